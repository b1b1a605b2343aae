import pytest

from psd_ingest.constants import ColorMode
from psd_ingest.errors import InvalidHeader, InvalidSignature, UnsupportedVersion
from psd_ingest.psd.header import FileHeader


@pytest.fixture
def fixture() -> bytes:
    return (
        b"8BPS\x00\x01\x00\x00\x00\x00\x00\x00\x00\x03\x00\x00\x00\x96\x00"
        b"\x00\x00d\x00\x08\x00\x03"
    )


def test_header_read(fixture: bytes) -> None:
    header = FileHeader.frombytes(fixture)
    assert header.version == 1
    assert header.channels == 3
    assert header.height == 150
    assert header.width == 100
    assert header.depth == 8
    assert header.color_mode == ColorMode.RGB
    assert not header.is_psb


def test_header_psb(fixture: bytes) -> None:
    header = FileHeader.frombytes(fixture[:5] + b"\x02" + fixture[6:])
    assert header.is_psb


@pytest.mark.parametrize("data", [b"\x00\x01\x02\x03", b"GIF89a" + b"\x00" * 20])
def test_header_invalid_signature(data: bytes) -> None:
    with pytest.raises(InvalidSignature):
        FileHeader.frombytes(data)


def test_header_unsupported_version(fixture: bytes) -> None:
    with pytest.raises(UnsupportedVersion):
        FileHeader.frombytes(fixture[:5] + b"\x03" + fixture[6:])


@pytest.mark.parametrize(
    "offset, value",
    [
        (22, b"\x00\x07"),  # depth
        (12, b"\x00\x00"),  # channels
        (18, b"\x00\x00\x00\x00"),  # width
        (24, b"\x00\x05"),  # color mode
    ],
)
def test_header_out_of_range(fixture: bytes, offset: int, value: bytes) -> None:
    data = fixture[:offset] + value + fixture[offset + len(value) :]
    with pytest.raises(InvalidHeader):
        FileHeader.frombytes(data)
