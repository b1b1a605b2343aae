import numpy as np
import pytest

from psd_ingest.api import numpy_io
from psd_ingest.constants import ColorMode, Compression
from psd_ingest.errors import StructuralInconsistency, UnsupportedCompression
from psd_ingest.psd import PSD
from psd_ingest.psd.header import FileHeader
from psd_ingest.psd.layer_and_mask import ChannelData

from ..utils import (
    LayerSpec,
    build_psd,
    mask_data,
    merged_image,
    raw_channel,
    rle_channel,
    solid_layer,
    zip_channel,
)


def materialize(spec: LayerSpec, **header):
    data = build_psd([spec], **header)
    psd = PSD.frombytes(data)
    record, channels = next(psd._iter_layers())
    return numpy_io.materialize_layer(
        0, record, channels, psd.header, psd.color_mode_data.value
    )


@pytest.mark.parametrize(
    "data, depth, expected",
    [
        (b"\x00\x80\xff\x10", 8, [0, 128, 255, 16]),
        (b"\x12\x34\xff\xff\x00\x01\x80\x00", 16, [0x12, 255, 0, 128]),
        (np.array([0.0, 0.5, 1.5, np.nan], dtype=">f4").tobytes(), 32, [0, 128, 255, 0]),
    ],
)
def test_parse_array(data: bytes, depth: int, expected) -> None:
    array = numpy_io.parse_array(data, 2, 2, depth)
    assert array.dtype == np.uint8
    assert array.shape == (2, 2)
    assert array.reshape(-1).tolist() == expected


def test_parse_array_bitmap() -> None:
    # Rows are padded to whole bytes; set bits are black.
    array = numpy_io.parse_array(b"\xa0\x40", 3, 2, 1)
    assert array.tolist() == [[0, 255, 0], [255, 0, 255]]


def test_decode_channel_short_raw() -> None:
    with pytest.raises(StructuralInconsistency):
        numpy_io.decode_channel(ChannelData(Compression.RAW, b"\x00"), 2, 2, 8)


def test_to_rgb_cmyk() -> None:
    shape = (1, 2)
    planes = {
        0: np.array([[255, 0]], np.uint8),
        1: np.array([[255, 255]], np.uint8),
        2: np.array([[255, 255]], np.uint8),
        3: np.array([[255, 128]], np.uint8),
    }
    rgb = numpy_io.to_rgb(planes, ColorMode.CMYK, shape)
    assert rgb.tolist() == [[[255, 255, 255], [0, 128, 128]]]


def test_to_rgb_indexed() -> None:
    palette = bytearray(768)
    palette[7] = 10  # red of index 7
    palette[256 + 7] = 20
    palette[512 + 7] = 30
    planes = {0: np.array([[7, 0]], np.uint8)}
    rgb = numpy_io.to_rgb(planes, ColorMode.INDEXED, (1, 2), bytes(palette))
    assert rgb.tolist() == [[[10, 20, 30], [0, 0, 0]]]


@pytest.mark.parametrize("mode", [ColorMode.GRAYSCALE, ColorMode.DUOTONE, ColorMode.LAB])
def test_to_rgb_gray(mode: ColorMode) -> None:
    planes = {0: np.array([[7, 200]], np.uint8)}
    rgb = numpy_io.to_rgb(planes, mode, (1, 2))
    assert rgb.tolist() == [[[7, 7, 7], [200, 200, 200]]]


def test_materialize_rgba() -> None:
    spec = LayerSpec(
        bbox=(10, 20, 12, 21),
        channels=[
            raw_channel(0, b"\x01\x02"),
            raw_channel(1, b"\x03\x04"),
            raw_channel(2, b"\x05\x06"),
            raw_channel(-1, b"\xff\x80"),
        ],
    )
    pixels = materialize(spec)
    assert pixels.warnings == []
    raster = pixels.raster
    assert raster.size == (2, 1)
    assert raster.tobytes() == bytes([1, 3, 5, 255, 2, 4, 6, 128])
    assert raster.has_transparency


def test_materialize_without_alpha_is_opaque() -> None:
    pixels = materialize(solid_layer("a", (0, 0, 3, 3), (9, 8, 7), alpha=None))
    assert pixels.raster.size == (3, 3)
    assert not pixels.raster.has_transparency
    assert pixels.raster.data[2, 2].tolist() == [9, 8, 7, 255]


@pytest.mark.parametrize("encode", ["rle", "zip"])
def test_materialize_compressed(encode: str) -> None:
    plane = bytes(range(12))
    if encode == "rle":
        channels = [rle_channel(i, plane, 4, 3) for i in range(3)]
    else:
        channels = [zip_channel(i, plane) for i in range(3)]
    pixels = materialize(LayerSpec(bbox=(0, 0, 4, 3), channels=channels))
    assert pixels.warnings == []
    assert pixels.raster.data[:, :, 0].reshape(-1).tolist() == list(range(12))


def test_materialize_psb_rle() -> None:
    plane = b"\x05" * 6
    channels = [rle_channel(i, plane, 3, 2, version=2) for i in range(3)]
    pixels = materialize(LayerSpec(bbox=(0, 0, 3, 2), channels=channels), version=2)
    assert pixels.raster.data[:, :, :3].reshape(-1).tolist() == [5] * 18


def test_materialize_grayscale() -> None:
    spec = LayerSpec(bbox=(0, 0, 2, 1), channels=[raw_channel(0, b"\x10\x20")])
    pixels = materialize(spec, color_mode=ColorMode.GRAYSCALE, channels=1)
    assert pixels.raster.tobytes() == bytes([16, 16, 16, 255, 32, 32, 32, 255])


def test_materialize_cmyk() -> None:
    spec = LayerSpec(
        bbox=(0, 0, 1, 1),
        channels=[raw_channel(i, b"\xff") for i in range(3)] + [raw_channel(3, b"\x00")],
    )
    pixels = materialize(spec, color_mode=ColorMode.CMYK, channels=4)
    assert pixels.raster.tobytes() == bytes([0, 0, 0, 255])


def test_materialize_16bit() -> None:
    spec = LayerSpec(
        bbox=(0, 0, 1, 1),
        channels=[raw_channel(i, b"\xab\xcd") for i in range(3)],
    )
    pixels = materialize(spec, depth=16)
    assert pixels.raster.tobytes() == bytes([0xAB, 0xAB, 0xAB, 255])


def test_materialize_zero_area() -> None:
    pixels = materialize(solid_layer("empty", (5, 5, 5, 9), (1, 2, 3)))
    assert pixels.warnings == []
    assert pixels.raster.is_empty()
    assert pixels.raster.size == (0, 4)


def test_materialize_unknown_compression() -> None:
    spec = LayerSpec(
        bbox=(0, 0, 2, 1),
        channels=[(0, 9, b"??"), raw_channel(1, b"\x07\x07"), raw_channel(2, b"\x07\x07")],
    )
    pixels = materialize(spec)
    assert len(pixels.warnings) == 1
    warning = pixels.warnings[0]
    assert warning.category is UnsupportedCompression
    assert warning.layer_id == 0
    assert pixels.raster.tobytes() == bytes([0, 7, 7, 255] * 2)


def test_materialize_short_raw_channel() -> None:
    spec = LayerSpec(
        bbox=(0, 0, 4, 4),
        channels=[raw_channel(0, b"\x01\x02"), raw_channel(1, b"\x00" * 16)],
    )
    pixels = materialize(spec)
    assert [w.category for w in pixels.warnings] == [StructuralInconsistency]
    assert pixels.raster.is_empty()


def test_materialize_mask() -> None:
    spec = solid_layer(
        "masked",
        (0, 0, 4, 4),
        (255, 0, 0),
        mask=mask_data((1, 1, 3, 3), background_color=255),
    )
    spec.channels.append(raw_channel(-2, b"\x00\x80\xff\x10"))
    pixels = materialize(spec)
    mask = pixels.mask
    assert mask.bbox == (1, 1, 3, 3)
    assert mask.background_color == 255
    assert not mask.disabled
    assert mask.data.tolist() == [[0, 128], [255, 16]]
    assert mask.numpy().shape == (2, 2, 1)


def test_materialize_mask_without_channel() -> None:
    spec = solid_layer("masked", (0, 0, 1, 1), (0, 0, 0), mask=mask_data((0, 0, 1, 1)))
    mask = materialize(spec).mask
    assert mask.data is None
    assert mask.numpy() is None


def test_merged_image_gray() -> None:
    data = build_psd(
        width=2,
        height=1,
        channels=1,
        color_mode=ColorMode.GRAYSCALE,
        image_data=merged_image({0: b"\x00\xff"}),
    )
    raster = numpy_io.get_image_data(PSD.frombytes(data))
    assert raster.tobytes() == bytes([0, 0, 0, 255, 255, 255, 255, 255])


def test_merged_image_removes_white_matte() -> None:
    # Half transparent red over white is stored as (255, 127, 127).
    data = build_psd(
        width=1,
        height=1,
        channels=4,
        image_data=merged_image({0: b"\xff", 1: b"\x7f", 2: b"\x7f", 3: b"\x80"}),
    )
    raster = numpy_io.get_image_data(PSD.frombytes(data), has_alpha=True)
    r, g, b, a = raster.data[0, 0].tolist()
    assert (r, a) == (255, 128)
    assert g <= 1 and b <= 1


def test_merged_image_unknown_compression() -> None:
    data = build_psd(width=1, height=1, image_data=b"\x00\x09\x00\x00\x00")
    with pytest.raises(UnsupportedCompression):
        numpy_io.get_image_data(PSD.frombytes(data))


def test_expected_channels() -> None:
    header = FileHeader(channels=4, color_mode=ColorMode.CMYK)
    assert numpy_io.EXPECTED_CHANNELS[header.color_mode] == 4
