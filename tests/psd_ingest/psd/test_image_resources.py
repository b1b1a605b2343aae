from psd_ingest.constants import Resource
from psd_ingest.psd.bin_utils import BinaryReader
from psd_ingest.psd.image_resources import (
    ImageResources,
    ResolutionInfo,
    get_resolution,
)

from ..utils import pack, resolution_resource


def read_resources(body: bytes) -> ImageResources:
    return ImageResources.read(BinaryReader(pack("I", len(body)) + body))


def test_resolution() -> None:
    resources = read_resources(resolution_resource(300.0))
    info = resources.get_data(Resource.RESOLUTION_INFO)
    assert isinstance(info, ResolutionInfo)
    assert info.dpi == (300.0, 300.0)
    assert get_resolution(resources) == (300.0, 300.0)


def test_unknown_resource_kept_raw() -> None:
    body = b"8BIM" + pack("H", 4000) + b"\x03abc" + pack("I", 3) + b"xyz\x00"
    resources = read_resources(body + resolution_resource())
    assert resources.get_data(4000) == b"xyz"
    assert resources[4000].name == "abc"
    assert get_resolution(resources) == (72.0, 72.0)


def test_missing_resolution() -> None:
    assert get_resolution(read_resources(b"")) is None


def test_malformed_resources_are_skipped() -> None:
    body = resolution_resource() + b"8BIM" + pack("H", 1000) + b"\x00\x00" + pack("I", 99)
    resources = read_resources(body)
    assert len(resources) == 1
    assert get_resolution(resources) == (72.0, 72.0)
