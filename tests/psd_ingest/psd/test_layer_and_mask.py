import pytest

from psd_ingest.constants import BlendMode, Compression, SectionDivider, Tag
from psd_ingest.errors import TruncatedInput
from psd_ingest.psd.bin_utils import BinaryReader
from psd_ingest.psd.layer_and_mask import (
    ChannelData,
    LayerInfo,
    LayerRecord,
    MaskData,
)
from psd_ingest.psd.tagged_blocks import SectionDividerSetting, TaggedBlocks

from ..utils import (
    LayerSpec,
    fill_opacity,
    mask_data,
    pack,
    section_divider,
    solid_layer,
    tagged_block,
    unicode_name,
)


def read_layer_info(layers, version=1, layer_count=None) -> LayerInfo:
    count = len(layers) if layer_count is None else layer_count
    body = pack("h", count)
    body += b"".join(layer.record(version) for layer in layers)
    body += b"".join(layer.channel_data() for layer in layers)
    data = pack(("I", "Q")[version - 1], len(body)) + body
    return LayerInfo.read(BinaryReader(data), version=version)


def test_layer_record() -> None:
    spec = solid_layer(
        "Layer 1",
        (10, 20, 13, 22),
        (1, 2, 3),
        blend_key=b"mul ",
        opacity=128,
        clipping=1,
        visible=False,
        blocks=unicode_name("Ünïcode") + fill_opacity(64),
    )
    record = LayerRecord.read(BinaryReader(spec.record()))
    assert (record.left, record.top, record.right, record.bottom) == (10, 20, 13, 22)
    assert (record.width, record.height) == (3, 2)
    assert [c.id for c in record.channel_info] == [-1, 0, 1, 2]
    assert [c.length for c in record.channel_info] == [8, 8, 8, 8]
    assert record.blend_mode == BlendMode.MULTIPLY
    assert record.opacity == 128
    assert record.clipping == 1
    assert not record.flags.visible
    assert record.name == "Layer 1"
    assert record.mask_data is None
    assert record.tagged_blocks.get_data(Tag.UNICODE_LAYER_NAME) == "Ünïcode"
    assert record.tagged_blocks.get_data(Tag.BLEND_FILL_OPACITY) == 64


def test_layer_record_unknown_blend_mode() -> None:
    record = LayerRecord.read(BinaryReader(LayerSpec(blend_key=b"????").record()))
    assert record.blend_mode == BlendMode.NORMAL


def test_layer_record_psb() -> None:
    spec = solid_layer("big", (0, 0, 2, 2), (0, 0, 0))
    record = LayerRecord.read(BinaryReader(spec.record(version=2)), version=2)
    assert [c.length for c in record.channel_info] == [6, 6, 6, 6]


def test_section_divider() -> None:
    record = LayerRecord.read(
        BinaryReader(LayerSpec(blocks=section_divider(1, b"mul ")).record())
    )
    divider = record.tagged_blocks.get_data(Tag.SECTION_DIVIDER_SETTING)
    assert isinstance(divider, SectionDividerSetting)
    assert divider.kind == SectionDivider.OPEN_FOLDER
    assert divider.blend_mode == BlendMode.MULTIPLY


def test_unknown_tagged_block_is_kept_raw() -> None:
    blocks = TaggedBlocks.read(BinaryReader(tagged_block(b"zzzz", b"\x01\x02")))
    assert blocks.get_data(b"zzzz") == b"\x01\x02"


def test_mask_data() -> None:
    data = pack("I", 20) + mask_data((1, 2, 5, 6), background_color=255, disabled=True)
    mask = MaskData.read(BinaryReader(data))
    assert (mask.left, mask.top, mask.right, mask.bottom) == (1, 2, 5, 6)
    assert (mask.width, mask.height) == (4, 4)
    assert mask.background_color == 255
    assert mask.disabled


def test_real_mask_data() -> None:
    body = mask_data((0, 0, 4, 4))[:18] + pack("BB", 0, 128) + pack("4i", 1, 1, 3, 3)
    mask = MaskData.read(BinaryReader(pack("I", len(body)) + body))
    assert mask.real_background_color == 128
    assert (mask.real_width, mask.real_height) == (2, 2)


def test_empty_mask_data() -> None:
    assert MaskData.read(BinaryReader(pack("I", 0))) is None


def test_layer_info() -> None:
    layers = [
        solid_layer("bottom", (0, 0, 2, 1), (10, 20, 30)),
        LayerSpec(name="empty"),
    ]
    info = read_layer_info(layers)
    assert info.layer_count == 2
    assert not info.has_merged_alpha
    assert len(info.layer_records) == 2
    assert len(info.channel_image_data) == 2
    channels = info.channel_image_data[0]
    assert [c.compression for c in channels] == [Compression.RAW] * 4
    assert channels[1].data == b"\x0a\x0a"
    assert info.channel_image_data[1] == []


def test_layer_info_negative_count() -> None:
    info = read_layer_info([LayerSpec(name="a")], layer_count=-1)
    assert info.has_merged_alpha
    assert len(info.layer_records) == 1


def test_channel_data_keeps_unknown_compression() -> None:
    spec = LayerSpec(bbox=(0, 0, 1, 1), channels=[(0, 9, b"\x00")])
    info = read_layer_info([spec])
    assert info.channel_image_data[0][0] == ChannelData(9, b"\x00")


def test_truncated_layer_info() -> None:
    data = pack("I", 10) + pack("h", 1) + b"\x00" * 8
    with pytest.raises(TruncatedInput):
        LayerInfo.read(BinaryReader(data))


def test_channel_data_short_length() -> None:
    reader = BinaryReader(b"\x00")
    channel = ChannelData.read(reader, 1)
    assert channel.data == b""
    assert reader.remaining() == 0
