"""
In-memory PSD writer for tests.

Documents are assembled section by section with :py:mod:`struct`, so every
test builds exactly the structure it exercises instead of reading fixture
files.
"""

import logging
import struct
import zlib
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from attrs import define, field

from psd_ingest.compression import rle

logging.basicConfig(level=logging.DEBUG)

Channel = Tuple[int, int, bytes]  # (channel id, compression, data)


def pack(fmt: str, *args) -> bytes:
    return struct.pack(">" + fmt, *args)


def pad_to(data: bytes, divisor: int) -> bytes:
    return data + b"\x00" * (-len(data) % divisor)


def pascal_string(text: str, padding: int = 4) -> bytes:
    raw = text.encode("macroman")
    return pad_to(pack("B", len(raw)) + raw, padding)


def unicode_string(text: str) -> bytes:
    return pack("I", len(text)) + text.encode("utf-16-be")


def tagged_block(key: bytes, data: bytes, version: int = 1, big: bool = False) -> bytes:
    fmt = "Q" if version == 2 and big else "I"
    return b"8BIM" + key + pack(fmt, len(data)) + data


def section_divider(kind: int, blend_key: Optional[bytes] = None) -> bytes:
    data = pack("I", kind)
    if blend_key is not None:
        data += b"8BIM" + blend_key
    return tagged_block(b"lsct", data)


def unicode_name(name: str) -> bytes:
    return tagged_block(b"luni", unicode_string(name))


def fill_opacity(value: int) -> bytes:
    return tagged_block(b"iOpa", pack("B", value) + b"\x00\x00\x00")


def descriptor(items: Sequence[Tuple[bytes, bytes, bytes]], class_id: bytes = b"TxLr") -> bytes:
    """Descriptor body of (key, ostype, encoded value) items."""
    data = unicode_string("") + pack("I", 0) + class_id + pack("I", len(items))
    for key, ostype, value in items:
        data += pack("I", len(key)) + key + ostype + value
    return data


def engine_data(font_size: float = 24.0, font: str = "Helvetica", rgb=(1.0, 0.0, 0.0)) -> bytes:
    name = b"(\xfe\xff" + font.encode("utf-16-be") + b")"
    values = " ".join("%.1f" % v for v in (1.0,) + tuple(rgb)).encode("ascii")
    return (
        b"\n\n<<\n\t/EngineDict\n\t<<\n\t\t/StyleRun\n\t\t<<\n\t\t\t/RunArray\n"
        b"\t\t\t[\n\t\t\t<<\n\t\t\t\t/StyleSheet\n\t\t\t\t<<\n"
        b"\t\t\t\t\t/StyleSheetData\n\t\t\t\t\t<<\n"
        b"\t\t\t\t\t\t/Font 0\n"
        b"\t\t\t\t\t\t/FontSize " + ("%.1f" % font_size).encode("ascii") + b"\n"
        b"\t\t\t\t\t\t/FillColor\n\t\t\t\t\t\t<<\n\t\t\t\t\t\t\t/Type 1\n"
        b"\t\t\t\t\t\t\t/Values [ " + values + b" ]\n\t\t\t\t\t\t>>\n"
        b"\t\t\t\t\t>>\n\t\t\t\t>>\n\t\t\t>>\n\t\t\t]\n\t\t>>\n\t>>\n"
        b"\t/ResourceDict\n\t<<\n\t\t/FontSet\n\t\t[\n\t\t<<\n"
        b"\t\t\t/Name " + name + b"\n\t\t>>\n\t\t]\n\t>>\n>>\x00"
    )


def type_tool(text: str, engine: Optional[bytes] = None) -> bytes:
    items = [(b"Txt ", b"TEXT", unicode_string(text + "\x00"))]
    if engine is not None:
        items.append((b"EngineData", b"tdta", pack("I", len(engine)) + engine))
    text_data = pack("I", 16) + descriptor(items)
    warp = pack("I", 16) + descriptor([], class_id=b"warp")
    data = (
        pack("H", 1)
        + pack("6d", 1.0, 0.0, 0.0, 1.0, 0.0, 0.0)
        + pack("H", 50)
        + text_data
        + pack("H", 1)
        + warp
        + pack("4i", 0, 0, 0, 0)
    )
    return tagged_block(b"TySh", data)


def mask_data(
    bbox: Tuple[int, int, int, int],
    background_color: int = 0,
    disabled: bool = False,
) -> bytes:
    left, top, right, bottom = bbox
    flags = 2 if disabled else 0
    return pack("4iBB", top, left, bottom, right, background_color, flags) + b"\x00\x00"


def raw_channel(channel_id: int, data: bytes) -> Channel:
    return channel_id, 0, bytes(data)


def rle_channel(
    channel_id: int, data: bytes, width: int, height: int, version: int = 1
) -> Channel:
    rows = [rle.encode(bytes(data[i * width : (i + 1) * width])) for i in range(height)]
    counts = b"".join(pack(("H", "I")[version - 1], len(row)) for row in rows)
    return channel_id, 1, counts + b"".join(rows)


def zip_channel(channel_id: int, data: bytes) -> Channel:
    return channel_id, 2, zlib.compress(bytes(data))


@define
class LayerSpec:
    """One layer record and its channel data."""

    name: str = ""
    bbox: Tuple[int, int, int, int] = (0, 0, 0, 0)
    channels: List[Channel] = field(factory=list)
    blend_key: bytes = b"norm"
    opacity: int = 255
    clipping: int = 0
    visible: bool = True
    mask: bytes = b""
    blocks: bytes = b""

    def record(self, version: int = 1) -> bytes:
        left, top, right, bottom = self.bbox
        data = pack("4iH", top, left, bottom, right, len(self.channels))
        for channel_id, _, channel in self.channels:
            data += pack(("hI", "hQ")[version - 1], channel_id, len(channel) + 2)
        flags = 0 if self.visible else 2
        data += b"8BIM" + self.blend_key + pack("BBB", self.opacity, self.clipping, flags)
        extra = (
            pack("I", len(self.mask))
            + self.mask
            + pack("I", 0)
            + pascal_string(self.name)
            + self.blocks
        )
        return data + pack("xI", len(extra)) + extra

    def channel_data(self) -> bytes:
        return b"".join(
            pack("H", compression) + channel
            for _, compression, channel in self.channels
        )


def solid_layer(
    name: str,
    bbox: Tuple[int, int, int, int],
    color: Sequence[int],
    alpha: Optional[int] = 255,
    **kwargs,
) -> LayerSpec:
    """RGB layer filled with one color, raw compressed."""
    left, top, right, bottom = bbox
    size = max(right - left, 0) * max(bottom - top, 0)
    channels = []
    if alpha is not None:
        channels.append(raw_channel(-1, bytes([alpha]) * size))
    for index, value in enumerate(color):
        channels.append(raw_channel(index, bytes([value]) * size))
    return LayerSpec(name=name, bbox=bbox, channels=channels, **kwargs)


def group_open(name: str = "</Layer group>") -> LayerSpec:
    """Bounding divider that starts a group in storage order."""
    return LayerSpec(name=name, blocks=section_divider(3))


def group_close(
    name: str,
    blend_key: bytes = b"pass",
    opacity: int = 255,
    closed: bool = False,
    blocks: bytes = b"",
    **kwargs,
) -> LayerSpec:
    """Folder record that ends a group and carries its properties."""
    return LayerSpec(
        name=name,
        blend_key=blend_key,
        opacity=opacity,
        blocks=section_divider(2 if closed else 1, blend_key) + blocks,
        **kwargs,
    )


def resolution_resource(dpi: float = 72.0) -> bytes:
    value = int(dpi * 65536)
    data = pack("I2HI2H", value, 1, 1, value, 1, 1)
    return b"8BIM" + pack("H", 1005) + b"\x00\x00" + pack("I", len(data)) + data


def build_psd(
    layers: Sequence[LayerSpec] = (),
    width: int = 100,
    height: int = 100,
    channels: int = 3,
    depth: int = 8,
    color_mode: int = 3,
    version: int = 1,
    resources: bytes = b"",
    color_mode_data: bytes = b"",
    image_data: Optional[bytes] = None,
    layer_count: Optional[int] = None,
    global_blocks: bytes = b"",
) -> bytes:
    """Assemble a complete document. ``layers`` are in storage order."""
    header = b"8BPS" + pack("H6xHIIHH", version, channels, height, width, depth, color_mode)
    length_fmt = ("I", "Q")[version - 1]

    if layers:
        count = len(layers) if layer_count is None else layer_count
        body = pack("h", count)
        body += b"".join(layer.record(version) for layer in layers)
        body += b"".join(layer.channel_data() for layer in layers)
        body = pad_to(body, 2)
        layer_info = pack(length_fmt, len(body)) + body
    else:
        layer_info = pack(length_fmt, 0)
    layer_and_mask = layer_info + pack("I", 0) + global_blocks

    if image_data is None:
        row = (width * depth + 7) // 8
        image_data = pack("H", 0) + b"\x00" * (row * height * channels)

    return (
        header
        + pack("I", len(color_mode_data))
        + color_mode_data
        + pack("I", len(resources))
        + resources
        + pack(length_fmt, len(layer_and_mask))
        + layer_and_mask
        + image_data
    )


def merged_image(planes: Dict[int, bytes]) -> bytes:
    """Raw merged image data from planes in channel order."""
    return pack("H", 0) + b"".join(planes[i] for i in sorted(planes))


def pixel(raster, x: int, y: int) -> Tuple[int, ...]:
    return tuple(int(v) for v in np.asarray(raster.data)[y, x])


def text_layer(name: str, bbox: Tuple[int, int, int, int], text: str, **style) -> LayerSpec:
    """Red type layer carrying ``text`` and its engine data."""
    return solid_layer(
        name, bbox, (255, 0, 0), blocks=type_tool(text, engine_data(**style))
    )
