"""
Decoders for tagged blocks.

Tagged blocks ("additional layer information") follow the layer name in each
layer record, and also trail the layer-and-mask section at document level.
Only the blocks needed to build the layer tree are decoded: section
dividers, type tool data, unicode names, layer ids and fill opacity. Every
other block is kept as raw bytes.
"""

import logging
from typing import Any, Optional

from attrs import define, field

from psd_ingest.constants import BlendMode, SectionDivider, Tag
from psd_ingest.errors import TruncatedInput
from psd_ingest.psd.base import BaseElement, DictElement
from psd_ingest.psd.bin_utils import BinaryReader, trimmed_repr
from psd_ingest.psd.descriptor import DescriptorBlock
from psd_ingest.registry import new_registry

logger = logging.getLogger(__name__)

TYPES, register = new_registry()


@define(repr=False)
class TaggedBlocks(DictElement):
    """
    Tagged blocks of one record, keyed by the raw four-byte tag.

    Lookups accept either a :py:class:`~psd_ingest.constants.Tag` member or
    its bytes value. A repeated tag keeps the last occurrence.
    """

    def get_data(self, key: Any, default: Any = None) -> Any:
        """Return the decoded payload stored under ``key``, or ``default``."""
        if key in self:
            return self[key].data
        return default

    @classmethod
    def read(
        cls,
        reader: BinaryReader,
        version: int = 1,
        padding: int = 1,
        **kwargs: Any,
    ) -> "TaggedBlocks":
        items = []
        while reader.is_readable(12):  # signature + key + length
            block = TaggedBlock.read(reader, version, padding, **kwargs)
            if block is None:
                break
            items.append((cls._key_converter(block.key), block))
        return cls(items)  # type: ignore[call-arg]

    @classmethod
    def _key_converter(cls, key: Any) -> Any:
        return getattr(key, "value", key)


@define(repr=False)
class TaggedBlock(BaseElement):
    """
    A single ``8BIM``/``8B64`` block.

    ``key`` is a :py:class:`~psd_ingest.constants.Tag` when the code is
    known and raw bytes otherwise; ``data`` holds the decoded structure or,
    for unregistered keys, the payload bytes.
    """

    _SIGNATURES = (b"8BIM", b"8B64")
    _BIG_KEYS = {
        Tag.USER_MASK,
        Tag.LAYER_16,
        Tag.LAYER_32,
        Tag.LAYER,
        Tag.SAVING_MERGED_TRANSPARENCY,
        Tag.SAVING_MERGED_TRANSPARENCY16,
        Tag.SAVING_MERGED_TRANSPARENCY32,
        Tag.ALPHA,
        Tag.FILTER_MASK,
        Tag.LINKED_LAYER2,
        Tag.LINKED_LAYER3,
        Tag.LINKED_LAYER_EXTERNAL,
        Tag.FILTER_EFFECTS1,
        Tag.FILTER_EFFECTS2,
        Tag.PIXEL_SOURCE_DATA2,
        Tag.UNICODE_PATH_NAME,
        Tag.EXPORT_SETTING1,
        Tag.EXPORT_SETTING2,
        Tag.COMPOSITOR_INFO,
        Tag.ARTBOARD_DATA2,
    }

    signature: bytes = field(default=b"8BIM", repr=False)
    key: Any = b""
    data: Any = field(default=b"", repr=True)

    @classmethod
    def read(  # type: ignore[return]
        cls,
        reader: BinaryReader,
        version: int = 1,
        padding: int = 1,
        **kwargs: Any,
    ) -> Optional["TaggedBlock"]:
        signature = reader.read(4)
        if signature not in cls._SIGNATURES:
            logger.warning("Invalid signature (%r)", signature)
            reader.seek(reader.tell() - 4)
            return None

        key = reader.read(4)
        try:
            key = Tag(key)
        except ValueError:
            logger.debug("Unknown key: %r", key)

        fmt = cls._length_format(key, version)
        raw_data = reader.read_length_block(fmt=fmt, padding=padding)
        decoder = TYPES.get(key)
        if decoder:
            try:
                read_data = getattr(decoder, "frombytes", decoder)
                data = read_data(raw_data, version=version, **kwargs)
            except (ValueError, TruncatedInput) as e:
                # Fallback to raw data.
                logger.warning("Failed to read tagged block %r: %s", key, e)
                data = raw_data
        else:
            logger.info("Unknown tagged block: %r, %s", key, trimmed_repr(raw_data))
            data = raw_data
        return cls(signature, key, data)

    @classmethod
    def _length_format(cls, key: Any, version: int) -> str:
        return ("I", "Q")[int(version == 2 and key in cls._BIG_KEYS)]

    def __repr__(self) -> str:
        return "TaggedBlock(%s, %s)" % (
            getattr(self.key, "name", self.key),
            trimmed_repr(self.data),
        )


@register(Tag.SECTION_DIVIDER_SETTING, Tag.NESTED_SECTION_DIVIDER_SETTING)
@define(repr=True)
class SectionDividerSetting(BaseElement):
    """
    Group marker carried by ``lsct`` and ``lsdk`` blocks.

    ``kind`` is a :py:class:`~psd_ingest.constants.SectionDivider`.
    ``blend_mode`` is only present in the longer form of the block and is
    None otherwise; ``sub_type`` is kept but unused.
    """

    kind: SectionDivider = field(default=SectionDivider.OTHER, converter=SectionDivider)
    blend_mode: Optional[BlendMode] = None
    sub_type: Optional[int] = None

    @classmethod
    def read(cls, reader: BinaryReader, **kwargs: Any) -> "SectionDividerSetting":
        kind = reader.read_u32()
        blend_mode = None
        if reader.is_readable(8):
            signature = reader.read(4)
            if signature != b"8BIM":
                raise ValueError("Invalid signature %r" % signature)
            blend_mode = BlendMode.from_signature(reader.read(4))
        sub_type = None
        if reader.is_readable(4):
            sub_type = reader.read_u32()
        return cls(kind, blend_mode=blend_mode, sub_type=sub_type)


@register(Tag.TYPE_TOOL_OBJECT_SETTING)
@define(repr=False)
class TypeToolObjectSetting(BaseElement):
    """
    Text layer payload from the ``TySh`` block.

    ``transform`` is the affine matrix as ``(xx, xy, yx, yy, tx, ty)``.
    ``text_data`` is a :py:class:`~psd_ingest.psd.descriptor.DescriptorBlock`
    whose ``b"Txt "`` item is the text and whose ``b"EngineData"`` item is
    the raw style data. ``warp`` and the trailing bounds are read so the
    block is consumed, but nothing downstream uses them.
    """

    version: int = 1
    transform: tuple = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)
    text_version: int = 50
    text_data: DescriptorBlock = field(factory=DescriptorBlock)
    warp_version: int = 1
    warp: Optional[DescriptorBlock] = None
    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0

    @classmethod
    def read(cls, reader: BinaryReader, **kwargs: Any) -> "TypeToolObjectSetting":
        version = reader.read_u16()
        transform = reader.read_fmt("6d")
        text_version = reader.read_u16()
        text_data = DescriptorBlock.read(reader)
        # Some writers omit the warp and bounds.
        warp_version, warp = 1, None
        left = top = right = bottom = 0
        if reader.is_readable(6):
            warp_version = reader.read_u16()
            warp = DescriptorBlock.read(reader)
            if reader.is_readable(16):
                left, top, right, bottom = reader.read_fmt("4i")
        return cls(
            version,
            transform,
            text_version,
            text_data,
            warp_version,
            warp,
            left,
            top,
            right,
            bottom,
        )

    def __repr__(self) -> str:
        return "TypeToolObjectSetting(text=%r)" % (self.text_data.get(b"Txt "),)


@register(Tag.UNICODE_LAYER_NAME)
def _read_unicode_name(data: bytes, **kwargs: Any) -> str:
    return BinaryReader(data).read_unicode_string()


@register(Tag.LAYER_ID)
def _read_layer_id(data: bytes, **kwargs: Any) -> int:
    return BinaryReader(data).read_u32()


@register(Tag.BLEND_FILL_OPACITY)
def _read_byte(data: bytes, **kwargs: Any) -> int:
    return BinaryReader(data).read_u8()
