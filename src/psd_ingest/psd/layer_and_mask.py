"""
Decoders for section 4 of the file, "Layer and Mask Information".

:py:class:`LayerAndMaskInformation` wraps one :py:class:`LayerInfo`, which
in turn holds the per-layer :py:class:`LayerRecord` list followed by one
:py:class:`ChannelData` per channel. A record lists its planes with
:py:class:`ChannelInfo` and an optional :py:class:`MaskData`.

Records come bottom-to-top and flat. A group is spread over two records:
a hidden ``BOUNDING_SECTION_DIVIDER`` that appears first, and a later
``OPEN_FOLDER`` / ``CLOSED_FOLDER`` record that owns the group's name,
opacity and blend mode. Turning this into a tree happens in
:py:mod:`psd_ingest.api.psd_image`.

Channel payloads are laid out record after record, in the order each
record lists its channels.
"""

import logging
from typing import Any, List, Optional

from attrs import define, field

from psd_ingest.constants import BlendMode, ChannelID, Clipping, Compression, Tag
from psd_ingest.psd.base import BaseElement, ListElement
from psd_ingest.psd.bin_utils import BinaryReader
from psd_ingest.psd.tagged_blocks import TaggedBlocks, register

logger = logging.getLogger(__name__)


@define(repr=False)
class LayerAndMaskInformation(BaseElement):
    """
    Layer and mask information section.

    .. py:attribute:: layer_info

        See :py:class:`.LayerInfo`.

    .. py:attribute:: global_layer_mask_info

        Raw bytes of the global layer mask info, kept opaque.

    .. py:attribute:: tagged_blocks

        Document-level :py:class:`~psd_ingest.psd.tagged_blocks.TaggedBlocks`.
    """

    layer_info: Optional["LayerInfo"] = None
    global_layer_mask_info: bytes = b""
    tagged_blocks: Optional[TaggedBlocks] = None

    @classmethod
    def read(
        cls,
        reader: BinaryReader,
        encoding: str = "macroman",
        version: int = 1,
        **kwargs: Any,
    ) -> "LayerAndMaskInformation":
        start_pos = reader.tell()
        length = reader.read_fmt(("I", "Q")[version - 1])[0]
        logger.debug(
            "reading layer and mask info, len=%d, offset=%d", length, start_pos
        )
        if length == 0:
            return cls()
        return cls._read_body(reader.subreader(length), encoding, version)

    @classmethod
    def _read_body(
        cls, reader: BinaryReader, encoding: str, version: int
    ) -> "LayerAndMaskInformation":
        layer_info = LayerInfo.read(reader, encoding, version)

        global_layer_mask_info = b""
        if reader.is_readable(4):
            global_layer_mask_info = reader.read_length_block()
            logger.debug(
                "reading global layer mask info, len=%d", len(global_layer_mask_info)
            )

        tagged_blocks = None
        if reader.is_readable(12):
            # Global tagged blocks align to 4 bytes.
            tagged_blocks = TaggedBlocks.read(
                reader, version=version, padding=4, encoding=encoding
            )

        return cls(layer_info, global_layer_mask_info, tagged_blocks)


@define(repr=False)
class LayerInfo(BaseElement):
    """
    Layer records plus their channel payloads.

    ``layer_count`` is signed in the file; a negative count means the first
    alpha channel of the merged image holds transparency, and the layer
    count is its absolute value. ``layer_records`` is a
    :py:class:`.LayerRecords` and ``channel_image_data`` the matching
    :py:class:`.ChannelImageData`.
    """

    layer_count: int = 0
    layer_records: "LayerRecords" = field(factory=lambda: LayerRecords())
    channel_image_data: "ChannelImageData" = field(factory=lambda: ChannelImageData())

    @classmethod
    def read(
        cls,
        reader: BinaryReader,
        encoding: str = "macroman",
        version: int = 1,
        **kwargs: Any,
    ) -> "LayerInfo":
        length = reader.read_fmt(("I", "Q")[version - 1])[0]
        logger.debug("reading layer info, len=%d", length)
        if length == 0:
            return LayerInfo()
        return cls._read_body(reader.subreader(length), encoding, version)

    @classmethod
    def _read_body(
        cls, reader: BinaryReader, encoding: str, version: int
    ) -> "LayerInfo":
        start_pos = reader.tell()
        layer_count = reader.read_i16()
        layer_records = LayerRecords.read(reader, layer_count, encoding, version)
        logger.debug("  read layer records, len=%d", reader.tell() - start_pos)
        channel_image_data = ChannelImageData.read(reader, layer_records)
        return cls(
            layer_count=layer_count,
            layer_records=layer_records,
            channel_image_data=channel_image_data,
        )

    @property
    def has_merged_alpha(self) -> bool:
        """Whether the merged image carries a real transparency channel."""
        return self.layer_count < 0


@register(Tag.LAYER_16, Tag.LAYER_32)
@define(repr=False)
class LayerInfoBlock(LayerInfo):
    """Layer info stored in a ``Lr16`` or ``Lr32`` tagged block."""

    @classmethod
    def read(
        cls,
        reader: BinaryReader,
        encoding: str = "macroman",
        version: int = 1,
        **kwargs: Any,
    ) -> "LayerInfo":
        return cls._read_body(reader, encoding, version)


@define(repr=False)
class ChannelInfo(BaseElement):
    """
    One entry of a record's channel table.

    ``id`` follows :py:class:`~psd_ingest.constants.ChannelID` (color
    planes from 0 up, then negative ids for transparency and masks).
    ``length`` counts the payload bytes including its 2-byte compression id.
    """

    id: int = 0
    length: int = 0

    @classmethod
    def read(cls, reader: BinaryReader, version: int = 1, **kwargs: Any) -> "ChannelInfo":
        return cls(*reader.read_fmt(("hI", "hQ")[version - 1]))

    def __repr__(self) -> str:
        return "ChannelInfo(id=%d, length=%d)" % (self.id, self.length)


@define(repr=False)
class LayerFlags(BaseElement):
    """
    Layer flags.

    .. py:attribute:: transparency_protected
    .. py:attribute:: visible
    .. py:attribute:: pixel_data_irrelevant
    """

    transparency_protected: bool = False
    visible: bool = True
    pixel_data_irrelevant: bool = False

    @classmethod
    def read(cls, reader: BinaryReader, **kwargs: Any) -> "LayerFlags":
        flags = reader.read_u8()
        # Bit 1 is set for hidden layers.
        return cls(bool(flags & 1), not bool(flags & 2), bool(flags & 16))


class LayerRecords(ListElement):
    """
    List of layer records. See :py:class:`.LayerRecord`.
    """

    @classmethod
    def read(  # type: ignore[override]
        cls,
        reader: BinaryReader,
        layer_count: int,
        encoding: str = "macroman",
        version: int = 1,
        **kwargs: Any,
    ) -> "LayerRecords":
        items = []
        for _ in range(abs(layer_count)):
            items.append(LayerRecord.read(reader, encoding, version))
        return cls(items)  # type: ignore[call-arg]


@define(repr=False)
class LayerRecord(BaseElement):
    """
    Per-layer header read from the layer info section.

    The rectangle is ``top``/``left``/``bottom``/``right`` in document
    pixels. ``channel_info`` lists a :py:class:`.ChannelInfo` per plane and
    ``blend_key`` is the raw four-character mode key. ``opacity`` runs
    0..255, ``clipping`` is a :py:class:`~psd_ingest.constants.Clipping`
    and ``flags`` a :py:class:`.LayerFlags`. ``mask_data`` is a
    :py:class:`.MaskData` or None. ``name`` is the legacy Pascal name; a
    unicode name in ``tagged_blocks`` overrides it.
    """

    top: int = 0
    left: int = 0
    bottom: int = 0
    right: int = 0
    channel_info: List[ChannelInfo] = field(factory=list)
    signature: bytes = field(default=b"8BIM", repr=False)
    blend_key: bytes = BlendMode.NORMAL.value
    opacity: int = 255
    clipping: int = Clipping.BASE
    flags: LayerFlags = field(factory=LayerFlags)
    mask_data: Optional["MaskData"] = None
    name: str = ""
    tagged_blocks: TaggedBlocks = field(factory=TaggedBlocks)

    @classmethod
    def read(
        cls,
        reader: BinaryReader,
        encoding: str = "macroman",
        version: int = 1,
        **kwargs: Any,
    ) -> "LayerRecord":
        start_pos = reader.tell()
        top, left, bottom, right, num_channels = reader.read_fmt("4iH")
        channel_info = [ChannelInfo.read(reader, version) for _ in range(num_channels)]
        signature, blend_key, opacity, clipping = reader.read_fmt("4s4sBB")
        flags = LayerFlags.read(reader)

        extra = BinaryReader(reader.read_length_block(fmt="xI"))
        logger.debug("  read layer record, len=%d", reader.tell() - start_pos)
        mask_data = MaskData.read(extra)
        extra.read_length_block()  # blending ranges
        name = extra.read_pascal_string(encoding, padding=4)
        tagged_blocks = TaggedBlocks.read(
            extra, version=version, padding=1, encoding=encoding
        )
        return cls(
            top=top,
            left=left,
            bottom=bottom,
            right=right,
            channel_info=channel_info,
            signature=signature,
            blend_key=blend_key,
            opacity=opacity,
            clipping=clipping,
            flags=flags,
            mask_data=mask_data,
            name=name,
            tagged_blocks=tagged_blocks,
        )

    @property
    def blend_mode(self) -> BlendMode:
        """Blend mode; unknown keys read as NORMAL."""
        return BlendMode.from_signature(self.blend_key)

    @property
    def width(self) -> int:
        """Width of the layer."""
        return max(self.right - self.left, 0)

    @property
    def height(self) -> int:
        """Height of the layer."""
        return max(self.bottom - self.top, 0)

    def channel_size(self, channel_id: int) -> tuple:
        """(width, height) of the given channel."""
        if channel_id == ChannelID.USER_LAYER_MASK and self.mask_data:
            return (self.mask_data.width, self.mask_data.height)
        if channel_id == ChannelID.REAL_USER_LAYER_MASK and self.mask_data:
            return (self.mask_data.real_width, self.mask_data.real_height)
        return (self.width, self.height)

    def __repr__(self) -> str:
        return "LayerRecord(name=%r, bbox=(%d, %d, %d, %d), channels=%d)" % (
            self.name,
            self.left,
            self.top,
            self.right,
            self.bottom,
            len(self.channel_info),
        )


@define(repr=True)
class MaskData(BaseElement):
    """
    Layer mask parameters.

    ``top``/``left``/``bottom``/``right`` bound the mask plane and
    ``background_color`` (0 or 255) fills everything outside it.
    ``disabled`` comes from the mask flags. The ``real_*`` fields describe
    the combined vector and pixel mask and are only present in the longer
    variant of the block.
    """

    top: int = 0
    left: int = 0
    bottom: int = 0
    right: int = 0
    background_color: int = 0
    disabled: bool = False
    real_disabled: Optional[bool] = None
    real_background_color: Optional[int] = None
    real_top: Optional[int] = None
    real_left: Optional[int] = None
    real_bottom: Optional[int] = None
    real_right: Optional[int] = None

    @classmethod
    def read(cls, reader: BinaryReader, **kwargs: Any) -> Optional["MaskData"]:  # type: ignore[override]
        data = reader.read_length_block()
        if len(data) < 18:
            return None
        body = BinaryReader(data)
        top, left, bottom, right, background_color, flags = body.read_fmt("4iBB")
        self = cls(top, left, bottom, right, background_color, bool(flags & 2))
        if len(data) >= 36:
            real_flags, self.real_background_color = body.read_fmt("BB")
            self.real_disabled = bool(real_flags & 2)
            (
                self.real_top,
                self.real_left,
                self.real_bottom,
                self.real_right,
            ) = body.read_fmt("4i")
        return self

    @property
    def width(self) -> int:
        """Width of the mask."""
        return max(self.right - self.left, 0)

    @property
    def height(self) -> int:
        """Height of the mask."""
        return max(self.bottom - self.top, 0)

    @property
    def real_width(self) -> int:
        """Width of real user mask."""
        return max((self.real_right or 0) - (self.real_left or 0), 0)

    @property
    def real_height(self) -> int:
        """Height of real user mask."""
        return max((self.real_bottom or 0) - (self.real_top or 0), 0)


class ChannelImageData(ListElement):
    """
    List of channel data lists.

    The size of this list corresponds to the size of
    :py:class:`LayerRecords`. Each item is the list of
    :py:class:`ChannelData` of a layer, in channel info order.
    """

    @classmethod
    def read(
        cls,
        reader: BinaryReader,
        layer_records: Optional[LayerRecords] = None,
        **kwargs: Any,
    ) -> "ChannelImageData":
        start_pos = reader.tell()
        items = []
        for layer in layer_records or []:
            items.append([ChannelData.read(reader, c.length) for c in layer.channel_info])
        logger.debug("  read channel image data, len=%d", reader.tell() - start_pos)
        return cls(items)  # type: ignore[call-arg]


@define(repr=False)
class ChannelData(BaseElement):
    """
    Channel data.

    .. py:attribute:: compression

        Compression id. See :py:class:`~psd_ingest.constants.Compression`;
        unknown ids are kept as-is and reported when decoding.

    .. py:attribute:: data

        Compressed data.
    """

    compression: int = Compression.RAW
    data: bytes = b""

    @classmethod
    def read(cls, reader: BinaryReader, length: int = 0, **kwargs: Any) -> "ChannelData":
        if length < 2:
            reader.skip(length)
            return cls(Compression.RAW, b"")
        compression = reader.read_u16()
        data = reader.read(length - 2)
        return cls(compression=compression, data=data)

    def __repr__(self) -> str:
        return "ChannelData(compression=%d, len=%d)" % (self.compression, len(self.data))
