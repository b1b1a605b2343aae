"""
PSD Image module.

This module provides the main :py:class:`PSDImage` class, the entry point for
decoding a Photoshop document. It wraps the low-level
:py:class:`~psd_ingest.psd.PSD` structure, materializes the layer pixels and
reconstructs the layer tree from the flat layer list.

Example usage::

    from psd_ingest import PSDImage

    psd = PSDImage.open('document.psd')

    print(f"Size: {psd.width}x{psd.height}")
    print(f"Color mode: {psd.color_mode.name}")

    for layer in psd.descendants():
        print(f"{layer.layer_id} {layer.kind} {layer.name}")

    for warning in psd.warnings:
        print(warning)

    raster = psd.composite()
    raster.topil().save('output.png')

The document and its layers are immutable once constructed.
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, BinaryIO, Callable, Dict, List, Optional, Tuple, Union

from psd_ingest.api import numpy_io
from psd_ingest.api.layers import (
    AdjustmentLayer,
    Group,
    GroupMixin,
    Layer,
    PixelLayer,
    TextData,
    TypeLayer,
)
from psd_ingest.api.options import IngestOptions
from psd_ingest.api.raster import Raster
from psd_ingest.api.typesetting import get_text_data
from psd_ingest.constants import (
    ADJUSTMENT_TAGS,
    BlendMode,
    Clipping,
    ColorMode,
    SectionDivider,
    Tag,
)
from psd_ingest.errors import (
    DecodeWarning,
    ResourceLimitExceeded,
    StructuralInconsistency,
    UnsupportedColorMode,
    UnsupportedCompression,
)
from psd_ingest.psd.document import PSD
from psd_ingest.psd.image_resources import get_resolution
from psd_ingest.psd.layer_and_mask import ChannelData, LayerRecord
from psd_ingest.psd.tagged_blocks import SectionDividerSetting

logger = logging.getLogger(__name__)

# Record kinds.
_IMAGE = "image"
_TEXT = "text"
_ADJUSTMENT = "adjustment"
_GROUP_START = "group-start"
_GROUP_END = "group-end"


class PSDImage(GroupMixin):
    """
    Photoshop PSD/PSB document.

    The low-level data structure is accessible at :py:attr:`PSDImage._record`.
    Top-level layers are ordered bottom to top.

    Example::

        from psd_ingest import PSDImage

        psdimage = PSDImage.open('example.psd')
        raster = psdimage.composite()

        for layer in psdimage:
            print(layer)
    """

    def __init__(
        self,
        data: PSD,
        options: Optional[IngestOptions] = None,
        started: Optional[float] = None,
    ):
        if not isinstance(data, PSD):
            raise TypeError(f"Expected PSD instance, got {type(data).__name__}")
        self._record = data
        self._options = options or IngestOptions()
        self._started = time.monotonic() if started is None else started
        self._warnings: List[DecodeWarning] = []
        self._merged: Optional[Raster] = None
        self.children: Tuple[Layer, ...] = ()
        self._init()

    @classmethod
    def open(
        cls,
        fp: Union[BinaryIO, str, bytes, os.PathLike],
        options: Optional[IngestOptions] = None,
        encoding: str = "macroman",
    ) -> "PSDImage":
        """
        Open a PSD document.

        :param fp: filename, file-like object or the document bytes.
        :param options: :py:class:`~psd_ingest.api.options.IngestOptions`.
        :param encoding: charset encoding of the pascal string within the file,
            default 'macroman'. Some psd files need explicit encoding option.
        :return: A :py:class:`~psd_ingest.api.psd_image.PSDImage` object.
        """
        if isinstance(fp, (bytes, bytearray, memoryview)):
            return cls.frombytes(fp, options, encoding)
        if isinstance(fp, (str, os.PathLike)):
            with open(fp, "rb") as f:
                data = f.read()
        else:
            data = fp.read()
        return cls.frombytes(data, options, encoding)

    @classmethod
    def frombytes(
        cls,
        data: bytes,
        options: Optional[IngestOptions] = None,
        encoding: str = "macroman",
    ) -> "PSDImage":
        """
        Decode a PSD document held in memory.

        :raise InvalidSignature: the data is not a PSD/PSB document.
        :raise TruncatedInput: a required section is cut short.
        :raise ResourceLimitExceeded: a limit in ``options`` was exceeded.
        """
        started = time.monotonic()
        logger.debug("Decoding %d bytes", len(data))
        return cls(PSD.frombytes(data, encoding=encoding), options, started)

    def composite(
        self,
        viewport: Optional[Tuple[int, int, int, int]] = None,
        layer_filter: Optional[Callable[[Layer], bool]] = None,
    ) -> Raster:
        """
        Composite the PSD image.

        Documents without layers return the merged image stored in the file.

        :param viewport: Viewport bounding box specified by (x1, y1, x2, y2)
            tuple. Default is the viewbox of the PSD.
        :param layer_filter: Callable that takes a layer as argument and
            returns whether if the layer is composited. Default is
            :py:meth:`~psd_ingest.api.layers.Layer.is_visible`.
        :return: :py:class:`~psd_ingest.api.raster.Raster`.
        """
        from psd_ingest.composite import composite

        if len(self) == 0 and self._merged is not None and viewport is None:
            return self._merged
        return composite(self, viewport=viewport, layer_filter=layer_filter)

    @property
    def name(self) -> str:
        return "Root"

    @property
    def kind(self) -> str:
        return "psdimage"

    @property
    def width(self) -> int:
        """Document width."""
        return self._record.header.width

    @property
    def height(self) -> int:
        """Document height."""
        return self._record.header.height

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) tuple."""
        return self.width, self.height

    @property
    def viewbox(self) -> Tuple[int, int, int, int]:
        """Canvas bounding box (0, 0, width, height)."""
        return 0, 0, self.width, self.height

    @property
    def color_mode(self) -> ColorMode:
        """Document color mode."""
        return self._record.header.color_mode

    @property
    def depth(self) -> int:
        """Pixel depth in bits per channel."""
        return self._record.header.depth

    @property
    def channels(self) -> int:
        """Number of channels of the merged image."""
        return self._record.header.channels

    @property
    def version(self) -> int:
        """1 for PSD, 2 for PSB."""
        return self._record.header.version

    @property
    def resolution(self) -> Optional[Tuple[float, float]]:
        """(horizontal, vertical) DPI, or `None` when not recorded."""
        return get_resolution(self._record.image_resources)

    @property
    def has_merged_alpha(self) -> bool:
        """Whether the merged image carries a real transparency channel."""
        return self._record.has_merged_alpha

    @property
    def image_resources(self):
        """Document :py:class:`~psd_ingest.psd.image_resources.ImageResources`."""
        return self._record.image_resources

    @property
    def warnings(self) -> Tuple[DecodeWarning, ...]:
        """Non-fatal problems found while decoding, in layer order."""
        return tuple(self._warnings)

    def __repr__(self) -> str:
        return "%s(mode=%s size=%dx%d depth=%d channels=%d)" % (
            self.__class__.__name__,
            self.color_mode.name,
            self.width,
            self.height,
            self.depth,
            self.channels,
        )

    def _init(self) -> None:
        """Materialize pixels and build the layer tree."""
        records = list(self._record._iter_layers())
        logger.debug("Found %d layer records", len(records))
        self._check_limits(records)
        self._check_deadline()

        kinds = [_classify(record) for record, _ in records]
        if self._options.extract_images:
            if self.color_mode == ColorMode.LAB:
                self._warn(
                    UnsupportedColorMode,
                    "Lab document converted to grayscale from lightness",
                )
            pixels = self._materialize(records, kinds)
            if not records:
                self._merged = self._get_merged()
        else:
            pixels = {}
        self.children = self._build_tree(records, kinds, pixels)

    def _check_limits(self, records: List[Tuple[LayerRecord, List[ChannelData]]]) -> None:
        options = self._options
        if options.max_layer_count is not None and len(records) > options.max_layer_count:
            raise ResourceLimitExceeded(
                "max_layer_count", len(records), options.max_layer_count
            )
        total = self.width * self.height
        for record, _ in records:
            area = record.width * record.height
            if options.max_layer_size is not None and area > options.max_layer_size:
                raise ResourceLimitExceeded(
                    "max_layer_size", area, options.max_layer_size
                )
            total += area
        if options.max_total_pixels is not None and total > options.max_total_pixels:
            raise ResourceLimitExceeded(
                "max_total_pixels", total, options.max_total_pixels
            )

    def _check_deadline(self) -> None:
        timeout = self._options.timeout
        if timeout is None:
            return
        elapsed = time.monotonic() - self._started
        if elapsed > timeout:
            raise ResourceLimitExceeded("timeout", round(elapsed, 3), timeout)

    def _warn(self, category: type, message: str, layer_id: Optional[int] = None) -> None:
        logger.warning("%s: %s", category.__name__, message)
        self._warnings.append(DecodeWarning(category, message, layer_id))

    def _materialize(
        self,
        records: List[Tuple[LayerRecord, List[ChannelData]]],
        kinds: List[str],
    ) -> Dict[int, numpy_io.LayerPixels]:
        """Decode layer pixels, in parallel when more than one worker."""
        header = self._record.header
        palette = self._record.color_mode_data.value
        extract_hidden = self._options.extract_hidden
        jobs = [
            index
            for index, (record, _) in enumerate(records)
            if kinds[index] in (_IMAGE, _TEXT, _GROUP_END)
            and (extract_hidden or record.flags.visible)
        ]

        def task(index: int) -> numpy_io.LayerPixels:
            self._check_deadline()
            record, channels = records[index]
            return numpy_io.materialize_layer(
                index, record, channels, header, palette
            )

        workers = self._options.workers
        if workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(task, jobs))
        else:
            results = [task(index) for index in jobs]

        for result in results:
            self._warnings.extend(result.warnings)
        return dict(zip(jobs, results))

    def _get_merged(self) -> Optional[Raster]:
        expected = numpy_io.EXPECTED_CHANNELS.get(self.color_mode, 1)
        try:
            return numpy_io.get_image_data(
                self._record, has_alpha=self.channels > expected
            )
        except UnsupportedCompression as e:
            self._warn(UnsupportedCompression, "Merged image: %s" % e)
            return None

    def _build_tree(
        self,
        records: List[Tuple[LayerRecord, List[ChannelData]]],
        kinds: List[str],
        pixels: Dict[int, numpy_io.LayerPixels],
    ) -> Tuple[Layer, ...]:
        """
        Reconstruct the tree from the flat list. Records are stored bottom
        to top, so a group starts at its bounding divider and ends at the
        folder record that carries the group's own properties.
        """
        # Stack of (divider index, children) for the open groups.
        stack: List[Tuple[Optional[int], List[Layer]]] = [(None, [])]
        for index, (record, _) in enumerate(records):
            kind = kinds[index]
            if record.right < record.left or record.bottom < record.top:
                self._warn(
                    StructuralInconsistency,
                    "Inverted layer rectangle (%d, %d, %d, %d), treated as empty"
                    % (record.left, record.top, record.right, record.bottom),
                    index,
                )
            if kind == _GROUP_START:
                stack.append((index, []))
            elif kind == _GROUP_END:
                if len(stack) == 1:
                    self._warn(
                        StructuralInconsistency,
                        "Folder record without an open group",
                        index,
                    )
                    children: List[Layer] = []
                else:
                    _, children = stack.pop()
                stack[-1][1].append(
                    self._make_group(index, record, children, pixels.get(index))
                )
            else:
                stack[-1][1].append(
                    self._make_layer(index, record, kind, pixels.get(index))
                )

        while len(stack) > 1:
            start, children = stack.pop()
            self._warn(
                StructuralInconsistency, "Group is never closed, closing it", start
            )
            stack[-1][1].append(
                Group(
                    layer_id=start,
                    name="Group",
                    blend_mode=BlendMode.PASS_THROUGH,
                    children=children,
                )
            )
        return tuple(stack[0][1])

    def _make_layer(
        self,
        index: int,
        record: LayerRecord,
        kind: str,
        pixels: Optional[numpy_io.LayerPixels],
    ) -> Layer:
        raster = pixels.raster if pixels else None
        mask = pixels.mask if pixels else None
        if kind == _TEXT:
            return TypeLayer(
                raster=raster,
                mask=mask,
                text=get_text_data(record) or TextData(),
                **_common_fields(index, record),
            )
        if kind == _ADJUSTMENT:
            return AdjustmentLayer(
                adjustment=_adjustment_name(record), **_common_fields(index, record)
            )
        return PixelLayer(raster=raster, mask=mask, **_common_fields(index, record))

    def _make_group(
        self,
        index: int,
        record: LayerRecord,
        children: List[Layer],
        pixels: Optional[numpy_io.LayerPixels],
    ) -> Group:
        fields = _common_fields(index, record)
        divider = _get_divider(record)
        if divider is not None and divider.blend_mode is not None:
            fields["blend_mode"] = divider.blend_mode
        return Group(
            children=children, mask=pixels.mask if pixels else None, **fields
        )


def _get_divider(record: LayerRecord) -> Optional[SectionDividerSetting]:
    blocks = record.tagged_blocks
    divider = blocks.get_data(Tag.SECTION_DIVIDER_SETTING)
    divider = blocks.get_data(Tag.NESTED_SECTION_DIVIDER_SETTING, divider)
    if isinstance(divider, SectionDividerSetting):
        return divider
    return None


def _classify(record: LayerRecord) -> str:
    divider = _get_divider(record)
    # Some files contain dividers of kind OTHER on ordinary layers.
    if divider is not None and divider.kind != SectionDivider.OTHER:
        if divider.kind == SectionDivider.BOUNDING_SECTION_DIVIDER:
            return _GROUP_START
        return _GROUP_END
    if Tag.TYPE_TOOL_OBJECT_SETTING in record.tagged_blocks:
        return _TEXT
    if _adjustment_name(record) is not None:
        return _ADJUSTMENT
    return _IMAGE


def _adjustment_name(record: LayerRecord) -> Optional[str]:
    for block in record.tagged_blocks.values():
        if block.key in ADJUSTMENT_TAGS:
            return block.key.name
    return None


def _common_fields(index: int, record: LayerRecord) -> Dict[str, Any]:
    blocks = record.tagged_blocks
    name = blocks.get_data(Tag.UNICODE_LAYER_NAME)
    if not isinstance(name, str) or not name:
        name = record.name
    if not name:
        name = "Layer %d" % (index + 1)
    fill_opacity = blocks.get_data(Tag.BLEND_FILL_OPACITY, 255)
    if not isinstance(fill_opacity, int):
        fill_opacity = 255
    return dict(
        layer_id=index,
        name=name,
        bbox=(
            record.left,
            record.top,
            max(record.right, record.left),
            max(record.bottom, record.top),
        ),
        opacity=record.opacity / 255.0,
        blend_mode=record.blend_mode,
        visible=record.flags.visible,
        clipping=record.clipping == Clipping.NON_BASE,
        fill_opacity=min(fill_opacity, 255) / 255.0,
    )
