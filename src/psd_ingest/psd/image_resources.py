"""
Image resources section structure.

Every resource block is read; only the resolution info is decoded, the rest
is kept as raw bytes keyed by the resource id.
"""

import logging
from typing import Any, Optional, Tuple

from attrs import define, field

from psd_ingest.constants import Resource
from psd_ingest.errors import TruncatedInput
from psd_ingest.psd.base import BaseElement, DictElement
from psd_ingest.psd.bin_utils import BinaryReader, decode_fixed_point_32bit
from psd_ingest.registry import new_registry
from psd_ingest.validators import in_

logger = logging.getLogger(__name__)

TYPES, register = new_registry()


@define(repr=False)
class ImageResources(DictElement):
    """
    Image resources section of the PSD file. Dict of
    :py:class:`.ImageResource` keyed by resource id.
    """

    def get_data(self, key: Any, default: Any = None) -> Any:
        """
        Get data from the image resources.

        Shortcut for the following::

            if key in image_resources:
                value = image_resources[key].data
        """
        if key in self:
            return self[key].data
        return default

    @classmethod
    def read(
        cls, reader: BinaryReader, encoding: str = "macroman", **kwargs: Any
    ) -> "ImageResources":
        data = reader.read_length_block()
        logger.debug("reading image resources, len=%d", len(data))
        body = BinaryReader(data)
        items = []
        while body.is_readable(4):
            try:
                item = ImageResource.read(body, encoding=encoding)
            except (ValueError, TruncatedInput) as e:
                logger.warning("Skipping the rest of image resources: %s", e)
                break
            items.append((item.key, item))
        return cls(items)  # type: ignore[call-arg]

    @classmethod
    def _key_converter(cls, key: Any) -> Any:
        return int(key)


@define(repr=False)
class ImageResource(BaseElement):
    """
    Image resource block.

    .. py:attribute:: signature

        Binary signature, always ``b'8BIM'``.

    .. py:attribute:: key

        Unique identifier for the resource. See
        :py:class:`~psd_ingest.constants.Resource`.

    .. py:attribute:: name
    .. py:attribute:: data

        The resource data.
    """

    signature: bytes = field(
        default=b"8BIM",
        repr=False,
        validator=in_({b"8BIM", b"MeSa", b"AgHg", b"PHUT", b"DCSR"}),
    )
    key: int = 1000
    name: str = ""
    data: Any = field(default=b"", repr=False)

    @classmethod
    def read(
        cls, reader: BinaryReader, encoding: str = "macroman", **kwargs: Any
    ) -> "ImageResource":
        signature, key = reader.read_fmt("4sH")
        try:
            key = Resource(key)
        except ValueError:
            if Resource.is_path_info(key):
                logger.debug("Undefined PATH_INFO found: %d", key)
            elif Resource.is_plugin_resource(key):
                logger.debug("Undefined PLUGIN_RESOURCE found: %d", key)
            else:
                logger.info("Unknown image resource %d", key)
        name = reader.read_pascal_string(encoding, padding=2)
        raw_data = reader.read_length_block(padding=2)
        data = raw_data
        decoder = TYPES.get(key)
        if decoder:
            try:
                data = decoder.frombytes(raw_data)
            except TruncatedInput as e:
                logger.warning("Failed to read image resource %r: %s", key, e)
        return cls(signature, int(key), name, data)

    def __repr__(self) -> str:
        return "ImageResource(key=%d, name=%r)" % (self.key, self.name)


@register(Resource.RESOLUTION_INFO)
@define
class ResolutionInfo(BaseElement):
    """
    Resolution info structure.

    .. py:attribute:: horizontal

        Horizontal resolution in DPI (pixels per inch).

    .. py:attribute:: vertical

        Vertical resolution in DPI.
    """

    horizontal: float = 72.0
    horizontal_unit: int = 1
    width_unit: int = 1
    vertical: float = 72.0
    vertical_unit: int = 1
    height_unit: int = 1

    @classmethod
    def read(cls, reader: BinaryReader, **kwargs: Any) -> "ResolutionInfo":
        h_res, h_unit, w_unit, v_res, v_unit, height_unit = reader.read_fmt("I2HI2H")
        return cls(
            decode_fixed_point_32bit(h_res),
            h_unit,
            w_unit,
            decode_fixed_point_32bit(v_res),
            v_unit,
            height_unit,
        )

    @property
    def dpi(self) -> Tuple[float, float]:
        return (self.horizontal, self.vertical)


def get_resolution(resources: ImageResources) -> Optional[Tuple[float, float]]:
    """Return the (horizontal, vertical) DPI, or `None` when not recorded."""
    info = resources.get_data(Resource.RESOLUTION_INFO)
    if isinstance(info, ResolutionInfo):
        return info.dpi
    return None
