"""
Color mode data structure.
"""

import logging
from typing import Any

from attrs import define

from psd_ingest.psd.base import BaseElement
from psd_ingest.psd.bin_utils import BinaryReader

logger = logging.getLogger(__name__)


@define(repr=False)
class ColorModeData(BaseElement):
    """
    Color mode data section of the PSD file.

    For indexed color images the data is the color table for the image in a
    non-interleaved order. Duotone images also have this data, but the data
    format is undocumented. The content is kept opaque.
    """

    value: bytes = b""

    @classmethod
    def read(cls, reader: BinaryReader, version: int = 1, **kwargs: Any) -> "ColorModeData":
        value = reader.read_length_block()
        logger.debug("reading color mode data, len=%d", len(value))
        return cls(value)

    def __repr__(self) -> str:
        return "ColorModeData(len=%d)" % len(self.value)
