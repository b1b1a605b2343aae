"""
Low-level API that translates binary data to Python structure.

All the data structure in this subpackage inherits from one of the object
defined in :py:mod:`psd_ingest.psd.base` module.
"""

from .bin_utils import BinaryReader as BinaryReader
from .document import PSD as PSD
from .layer_and_mask import (
    ChannelImageData as ChannelImageData,
    LayerInfo as LayerInfo,
    LayerRecords as LayerRecords,
)
from .tagged_blocks import TaggedBlocks as TaggedBlocks

__all__ = [
    "BinaryReader",
    "PSD",
    "LayerInfo",
    "LayerRecords",
    "ChannelImageData",
    "TaggedBlocks",
]
