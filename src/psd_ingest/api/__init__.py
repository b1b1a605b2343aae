"""
High-level API: document model, layer materialization and ingestion.
"""

from .ingest import IngestResult, ingest
from .layers import (
    AdjustmentLayer,
    Group,
    Layer,
    PixelLayer,
    TextData,
    TypeLayer,
)
from .mask import Mask
from .options import IngestOptions
from .psd_image import PSDImage
from .raster import Raster

__all__ = [
    "AdjustmentLayer",
    "Group",
    "IngestOptions",
    "IngestResult",
    "Layer",
    "Mask",
    "PSDImage",
    "PixelLayer",
    "Raster",
    "TextData",
    "TypeLayer",
    "ingest",
]
