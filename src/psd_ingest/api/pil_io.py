"""
PIL IO module.
"""

import io
import logging
from typing import TYPE_CHECKING, Any

import numpy as np
from PIL import Image

if TYPE_CHECKING:
    from psd_ingest.api.raster import Raster

logger = logging.getLogger(__name__)


def convert_raster_to_pil(raster: "Raster") -> Image.Image:
    """Convert Raster to an RGBA PIL Image."""
    if raster.is_empty():
        raise ValueError("Empty raster cannot be converted to an image")
    return Image.fromarray(np.array(raster.data))


def convert_pil_to_array(image: Image.Image) -> np.ndarray:
    """Convert PIL Image to a (height, width, 4) uint8 array."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return np.asarray(image, dtype=np.uint8)


def encode_png(image: Image.Image, **kwargs: Any) -> bytes:
    """Encode PIL Image as PNG bytes."""
    with io.BytesIO() as f:
        image.save(f, format="PNG", **kwargs)
        return f.getvalue()
