"""
Thumbnail generator.

Downsamples a raster so that its longest side fits a bound, keeping the
aspect ratio. Box filtering through Pillow averages every source pixel that
falls into a target pixel, and never upsamples.
"""

import logging
from typing import Tuple

from PIL import Image

from psd_ingest.api import pil_io
from psd_ingest.api.raster import Raster

logger = logging.getLogger(__name__)

DEFAULT_SIZE = 128


def thumbnail_size(width: int, height: int, bound: int = DEFAULT_SIZE) -> Tuple[int, int]:
    """
    Target size of a thumbnail.

    :return: (width, height) unchanged when the source already fits.
    """
    if bound < 1:
        raise ValueError("Thumbnail bound must be positive: %r" % bound)
    longest = max(width, height)
    if longest <= bound:
        return width, height
    scale = bound / longest
    return max(1, round(width * scale)), max(1, round(height * scale))


def make_thumbnail(raster: Raster, bound: int = DEFAULT_SIZE) -> Raster:
    """
    Downsample ``raster`` so that its longest side is at most ``bound``.

    :param raster: :py:class:`~psd_ingest.api.raster.Raster`.
    :param bound: max dimension in pixels.
    :return: a new :py:class:`~psd_ingest.api.raster.Raster`, or ``raster``
        itself when it is empty or already within bound.
    """
    size = thumbnail_size(raster.width, raster.height, bound)
    if raster.is_empty() or size == raster.size:
        return raster
    logger.debug("Resizing %dx%d to %dx%d", raster.width, raster.height, *size)
    image = raster.topil().resize(size, Image.Resampling.BOX)
    return Raster(pil_io.convert_pil_to_array(image))
