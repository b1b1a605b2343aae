"""
Raster module.

:py:class:`Raster` is the owned RGBA8 pixel buffer produced for every layer
with pixels and for the flattened composite. Its dimensions always equal the
bounding box of the owner, not the document canvas.

Example::

    raster = layer.raster
    print(raster.width, raster.height, raster.has_transparency)
    array = raster.numpy()  # (height, width, 4) uint8
    raster.topil().save('layer.png')
"""

import logging
from typing import Tuple

import numpy as np
from attrs import define, field
from PIL import Image

from psd_ingest.api import pil_io

logger = logging.getLogger(__name__)


def _readonly(array: np.ndarray) -> np.ndarray:
    array = np.array(array, dtype=np.uint8, order="C")
    if array.ndim != 3 or array.shape[2] != 4:
        raise ValueError("Expected (height, width, 4) array, got %r" % (array.shape,))
    array.setflags(write=False)
    return array


@define(frozen=True, eq=False, repr=False)
class Raster:
    """
    Immutable RGBA8 pixel buffer.

    .. py:attribute:: data

        Read-only :py:class:`numpy.ndarray` of shape (height, width, 4) and
        dtype uint8.

    .. py:attribute:: has_transparency

        Whether any alpha sample is below 255, computed once at construction.
    """

    data: np.ndarray = field(converter=_readonly)
    has_transparency: bool = field()

    @has_transparency.default
    def _has_transparency(self) -> bool:
        return bool(self.data.size and (self.data[:, :, 3] < 255).any())

    @classmethod
    def empty(cls, width: int = 0, height: int = 0) -> "Raster":
        """Fully transparent raster of the given size."""
        return cls(np.zeros((height, width, 4), dtype=np.uint8))

    @classmethod
    def fromfloat(cls, color: np.ndarray, alpha: np.ndarray) -> "Raster":
        """
        Build a raster from normalized float arrays.

        :param color: (height, width, 3) array in [0, 1].
        :param alpha: (height, width, 1) array in [0, 1].
        """
        array = np.concatenate((color, alpha), axis=2)
        return cls(np.clip(np.rint(array * 255.0), 0, 255).astype(np.uint8))

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) tuple."""
        return self.width, self.height

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def numpy(self) -> np.ndarray:
        """Return a writable copy of the pixels."""
        return self.data.copy()

    def tobytes(self) -> bytes:
        """Interleaved RGBA bytes, row-major."""
        return self.data.tobytes()

    def topil(self) -> Image.Image:
        """
        Get PIL Image.

        :return: :py:class:`PIL.Image` in RGBA mode.
        :raise ValueError: for empty rasters, which PIL cannot represent.
        """
        return pil_io.convert_raster_to_pil(self)

    def to_png(self, **kwargs) -> bytes:
        """Encode the raster as PNG bytes."""
        return pil_io.encode_png(self.topil(), **kwargs)

    def __repr__(self) -> str:
        return "Raster(size=%dx%d%s)" % (
            self.width,
            self.height,
            " transparent" if self.has_transparency else "",
        )
