"""
Mask module.
"""

import logging
from typing import Optional, Tuple

import numpy as np
from attrs import define, field

from psd_ingest.psd.layer_and_mask import MaskData

logger = logging.getLogger(__name__)


@define(frozen=True, eq=False, repr=False)
class Mask:
    """Pixel mask attached to a layer.

    The mask covers its own bounding box; outside of it every sample takes
    :py:attr:`background_color`. When the record carries a real user mask
    (the combined vector and pixel mask), that one is used.

    .. py:attribute:: bbox

        (left, top, right, bottom) in document coordinates.

    .. py:attribute:: background_color

        0 or 255.

    .. py:attribute:: disabled
    .. py:attribute:: data

        (height, width) uint8 array, or `None` when no mask channel exists.
    """

    bbox: Tuple[int, int, int, int] = (0, 0, 0, 0)
    background_color: int = 0
    disabled: bool = False
    data: Optional[np.ndarray] = field(default=None)

    @classmethod
    def from_record(
        cls, mask_data: MaskData, data: Optional[np.ndarray], real: bool = False
    ) -> "Mask":
        if real:
            return cls(
                (
                    mask_data.real_left or 0,
                    mask_data.real_top or 0,
                    mask_data.real_right or 0,
                    mask_data.real_bottom or 0,
                ),
                mask_data.real_background_color or mask_data.background_color,
                mask_data.disabled,
                data,
            )
        return cls(
            (mask_data.left, mask_data.top, mask_data.right, mask_data.bottom),
            mask_data.background_color,
            mask_data.disabled,
            data,
        )

    @property
    def left(self) -> int:
        return self.bbox[0]

    @property
    def top(self) -> int:
        return self.bbox[1]

    @property
    def right(self) -> int:
        return self.bbox[2]

    @property
    def bottom(self) -> int:
        return self.bbox[3]

    @property
    def width(self) -> int:
        return max(self.right - self.left, 0)

    @property
    def height(self) -> int:
        return max(self.bottom - self.top, 0)

    def numpy(self) -> Optional[np.ndarray]:
        """Mask samples normalized to [0, 1] with shape (height, width, 1)."""
        if self.data is None or self.data.size == 0:
            return None
        return (self.data.astype(np.float64) / 255.0)[:, :, np.newaxis]

    def __repr__(self) -> str:
        return "Mask(bbox=%r%s)" % (self.bbox, " disabled" if self.disabled else "")
