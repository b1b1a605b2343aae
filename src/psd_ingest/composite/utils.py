"""Utility functions for composite operations."""

from typing import Optional, Tuple

import numpy as np

BBox = Tuple[int, int, int, int]


def divide(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Safe division for color ops; 0 where the divisor vanishes."""
    with np.errstate(divide="ignore", invalid="ignore"):
        c = np.true_divide(a, b)
        c[~np.isfinite(c)] = 0.0
    return c


def intersect(a: BBox, b: BBox) -> BBox:
    """Calculate intersection of two bounding boxes."""
    inter = (max(a[0], b[0]), max(a[1], b[1]), min(a[2], b[2]), min(a[3], b[3]))
    if inter[0] >= inter[2] or inter[1] >= inter[3]:
        return (0, 0, 0, 0)
    return inter


def is_empty(bbox: BBox) -> bool:
    return bbox[0] >= bbox[2] or bbox[1] >= bbox[3]


def clip(x: np.ndarray) -> np.ndarray:
    """Clip between [0, 1]."""
    return np.clip(x, 0.0, 1.0)


def paste(
    viewport: BBox,
    bbox: BBox,
    values: np.ndarray,
    background: Optional[float] = None,
) -> np.ndarray:
    """
    Place ``values`` covering ``bbox`` into a new array covering
    ``viewport``; the rest is filled with ``background``.
    """
    shape = (viewport[3] - viewport[1], viewport[2] - viewport[0], values.shape[2])
    view = (
        np.full(shape, background, dtype=np.float64)
        if background
        else np.zeros(shape, dtype=np.float64)
    )
    inter = intersect(viewport, bbox)
    if inter == (0, 0, 0, 0):
        return view

    v = (
        inter[0] - viewport[0],
        inter[1] - viewport[1],
        inter[2] - viewport[0],
        inter[3] - viewport[1],
    )
    b = (inter[0] - bbox[0], inter[1] - bbox[1], inter[2] - bbox[0], inter[3] - bbox[1])
    view[v[1] : v[3], v[0] : v[2], :] = values[b[1] : b[3], b[0] : b[2], :]
    return view


def crop(bbox: BBox, values: np.ndarray, region: BBox) -> np.ndarray:
    """Slice ``values`` covering ``bbox`` down to ``region`` inside it."""
    return values[
        region[1] - bbox[1] : region[3] - bbox[1],
        region[0] - bbox[0] : region[2] - bbox[0],
    ]
