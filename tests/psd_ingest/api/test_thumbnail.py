import numpy as np
import pytest

from psd_ingest.api.raster import Raster
from psd_ingest.api.thumbnail import make_thumbnail, thumbnail_size


@pytest.mark.parametrize(
    "size, bound, expected",
    [
        ((100, 100), 128, (100, 100)),
        ((256, 128), 128, (128, 64)),
        ((128, 256), 64, (32, 64)),
        ((1000, 3), 100, (100, 1)),
        ((333, 100), 100, (100, 30)),
    ],
)
def test_thumbnail_size(size, bound, expected) -> None:
    assert thumbnail_size(*size, bound) == expected


@pytest.mark.parametrize("width, height", [(640, 480), (17, 301), (1, 1000), (999, 998)])
@pytest.mark.parametrize("bound", [1, 16, 100])
def test_thumbnail_size_bounds(width: int, height: int, bound: int) -> None:
    w, h = thumbnail_size(width, height, bound)
    assert max(w, h) <= bound
    assert w >= 1 and h >= 1
    # Aspect ratio within one pixel of rounding.
    assert abs(w - width * h / height) <= 1 or abs(h - height * w / width) <= 1


def test_thumbnail_size_invalid() -> None:
    with pytest.raises(ValueError):
        thumbnail_size(10, 10, 0)


def test_make_thumbnail_downsamples() -> None:
    array = np.zeros((40, 80, 4), dtype=np.uint8)
    array[:, :40] = (255, 0, 0, 255)
    array[:, 40:] = (0, 0, 255, 255)
    thumbnail = make_thumbnail(Raster(array), 20)
    assert thumbnail.size == (20, 10)
    data = thumbnail.numpy()
    assert tuple(data[5, 0]) == (255, 0, 0, 255)
    assert tuple(data[5, 19]) == (0, 0, 255, 255)


def test_make_thumbnail_box_average() -> None:
    array = np.zeros((2, 2, 4), dtype=np.uint8)
    array[:, :, 3] = 255
    array[0, :, 0] = 255
    thumbnail = make_thumbnail(Raster(array), 1)
    assert thumbnail.size == (1, 1)
    assert abs(int(thumbnail.numpy()[0, 0, 0]) - 128) <= 1


def test_make_thumbnail_never_upsamples() -> None:
    raster = Raster(np.zeros((4, 3, 4), dtype=np.uint8))
    assert make_thumbnail(raster, 100) is raster


def test_make_thumbnail_empty() -> None:
    raster = Raster.empty(500, 0)
    assert make_thumbnail(raster, 10) is raster


def test_make_thumbnail_is_deterministic() -> None:
    rng = np.random.default_rng(0)
    raster = Raster(rng.integers(0, 256, (50, 70, 4), dtype=np.uint8))
    first = make_thumbnail(raster, 32)
    second = make_thumbnail(raster, 32)
    assert first.tobytes() == second.tobytes()
