import io

import numpy as np
import pytest
from PIL import Image

from psd_ingest.api.raster import Raster


def test_raster_is_read_only() -> None:
    raster = Raster(np.zeros((2, 3, 4), dtype=np.uint8))
    assert raster.size == (3, 2)
    with pytest.raises(ValueError):
        raster.data[0, 0, 0] = 1
    copy = raster.numpy()
    copy[0, 0, 0] = 1
    assert raster.data[0, 0, 0] == 0


def test_raster_owns_its_buffer() -> None:
    array = np.full((1, 1, 4), 255, dtype=np.uint8)
    raster = Raster(array)
    array[0, 0, 3] = 0
    assert not raster.has_transparency


@pytest.mark.parametrize("shape", [(2, 2), (2, 2, 3), (2, 2, 4, 1)])
def test_raster_shape(shape) -> None:
    with pytest.raises(ValueError):
        Raster(np.zeros(shape, dtype=np.uint8))


@pytest.mark.parametrize(
    "alpha, expected",
    [(255, False), (254, True), (0, True)],
)
def test_has_transparency(alpha: int, expected: bool) -> None:
    array = np.full((2, 2, 4), 255, dtype=np.uint8)
    array[1, 1, 3] = alpha
    assert Raster(array).has_transparency is expected


def test_empty() -> None:
    raster = Raster.empty(3, 0)
    assert raster.is_empty()
    assert raster.size == (3, 0)
    assert not raster.has_transparency
    assert raster.tobytes() == b""
    with pytest.raises(ValueError):
        raster.topil()


def test_fromfloat() -> None:
    color = np.array([[[1.0, 0.5, -0.1]]])
    alpha = np.array([[[1.2]]])
    raster = Raster.fromfloat(color, alpha)
    assert raster.tobytes() == bytes([255, 128, 0, 255])


def test_topil_and_png() -> None:
    array = np.zeros((2, 3, 4), dtype=np.uint8)
    array[:, :, 0] = 200
    array[:, :, 3] = 100
    raster = Raster(array)
    image = raster.topil()
    assert image.mode == "RGBA"
    assert image.size == (3, 2)
    assert image.getpixel((0, 0)) == (200, 0, 0, 100)

    decoded = Image.open(io.BytesIO(raster.to_png()))
    assert decoded.size == (3, 2)
    assert np.array_equal(np.asarray(decoded.convert("RGBA")), array)


def test_repr() -> None:
    assert repr(Raster.empty(2, 2)) == "Raster(size=2x2 transparent)"
