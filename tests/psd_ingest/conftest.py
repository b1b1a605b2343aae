from typing import Iterator

import pytest

from .utils import build_psd, group_close, group_open, solid_layer, text_layer


@pytest.fixture
def two_layers() -> bytes:
    """Opaque red canvas with a half transparent blue square on top."""
    return build_psd(
        [
            solid_layer("A", (0, 0, 100, 100), (255, 0, 0)),
            solid_layer("B", (25, 25, 75, 75), (0, 0, 255), opacity=128),
        ]
    )


@pytest.fixture
def nested_groups() -> Iterator[bytes]:
    yield build_psd(
        [
            solid_layer("Background", (0, 0, 10, 10), (255, 255, 255)),
            group_open(),
            solid_layer("Inner", (2, 2, 4, 4), (0, 255, 0)),
            group_open(),
            solid_layer("Deep", (5, 5, 8, 8), (0, 0, 255)),
            group_close("Child group", blend_key=b"norm"),
            group_close("Parent group"),
            text_layer("Title", (0, 0, 4, 2), "Hello", font_size=24.0),
        ],
        width=10,
        height=10,
    )
