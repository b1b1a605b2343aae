"""
Layer module.

This module defines the immutable layer tree built by
:py:class:`~psd_ingest.api.psd_image.PSDImage`. The tree is a closed set of
variants sharing the fields of :py:class:`Layer`:

- :py:class:`PixelLayer`: Raster layer with pixel data
- :py:class:`TypeLayer`: Text layer; carries :py:class:`TextData` and the
  raster Photoshop stored for it
- :py:class:`Group`: Folder owning its child layers
- :py:class:`AdjustmentLayer`: Adjustment or fill layer, kept as a named
  node without pixels

Children are ordered bottom to top, the order they are painted in::

    for layer in psd.descendants():
        if layer.kind == 'text':
            print(layer.name, layer.text.content)

Common layer properties:

- ``layer_id``: Position of the record in the file, stable within a decode
- ``name``: Layer name
- ``visible``: The layer's own visibility flag
- ``opacity``: Opacity in [0.0, 1.0]
- ``blend_mode``: :py:class:`~psd_ingest.constants.BlendMode`
- ``bbox``: Bounding box (left, top, right, bottom) in document coordinates
- ``kind``: ``'image'``, ``'text'``, ``'group'`` or ``'adjustment'``
"""

import logging
from typing import ClassVar, Iterator, Optional, Tuple

from attrs import define, field

from psd_ingest.api.mask import Mask
from psd_ingest.api.raster import Raster
from psd_ingest.constants import BlendMode
from psd_ingest.validators import range_

logger = logging.getLogger(__name__)


@define(frozen=True)
class TextData:
    """
    Text metadata of a type layer.

    .. py:attribute:: content

        Text content; ``\\r`` separates lines.

    .. py:attribute:: font_size
    .. py:attribute:: font_family
    .. py:attribute:: color

        Fill color as ``#rrggbb``.
    """

    content: str = ""
    font_size: float = 12.0
    font_family: str = "Arial"
    color: str = "#000000"


@define(frozen=True, eq=False, repr=False)
class Layer:
    """
    Base class of all layer variants.

    .. py:attribute:: layer_id
    .. py:attribute:: name
    .. py:attribute:: bbox
    .. py:attribute:: opacity
    .. py:attribute:: blend_mode
    .. py:attribute:: visible
    .. py:attribute:: clipping

        Whether this layer is clipped to the layer below it.

    .. py:attribute:: fill_opacity

        Fill opacity in [0.0, 1.0], multiplied into :py:attr:`opacity`.

    .. py:attribute:: mask

        :py:class:`~psd_ingest.api.mask.Mask` or `None`.

    .. py:attribute:: raster

        :py:class:`~psd_ingest.api.raster.Raster` sized to :py:attr:`bbox`,
        or `None` for groups, adjustments and layers without pixels.
    """

    kind: ClassVar[str] = "layer"

    layer_id: int = 0
    name: str = ""
    bbox: Tuple[int, int, int, int] = (0, 0, 0, 0)
    opacity: float = field(default=1.0, validator=range_(0.0, 1.0))
    blend_mode: BlendMode = BlendMode.NORMAL
    visible: bool = True
    clipping: bool = False
    fill_opacity: float = field(default=1.0, validator=range_(0.0, 1.0))
    mask: Optional[Mask] = None
    raster: Optional[Raster] = None

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

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) tuple."""
        return self.width, self.height

    @property
    def has_transparency(self) -> Optional[bool]:
        """Whether the raster has alpha below 255; `None` without a raster."""
        raster = self.raster
        return None if raster is None else raster.has_transparency

    def has_pixels(self) -> bool:
        """Whether the layer has a non-empty raster."""
        raster = self.raster
        return raster is not None and not raster.is_empty()

    def has_mask(self) -> bool:
        return self.mask is not None

    def is_group(self) -> bool:
        return False

    def is_visible(self) -> bool:
        """
        The layer's own visibility. Group visibility is applied while
        compositing since layers keep no reference to their parent.
        """
        return self.visible

    def __repr__(self) -> str:
        has_size = self.width > 0 and self.height > 0
        return "%s(%r%s%s%s%s)" % (
            self.__class__.__name__,
            self.name,
            " size=%dx%d" % (self.width, self.height) if has_size else "",
            " invisible" if not self.visible else "",
            " clip" if self.clipping else "",
            " mask" if self.has_mask() else "",
        )


class GroupMixin:
    """Sequence behavior shared by groups and the document."""

    children: Tuple[Layer, ...]

    def __len__(self) -> int:
        return len(self.children)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self.children)

    def __reversed__(self) -> Iterator[Layer]:
        return reversed(self.children)

    def __getitem__(self, key: int) -> Layer:
        return self.children[key]

    def descendants(self) -> Iterator[Layer]:
        """
        Return a generator to iterate over all descendant layers, depth
        first in paint order.

        Example::

            for layer in psd.descendants():
                print(layer)
        """
        for layer in self.children:
            yield layer
            if isinstance(layer, Group):
                yield from layer.descendants()

    def find(self, name: str) -> Optional[Layer]:
        """Returns the first layer found for the given layer name."""
        for layer in self.findall(name):
            return layer
        return None

    def findall(self, name: str) -> Iterator[Layer]:
        """Return a generator to iterate over all layers with the given name."""
        for layer in self.descendants():
            if layer.name == name:
                yield layer


@define(frozen=True, eq=False, repr=False)
class Group(GroupMixin, Layer):
    """
    Group of layers.

    A group with :py:attr:`~psd_ingest.constants.BlendMode.PASS_THROUGH`
    paints its children directly onto the backdrop; any other blend mode
    isolates them.
    """

    kind: ClassVar[str] = "group"

    children: Tuple[Layer, ...] = field(default=(), converter=tuple)

    @property
    def bbox_children(self) -> Tuple[int, int, int, int]:
        """Union of the bounding boxes of the non-empty descendants."""
        boxes = [
            layer.bbox
            for layer in self.descendants()
            if not layer.is_group() and layer.width > 0 and layer.height > 0
        ]
        if not boxes:
            return (0, 0, 0, 0)
        return (
            min(b[0] for b in boxes),
            min(b[1] for b in boxes),
            max(b[2] for b in boxes),
            max(b[3] for b in boxes),
        )

    def is_group(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "%s(%r%s children=%d)" % (
            self.__class__.__name__,
            self.name,
            " invisible" if not self.visible else "",
            len(self.children),
        )


@define(frozen=True, eq=False, repr=False)
class PixelLayer(Layer):
    """Layer that has rasterized image in pixels."""

    kind: ClassVar[str] = "image"


@define(frozen=True, eq=False, repr=False)
class TypeLayer(Layer):
    """
    Layer that has text and styling information for fonts or paragraphs.

    Example::

        print(layer.text.content, layer.text.font_family, layer.text.color)
    """

    kind: ClassVar[str] = "text"
    text: TextData = field(factory=TextData)


@define(frozen=True, eq=False, repr=False)
class AdjustmentLayer(Layer):
    """
    Adjustment or fill layer. Its effect on the layers below is not
    rendered.

    .. py:attribute:: adjustment

        Name of the tagged block that marked this layer, e.g. ``'CURVES'``.
    """

    kind: ClassVar[str] = "adjustment"

    adjustment: Optional[str] = None

