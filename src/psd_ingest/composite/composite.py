"""Composite implementation for layer rendering and blending."""

import logging
from typing import TYPE_CHECKING, Callable, Optional, Sequence, Tuple, Union

import numpy as np

from psd_ingest.api.layers import Group, Layer
from psd_ingest.api.raster import Raster
from psd_ingest.composite import utils
from psd_ingest.composite.blend import get_blend_func
from psd_ingest.constants import BlendMode

if TYPE_CHECKING:
    from psd_ingest.api.psd_image import PSDImage

logger = logging.getLogger(__name__)

# (region, color, alpha) of a source, in region coordinates.
Source = Tuple[utils.BBox, np.ndarray, np.ndarray]


def composite(
    group: Union[Layer, "PSDImage"],
    viewport: Optional[utils.BBox] = None,
    layer_filter: Optional[Callable[[Layer], bool]] = None,
) -> Raster:
    """
    Composite layers into a :py:class:`~psd_ingest.api.raster.Raster`.

    Layers are painted bottom to top. A layer is painted when
    ``layer_filter`` accepts it and every enclosing group was accepted, so
    a hidden group hides all of its descendants.

    :param group: Document, group or single layer to composite.
    :param viewport: Bounding box (left, top, right, bottom) to composite.
        Default is the document canvas, or the layer bounds.
    :param layer_filter: Callable that takes a layer and returns whether it
        is painted. Default is :py:meth:`~psd_ingest.api.layers.Layer.is_visible`.
    :return: RGBA raster covering ``viewport``.
    """
    if viewport is None:
        if isinstance(group, Group):
            viewport = group.bbox_children
        elif isinstance(group, Layer):
            viewport = group.bbox
        else:
            viewport = group.viewbox

    compositor = Compositor(viewport, layer_filter)
    if isinstance(group, Layer) and not isinstance(group, Group):
        compositor.apply_all([group])
    else:
        compositor.apply_all(list(group))
    color, alpha = compositor.finish()
    return Raster.fromfloat(color, alpha)


class Compositor(object):
    """Composite context.

    Accumulates straight (non-premultiplied) color and alpha over the
    viewport, starting from transparent black.

    Example::

        compositor = Compositor(psd.viewbox)
        compositor.apply_all(list(psd))
        color, alpha = compositor.finish()
    """

    def __init__(
        self,
        viewport: utils.BBox,
        layer_filter: Optional[Callable[[Layer], bool]] = None,
    ):
        self._viewport = viewport
        self._layer_filter = layer_filter or Layer.is_visible
        self._color = np.zeros((self.height, self.width, 3), dtype=np.float64)
        self._alpha = np.zeros((self.height, self.width, 1), dtype=np.float64)

    @property
    def viewport(self) -> utils.BBox:
        return self._viewport

    @property
    def width(self) -> int:
        return max(self._viewport[2] - self._viewport[0], 0)

    @property
    def height(self) -> int:
        return max(self._viewport[3] - self._viewport[1], 0)

    def finish(self) -> Tuple[np.ndarray, np.ndarray]:
        return self._color, self._alpha

    def apply_all(self, layers: Sequence[Layer], opacity: float = 1.0) -> None:
        """
        Paint ``layers`` in order. Clipping layers are painted inside the
        alpha of the nearest non-clipping layer below them; when that base
        is not painted, neither are they.
        """
        base: Optional[Source] = None
        for index, layer in enumerate(layers):
            if layer.clipping and index > 0:
                if base is not None:
                    self.apply(layer, opacity, clip=base)
                continue
            need_base = index + 1 < len(layers) and layers[index + 1].clipping
            base = self.apply(layer, opacity, need_base=need_base)

    def apply(
        self,
        layer: Layer,
        opacity: float = 1.0,
        clip: Optional[Source] = None,
        need_base: bool = False,
    ) -> Optional[Source]:
        """
        Paint a single layer.

        :param opacity: Opacity inherited from enclosing pass-through groups.
        :param clip: Base source the layer is clipped to.
        :param need_base: Whether the layer's own source must be returned to
            clip the layers above it.
        :return: The layer's source before inherited opacity, when painted
            as an isolated source or ``need_base`` is set.
        """
        if not self._layer_filter(layer):
            logger.debug("Ignore %s", layer)
            return None

        if isinstance(layer, Group) and layer.blend_mode == BlendMode.PASS_THROUGH:
            group_opacity = opacity * layer.opacity * layer.fill_opacity
            self.apply_all(layer.children, group_opacity)
            if need_base:
                return self._get_group(layer)
            return None

        if isinstance(layer, Group):
            source = self._get_group(layer)
        else:
            source = self._get_object(layer)
        if source is None:
            return None

        region, color, alpha = source
        if clip is not None:
            region, color, alpha = self._clip(source, clip)
            if utils.is_empty(region):
                return None
        self._apply_source(region, color, alpha * opacity, layer.blend_mode)
        return source

    def _apply_source(
        self,
        region: utils.BBox,
        color: np.ndarray,
        alpha: np.ndarray,
        blend_mode: BlendMode,
    ) -> None:
        x0, y0 = region[0] - self._viewport[0], region[1] - self._viewport[1]
        x1, y1 = region[2] - self._viewport[0], region[3] - self._viewport[1]
        color_b = self._color[y0:y1, x0:x1]
        alpha_b = self._alpha[y0:y1, x0:x1]

        blend_fn = get_blend_func(blend_mode)
        color_s = (1.0 - alpha_b) * color + alpha_b * utils.clip(
            blend_fn(color_b, color)
        )
        alpha_o = alpha + alpha_b * (1.0 - alpha)
        color_o = alpha * color_s + (1.0 - alpha) * alpha_b * color_b
        self._color[y0:y1, x0:x1] = utils.clip(utils.divide(color_o, alpha_o))
        self._alpha[y0:y1, x0:x1] = alpha_o

    def _get_object(self, layer: Layer) -> Optional[Source]:
        """Get the source of a layer with pixels."""
        if not layer.has_pixels():
            return None
        region = utils.intersect(self._viewport, layer.bbox)
        if utils.is_empty(region):
            logger.debug("Out of viewport %s", layer)
            return None
        assert layer.raster is not None
        data = utils.crop(layer.bbox, layer.raster.data, region)
        data = data.astype(np.float64) / 255.0
        color, alpha = data[:, :, :3], data[:, :, 3:4]
        alpha = alpha * self._get_mask(layer, region)
        return region, color, alpha * (layer.opacity * layer.fill_opacity)

    def _get_group(self, layer: Group) -> Optional[Source]:
        """Get the source of a group painted in isolation."""
        region = utils.intersect(self._viewport, layer.bbox_children)
        if utils.is_empty(region):
            return None
        compositor = Compositor(region, self._layer_filter)
        compositor.apply_all(layer.children)
        color, alpha = compositor.finish()
        alpha = alpha * self._get_mask(layer, region)
        return region, color, alpha * (layer.opacity * layer.fill_opacity)

    def _get_mask(self, layer: Layer, region: utils.BBox) -> Union[float, np.ndarray]:
        """Get mask values over ``region``; 1.0 when there is no mask."""
        mask = layer.mask
        if mask is None or mask.disabled:
            return 1.0
        values = mask.numpy()
        if values is None:
            return 1.0
        return utils.paste(region, mask.bbox, values, mask.background_color / 255.0)

    def _clip(self, source: Source, base: Source) -> Source:
        region, color, alpha = source
        base_region, _, base_alpha = base
        inter = utils.intersect(region, base_region)
        if utils.is_empty(inter):
            return inter, color[:0, :0], alpha[:0, :0]
        return (
            inter,
            utils.crop(region, color, inter),
            utils.crop(region, alpha, inter) * utils.crop(base_region, base_alpha, inter),
        )
