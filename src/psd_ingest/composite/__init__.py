"""
Composite module for layer rendering and blending.

This subpackage flattens a layer tree into a single RGBA
:py:class:`~psd_ingest.api.raster.Raster`, reproducing Photoshop's blend
modes, opacity, fill opacity, layer masks, clipping and group isolation.

Key modules:

- :py:mod:`psd_ingest.composite.composite`: The :py:class:`Compositor`
- :py:mod:`psd_ingest.composite.blend`: Blend mode implementations

Example usage::

    from psd_ingest import PSDImage
    from psd_ingest.composite import composite

    psd = PSDImage.open('document.psd')
    raster = composite(psd)
    raster.topil().save('output.png')

    # Composite including hidden layers
    raster = composite(psd, layer_filter=lambda layer: True)

Output is deterministic: compositing the same document twice yields
byte-identical rasters.
"""

from psd_ingest.composite.composite import Compositor, composite

__all__ = [
    "Compositor",
    "composite",
]
