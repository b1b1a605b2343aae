"""
psd-ingest: read-side decoder and compositor for Adobe Photoshop documents.

The package turns the raw bytes of a PSD/PSB file into an immutable layer
tree with per-layer RGBA rasters, a flattened composite and thumbnails.

Basic usage::

    from psd_ingest import PSDImage, ingest

    # One call: document, composite and thumbnails
    with open('example.psd', 'rb') as f:
        result = ingest(f.read())
    result.composite.topil().save('composite.png')

    # Or work with the document directly
    psd = PSDImage.open('example.psd')
    for layer in psd.descendants():
        print(layer.layer_id, layer.kind, layer.name)

Architecture:

- :py:mod:`psd_ingest.psd`: Low-level binary structure parsing
- :py:mod:`psd_ingest.compression`: Channel decompression (RAW, RLE, ZIP)
- :py:mod:`psd_ingest.api`: Document model, materialization and ingestion
- :py:mod:`psd_ingest.composite`: Blend modes and the layer compositor
"""

from psd_ingest.api.ingest import IngestOptions, IngestResult, ingest
from psd_ingest.api.psd_image import PSDImage
from psd_ingest.version import __version__

__all__ = ["PSDImage", "IngestOptions", "IngestResult", "ingest", "__version__"]
