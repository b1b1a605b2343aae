"""
One-call ingestion entry point.

Example::

    from psd_ingest import IngestOptions, ingest

    with open('document.psd', 'rb') as f:
        result = ingest(f.read(), IngestOptions(generate_thumbnails=True))

    result.composite.topil().save('composite.png')
    for layer in result.document.descendants():
        thumbnail = result.thumbnails.get(layer.layer_id)
"""

import logging
from typing import Dict, Optional

from attrs import define, field

from psd_ingest.api.options import IngestOptions
from psd_ingest.api.psd_image import PSDImage
from psd_ingest.api.raster import Raster
from psd_ingest.api.thumbnail import make_thumbnail

logger = logging.getLogger(__name__)

__all__ = ["IngestOptions", "IngestResult", "ingest"]


@define(frozen=True, eq=False)
class IngestResult:
    """
    Result of :py:func:`ingest`.

    .. py:attribute:: document

        :py:class:`~psd_ingest.api.psd_image.PSDImage`.

    .. py:attribute:: composite

        Flattened :py:class:`~psd_ingest.api.raster.Raster`, or `None` when
        images are not extracted.

    .. py:attribute:: thumbnails

        Layer id to thumbnail :py:class:`~psd_ingest.api.raster.Raster`, for
        every layer with pixels.

    .. py:attribute:: composite_thumbnail
    """

    document: PSDImage
    composite: Optional[Raster] = None
    thumbnails: Dict[int, Raster] = field(factory=dict)
    composite_thumbnail: Optional[Raster] = None

    @property
    def warnings(self):
        return self.document.warnings


def ingest(data: bytes, options: Optional[IngestOptions] = None) -> IngestResult:
    """
    Decode a document, composite it and optionally build thumbnails.

    Per-layer problems are reported in ``result.warnings``; document-level
    problems raise.

    :param data: full contents of a PSD or PSB file.
    :param options: :py:class:`~psd_ingest.api.options.IngestOptions`.
    :raise InvalidSignature: the data is not a PSD/PSB document.
    :raise TruncatedInput: a required section is cut short.
    :raise ResourceLimitExceeded: a limit in ``options`` was exceeded.
    """
    options = options or IngestOptions()
    document = PSDImage.frombytes(data, options)
    if not options.extract_images:
        return IngestResult(document)

    composite = document.composite()
    thumbnails: Dict[int, Raster] = {}
    composite_thumbnail = None
    if options.generate_thumbnails:
        for layer in document.descendants():
            if layer.raster is not None:
                thumbnails[layer.layer_id] = make_thumbnail(
                    layer.raster, options.thumbnail_size
                )
        composite_thumbnail = make_thumbnail(composite, options.thumbnail_size)
    logger.debug(
        "Ingested %r with %d warnings", document, len(document.warnings)
    )
    return IngestResult(document, composite, thumbnails, composite_thumbnail)
