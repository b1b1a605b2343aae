"""
Decode options.
"""

from typing import Optional

from attrs import define, field

from psd_ingest.api.thumbnail import DEFAULT_SIZE
from psd_ingest.validators import optional_range_, range_


@define(frozen=True)
class IngestOptions:
    """
    Options for decoding a document.

    Limits are checked before any pixel buffer is allocated and raise
    :py:class:`~psd_ingest.errors.ResourceLimitExceeded`. `None` disables a
    limit.

    .. py:attribute:: max_layer_size

        Max pixels (width x height) of a single layer.

    .. py:attribute:: max_layer_count
    .. py:attribute:: max_total_pixels

        Max pixels of the canvas plus every layer.

    .. py:attribute:: timeout

        Max seconds spent decoding, checked between layers.

    .. py:attribute:: extract_images

        Decode layer pixels and build the composite. When `False`, only the
        layer tree and metadata are produced.

    .. py:attribute:: extract_hidden

        Decode pixels of layers whose own visibility flag is off.

    .. py:attribute:: generate_thumbnails
    .. py:attribute:: thumbnail_size

        Max dimension of the thumbnails.

    .. py:attribute:: workers

        Number of threads decoding layers; 1 decodes inline.
    """

    max_layer_size: Optional[int] = field(default=None, validator=optional_range_(0))
    max_layer_count: Optional[int] = field(default=None, validator=optional_range_(0))
    max_total_pixels: Optional[int] = field(
        default=None, validator=optional_range_(0)
    )
    timeout: Optional[float] = field(default=None, validator=optional_range_(0))
    extract_images: bool = True
    extract_hidden: bool = True
    generate_thumbnails: bool = False
    thumbnail_size: int = field(default=DEFAULT_SIZE, validator=range_(1))
    workers: int = field(default=1, validator=range_(1))
