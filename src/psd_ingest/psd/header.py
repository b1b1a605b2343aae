"""
File header structure.
"""

import logging
from typing import Any

from attrs import define, field

from psd_ingest.constants import ColorMode
from psd_ingest.errors import InvalidHeader, InvalidSignature, UnsupportedVersion
from psd_ingest.psd.base import BaseElement
from psd_ingest.psd.bin_utils import BinaryReader
from psd_ingest.validators import in_, range_

logger = logging.getLogger(__name__)


@define(repr=True)
class FileHeader(BaseElement):
    """
    Header section of the PSD file.

    Example::

        from psd_ingest.psd.header import FileHeader
        from psd_ingest.constants import ColorMode

        header = FileHeader(channels=2, height=359, width=400, depth=8,
                            color_mode=ColorMode.GRAYSCALE)

    .. py:attribute:: signature

        Signature: always equal to ``b'8BPS'``.

    .. py:attribute:: version

        Version number. PSD is 1, and PSB is 2.

    .. py:attribute:: channels

        The number of channels in the image, including any user-defined alpha
        channel.

    .. py:attribute:: height

        The height of the image in pixels.

    .. py:attribute:: width

        The width of the image in pixels.

    .. py:attribute:: depth

        The number of bits per channel.

    .. py:attribute:: color_mode

        The color mode of the file. See
        :py:class:`~psd_ingest.constants.ColorMode`
    """

    _FORMAT = "4sH6xHIIHH"
    SIGNATURE = b"8BPS"

    signature: bytes = field(default=SIGNATURE, repr=False)
    version: int = field(default=1, validator=in_((1, 2)))
    channels: int = field(default=4, validator=range_(1, 56))
    height: int = field(default=64, validator=range_(1, 300000))
    width: int = field(default=64, validator=range_(1, 300000))
    depth: int = field(default=8, validator=in_((1, 8, 16, 32)))
    color_mode: ColorMode = field(
        default=ColorMode.RGB, converter=ColorMode, validator=in_(ColorMode)
    )

    @property
    def is_psb(self) -> bool:
        return self.version == 2

    @classmethod
    def read(cls, reader: BinaryReader, **kwargs: Any) -> "FileHeader":
        signature = reader.read_fixed_string(4)
        if signature != cls.SIGNATURE:
            raise InvalidSignature("This is not a PSD or PSB file: %r" % signature)
        reader.seek(reader.tell() - 4)
        values = reader.read_fmt(cls._FORMAT)
        version = values[1]
        if version not in (1, 2):
            raise UnsupportedVersion("Unsupported file version %d" % version)
        try:
            header = cls(*values)
        except ValueError as e:
            raise InvalidHeader(str(e)) from e
        logger.debug("read header: %r", header)
        return header
