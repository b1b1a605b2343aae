"""
Image data section structure.

:py:class:`ImageData` corresponds to the last section of the PSD/PSB file
where a composited image is stored. When the file does not contain layers,
this is the only place pixels are saved.
"""

import logging
from typing import Any, List

from attrs import define

from psd_ingest.compression import decompress, row_size
from psd_ingest.constants import Compression
from psd_ingest.psd.base import BaseElement
from psd_ingest.psd.bin_utils import BinaryReader
from psd_ingest.psd.header import FileHeader

logger = logging.getLogger(__name__)


@define(repr=False)
class ImageData(BaseElement):
    """
    Merged channel image data.

    .. py:attribute:: compression

        See :py:class:`~psd_ingest.constants.Compression`.

    .. py:attribute:: data

        `bytes` as compressed in the `compression` flag.
    """

    compression: int = Compression.RAW
    data: bytes = b""

    @classmethod
    def read(cls, reader: BinaryReader, **kwargs: Any) -> "ImageData":
        if not reader.is_readable(2):
            return cls()
        compression = reader.read_u16()
        data = reader.read(reader.remaining())
        logger.debug("  read image data, len=%d", len(data) + 2)
        return cls(compression, data)

    def get_data(self, header: FileHeader) -> List[bytes]:
        """
        Get decompressed data.

        :param header: See :py:class:`~psd_ingest.psd.header.FileHeader`.
        :return: `list` of bytes corresponding each channel.
        """
        data = decompress(
            self.data,
            self.compression,
            header.width,
            header.height * header.channels,
            header.depth,
            header.version,
        )
        plane_size = row_size(header.width, header.depth) * header.height
        return [
            data[i * plane_size : (i + 1) * plane_size] for i in range(header.channels)
        ]

    def __repr__(self) -> str:
        return "ImageData(compression=%d, len=%d)" % (self.compression, len(self.data))
