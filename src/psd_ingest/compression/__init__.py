"""
Channel decompression for PSD channel data.

Supported compression methods:

- **RAW** (``Compression.RAW``): Uncompressed pixel data
- **RLE** (``Compression.RLE``): Apple PackBits, one row at a time, preceded
  by a table of per-row byte counts
- **ZIP** (``Compression.ZIP``): Deflate without prediction
- **ZIP_WITH_PREDICTION** (``Compression.ZIP_WITH_PREDICTION``): Deflate over
  row-wise delta encoded samples

Example usage::

    from psd_ingest.compression import decompress
    from psd_ingest.constants import Compression

    raw_pixels = decompress(
        data=compressed,
        compression=Compression.RLE,
        width=100,
        height=100,
        depth=8,
        version=1,
    )

Decoded data is always exactly ``row_size(width, depth) * height`` bytes:
short input is zero-padded and surplus input is dropped. Unknown compression
ids and corrupt deflate streams raise
:py:class:`~psd_ingest.errors.UnsupportedCompression`.
"""

import logging
import zlib

import numpy as np

from psd_ingest.compression import rle as rle_impl
from psd_ingest.constants import Compression
from psd_ingest.errors import UnsupportedCompression

logger = logging.getLogger(__name__)


def row_size(width: int, depth: int) -> int:
    """Number of bytes in one row of samples."""
    return (width * depth + 7) // 8


def fit(data: bytes, length: int) -> bytes:
    """Truncate or zero-pad ``data`` to ``length`` bytes."""
    if len(data) >= length:
        return bytes(data[:length])
    return bytes(data) + b"\x00" * (length - len(data))


def decompress(
    data: bytes,
    compression: int,
    width: int,
    height: int,
    depth: int,
    version: int = 1,
) -> bytes:
    """Decompress raw data.

    :param data: compressed data bytes.
    :param compression: compression type,
            see :py:class:`~psd_ingest.constants.Compression`.
    :param width: width.
    :param height: height.
    :param depth: bit depth of the pixel.
    :param version: psd file version.
    :return: decompressed data bytes.
    :raise UnsupportedCompression: for unknown ids or corrupt zip data.
    """
    length = row_size(width, depth) * height
    if length == 0:
        return b""
    if compression == Compression.RAW:
        return fit(data, length)
    if compression == Compression.RLE:
        return decode_rle(data, width, height, depth, version)
    if compression in (Compression.ZIP, Compression.ZIP_WITH_PREDICTION):
        try:
            result = zlib.decompress(data)
        except zlib.error as e:
            raise UnsupportedCompression("Corrupt zip data: %s" % e) from e
        result = fit(result, length)
        if compression == Compression.ZIP_WITH_PREDICTION:
            result = decode_prediction(result, width, height, depth)
        return result
    raise UnsupportedCompression("Unknown compression id %r" % (compression,))


def decode_rle(data: bytes, width: int, height: int, depth: int, version: int) -> bytes:
    """Decode PackBits rows preceded by the per-row byte count table."""
    size = row_size(width, depth)
    dtype = (">u2", ">u4")[version - 1]
    table_size = height * np.dtype(dtype).itemsize
    counts = np.frombuffer(fit(data[:table_size], table_size), dtype=dtype)
    rows = []
    offset = table_size
    for count in counts.tolist():
        rows.append(rle_impl.decode(bytes(data[offset : offset + count]), size))
        offset += count
    if offset < len(data):
        logger.debug("Ignoring %d trailing RLE bytes", len(data) - offset)
    return b"".join(rows)


def decode_prediction(data: bytes, width: int, height: int, depth: int) -> bytes:
    """Undo the row-wise delta encoding of ZIP_WITH_PREDICTION."""
    if depth == 8:
        arr = np.frombuffer(data, dtype=np.uint8).reshape((height, width))
        return np.cumsum(arr, axis=1, dtype=np.uint8).tobytes()
    elif depth == 16:
        arr = np.frombuffer(data, dtype=">u2").reshape((height, width))
        return np.cumsum(arr, axis=1, dtype=np.uint16).astype(">u2").tobytes()
    elif depth == 32:
        # Each row packs the 4 bytes of every float into byte planes:
        # "123412341234" is stored as "111222333444" before the delta.
        arr = np.frombuffer(data, dtype=np.uint8).reshape((height, width * 4))
        arr = np.cumsum(arr, axis=1, dtype=np.uint8)
        return arr.reshape((height, 4, width)).transpose((0, 2, 1)).tobytes()
    raise UnsupportedCompression("Invalid pixel depth %d for prediction" % depth)
