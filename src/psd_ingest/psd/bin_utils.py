"""
Binary reading utilities.

:py:class:`BinaryReader` is a bounds-checked cursor over an immutable byte
buffer. All multi-byte values are big-endian. Any read past the end of the
buffer raises :py:class:`~psd_ingest.errors.TruncatedInput`.
"""

import logging
import struct
from typing import Any, Tuple

from psd_ingest.errors import TruncatedInput

logger = logging.getLogger(__name__)


def pad(number: int, divisor: int) -> int:
    """Round ``number`` up to a multiple of ``divisor``."""
    if divisor > 1 and number % divisor:
        number = (number // divisor + 1) * divisor
    return number


def decode_fixed_point_32bit(value: int) -> float:
    """Decode a 16.16 fixed point number."""
    return value / 65536.0


def trimmed_repr(data: Any, trim_length: int = 16) -> str:
    if isinstance(data, bytes) and len(data) > trim_length:
        return repr(data[:trim_length] + b" ... =" + str(len(data)).encode("ascii"))
    return repr(data)


class BinaryReader:
    """
    Cursor over a byte buffer.

    Example::

        reader = BinaryReader(data)
        signature = reader.read_fixed_string(4)
        version = reader.read_u16()

    :param data: bytes-like buffer.
    :param offset: absolute position of ``data[0]`` in the enclosing buffer,
        used for error reporting of sub readers.
    """

    __slots__ = ("_data", "_pos", "_base")

    def __init__(self, data: bytes, offset: int = 0) -> None:
        self._data = memoryview(data).cast("B")
        self._pos = 0
        self._base = offset

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return "BinaryReader(pos=%d, size=%d)" % (self._pos, len(self._data))

    def tell(self) -> int:
        """Current cursor position."""
        return self._pos

    def remaining(self) -> int:
        """Number of unread bytes."""
        return len(self._data) - self._pos

    def is_readable(self, size: int = 1) -> bool:
        return self.remaining() >= size

    def _require(self, size: int) -> None:
        if size < 0 or size > self.remaining():
            raise TruncatedInput(size, self.remaining(), self._base + self._pos)

    def seek(self, pos: int) -> int:
        """Move the cursor to the absolute position ``pos``."""
        if pos < 0 or pos > len(self._data):
            raise TruncatedInput(
                pos - self._pos, self.remaining(), self._base + self._pos
            )
        self._pos = pos
        return pos

    def skip(self, size: int) -> None:
        self._require(size)
        self._pos += size

    def read(self, size: int) -> bytes:
        """Read ``size`` raw bytes."""
        self._require(size)
        start = self._pos
        self._pos += size
        return bytes(self._data[start : self._pos])

    def read_fmt(self, fmt: str) -> Tuple[Any, ...]:
        """Read values according to a big-endian ``struct`` format."""
        fmt = ">" + fmt
        size = struct.calcsize(fmt)
        self._require(size)
        values = struct.unpack_from(fmt, self._data, self._pos)
        self._pos += size
        return values

    def read_u8(self) -> int:
        return self.read_fmt("B")[0]

    def read_u16(self) -> int:
        return self.read_fmt("H")[0]

    def read_u32(self) -> int:
        return self.read_fmt("I")[0]

    def read_u64(self) -> int:
        return self.read_fmt("Q")[0]

    def read_i16(self) -> int:
        return self.read_fmt("h")[0]

    def read_i32(self) -> int:
        return self.read_fmt("i")[0]

    def read_i64(self) -> int:
        return self.read_fmt("q")[0]

    def read_f64(self) -> float:
        return self.read_fmt("d")[0]

    def read_fixed_string(self, size: int) -> bytes:
        return self.read(size)

    def read_pascal_string(self, encoding: str = "macroman", padding: int = 1) -> str:
        """
        Read a length-prefixed byte string. The total size including the
        length byte is padded to a multiple of ``padding``.
        """
        length = self.read_u8()
        data = self.read(length)
        self.skip(min(pad(length + 1, padding) - length - 1, self.remaining()))
        return data.decode(encoding, "replace")

    def read_unicode_string(self, padding: int = 1) -> str:
        """Read a 32-bit character count followed by UTF-16BE characters."""
        num_chars = self.read_u32()
        data = self.read(num_chars * 2)
        self.skip(pad(num_chars * 2 + 4, padding) - num_chars * 2 - 4)
        return data.decode("utf-16-be", "replace").rstrip("\0")

    def read_length_block(self, fmt: str = "I", padding: int = 1) -> bytes:
        """
        Read a block of data prefixed by its length, then skip the padding
        that rounds the block up to a multiple of ``padding``.
        """
        length = self.read_fmt(fmt)[0]
        data = self.read(length)
        self.skip(min(pad(length, padding) - length, self.remaining()))
        return data

    def subreader(self, size: int) -> "BinaryReader":
        """Return a bounded reader over the next ``size`` bytes and skip them."""
        self._require(size)
        start = self._pos
        self._pos += size
        return BinaryReader(self._data[start : self._pos], self._base + start)
