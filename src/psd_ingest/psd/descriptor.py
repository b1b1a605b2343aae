"""
Descriptor data structure.

Descriptors are the generic key-value serialization used by Photoshop for
extended data, such as the text content of a type layer. Each item is a
key followed by a 4-byte OSType telling how to decode the value.

Scalar values are decoded into plain Python objects (`float`, `int`,
`bool`, `str`, `bytes`); compound values become :py:class:`Descriptor`,
`list`, :py:class:`UnitFloat`, :py:class:`Enumerated` or
:py:class:`Class`::

    descriptor = DescriptorBlock.frombytes(data)
    text = descriptor.get(b"Txt ")
"""

import logging
from typing import Any, Callable, Dict, List, TypeVar

from attrs import define, field

from psd_ingest.constants import OSType
from psd_ingest.psd.base import DictElement
from psd_ingest.psd.bin_utils import BinaryReader
from psd_ingest.registry import new_registry

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="Descriptor")

TYPES, register = new_registry(attribute="ostype")


def read_length_and_key(reader: BinaryReader) -> bytes:
    """
    Helper to read descriptor key. A zero length means a 4-byte key.
    """
    length = reader.read_u32()
    return reader.read(length or 4)


def read_value(reader: BinaryReader) -> Any:
    """Read an OSType tag and the value it introduces."""
    ostype = reader.read(4)
    try:
        ostype = OSType(ostype)
    except ValueError:
        raise ValueError("Unknown descriptor type %r at %d" % (ostype, reader.tell()))
    return TYPES[ostype](reader)


@define(repr=False)
class Descriptor(DictElement):
    """
    Dict-like descriptor structure keyed by `bytes`.

    .. py:attribute:: name

        `str`

    .. py:attribute:: classID

        `bytes`
    """

    name: str = ""
    classID: bytes = b"null"

    @classmethod
    def _read_body(cls, reader: BinaryReader) -> Dict[str, Any]:
        name = reader.read_unicode_string()
        classID = read_length_and_key(reader)
        count = reader.read_u32()
        items = []
        for _ in range(count):
            key = read_length_and_key(reader)
            items.append((key, read_value(reader)))
        return dict(items=items, name=name, classID=classID)

    @classmethod
    def read(cls: type[T], reader: BinaryReader, **kwargs: Any) -> T:
        return cls(**cls._read_body(reader))

    @classmethod
    def _key_converter(cls, key: Any) -> Any:
        if hasattr(key, "encode"):
            return key.encode("ascii")
        return key


@define(repr=False)
class DescriptorBlock(Descriptor):
    """
    Descriptor prefixed by its 32-bit version (always 16).

    .. py:attribute:: version
    """

    version: int = 16

    @classmethod
    def read(cls, reader: BinaryReader, **kwargs: Any) -> "DescriptorBlock":
        version = reader.read_u32()
        if version != 16:
            logger.debug("Unexpected descriptor version %d", version)
        return cls(version=version, **cls._read_body(reader))


@define
class UnitFloat:
    """Float value with a 4-character unit, e.g. ``b"#Pxl"``."""

    unit: bytes = b"#Nne"
    value: float = 0.0

    def __float__(self) -> float:
        return self.value


@define
class Enumerated:
    """Enumeration value."""

    typeID: bytes = b""
    enum: bytes = b""


@define
class Class:
    """Class reference."""

    name: str = ""
    classID: bytes = b""


@define
class ReferenceItem:
    """One item of a reference (``obj ``) value."""

    ostype: OSType = field(default=OSType.PROPERTY)
    values: tuple = field(factory=tuple)


@register(OSType.DESCRIPTOR, OSType.GLOBAL_OBJECT)
def _read_descriptor(reader: BinaryReader) -> Descriptor:
    return Descriptor.read(reader)


@register(OSType.OBJECT_ARRAY)
def _read_object_array(reader: BinaryReader) -> Descriptor:
    reader.read_u32()  # items count
    return Descriptor.read(reader)


@register(OSType.LIST)
def _read_list(reader: BinaryReader) -> List[Any]:
    count = reader.read_u32()
    return [read_value(reader) for _ in range(count)]


@register(OSType.DOUBLE)
def _read_double(reader: BinaryReader) -> float:
    return reader.read_f64()


@register(OSType.UNIT_FLOAT)
def _read_unit_float(reader: BinaryReader) -> UnitFloat:
    unit, value = reader.read_fmt("4sd")
    return UnitFloat(unit, value)


@register(OSType.UNIT_FLOATS)
def _read_unit_floats(reader: BinaryReader) -> List[UnitFloat]:
    unit, count = reader.read_fmt("4sI")
    return [UnitFloat(unit, value) for value in reader.read_fmt("%dd" % count)]


@register(OSType.STRING)
def _read_string(reader: BinaryReader) -> str:
    return reader.read_unicode_string()


@register(OSType.ENUMERATED)
def _read_enumerated(reader: BinaryReader) -> Enumerated:
    typeID = read_length_and_key(reader)
    enum = read_length_and_key(reader)
    return Enumerated(typeID, enum)


@register(OSType.INTEGER)
def _read_integer(reader: BinaryReader) -> int:
    return reader.read_i32()


@register(OSType.LARGE_INTEGER)
def _read_large_integer(reader: BinaryReader) -> int:
    return reader.read_i64()


@register(OSType.BOOLEAN)
def _read_bool(reader: BinaryReader) -> bool:
    return reader.read_u8() != 0


@register(OSType.CLASS1, OSType.CLASS2)
def _read_class(reader: BinaryReader) -> Class:
    name = reader.read_unicode_string()
    return Class(name, read_length_and_key(reader))


@register(OSType.RAW_DATA, OSType.ALIAS, OSType.PATH)
def _read_raw_data(reader: BinaryReader) -> bytes:
    return reader.read_length_block()


_REFERENCE_READERS: Dict[OSType, Callable[[BinaryReader], tuple]] = {
    OSType.PROPERTY: lambda r: (
        r.read_unicode_string(),
        read_length_and_key(r),
        read_length_and_key(r),
    ),
    OSType.CLASS3: lambda r: (r.read_unicode_string(), read_length_and_key(r)),
    OSType.ENUMERATED_REFERENCE: lambda r: (
        r.read_unicode_string(),
        read_length_and_key(r),
        read_length_and_key(r),
        read_length_and_key(r),
    ),
    OSType.OFFSET: lambda r: (
        r.read_unicode_string(),
        read_length_and_key(r),
        r.read_u32(),
    ),
    OSType.IDENTIFIER: lambda r: (r.read_i32(),),
    OSType.INDEX: lambda r: (r.read_i32(),),
    OSType.NAME: lambda r: (
        r.read_unicode_string(),
        read_length_and_key(r),
        r.read_unicode_string(),
    ),
}


@register(OSType.REFERENCE)
def _read_reference(reader: BinaryReader) -> List[ReferenceItem]:
    count = reader.read_u32()
    items = []
    for _ in range(count):
        ostype = OSType(reader.read(4))
        items.append(ReferenceItem(ostype, _REFERENCE_READERS[ostype](reader)))
    return items
