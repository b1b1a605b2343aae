"""
Base data structures intended for inheritance.

All the data objects in :py:mod:`psd_ingest.psd` inherit from the base
classes here and get attrs_ decoration to have data fields. Every element is
decoded from a :py:class:`~psd_ingest.psd.bin_utils.BinaryReader` through
its ``read`` classmethod; nothing here writes.

.. _attrs: https://www.attrs.org/en/stable/index.html
"""

import logging
from collections import OrderedDict
from typing import Any, Iterator, TypeVar

from attrs import define, field

from psd_ingest.psd.bin_utils import BinaryReader, trimmed_repr

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="BaseElement")


class BaseElement:
    """
    Base element of the decoded PSD structures.

    Subclasses implement ``read(cls, reader, **kwargs)``;
    :py:meth:`frombytes` wraps raw bytes in a reader first.
    """

    @classmethod
    def read(cls: type[T], reader: BinaryReader, **kwargs: Any) -> T:
        raise NotImplementedError()

    @classmethod
    def frombytes(cls: type[T], data: bytes, **kwargs: Any) -> T:
        return cls.read(BinaryReader(data), **kwargs)


@define(repr=False)
class ListElement(BaseElement):
    """Read-only sequence of decoded items."""

    _items: list = field(factory=list, converter=list)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __getitem__(self, index: Any) -> Any:
        return self._items[index]

    def __repr__(self) -> str:
        return repr(self._items)


@define(repr=False)
class DictElement(BaseElement):
    """
    Read-only mapping of decoded items in file order.

    Lookups pass the key through :py:meth:`_key_converter`, so subclasses
    keyed by enum values accept both the enum member and its raw value.
    """

    _items: OrderedDict = field(factory=OrderedDict, converter=OrderedDict)

    def get(self, key: Any, *args: Any) -> Any:
        return self._items.get(self._key_converter(key), *args)

    def items(self) -> Any:
        return self._items.items()

    def values(self) -> Any:
        return self._items.values()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __getitem__(self, key: Any) -> Any:
        return self._items[self._key_converter(key)]

    def __contains__(self, key: Any) -> bool:
        return self._key_converter(key) in self._items

    def __repr__(self) -> str:
        return "{%s}" % ", ".join(
            "%r: %s" % (key, trimmed_repr(value)) for key, value in self._items.items()
        )

    @classmethod
    def _key_converter(cls, key: Any) -> Any:
        return key
