"""
EngineData structure.

Type layers embed their text formatting in a PostScript-like markup referred
to as EngineData. The format looks like the following::

    <<
      /EngineDict
      <<
        /Editor
        <<
          /Text (˛ˇMake a change and save.)
        >>
      >>
      /ResourceDict
      <<
        /FontSet [ << /Name (˛ˇArialMT) >> ]
      >>
    >>

:py:func:`parse` turns the markup into nested `dict` and `list` values keyed
by property name (without the leading slash).
"""

import logging
import re
from enum import Enum
from typing import Any, Dict, Iterator, List, Tuple

from psd_ingest.registry import new_registry

logger = logging.getLogger(__name__)

TOKEN_CONVERTERS, register = new_registry()


def compile_re(pattern: str) -> "re.Pattern[bytes]":
    return re.compile(pattern.encode("latin-1"), re.S)


class EngineToken(Enum):
    ARRAY_END = compile_re(r"^\]$")
    ARRAY_START = compile_re(r"^\[$")
    BOOLEAN = compile_re(r"^(true|false)$")
    DICT_END = compile_re(r"^>>(\x00)*$")
    DICT_START = compile_re(r"^<<$")
    NOOP = compile_re(r"^$")
    NUMBER = compile_re(r"^-?\d+$")
    NUMBER_WITH_DECIMAL = compile_re(r"^-?\d*\.\d+$")
    PROPERTY = compile_re(r"^\/[a-zA-Z0-9_]+$")
    STRING = compile_re(r"^\((\xfe\xff([^\)]|\\\))*)\)$")
    # Unknown tags: b'(hwid)', b'(fwid)', b'(aalt)'
    UNKNOWN_TAG = compile_re(r"^\([a-zA-Z0-9]*\)$")


class Tokenizer:
    """
    Tokenize engine data.

    Example::

        tokenizer = Tokenizer(data)
        for token, token_type in tokenizer:
            print('%s: %r' % (token_type.name, token))
    """

    DIVIDER = compile_re(r"[ \n\t\r]+")
    UTF16_START = b"(\xfe\xff"
    UTF16_END = compile_re(r"[^\\]\)")

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.index = 0

    def __iter__(self) -> Iterator[Tuple[bytes, EngineToken]]:
        return self

    def __len__(self) -> int:
        return len(self.data) - self.index

    def __next__(self) -> Tuple[bytes, EngineToken]:
        while len(self) > 0:
            index = self.index
            if self.data.startswith(self.UTF16_START, index):
                match = self.UTF16_END.search(self.data, index + 2)
                if match is None:
                    raise ValueError("Invalid token: %r" % (self.data[index:index + 32]))
                token = self.data[index : match.end()]
                self.index = match.end()
            else:
                match = self.DIVIDER.search(self.data, index)
                if match is None:
                    token = self.data[index:]
                    self.index = len(self.data)
                else:
                    token = self.data[index : match.start()]
                    self.index = match.end()
                if token == b"":
                    continue
            for token_type in EngineToken:
                if token_type.value.search(token):
                    return token, token_type
            raise ValueError("Unknown token: %r" % (token))
        raise StopIteration


_ESCAPED_CHARS = (b"\\", b"(", b")")


@register(EngineToken.STRING)
def _convert_string(token: bytes) -> str:
    value = token[1:-1]
    for c in _ESCAPED_CHARS:
        value = value.replace(b"\\" + c, c)
    return value.decode("utf-16")


@register(EngineToken.BOOLEAN)
def _convert_bool(token: bytes) -> bool:
    return token == b"true"


@register(EngineToken.NUMBER)
def _convert_integer(token: bytes) -> int:
    return int(token)


@register(EngineToken.NUMBER_WITH_DECIMAL)
def _convert_float(token: bytes) -> float:
    return float(token)


@register(EngineToken.UNKNOWN_TAG)
def _convert_tag(token: bytes) -> bytes:
    return token


def _read_value(tokenizer: Tokenizer, token: bytes, token_type: EngineToken) -> Any:
    if token_type == EngineToken.DICT_START:
        return _read_dict(tokenizer)
    if token_type == EngineToken.ARRAY_START:
        return _read_list(tokenizer)
    converter = TOKEN_CONVERTERS.get(token_type)
    if converter is None:
        raise ValueError("Invalid token: %r" % (token))
    return converter(token)


def _read_dict(tokenizer: Tokenizer) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for token, token_type in tokenizer:
        if token_type == EngineToken.PROPERTY:
            key = token[1:].decode("macroman")
            pair = next(tokenizer, None)
            if pair is None:
                break
            result[key] = _read_value(tokenizer, *pair)
        elif token_type == EngineToken.DICT_END:
            return result
    return result


def _read_list(tokenizer: Tokenizer) -> List[Any]:
    result: List[Any] = []
    for token, token_type in tokenizer:
        if token_type == EngineToken.ARRAY_END:
            return result
        if token_type == EngineToken.NOOP:
            continue
        result.append(_read_value(tokenizer, token, token_type))
    return result


def parse(data: bytes) -> Dict[str, Any]:
    """
    Parse EngineData markup.

    :param data: raw markup bytes.
    :return: `dict` of the outermost dictionary.
    :raise ValueError: on malformed markup.
    """
    tokenizer = Tokenizer(data)
    for token, token_type in tokenizer:
        if token_type == EngineToken.DICT_START:
            return _read_dict(tokenizer)
    return {}


def lookup(data: Any, *path: Any, default: Any = None) -> Any:
    """
    Follow ``path`` of dict keys and list indices, returning ``default``
    when any step is missing.
    """
    for key in path:
        try:
            data = data[key]
        except (KeyError, IndexError, TypeError):
            return default
    return data
