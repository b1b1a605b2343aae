"""
Exceptions raised while decoding a document.

Fatal problems are raised as :py:class:`PSDError` subclasses and abort the
decode. Per-layer problems (:py:class:`UnsupportedCompression`,
:py:class:`StructuralInconsistency` and :py:class:`UnsupportedColorMode`) are
never raised out of a decode; they are collected as :py:class:`DecodeWarning`
entries on the document instead.
"""

from typing import Optional

from attrs import define, field


class PSDError(Exception):
    """Base class of all the errors in psd_ingest."""


class InvalidSignature(PSDError):
    """The input is not a PSD or PSB document."""


class UnsupportedVersion(InvalidSignature):
    """The file header carries a version other than 1 (PSD) or 2 (PSB)."""


class InvalidHeader(PSDError):
    """The file header has out-of-range fields."""


class TruncatedInput(PSDError):
    """
    The buffer is shorter than a required field.

    .. py:attribute:: requested

        Number of bytes the read asked for.

    .. py:attribute:: available

        Number of bytes left in the buffer.

    .. py:attribute:: offset

        Absolute position of the failed read.
    """

    def __init__(self, requested: int, available: int, offset: int = 0) -> None:
        self.requested = requested
        self.available = available
        self.offset = offset
        super().__init__(
            "Truncated input at offset %d: requested %d bytes, %d available"
            % (offset, requested, available)
        )


class ResourceLimitExceeded(PSDError):
    """A caller-configured resource limit was exceeded."""

    def __init__(self, limit: str, value: float, maximum: float) -> None:
        self.limit = limit
        self.value = value
        self.maximum = maximum
        super().__init__("%s exceeded: %s > %s" % (limit, value, maximum))


class UnsupportedCompression(PSDError):
    """Channel compression that cannot be decoded; recorded as a warning."""


class StructuralInconsistency(PSDError):
    """Malformed layer structure; recorded as a warning."""


class UnsupportedColorMode(PSDError):
    """Color mode approximated when converting to RGB; recorded as a warning."""


@define(frozen=True)
class DecodeWarning:
    """
    Non-fatal problem found while decoding.

    .. py:attribute:: category

        Exception class describing the problem, e.g.
        :py:class:`UnsupportedCompression`.

    .. py:attribute:: message

        Human readable description.

    .. py:attribute:: layer_id

        Id of the affected layer, or `None` for document-level warnings.
    """

    category: type = field()
    message: str = field()
    layer_id: Optional[int] = field(default=None)

    def __str__(self) -> str:
        where = "document" if self.layer_id is None else "layer %d" % self.layer_id
        return "%s (%s): %s" % (self.category.__name__, where, self.message)
