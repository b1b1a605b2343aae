"""
Validation functions for attrs records.
"""

from typing import Any, Optional

from attrs import define, field
from attrs.validators import in_

__all__ = ["in_", "range_", "optional_range_"]


@define(repr=False, frozen=True)
class _RangeValidator:
    minimum: Any = field()
    maximum: Optional[Any] = field(default=None)

    def __call__(self, inst: Any, attribute: Any, value: Any) -> None:
        try:
            in_range = self.minimum <= value and (
                self.maximum is None or value <= self.maximum
            )
        except TypeError:
            in_range = False

        if not in_range:
            raise ValueError(
                "'{name}' must be in range [{minimum!r}, {maximum!r}]: {value!r}".format(
                    name=attribute.name,
                    minimum=self.minimum,
                    maximum=self.maximum,
                    value=value,
                )
            )

    def __repr__(self) -> str:
        return "<range_ validator with [{minimum!r}, {maximum!r}]>".format(
            minimum=self.minimum, maximum=self.maximum
        )


def range_(minimum: Any, maximum: Optional[Any] = None) -> _RangeValidator:
    """
    A validator that raises a :exc:`ValueError` if the initializer is called
    with a value that does not belong in the [minimum, maximum] range. The
    check is performed using ``minimum <= value and value <= maximum``; a
    missing ``maximum`` leaves the range open.
    """
    return _RangeValidator(minimum, maximum)


def optional_range_(minimum: Any, maximum: Optional[Any] = None) -> Any:
    """Like :py:func:`range_` but accepts `None` to mean "no limit"."""
    validator = range_(minimum, maximum)

    def _validate(inst: Any, attribute: Any, value: Any) -> None:
        if value is not None:
            validator(inst, attribute, value)

    return _validate
