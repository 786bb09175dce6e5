"""Bounded command fields.

Command sets subclass :class:`BoundedFields` and list one validator per
field in ``VALIDATORS``.  Assigning a value the validator rejects stores the
field's default instead.  Nothing is raised to the caller; re-read the field
to find out whether the value was accepted.
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal
from enum import IntEnum
from typing import Any, Callable, ClassVar

from .time_value import TimeValue

logger = logging.getLogger(__name__)

Validator = Callable[[Any], Any]


class BoundedFields:
    """Mixin that validates attribute assignment against ``VALIDATORS``."""

    VALIDATORS: ClassVar[dict[str, Validator]] = {}

    def default_for(self, name: str) -> Any:
        raise NotImplementedError

    def __setattr__(self, name: str, value: Any) -> None:
        validator = self.VALIDATORS.get(name)
        if validator is not None:
            if value is None:
                value = self.default_for(name)
            else:
                try:
                    value = validator(value)
                except (TypeError, ValueError):
                    default = self.default_for(name)
                    logger.debug(
                        "%s: rejected %s=%r, using default %r",
                        type(self).__name__, name, value, default,
                    )
                    value = default
        object.__setattr__(self, name, value)

    def field_names(self) -> list[str]:
        return list(self.VALIDATORS)


def float_range(low: float, high: float) -> Validator:
    """Validator for a float in the closed range [low, high]."""

    def check(value: Any) -> float:
        if isinstance(value, bool):
            raise TypeError("bool is not a number")
        result = float(value)
        if math.isnan(result) or not low <= result <= high:
            raise ValueError(f"{result} outside {low}..{high}")
        return result

    return check


def int_range(low: int, high: int) -> Validator:
    """Validator for an integer in the closed range [low, high]."""

    def check(value: Any) -> int:
        if isinstance(value, bool):
            raise TypeError("bool is not a number")
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"{value} is not a whole number")
        result = int(value)
        if not low <= result <= high:
            raise ValueError(f"{result} outside {low}..{high}")
        return result

    return check


def enum_member(enum_cls: type[IntEnum]) -> Validator:
    """Validator accepting an enum member, its value, or its name."""

    def check(value: Any) -> IntEnum:
        if isinstance(value, bool):
            raise TypeError("bool is not an enum value")
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"{value} is not a whole number")
        if isinstance(value, str) and not value.strip().lstrip("-").isdigit():
            try:
                return enum_cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"{value!r} is not a {enum_cls.__name__}") from None
        return enum_cls(int(value))

    return check


def flag(value: Any) -> bool:
    """Validator for a 0/1 flag."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        value = value.strip()
        if value not in ("0", "1"):
            raise ValueError(f"{value!r} is not a flag")
        return value == "1"
    if value in (0, 1):
        return bool(value)
    raise ValueError(f"{value!r} is not a flag")


def time_value(value: Any) -> TimeValue:
    """Validator accepting a TimeValue, its ``HH:MM:SS.hh`` form, or its dict."""
    if isinstance(value, TimeValue):
        return value.copy()
    if isinstance(value, str):
        return TimeValue.parse(value)
    if isinstance(value, dict):
        return TimeValue.from_dict(value)
    raise TypeError(f"{type(value).__name__} is not a time value")


def format_float(value: float) -> str:
    """Fixed-point text of a float with its shortest digits.

    ``15.0 -> "15"``, ``12.654 -> "12.654"``, ``0.00001 -> "0.00001"``.
    """
    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def to_plain(value: Any) -> Any:
    """JSON-friendly form of a field value."""
    if isinstance(value, TimeValue):
        return value.to_dict()
    if isinstance(value, IntEnum):
        return int(value)
    return value
