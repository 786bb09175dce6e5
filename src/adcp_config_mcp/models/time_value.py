"""Duration value used by the ensemble, ping and burst interval commands.

The device writes these as ``HH:MM:SS.hh``, e.g. ``CEI 00:00:01.00``.
"""

from __future__ import annotations

import re

from ..errors import MalformedInput

_TIME_RE = re.compile(r"^\s*(\d+):(\d{1,2}):(\d{1,2})(?:\.(\d{1,2}))?\s*$")


class TimeValue:
    """Hours, minutes, seconds and hundredths of a second.

    Every assignment carries overflow into the next larger field at once,
    against whatever that field holds at that moment. The same numbers
    assigned in a different order can give a different time:

        >>> TimeValue(1, 340, 66, 144)
        TimeValue(6, 41, 7, 44)
        >>> t = TimeValue()
        >>> t.hundredth, t.second, t.minute, t.hour = 144, 66, 340, 1
        >>> t
        TimeValue(1, 40, 6, 44)

    The constructor assigns hour, minute, second, hundredth in that order.
    Negative inputs are clamped to zero.
    """

    __slots__ = ("_hour", "_minute", "_second", "_hundredth")

    def __init__(
        self, hour: int = 0, minute: int = 0, second: int = 0, hundredth: int = 0
    ) -> None:
        self._hour = 0
        self._minute = 0
        self._second = 0
        self._hundredth = 0
        self.hour = hour
        self.minute = minute
        self.second = second
        self.hundredth = hundredth

    @property
    def hour(self) -> int:
        return self._hour

    @hour.setter
    def hour(self, value: int) -> None:
        self._hour = max(int(value), 0)

    @property
    def minute(self) -> int:
        return self._minute

    @minute.setter
    def minute(self, value: int) -> None:
        value = max(int(value), 0)
        self._minute = value % 60
        if value >= 60:
            self.hour = self._hour + value // 60

    @property
    def second(self) -> int:
        return self._second

    @second.setter
    def second(self, value: int) -> None:
        value = max(int(value), 0)
        self._second = value % 60
        if value >= 60:
            self.minute = self._minute + value // 60

    @property
    def hundredth(self) -> int:
        return self._hundredth

    @hundredth.setter
    def hundredth(self, value: int) -> None:
        value = max(int(value), 0)
        self._hundredth = value % 100
        if value >= 100:
            self.second = self._second + value // 100

    def to_seconds(self) -> int:
        """Whole seconds, rounding half a second or more up."""
        total = self._hour * 3600 + self._minute * 60 + self._second
        if self._hundredth >= 50:
            total += 1
        return total

    def copy(self) -> TimeValue:
        return TimeValue(self._hour, self._minute, self._second, self._hundredth)

    def to_dict(self) -> dict:
        return {
            "hour": self._hour,
            "minute": self._minute,
            "second": self._second,
            "hundredth": self._hundredth,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TimeValue:
        return cls(
            data.get("hour", 0),
            data.get("minute", 0),
            data.get("second", 0),
            data.get("hundredth", 0),
        )

    @classmethod
    def parse(cls, text: str) -> TimeValue:
        """Parse the device form ``HH:MM:SS.hh``.

        Raises:
            MalformedInput: If the text is not a time value.
        """
        match = _TIME_RE.match(text)
        if match is None:
            raise MalformedInput(f"Not a time value: {text!r}")
        hour, minute, second, hundredth = match.groups()
        return cls(int(hour), int(minute), int(second), int(hundredth or 0))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeValue):
            return NotImplemented
        return (
            self._hour == other._hour
            and self._minute == other._minute
            and self._second == other._second
            and self._hundredth == other._hundredth
        )

    __hash__ = None  # mutable

    def __str__(self) -> str:
        return (
            f"{self._hour:02d}:{self._minute:02d}:"
            f"{self._second:02d}.{self._hundredth:02d}"
        )

    def __repr__(self) -> str:
        return (
            f"TimeValue({self._hour}, {self._minute}, "
            f"{self._second}, {self._hundredth})"
        )
