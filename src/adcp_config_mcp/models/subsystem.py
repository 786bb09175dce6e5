"""Subsystem identity and the catalog of known subsystem codes.

A subsystem is one transducer/frequency module.  The device names it with a
single ASCII character; the serial number lists the characters for the
modules that are fitted, and the position among those characters is the
subsystem's hardware slot index.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class Frequency(IntEnum):
    """Nominal transmit frequency in kHz."""

    UNKNOWN = 0
    KHZ_20 = 20
    KHZ_38 = 38
    KHZ_75 = 75
    KHZ_150 = 150
    KHZ_300 = 300
    KHZ_600 = 600
    KHZ_1200 = 1200
    KHZ_2000 = 2000


EMPTY_CODE = "0"

# code -> (description, frequency)
SUBSYSTEM_CATALOG: dict[str, tuple[str, Frequency]] = {
    "0": ("Spare", Frequency.UNKNOWN),
    "1": ("2 MHz 4 beam 20 degree piston", Frequency.KHZ_2000),
    "2": ("1.2 MHz 4 beam 20 degree piston", Frequency.KHZ_1200),
    "3": ("600 kHz 4 beam 20 degree piston", Frequency.KHZ_600),
    "4": ("300 kHz 4 beam 20 degree piston", Frequency.KHZ_300),
    "5": ("2 MHz 4 beam 20 degree piston, 45 degree heading offset", Frequency.KHZ_2000),
    "6": ("1.2 MHz 4 beam 20 degree piston, 45 degree heading offset", Frequency.KHZ_1200),
    "7": ("600 kHz 4 beam 20 degree piston, 45 degree heading offset", Frequency.KHZ_600),
    "8": ("300 kHz 4 beam 20 degree piston, 45 degree heading offset", Frequency.KHZ_300),
    "9": ("2 MHz vertical beam piston", Frequency.KHZ_2000),
    "A": ("1.2 MHz vertical beam piston", Frequency.KHZ_1200),
    "B": ("600 kHz vertical beam piston", Frequency.KHZ_600),
    "C": ("300 kHz vertical beam piston", Frequency.KHZ_300),
    "D": ("150 kHz vertical beam piston", Frequency.KHZ_150),
    "E": ("75 kHz vertical beam piston", Frequency.KHZ_75),
    "F": ("38 kHz vertical beam piston", Frequency.KHZ_38),
    "G": ("20 kHz vertical beam piston", Frequency.KHZ_20),
    "H": ("Spare", Frequency.UNKNOWN),
    "I": ("600 kHz 4 beam 30 degree array", Frequency.KHZ_600),
    "J": ("300 kHz 4 beam 30 degree array", Frequency.KHZ_300),
    "K": ("150 kHz 4 beam 30 degree array", Frequency.KHZ_150),
    "L": ("75 kHz 4 beam 30 degree array", Frequency.KHZ_75),
    "M": ("38 kHz 4 beam 30 degree array", Frequency.KHZ_38),
    "N": ("20 kHz 4 beam 30 degree array", Frequency.KHZ_20),
    "O": ("600 kHz 4 beam 15 degree array", Frequency.KHZ_600),
    "P": ("300 kHz 4 beam 15 degree array", Frequency.KHZ_300),
    "Q": ("150 kHz 4 beam 15 degree array", Frequency.KHZ_150),
    "R": ("75 kHz 4 beam 15 degree array", Frequency.KHZ_75),
    "S": ("38 kHz 4 beam 15 degree array", Frequency.KHZ_38),
    "T": ("20 kHz 4 beam 15 degree array", Frequency.KHZ_20),
    "U": ("600 kHz 1 beam 0 degree array", Frequency.KHZ_600),
    "V": ("300 kHz 1 beam 0 degree array", Frequency.KHZ_300),
    "W": ("150 kHz 1 beam 0 degree array", Frequency.KHZ_150),
    "X": ("75 kHz 1 beam 0 degree array", Frequency.KHZ_75),
    "Y": ("38 kHz 1 beam 0 degree array", Frequency.KHZ_38),
    "Z": ("20 kHz 1 beam 0 degree array", Frequency.KHZ_20),
    "a": ("Spare", Frequency.UNKNOWN),
    "b": ("Spare", Frequency.UNKNOWN),
    "c": ("1.2 MHz 4 beam 20 degree piston, opposite facing", Frequency.KHZ_1200),
    "d": ("600 kHz 4 beam 20 degree piston, opposite facing", Frequency.KHZ_600),
    "e": ("300 kHz 4 beam 20 degree piston, opposite facing", Frequency.KHZ_300),
}

VERTICAL_BEAM_CODES = frozenset("9ABCDEFG")


@dataclass(frozen=True)
class Subsystem:
    """A subsystem code and its slot index within the serial number."""

    code: str = EMPTY_CODE
    index: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.code, str) or len(self.code) != 1:
            raise ValueError(f"Subsystem code must be one character, got {self.code!r}")
        if self.index < 0:
            raise ValueError(f"Subsystem index must be >= 0, got {self.index}")

    @property
    def description(self) -> str:
        return describe_code(self.code)

    @property
    def frequency(self) -> Frequency:
        return SUBSYSTEM_CATALOG.get(self.code, ("", Frequency.UNKNOWN))[1]

    @property
    def is_vertical_beam(self) -> bool:
        return self.code in VERTICAL_BEAM_CODES

    @property
    def is_empty(self) -> bool:
        return self.code == EMPTY_CODE

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "index": self.index,
            "description": self.description,
            "frequency_khz": int(self.frequency),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Subsystem:
        return cls(code=data["code"], index=data.get("index", 0))

    def __str__(self) -> str:
        return f"[{self.index}] {self.description}"


def describe_code(code: str) -> str:
    """Human-readable description for a subsystem code character."""
    entry = SUBSYSTEM_CATALOG.get(code)
    if entry is None:
        return f"Unknown subsystem {code!r}"
    return entry[0]


def is_known_code(code: str) -> bool:
    return code in SUBSYSTEM_CATALOG and code != EMPTY_CODE
