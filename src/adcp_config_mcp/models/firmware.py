"""Firmware version token.

Layout (4 bytes)::

    +-------+-------+----------+----------------+
    | Major | Minor | Revision | Subsystem code |
    | 1 B   | 1 B   | 1 B      | 1 B            |
    +-------+-------+----------+----------------+

The subsystem code byte is normally the ASCII code character.  Old firmware
(major 0 or the debug major 99, minor <= 2, revision <= 13) stored the slot
index within the serial number's subsystem string instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar

from ..errors import MalformedInput
from .serial_number import SerialNumber
from .subsystem import Subsystem

FIRMWARE_SIZE = 4
OFF_MAJOR = 0
OFF_MINOR = 1
OFF_REVISION = 2
OFF_SUBSYSTEM = 3

DEBUG_MAJOR_VER = 99
LEGACY_MAX_MINOR = 2
LEGACY_MAX_REVISION = 13

_VERSION_RE = re.compile(r"(\d{1,3})\.(\d{1,3})\.(\d{1,3})")


@dataclass
class Firmware:
    """Firmware version plus the subsystem it was reported for."""

    SIZE: ClassVar[int] = FIRMWARE_SIZE

    subsystem_code: int = 0
    major: int = 0
    minor: int = 0
    revision: int = 0

    def __post_init__(self) -> None:
        for name in ("subsystem_code", "major", "minor", "revision"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"Firmware {name} must be 0-255, got {value}")

    def encode(self) -> bytes:
        return bytes([self.major, self.minor, self.revision, self.subsystem_code])

    @classmethod
    def decode(cls, data: bytes) -> Firmware:
        """Decode the 4-byte token.

        Raises:
            MalformedInput: If ``data`` is not exactly 4 bytes.
        """
        if len(data) != FIRMWARE_SIZE:
            raise MalformedInput(
                f"Firmware token must be {FIRMWARE_SIZE} bytes, got {len(data)}"
            )
        return cls(
            subsystem_code=data[OFF_SUBSYSTEM],
            major=data[OFF_MAJOR],
            minor=data[OFF_MINOR],
            revision=data[OFF_REVISION],
        )

    @classmethod
    def parse(cls, text: str, subsystem_code: int = 0) -> Firmware:
        """Parse a ``MM.mm.rr`` version string.

        Raises:
            MalformedInput: If no version number is found.
        """
        match = _VERSION_RE.search(text)
        if match is None:
            raise MalformedInput(f"No firmware version in {text!r}")
        try:
            return cls(subsystem_code, *(int(g) for g in match.groups()))
        except ValueError as exc:
            raise MalformedInput(str(exc)) from exc

    @property
    def is_legacy(self) -> bool:
        return (
            self.major in (0, DEBUG_MAJOR_VER)
            and self.minor <= LEGACY_MAX_MINOR
            and self.revision <= LEGACY_MAX_REVISION
        )

    @property
    def version(self) -> str:
        return f"{self.major}.{self.minor}.{self.revision}"

    def subsystem_char(self, serial: SerialNumber | None = None) -> str:
        """The subsystem code character this token refers to."""
        if self.is_legacy and serial is not None:
            codes = serial.subsystems_string()
            if self.subsystem_code < len(codes):
                return codes[self.subsystem_code]
        return chr(self.subsystem_code)

    def subsystem(self, serial: SerialNumber) -> Subsystem:
        """Resolve the subsystem in the serial's inventory.

        Falls back to a standalone ``Subsystem(code, 0)`` when the code is
        not fitted.
        """
        code = self.subsystem_char(serial)
        found = serial.find(code)
        if found is not None:
            return found
        return Subsystem(code=code, index=0)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "major": self.major,
            "minor": self.minor,
            "revision": self.revision,
            "subsystem_code": self.subsystem_code,
            "subsystem_char": chr(self.subsystem_code),
        }

    def __str__(self) -> str:
        return f"{self.version} - {chr(self.subsystem_code)}"


def firmware_version_list() -> list[int]:
    """Every legal subsystem code byte value (1-255)."""
    return list(range(1, 256))
