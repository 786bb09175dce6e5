"""Serial number decoding.

Layout of the 32-character serial number::

    +---------------+-------------------------+-----------+----------------+
    | Base hardware | Subsystem codes         | Spare     | System serial  |
    | [0:2]         | [2:17], '0' = empty     | [17:26]   | [26:32]        |
    +---------------+-------------------------+-----------+----------------+

Example: ``01230000000000000000000000000004`` is base hardware ``01``,
subsystems ``2`` (slot 0) and ``3`` (slot 1), system serial ``000004``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..errors import MalformedInput
from .subsystem import EMPTY_CODE, Subsystem

SERIAL_LENGTH = 32
BASE_HDWR_START = 0
BASE_HDWR_LEN = 2
SUBSYSTEM_START = 2
SUBSYSTEM_LEN = 15
SPARE_START = 17
SPARE_LEN = 9
SYSTEM_SERIAL_START = 26
SYSTEM_SERIAL_LEN = 6

EMPTY_SERIAL = "0" * SERIAL_LENGTH

# Serial number reported by DVL-only systems
DVL_SERIAL = "01H00000000000000000000000999999"


@dataclass(frozen=True)
class SerialNumber:
    """Parsed device serial number with its ordered subsystem inventory."""

    value: str = EMPTY_SERIAL
    subsystems: tuple[Subsystem, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        value = self.value.strip()
        if len(value) != SERIAL_LENGTH or not value.isalnum() or not value.isascii():
            raise MalformedInput(
                f"Serial number must be {SERIAL_LENGTH} alphanumeric characters, got {self.value!r}"
            )
        object.__setattr__(self, "value", value)

        inventory: list[Subsystem] = []
        seen: set[str] = set()
        for code in value[SUBSYSTEM_START:SUBSYSTEM_START + SUBSYSTEM_LEN]:
            if code == EMPTY_CODE or code in seen:
                continue
            seen.add(code)
            inventory.append(Subsystem(code=code, index=len(inventory)))
        object.__setattr__(self, "subsystems", tuple(inventory))

    @property
    def base_hardware(self) -> str:
        return self.value[BASE_HDWR_START:BASE_HDWR_START + BASE_HDWR_LEN]

    @property
    def subsystem_field(self) -> str:
        """The raw 15-character subsystem field, empty slots included."""
        return self.value[SUBSYSTEM_START:SUBSYSTEM_START + SUBSYSTEM_LEN]

    @property
    def spare(self) -> str:
        return self.value[SPARE_START:SPARE_START + SPARE_LEN]

    @property
    def system_serial(self) -> str:
        return self.value[SYSTEM_SERIAL_START:SYSTEM_SERIAL_START + SYSTEM_SERIAL_LEN]

    def subsystems_string(self) -> str:
        """Subsystem codes without the empty slots, e.g. ``"23"``."""
        return "".join(c for c in self.subsystem_field if c != EMPTY_CODE)

    def find(self, code: str) -> Subsystem | None:
        """Return the inventory entry for a code, or None if not fitted."""
        for ss in self.subsystems:
            if ss.code == code:
                return ss
        return None

    def has(self, code: str) -> bool:
        return self.find(code) is not None

    def subsystem_at(self, slot: int) -> Subsystem | None:
        """Return the subsystem in a raw slot of the subsystem field."""
        if not 0 <= slot < SUBSYSTEM_LEN:
            return None
        code = self.subsystem_field[slot]
        if code == EMPTY_CODE:
            return None
        return self.find(code)

    def with_subsystem(self, code: str) -> SerialNumber:
        """Return a copy with ``code`` placed in the first empty slot.

        Raises:
            ValueError: If every subsystem slot is already used.
        """
        if len(code) != 1 or code == EMPTY_CODE:
            raise ValueError(f"Invalid subsystem code {code!r}")
        ss = self.subsystem_field
        slot = ss.find(EMPTY_CODE)
        if slot < 0:
            raise ValueError("No empty subsystem slot in serial number")
        return self._replace_subsystems(ss[:slot] + code + ss[slot + 1:])

    def without_subsystem(self, code: str) -> SerialNumber:
        """Return a copy with every slot holding ``code`` emptied and packed left."""
        remaining = "".join(c for c in self.subsystem_field if c not in (code, EMPTY_CODE))
        return self._replace_subsystems(remaining.ljust(SUBSYSTEM_LEN, EMPTY_CODE))

    def _replace_subsystems(self, subsystem_field: str) -> SerialNumber:
        v = self.value
        return SerialNumber(
            v[:SUBSYSTEM_START] + subsystem_field + v[SUBSYSTEM_START + SUBSYSTEM_LEN:]
        )

    def description(self) -> str:
        """One-line summary such as ``"0: 1.2 MHz ...; 1: 600 kHz ...; ADCP: 000004"``."""
        parts = [f"{ss.index}: {ss.description}" for ss in self.subsystems]
        parts.append(f"ADCP: {self.system_serial}")
        return "; ".join(parts)

    def to_dict(self) -> dict:
        return {
            "serial_number": self.value,
            "base_hardware": self.base_hardware,
            "system_serial": self.system_serial,
            "subsystems": [ss.to_dict() for ss in self.subsystems],
        }

    def __str__(self) -> str:
        return self.value
