"""Instrument-wide commands.

Each field holds a bounded value with a fixed default.  Assigning an
out-of-range value stores the default instead (see :mod:`.fields`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, ClassVar

from ..protocol.commands import Mnemonic, build_command, build_stime
from .fields import (
    BoundedFields,
    enum_member,
    flag,
    float_range,
    format_float,
    int_range,
    time_value,
    to_plain,
)
from .time_value import TimeValue


class AdcpMode(IntEnum):
    DVL = 0
    PROFILE = 1


class OutputMode(IntEnum):
    """CEOUTPUT: where ensembles are sent on the serial port."""

    DISABLE = 0
    BINARY = 1
    ASCII = 2


class HeadingSource(IntEnum):
    INTERNAL = 1
    SERIAL = 2


class Baudrate(IntEnum):
    BAUD_2400 = 2400
    BAUD_4800 = 4800
    BAUD_9600 = 9600
    BAUD_19200 = 19200
    BAUD_38400 = 38400
    BAUD_115200 = 115200
    BAUD_230400 = 230400
    BAUD_460800 = 460800
    BAUD_921600 = 921600


MODE_KEYWORDS: dict[AdcpMode, str] = {
    AdcpMode.DVL: Mnemonic.CDVL,
    AdcpMode.PROFILE: Mnemonic.CPROFILE,
}

# Defaults
DEFAULT_MODE = AdcpMode.PROFILE
DEFAULT_CEI = TimeValue(0, 0, 1, 0)
DEFAULT_CETFP_YEAR = 2012
DEFAULT_CETFP_MONTH = 1
DEFAULT_CETFP_DAY = 1
DEFAULT_CETFP_HOUR = 1
DEFAULT_CETFP_MINUTE = 0
DEFAULT_CETFP_SECOND = 0
DEFAULT_CETFP_HUNDREDTH = 0
DEFAULT_CERECORD = False
DEFAULT_CEOUTPUT = OutputMode.BINARY
DEFAULT_CEPO = ""
DEFAULT_CWS = 0.0
DEFAULT_CWT = 15.0
DEFAULT_CTD = 0.0
DEFAULT_CWSS = 1500.0
DEFAULT_CHS = HeadingSource.INTERNAL
DEFAULT_CHO = 0.0
DEFAULT_C232B = Baudrate.BAUD_115200
DEFAULT_C485B = Baudrate.BAUD_115200
DEFAULT_C422B = Baudrate.BAUD_230400

# Bounds
MIN_CHO, MAX_CHO = -180.0, 180.0
MIN_CWS, MAX_CWS = 0.0, 100.0
MIN_CWT, MAX_CWT = -5.0, 50.0
MIN_CTD, MAX_CTD = 0.0, 10000.0
MIN_CWSS, MAX_CWSS = 1300.0, 1800.0
MIN_YEAR, MAX_YEAR = 2000, 2099
MIN_MONTH, MAX_MONTH = 1, 12
MIN_DAY, MAX_DAY = 1, 31
MIN_HOUR, MAX_HOUR = 0, 23
MIN_MINSEC, MAX_MINSEC = 0, 59
MIN_HUNSEC, MAX_HUNSEC = 0, 99


def _cepo_string(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError("CEPO must be a string")
    if value and not (value.isascii() and value.isalnum()):
        raise ValueError(f"Invalid CEPO {value!r}")
    return value


@dataclass
class ValidatedCommandSet(BoundedFields):
    """Instrument-wide command values."""

    VALIDATORS: ClassVar[dict] = {
        "mode": enum_member(AdcpMode),
        "cei": time_value,
        "cetfp_year": int_range(MIN_YEAR, MAX_YEAR),
        "cetfp_month": int_range(MIN_MONTH, MAX_MONTH),
        "cetfp_day": int_range(MIN_DAY, MAX_DAY),
        "cetfp_hour": int_range(MIN_HOUR, MAX_HOUR),
        "cetfp_minute": int_range(MIN_MINSEC, MAX_MINSEC),
        "cetfp_second": int_range(MIN_MINSEC, MAX_MINSEC),
        "cetfp_hundredth": int_range(MIN_HUNSEC, MAX_HUNSEC),
        "cerecord_ensemble_ping": flag,
        "cerecord_single_ping": flag,
        "ceoutput": enum_member(OutputMode),
        "cepo": _cepo_string,
        "cws": float_range(MIN_CWS, MAX_CWS),
        "cwt": float_range(MIN_CWT, MAX_CWT),
        "ctd": float_range(MIN_CTD, MAX_CTD),
        "cwss": float_range(MIN_CWSS, MAX_CWSS),
        "chs": enum_member(HeadingSource),
        "cho": float_range(MIN_CHO, MAX_CHO),
        "c232b": enum_member(Baudrate),
        "c485b": enum_member(Baudrate),
        "c422b": enum_member(Baudrate),
    }

    DEFAULTS: ClassVar[dict] = {
        "mode": DEFAULT_MODE,
        "cei": DEFAULT_CEI,
        "cetfp_year": DEFAULT_CETFP_YEAR,
        "cetfp_month": DEFAULT_CETFP_MONTH,
        "cetfp_day": DEFAULT_CETFP_DAY,
        "cetfp_hour": DEFAULT_CETFP_HOUR,
        "cetfp_minute": DEFAULT_CETFP_MINUTE,
        "cetfp_second": DEFAULT_CETFP_SECOND,
        "cetfp_hundredth": DEFAULT_CETFP_HUNDREDTH,
        "cerecord_ensemble_ping": DEFAULT_CERECORD,
        "cerecord_single_ping": DEFAULT_CERECORD,
        "ceoutput": DEFAULT_CEOUTPUT,
        "cepo": DEFAULT_CEPO,
        "cws": DEFAULT_CWS,
        "cwt": DEFAULT_CWT,
        "ctd": DEFAULT_CTD,
        "cwss": DEFAULT_CWSS,
        "chs": DEFAULT_CHS,
        "cho": DEFAULT_CHO,
        "c232b": DEFAULT_C232B,
        "c485b": DEFAULT_C485B,
        "c422b": DEFAULT_C422B,
    }

    # Field group -> mnemonic, in command list order
    MNEMONICS: ClassVar[dict[str, str]] = {
        "cei": Mnemonic.CEI,
        "cetfp": Mnemonic.CETFP,
        "cerecord": Mnemonic.CERECORD,
        "ceoutput": Mnemonic.CEOUTPUT,
        "cepo": Mnemonic.CEPO,
        "cws": Mnemonic.CWS,
        "cwt": Mnemonic.CWT,
        "ctd": Mnemonic.CTD,
        "cwss": Mnemonic.CWSS,
        "chs": Mnemonic.CHS,
        "cho": Mnemonic.CHO,
        "c232b": Mnemonic.C232B,
        "c485b": Mnemonic.C485B,
        "c422b": Mnemonic.C422B,
    }

    mode: AdcpMode = DEFAULT_MODE
    cei: TimeValue = field(default_factory=DEFAULT_CEI.copy)
    cetfp_year: int = DEFAULT_CETFP_YEAR
    cetfp_month: int = DEFAULT_CETFP_MONTH
    cetfp_day: int = DEFAULT_CETFP_DAY
    cetfp_hour: int = DEFAULT_CETFP_HOUR
    cetfp_minute: int = DEFAULT_CETFP_MINUTE
    cetfp_second: int = DEFAULT_CETFP_SECOND
    cetfp_hundredth: int = DEFAULT_CETFP_HUNDREDTH
    cerecord_ensemble_ping: bool = DEFAULT_CERECORD
    cerecord_single_ping: bool = DEFAULT_CERECORD
    ceoutput: OutputMode = DEFAULT_CEOUTPUT
    cepo: str = DEFAULT_CEPO
    cws: float = DEFAULT_CWS
    cwt: float = DEFAULT_CWT
    ctd: float = DEFAULT_CTD
    cwss: float = DEFAULT_CWSS
    chs: HeadingSource = DEFAULT_CHS
    cho: float = DEFAULT_CHO
    c232b: Baudrate = DEFAULT_C232B
    c485b: Baudrate = DEFAULT_C485B
    c422b: Baudrate = DEFAULT_C422B

    def default_for(self, name: str) -> Any:
        value = self.DEFAULTS[name]
        if isinstance(value, TimeValue):
            return value.copy()
        return value

    def set_defaults(self) -> None:
        for name in self.VALIDATORS:
            setattr(self, name, None)

    # ─── CETFP ─────────────────────────────────────────────────────────

    def set_cetfp(self, when: datetime) -> None:
        """Set the time of first ping from a datetime.

        Each component is validated on its own, so a year outside
        2000-2099 falls back to the default year only.
        """
        self.cetfp_year = when.year
        self.cetfp_month = when.month
        self.cetfp_day = when.day
        self.cetfp_hour = when.hour
        self.cetfp_minute = when.minute
        self.cetfp_second = when.second
        self.cetfp_hundredth = when.microsecond // 10000

    def cetfp_datetime(self) -> datetime | None:
        """The time of first ping, or None if the date does not exist."""
        try:
            return datetime(
                self.cetfp_year, self.cetfp_month, self.cetfp_day,
                self.cetfp_hour, self.cetfp_minute, self.cetfp_second,
                self.cetfp_hundredth * 10000,
            )
        except ValueError:
            return None

    # ─── RENDERING ─────────────────────────────────────────────────────

    def mode_to_string(self) -> str:
        """Mode keyword; also the literal mode command."""
        return MODE_KEYWORDS[self.mode]

    def value_string(self, name: str) -> str:
        """Device text for one command's value.

        Raises:
            ValueError: If ``name`` is not a command of this set.
        """
        if name == "mode":
            return self.mode_to_string()
        if name == "cei":
            return str(self.cei)
        if name == "cetfp":
            return (
                f"{self.cetfp_year:04d}/{self.cetfp_month:02d}/{self.cetfp_day:02d},"
                f"{self.cetfp_hour:02d}:{self.cetfp_minute:02d}:"
                f"{self.cetfp_second:02d}.{self.cetfp_hundredth:02d}"
            )
        if name == "cerecord":
            return f"{int(self.cerecord_ensemble_ping)},{int(self.cerecord_single_ping)}"
        if name == "cepo":
            return self.cepo
        if name in ("ceoutput", "chs", "c232b", "c485b", "c422b"):
            return str(int(getattr(self, name)))
        if name in ("cws", "cwt", "ctd", "cwss", "cho"):
            return format_float(getattr(self, name))
        raise ValueError(f"Unknown command {name!r}")

    def to_command_string(self, name: str) -> str:
        """Render one command, e.g. ``to_command_string("cwt") -> "CWT 15"``."""
        if name == "mode":
            return self.mode_to_string()
        if name not in self.MNEMONICS:
            raise ValueError(f"Unknown command {name!r}")
        return build_command(self.MNEMONICS[name], self.value_string(name))

    def get_time_command(self, when: datetime | None = None) -> str:
        return build_stime(when)

    def get_command_list(self, when: datetime | None = None) -> list[str]:
        """Commands to configure the instrument, in the order the device expects."""
        commands = [self.mode_to_string(), self.get_time_command(when)]
        for name in self.MNEMONICS:
            if name == "cetfp":
                continue
            commands.append(self.to_command_string(name))
        return commands

    def get_deployment_command_list(self) -> list[str]:
        return [self.to_command_string("cetfp")]

    # ─── SERIALIZATION ─────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {name: to_plain(getattr(self, name)) for name in self.VALIDATORS}

    @classmethod
    def from_dict(cls, data: dict) -> ValidatedCommandSet:
        commands = cls()
        for name in cls.VALIDATORS:
            if name in data:
                setattr(commands, name, data[name])
        return commands
