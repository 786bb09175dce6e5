"""Per-subsystem commands: water profile, burst, bottom track and water track.

Defaults depend on the subsystem's transmit frequency.  Every command line
carries the configuration's CEPO index, e.g. ``CWPBL[1] 0.5``.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, ClassVar

from ..protocol.commands import Mnemonic, build_indexed_command
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
from .subsystem import Frequency, Subsystem
from .time_value import TimeValue


class TransmitPulseType(IntEnum):
    """CWPBB water profile transmit pulse."""

    NARROWBAND = 0
    BROADBAND = 1
    BROADBAND_PULSE_TO_PULSE = 2
    NONCODED_PULSE_TO_PULSE = 3


class BottomTrackMode(IntEnum):
    """CBTBB bottom track broadband mode."""

    NARROWBAND_LONG_RANGE = 0
    BROADBAND_CODED = 1
    BROADBAND_NON_CODED = 2
    NA_3 = 3
    BROADBAND_NON_CODED_P2P = 4
    NA_5 = 5
    NA_6 = 6
    AUTO_SWITCH_NARROWBAND_BROADBAND_NON_CODED = 7


# Frequency independent defaults
DEFAULT_CWPON = True
DEFAULT_CWPBB_TRANSMIT_PULSE_TYPE = TransmitPulseType.BROADBAND
DEFAULT_CWPBB_LAG_LENGTH = 0.042
DEFAULT_CWPAI = TimeValue()
DEFAULT_CBI_BURST_INTERVAL = TimeValue()
DEFAULT_CBI_NUM_ENSEMBLES = 1
DEFAULT_CBTON = True
DEFAULT_CBTBB_MODE = BottomTrackMode.BROADBAND_NON_CODED
DEFAULT_CBTBB_PULSE_TO_PULSE_LAG = 0.0
DEFAULT_CBTBB_LONG_RANGE_DEPTH = 30.0
DEFAULT_CWTON = False
DEFAULT_CWTBB = False

# Frequency dependent defaults
_FREQUENCY_COLUMNS = (
    "cbttbp", "cwttbp", "cwptbp", "cbtbl", "cbtmx", "cwtbl",
    "cwtbs", "cwpbl", "cwpbs", "cwpx", "cwpbn", "cwpp",
)

FREQUENCY_DEFAULTS: dict[Frequency, dict[str, float]] = {
    freq: dict(zip(_FREQUENCY_COLUMNS, row))
    for freq, row in {
        Frequency.KHZ_38: (2.0, 4.0, 4.0, 2.0, 2000.0, 32.0, 32.0, 32.0, 32.0, 0.0, 30, 1),
        Frequency.KHZ_75: (1.0, 2.0, 2.0, 1.0, 1000.0, 16.0, 16.0, 16.0, 16.0, 0.0, 30, 1),
        Frequency.KHZ_150: (0.5, 1.0, 1.0, 0.5, 500.0, 8.0, 8.0, 8.0, 8.0, 0.0, 30, 1),
        Frequency.KHZ_300: (0.25, 0.5, 0.5, 0.25, 250.0, 4.0, 4.0, 4.0, 4.0, 0.0, 30, 1),
        Frequency.KHZ_600: (0.125, 0.25, 0.25, 0.125, 125.0, 2.0, 2.0, 2.0, 2.0, 0.0, 30, 1),
        Frequency.KHZ_1200: (0.05, 0.1, 0.1, 0.1, 50.0, 2.0, 2.0, 1.0, 1.0, 0.0, 20, 1),
    }.items()
}

# Frequencies without their own table borrow the nearest one
FREQUENCY_DEFAULTS[Frequency.KHZ_20] = FREQUENCY_DEFAULTS[Frequency.KHZ_38]
FREQUENCY_DEFAULTS[Frequency.KHZ_2000] = FREQUENCY_DEFAULTS[Frequency.KHZ_1200]
FREQUENCY_DEFAULTS[Frequency.UNKNOWN] = FREQUENCY_DEFAULTS[Frequency.KHZ_600]


class SubsystemCommandSet(BoundedFields):
    """Commands for one subsystem configuration.

    Args:
        subsystem: Subsystem the commands apply to; picks the defaults.
        cepo_index: Position of the configuration within the CEPO string.
    """

    VALIDATORS: ClassVar[dict] = {
        # Water profile
        "cwpon": flag,
        "cwpbb_transmit_pulse_type": enum_member(TransmitPulseType),
        "cwpbb_lag_length": float_range(0.0, 100.0),
        "cwpbl": float_range(0.0, 100.0),
        "cwpbs": float_range(0.01, 100.0),
        "cwpx": float_range(0.0, 100.0),
        "cwpbn": int_range(0, 200),
        "cwpp": int_range(0, 10000),
        "cwpai": time_value,
        "cwptbp": float_range(0.0, 86400.0),
        # Burst
        "cbi_burst_interval": time_value,
        "cbi_num_ensembles": int_range(0, 10000),
        # Bottom track
        "cbton": flag,
        "cbtbb_mode": enum_member(BottomTrackMode),
        "cbtbb_pulse_to_pulse_lag": float_range(0.0, 100.0),
        "cbtbb_long_range_depth": float_range(0.0, 10000.0),
        "cbtbl": float_range(0.0, 10.0),
        "cbtmx": float_range(5.0, 10000.0),
        "cbttbp": float_range(0.0, 86400.0),
        # Water track
        "cwton": flag,
        "cwtbb": flag,
        "cwtbl": float_range(0.0, 100.0),
        "cwtbs": float_range(0.05, 64.0),
        "cwttbp": float_range(0.0, 86400.0),
    }

    DEFAULTS: ClassVar[dict] = {
        "cwpon": DEFAULT_CWPON,
        "cwpbb_transmit_pulse_type": DEFAULT_CWPBB_TRANSMIT_PULSE_TYPE,
        "cwpbb_lag_length": DEFAULT_CWPBB_LAG_LENGTH,
        "cwpai": DEFAULT_CWPAI,
        "cbi_burst_interval": DEFAULT_CBI_BURST_INTERVAL,
        "cbi_num_ensembles": DEFAULT_CBI_NUM_ENSEMBLES,
        "cbton": DEFAULT_CBTON,
        "cbtbb_mode": DEFAULT_CBTBB_MODE,
        "cbtbb_pulse_to_pulse_lag": DEFAULT_CBTBB_PULSE_TO_PULSE_LAG,
        "cbtbb_long_range_depth": DEFAULT_CBTBB_LONG_RANGE_DEPTH,
        "cwton": DEFAULT_CWTON,
        "cwtbb": DEFAULT_CWTBB,
    }

    # Command -> mnemonic, in command list order
    MNEMONICS: ClassVar[dict[str, str]] = {
        "cwpon": Mnemonic.CWPON,
        "cwpbb": Mnemonic.CWPBB,
        "cwpbl": Mnemonic.CWPBL,
        "cwpbs": Mnemonic.CWPBS,
        "cwpx": Mnemonic.CWPX,
        "cwpbn": Mnemonic.CWPBN,
        "cwpp": Mnemonic.CWPP,
        "cwpai": Mnemonic.CWPAI,
        "cwptbp": Mnemonic.CWPTBP,
        "cbi": Mnemonic.CBI,
        "cbton": Mnemonic.CBTON,
        "cbtbb": Mnemonic.CBTBB,
        "cbtbl": Mnemonic.CBTBL,
        "cbtmx": Mnemonic.CBTMX,
        "cbttbp": Mnemonic.CBTTBP,
        "cwton": Mnemonic.CWTON,
        "cwtbb": Mnemonic.CWTBB,
        "cwtbl": Mnemonic.CWTBL,
        "cwtbs": Mnemonic.CWTBS,
        "cwttbp": Mnemonic.CWTTBP,
    }

    def __init__(self, subsystem: Subsystem | None = None, cepo_index: int = 0) -> None:
        self.subsystem = subsystem or Subsystem()
        self.cepo_index = cepo_index
        self.set_defaults()

    @property
    def frequency(self) -> Frequency:
        return self.subsystem.frequency

    def default_for(self, name: str) -> Any:
        if name in self.DEFAULTS:
            value = self.DEFAULTS[name]
        else:
            value = FREQUENCY_DEFAULTS.get(
                self.frequency, FREQUENCY_DEFAULTS[Frequency.UNKNOWN]
            )[name]
        if isinstance(value, TimeValue):
            return value.copy()
        return value

    def set_defaults(self) -> None:
        """Reset every command to the default for this subsystem's frequency."""
        for name in self.VALIDATORS:
            setattr(self, name, None)

    # ─── RENDERING ─────────────────────────────────────────────────────

    def value_string(self, name: str) -> str:
        """Device text for one command's value.

        Raises:
            ValueError: If ``name`` is not a command of this set.
        """
        if name == "cwpbb":
            return f"{int(self.cwpbb_transmit_pulse_type)},{format_float(self.cwpbb_lag_length)}"
        if name == "cbtbb":
            return (
                f"{int(self.cbtbb_mode)},"
                f"{format_float(self.cbtbb_pulse_to_pulse_lag)},"
                f"{format_float(self.cbtbb_long_range_depth)}"
            )
        if name == "cbi":
            return f"{self.cbi_burst_interval},{self.cbi_num_ensembles}"
        if name in ("cwpon", "cbton", "cwton", "cwtbb"):
            return str(int(getattr(self, name)))
        if name in ("cwpbn", "cwpp"):
            return str(getattr(self, name))
        if name == "cwpai":
            return str(self.cwpai)
        if name in self.MNEMONICS:
            return format_float(getattr(self, name))
        raise ValueError(f"Unknown subsystem command {name!r}")

    def to_command_string(self, name: str) -> str:
        """Render one command, e.g. ``to_command_string("cwpbn") -> "CWPBN[0] 30"``."""
        if name not in self.MNEMONICS:
            raise ValueError(f"Unknown subsystem command {name!r}")
        return build_indexed_command(self.MNEMONICS[name], self.cepo_index, self.value_string(name))

    def get_command_list(self) -> list[str]:
        """Commands for this subsystem.

        The ping interval is sent as CWPAI when set, otherwise the ping
        count is sent as CWPP.
        """
        use_cwpai = self.cwpai != TimeValue()
        commands = []
        for name in self.MNEMONICS:
            if name == "cwpp" and use_cwpai:
                continue
            if name == "cwpai" and not use_cwpai:
                continue
            commands.append(self.to_command_string(name))
        return commands

    # ─── SERIALIZATION ─────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {name: to_plain(getattr(self, name)) for name in self.VALIDATORS}

    def update_from_dict(self, data: dict) -> None:
        for name in self.VALIDATORS:
            if name in data:
                setattr(self, name, data[name])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SubsystemCommandSet):
            return NotImplemented
        return (
            self.subsystem == other.subsystem
            and self.cepo_index == other.cepo_index
            and self.to_dict() == other.to_dict()
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"SubsystemCommandSet(subsystem={self.subsystem.code!r}, "
            f"cepo_index={self.cepo_index})"
        )
