"""Command mnemonics and builders for the direct (non-configuration) commands.

Every command is a single ASCII line: the mnemonic, a space, and the value.
Subsystem commands carry the CEPO index in brackets, e.g. ``CWPBL[1] 0.5``.
"""

from __future__ import annotations

from datetime import datetime

TERMINATOR = "\r"


class Mnemonic:
    """Command tokens accepted by the instrument."""

    # Mode
    CDVL = "CDVL"
    CPROFILE = "CPROFILE"

    # Ensemble
    CEI = "CEI"
    CETFP = "CETFP"
    CERECORD = "CERECORD"
    CEOUTPUT = "CEOUTPUT"
    CEPO = "CEPO"

    # Environment
    CWS = "CWS"
    CWT = "CWT"
    CTD = "CTD"
    CWSS = "CWSS"
    CHO = "CHO"
    CHS = "CHS"

    # Serial ports
    C232B = "C232B"
    C485B = "C485B"
    C422B = "C422B"

    # Water profile
    CWPON = "CWPON"
    CWPBB = "CWPBB"
    CWPBL = "CWPBL"
    CWPBS = "CWPBS"
    CWPX = "CWPX"
    CWPBN = "CWPBN"
    CWPP = "CWPP"
    CWPAI = "CWPAI"
    CWPTBP = "CWPTBP"

    # Burst
    CBI = "CBI"

    # Bottom track
    CBTON = "CBTON"
    CBTBB = "CBTBB"
    CBTBL = "CBTBL"
    CBTMX = "CBTMX"
    CBTTBP = "CBTTBP"

    # Water track
    CWTON = "CWTON"
    CWTBB = "CWTBB"
    CWTBL = "CWTBL"
    CWTBS = "CWTBS"
    CWTTBP = "CWTTBP"

    # Direct commands and diagnostics
    BREAK = "BREAK"
    STIME = "STIME"
    START = "START"
    STOP = "STOP"
    CSHOW = "CSHOW"
    CSAVE = "CSAVE"
    CDEFAULT = "CDEFAULT"
    SLEEP = "SLEEP"
    DSDIR = "DSDIR"
    ENGPNI = "ENGPNI"
    ENGI2CSHOW = "ENGI2CSHOW"


STIME_FORMAT = "%Y/%m/%d,%H:%M:%S"


def build_command(mnemonic: str, value: object | None = None) -> str:
    """Build a command line (without terminator)."""
    if not mnemonic or " " in mnemonic:
        raise ValueError(f"Invalid mnemonic {mnemonic!r}")
    if value is None or value == "":
        return mnemonic
    return f"{mnemonic} {value}"


def build_indexed_command(mnemonic: str, cepo_index: int, value: object) -> str:
    """Build a subsystem command line such as ``CWPBN[0] 30``.

    Args:
        mnemonic: Subsystem command token.
        cepo_index: Position of the configuration within the CEPO string.
        value: Already formatted value text.
    """
    if cepo_index < 0:
        raise ValueError(f"CEPO index must be >= 0, got {cepo_index}")
    return f"{mnemonic}[{cepo_index}] {value}"


def build_stime(when: datetime | None = None) -> str:
    """Build ``STIME yyyy/MM/dd,HH:mm:ss`` for the given (or current) time."""
    when = when or datetime.now()
    if not 2000 <= when.year <= 2099:
        raise ValueError(f"STIME year must be 2000-2099, got {when.year}")
    return build_command(Mnemonic.STIME, when.strftime(STIME_FORMAT))


def build_break() -> str:
    return Mnemonic.BREAK


def build_start_pinging() -> str:
    return Mnemonic.START


def build_stop_pinging() -> str:
    return Mnemonic.STOP


def build_cshow() -> str:
    return Mnemonic.CSHOW


def build_csave() -> str:
    return Mnemonic.CSAVE


def build_cdefault() -> str:
    return Mnemonic.CDEFAULT


def build_sleep() -> str:
    return Mnemonic.SLEEP


def build_dsdir() -> str:
    return Mnemonic.DSDIR


def build_eng_pni() -> str:
    return Mnemonic.ENGPNI


def build_eng_i2c_show() -> str:
    return Mnemonic.ENGI2CSHOW


def terminate(lines: list[str]) -> bytes:
    """Join command lines into the ASCII byte stream sent to the device."""
    return "".join(line + TERMINATOR for line in lines).encode("ascii")
