"""Decoders for the instrument's text responses.

Every decoder is a pure function of the response text.  A decoder raises
:class:`~adcp_config_mcp.errors.MalformedInput` only when a required token
is missing; rows it cannot read inside a table are skipped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import IntEnum

from ..errors import MalformedInput
from ..models.commands import AdcpMode
from ..models.configuration import CepoAllocator
from ..models.firmware import Firmware
from ..models.serial_number import SerialNumber
from .commands import Mnemonic

logger = logging.getLogger(__name__)

_SN_RE = re.compile(r"SN\s*:\s*([0-9A-Za-z]{32})")
_FW_RE = re.compile(r"FW\s*:\s*(\d{1,3}\.\d{1,3}\.\d{1,3})")
_STIME_RE = re.compile(
    r"(\d{4})/(\d{1,2})/(\d{1,2})[ ,T]+(\d{1,2}):(\d{1,2}):(\d{1,2})"
)
_FLOAT = r"([-+]?\d+(?:\.\d*)?(?:[eE][-+]?\d+)?)"
_HPR_RE = re.compile(
    rf"H\s*=\s*{_FLOAT}\s*,\s*P\s*=\s*{_FLOAT}\s*,\s*R\s*=\s*{_FLOAT}"
)
_BOARD_RE = re.compile(r"(\d+)(?:-[0-9A-Za-z]+)*\s+REV:\s*(\S+)\s+SER#\s*(\S+)")
_TOTAL_RE = re.compile(rf"total\s+space\s*:\s*{_FLOAT}", re.IGNORECASE)
_USED_RE = re.compile(rf"used\s+space\s*:\s*{_FLOAT}", re.IGNORECASE)
_DIR_ENTRY_RE = re.compile(
    r"^(\S+)\s+(\d{4}/\d{1,2}/\d{1,2})\s+(\d{1,2}:\d{1,2}:\d{1,2})\s+"
    + _FLOAT
    + r"\s*(?:MB)?$",
    re.IGNORECASE,
)
_CETFP_RE = re.compile(
    r"(\d{4})/(\d{1,2})/(\d{1,2}),(\d{1,2}):(\d{1,2}):(\d{1,2})(?:\.(\d{1,2}))?"
)
_INDEXED_RE = re.compile(r"\[(\d+)\]\s*([^\[]*)")


# ─── BREAK ───────────────────────────────────────────────────────────

@dataclass
class BreakInfo:
    """Parsed BREAK wake-up banner."""

    serial_number: SerialNumber
    firmware: Firmware
    hardware: str

    def to_dict(self) -> dict:
        return {
            "serial_number": self.serial_number.to_dict(),
            "firmware": self.firmware.to_dict(),
            "hardware": self.hardware,
        }


def decode_break(text: str) -> BreakInfo:
    """Decode the banner printed after a BREAK.

    Example banner::

        ADCP2
        Rowe Technologies Inc. 2013 (c)
        SN: 01200000000000000000000000000004
        FW: 00.02.05 Apr 17 2013 05:47:18

    The hardware name is the first line that is not the serial number,
    firmware, copyright or the command echo.

    Raises:
        MalformedInput: If the SN or FW token is missing.
    """
    sn_match = _SN_RE.search(text)
    if sn_match is None:
        raise MalformedInput("BREAK banner has no SN: token")
    fw_match = _FW_RE.search(text)
    if fw_match is None:
        raise MalformedInput("BREAK banner has no FW: token")

    serial = SerialNumber(sn_match.group(1))
    firmware = Firmware.parse(fw_match.group(1))

    hardware = ""
    for line in text.splitlines():
        line = line.strip()
        if not line or line.upper() == Mnemonic.BREAK:
            continue
        if _SN_RE.search(line) or _FW_RE.search(line):
            continue
        if "(c)" in line.lower() or "copyright" in line.lower():
            continue
        hardware = line
        break

    return BreakInfo(serial_number=serial, firmware=firmware, hardware=hardware)


# ─── STIME ───────────────────────────────────────────────────────────

def decode_stime(text: str) -> datetime:
    """Decode the instrument time, ``YYYY/MM/DD HH:MM:SS``.

    Raises:
        MalformedInput: If no valid timestamp is present.
    """
    match = _STIME_RE.search(text)
    if match is None:
        raise MalformedInput(f"No timestamp in {text!r}")
    try:
        return datetime(*(int(g) for g in match.groups()))
    except ValueError as exc:
        raise MalformedInput(f"Invalid timestamp {match.group(0)!r}: {exc}") from exc


# ─── ENGPNI ──────────────────────────────────────────────────────────

@dataclass
class HPR:
    """Heading, pitch and roll in degrees."""

    heading: float
    pitch: float
    roll: float

    def to_dict(self) -> dict:
        return asdict(self)


def decode_eng_pni(text: str) -> HPR:
    """Decode the compass line ``H=<f>, P=<f>, R=<f>``.

    Raises:
        MalformedInput: If the line is missing.
    """
    match = _HPR_RE.search(text)
    if match is None:
        raise MalformedInput(f"No heading/pitch/roll in {text!r}")
    heading, pitch, roll = (float(g) for g in match.groups())
    return HPR(heading=heading, pitch=pitch, roll=roll)


# ─── ENGI2CSHOW ──────────────────────────────────────────────────────

class BoardId(IntEnum):
    """Board part numbers stored in the I2C EEPROMs."""

    BACKPLANE = 1015
    IO = 1016
    LOW_POWER_REG = 1018
    RECEIVER = 1019
    XMITTER = 1020
    VIRTUAL_GROUND = 1021


BOARD_FIELDS: dict[BoardId, str] = {
    BoardId.IO: "io_board",
    BoardId.LOW_POWER_REG: "low_power_reg_board",
    BoardId.XMITTER: "xmitter_board",
    BoardId.VIRTUAL_GROUND: "virtual_ground_board",
    BoardId.RECEIVER: "receiver_board",
    BoardId.BACKPLANE: "backplane_board",
}

RTC_DEVICES = frozenset({"RTC"})
RECEIVER_DEVICES = frozenset({"RCV", "RCVR", "RECEIVER"})


@dataclass
class BoardInfo:
    """Board identity read from an EEPROM: ``<id>  REV:<rev>  SER#<serial>``."""

    board_id: int
    revision: str
    serial: str


@dataclass
class I2cMemDevs:
    """Register banks and board identities from ENGI2CSHOW.

    Register banks map the I2C address to the bytes read from it.
    """

    rtc: dict[int, list[int]] = field(default_factory=dict)
    receiver: dict[int, list[int]] = field(default_factory=dict)
    io_board: BoardInfo | None = None
    low_power_reg_board: BoardInfo | None = None
    xmitter_board: BoardInfo | None = None
    virtual_ground_board: BoardInfo | None = None
    receiver_board: BoardInfo | None = None
    backplane_board: BoardInfo | None = None

    def to_dict(self) -> dict:
        d = asdict(self)
        d["rtc"] = {f"0x{addr:02X}": data for addr, data in self.rtc.items()}
        d["receiver"] = {f"0x{addr:02X}": data for addr, data in self.receiver.items()}
        return d


def _parse_hex_bytes(text: str) -> list[int] | None:
    values = []
    for token in text.replace(",", " ").split():
        try:
            value = int(token, 16)
        except ValueError:
            return None
        if not 0 <= value <= 0xFF:
            return None
        values.append(value)
    return values or None


def decode_eng_i2c_show(text: str) -> I2cMemDevs:
    """Decode the I2C device table (``device,address,data`` per line).

    Example::

        RTC,0x68,00 30 12 04 17 04 13
        RCV,0x20,0A 0B 0C 0D
        EEPROM,0x50,1016-0001-00  REV:XC1  SER#0042
        EEPROM,0x54,--

    Rows that cannot be read, ``--`` data, and board IDs that are not
    known are skipped.
    """
    result = I2cMemDevs()
    for line in text.splitlines():
        parts = line.strip().split(",", 2)
        if len(parts) != 3:
            continue
        device, address_text, data = (p.strip() for p in parts)
        if not data or data == "--":
            continue
        try:
            address = int(address_text, 16)
        except ValueError:
            logger.debug("Skipping I2C row with bad address: %r", line)
            continue

        device_key = device.upper()
        if device_key in RTC_DEVICES or device_key in RECEIVER_DEVICES:
            values = _parse_hex_bytes(data)
            if values is None:
                logger.debug("Skipping I2C row with bad data: %r", line)
                continue
            bank = result.rtc if device_key in RTC_DEVICES else result.receiver
            bank.setdefault(address, []).extend(values)
            continue

        for match in _BOARD_RE.finditer(data):
            board_id = int(match.group(1))
            try:
                attr = BOARD_FIELDS[BoardId(board_id)]
            except ValueError:
                logger.debug("Unknown board ID %d in %r", board_id, line)
                continue
            setattr(
                result,
                attr,
                BoardInfo(board_id=board_id, revision=match.group(2), serial=match.group(3)),
            )
    return result


# ─── DSDIR ───────────────────────────────────────────────────────────

@dataclass
class DirEntry:
    """One file on the internal memory card."""

    file_name: str
    modify_time: datetime | None
    file_size_mb: float

    def to_dict(self) -> dict:
        return {
            "file_name": self.file_name,
            "modify_time": self.modify_time.isoformat() if self.modify_time else None,
            "file_size_mb": self.file_size_mb,
        }


@dataclass
class DirListing:
    """Parsed DSDIR directory listing (sizes in MB)."""

    total_space_mb: float
    used_space_mb: float
    entries: list[DirEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_space_mb": self.total_space_mb,
            "used_space_mb": self.used_space_mb,
            "entries": [e.to_dict() for e in self.entries],
        }


def decode_dsdir(text: str) -> DirListing:
    """Decode a DSDIR listing.

    Example::

        DSDIR
        Total Space:                       3781.500 MB
        Used  Space:                          0.017 MB
        A0000001.ENS 2013/04/17 05:47:18      0.012
        A0000002.ENS 2013/04/17 06:00:00      0.005
        DSDIR

    Blank lines, the command echo and unreadable rows are skipped.

    Raises:
        MalformedInput: If the total or used space line is missing.
    """
    total = _TOTAL_RE.search(text)
    used = _USED_RE.search(text)
    if total is None or used is None:
        raise MalformedInput("DSDIR listing has no total/used space")

    entries = []
    for line in text.splitlines():
        match = _DIR_ENTRY_RE.match(line.strip())
        if match is None:
            continue
        name, date_text, time_text, size_text = match.groups()
        try:
            modified = datetime.strptime(f"{date_text} {time_text}", "%Y/%m/%d %H:%M:%S")
        except ValueError:
            modified = None
        entries.append(DirEntry(file_name=name, modify_time=modified, file_size_mb=float(size_text)))

    return DirListing(
        total_space_mb=float(total.group(1)),
        used_space_mb=float(used.group(1)),
        entries=entries,
    )


# ─── CSHOW ───────────────────────────────────────────────────────────

# Instrument commands written as "<MNEMONIC> <value>"
_CSHOW_SCALARS: dict[str, str] = {
    Mnemonic.CEI: "cei",
    Mnemonic.CEOUTPUT: "ceoutput",
    Mnemonic.CWS: "cws",
    Mnemonic.CWT: "cwt",
    Mnemonic.CTD: "ctd",
    Mnemonic.CWSS: "cwss",
    Mnemonic.CHO: "cho",
    Mnemonic.CHS: "chs",
    Mnemonic.C232B: "c232b",
    Mnemonic.C485B: "c485b",
    Mnemonic.C422B: "c422b",
}

# Subsystem commands written as "<MNEMONIC>[i] <value> [j] <value>"
_CSHOW_INDEXED: dict[str, tuple[str, ...]] = {
    Mnemonic.CWPON: ("cwpon",),
    Mnemonic.CWPBB: ("cwpbb_transmit_pulse_type", "cwpbb_lag_length"),
    Mnemonic.CWPBL: ("cwpbl",),
    Mnemonic.CWPBS: ("cwpbs",),
    Mnemonic.CWPX: ("cwpx",),
    Mnemonic.CWPBN: ("cwpbn",),
    Mnemonic.CWPP: ("cwpp",),
    Mnemonic.CWPAI: ("cwpai",),
    Mnemonic.CWPTBP: ("cwptbp",),
    Mnemonic.CBI: ("cbi_burst_interval", "cbi_num_ensembles"),
    Mnemonic.CBTON: ("cbton",),
    Mnemonic.CBTBB: ("cbtbb_mode", "cbtbb_pulse_to_pulse_lag", "cbtbb_long_range_depth"),
    Mnemonic.CBTBL: ("cbtbl",),
    Mnemonic.CBTMX: ("cbtmx",),
    Mnemonic.CBTTBP: ("cbttbp",),
    Mnemonic.CWTON: ("cwton",),
    Mnemonic.CWTBB: ("cwtbb",),
    Mnemonic.CWTBL: ("cwtbl",),
    Mnemonic.CWTBS: ("cwtbs",),
    Mnemonic.CWTTBP: ("cwttbp",),
}


def _decode_cshow_line(line: str, allocator: CepoAllocator) -> None:
    commands = allocator.commands

    if "[" in line:
        mnemonic = line.split("[", 1)[0].strip()
        names = _CSHOW_INDEXED.get(mnemonic)
        if names is None:
            logger.debug("Ignoring CSHOW line %r", line)
            return
        for index_text, value_text in _INDEXED_RE.findall(line):
            config = allocator.get_by_index(int(index_text))
            if config is None:
                logger.debug("No configuration at CEPO index %s for %r", index_text, line)
                continue
            values = [v.strip() for v in value_text.split(",")]
            if len(values) < len(names):
                logger.debug("Too few values for %s[%s]: %r", mnemonic, index_text, value_text)
                continue
            for name, value in zip(names, values):
                setattr(config.commands, name, value)
        return

    tokens = line.split(None, 1)
    if len(tokens) < 2:
        if tokens and tokens[0] in (Mnemonic.CDVL, Mnemonic.CPROFILE):
            commands.mode = AdcpMode.DVL if tokens[0] == Mnemonic.CDVL else AdcpMode.PROFILE
        return
    mnemonic, value = tokens[0], tokens[1].strip()

    if mnemonic.lower() == "mode":
        if "dvl" in value.lower():
            commands.mode = AdcpMode.DVL
        elif "profile" in value.lower():
            commands.mode = AdcpMode.PROFILE
    elif mnemonic == Mnemonic.CETFP:
        match = _CETFP_RE.search(value)
        if match is None:
            logger.debug("Bad CETFP value %r", value)
            return
        year, month, day, hour, minute, second, hundredth = match.groups()
        commands.cetfp_year = year
        commands.cetfp_month = month
        commands.cetfp_day = day
        commands.cetfp_hour = hour
        commands.cetfp_minute = minute
        commands.cetfp_second = second
        commands.cetfp_hundredth = hundredth or 0
    elif mnemonic == Mnemonic.CERECORD:
        flags = [v.strip() for v in value.split(",")]
        commands.cerecord_ensemble_ping = flags[0]
        if len(flags) > 1:
            commands.cerecord_single_ping = flags[1]
    elif mnemonic in _CSHOW_SCALARS:
        setattr(commands, _CSHOW_SCALARS[mnemonic], value.split()[0])
    elif mnemonic != Mnemonic.CEPO:
        logger.debug("Ignoring CSHOW line %r", line)


def decode_cshow(text: str, serial: SerialNumber) -> CepoAllocator:
    """Rebuild a configuration from a CSHOW dump.

    The CEPO line is applied first so the subsystem commands, written as
    ``CWPBB[0] 1,0.042 [1] 1,0.042``, can be matched to configurations by
    CEPO index.  Unknown commands are ignored.
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    allocator = CepoAllocator(serial)

    for line in lines:
        tokens = line.split()
        if len(tokens) > 1 and tokens[0] == Mnemonic.CEPO:
            allocator.set_cepo(tokens[1], serial)
            break

    for line in lines:
        _decode_cshow_line(line, allocator)
    return allocator


# ─── DISPATCH ────────────────────────────────────────────────────────

def parse_response(command: str, text: str, serial: SerialNumber | None = None):
    """Decode a response by the command that produced it.

    Returns the decoded result, or the text unchanged if no decoder
    matches.  CSHOW needs ``serial``.
    """
    decoders = {
        Mnemonic.BREAK: decode_break,
        Mnemonic.STIME: decode_stime,
        Mnemonic.ENGPNI: decode_eng_pni,
        Mnemonic.ENGI2CSHOW: decode_eng_i2c_show,
        Mnemonic.DSDIR: decode_dsdir,
    }
    key = command.strip().upper()
    if key == Mnemonic.CSHOW:
        return decode_cshow(text, serial or SerialNumber())
    decoder = decoders.get(key)
    if decoder:
        return decoder(text)
    return text
