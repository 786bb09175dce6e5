"""Tests for instrument response decoders."""

from datetime import datetime

import pytest

from adcp_config_mcp.errors import MalformedInput
from adcp_config_mcp.models.commands import AdcpMode, Baudrate, HeadingSource, OutputMode
from adcp_config_mcp.models.serial_number import SerialNumber
from adcp_config_mcp.models.subsystem import Subsystem
from adcp_config_mcp.models.subsystem_commands import BottomTrackMode, TransmitPulseType
from adcp_config_mcp.models.time_value import TimeValue
from adcp_config_mcp.protocol.parser import (
    BoardId,
    decode_break,
    decode_cshow,
    decode_dsdir,
    decode_eng_i2c_show,
    decode_eng_pni,
    decode_stime,
    parse_response,
)

BREAK_BANNER = (
    "BREAK\r\n"
    "ADCP2\r\n"
    "Rowe Technologies Inc. 2013 (c)\r\n"
    "SN: 01200000000000000000000000000004\r\n"
    "FW: 00.02.05 Apr 17 2013 05:47:18\r\n"
)

CSHOW_SINGLE = (
    "CSHOW\r\n"
    "\r\n"
    "DP1200 System Configuration:\r\n"
    "    Mode Profile\r\n"
    "    Sim 0 \r\n"
    "    CEI 00:00:01.00\r\n"
    "    CEPO 2\r\n"
    "    CBI[0] 00:00:01.00,100 \r\n"
    "    CETFP 2012/09/24,12:30:10.25\r\n"
    "    CERECORD 1,1\r\n"
    "    CEOUTPUT 1\r\n"
    "    CWPON[0] 1 \r\n"
    "    CWPBB[0] 1,0.042 \r\n"
    "    CWPAP[0] 10,0.15,0.06,0.04,0.01 \r\n"
    "    CWPBP[0] 1,0.02 \r\n"
    "    CWPST[0] 0.400,1.000,1.001 \r\n"
    "    CWPBL[0] 0.10 \r\n"
    "    CWPBS[0] 1.00 \r\n"
    "    CWPX [0] 0.01 \r\n"
    "    CWPBN[0] 30 \r\n"
    "    CWPP[0] 1 \r\n"
    "    CWPAI[0] 03:02:00.10 \r\n"
    "    CWPTBP[0] 0.13 \r\n"
    "    CBTON[0] 1 \r\n"
    "    CBTBB[0] 2, 1.023, 30.00 \r\n"
    "    CBTST[0] 0.900,1.002,1.001 \r\n"
    "    CBTBL[0] 0.05 \r\n"
    "    CBTMX[0] 75.00 \r\n"
    "    CBTTBP[0] 0.05 \r\n"
    "    CBTT[0] 15.0,25.0,5.0,2.0 \r\n"
    "    CWTON[0] 0 \r\n"
    "    CWTBB[0] 0 \r\n"
    "    CWTBL[0] 2.00 \r\n"
    "    CWTBS[0] 2.01 \r\n"
    "    CWTTBP[0] 0.13 \r\n"
    "    CWS 17.00\r\n"
    "    CWT 15.00\r\n"
    "    CTD 22.10\r\n"
    "    CWSS 1500.01\r\n"
    "    CHO 12.654\r\n"
    "    CHS 1\r\n"
    "    CVSF 1.023\r\n"
    "    C232B 115200\r\n"
    "    C485B 460800\r\n"
    "    C422B 19200\r\n"
    "CSHOW\r\n"
)

CSHOW_MULTI = (
    "CSHOW\r\n"
    "\r\n"
    "DP1200 System Configuration:\r\n"
    "    Mode Profile\r\n"
    "    CEI 13:20:01.33\r\n"
    "    CEPO 2232332\r\n"
    "    CBI[0] 00:00:01.01,101 [1] 00:00:01.02,102 [2] 00:02:03.01,102 [3] 00:00:01.03,103 "
    "[4] 00:00:03.04,104 [5] 00:00:01.05,105 [6] 00:06:03.01,106 \r\n"
    "    CERECORD 1,1\r\n"
    "    CWPON[0] 1 [1] 0 [2] 1 [3] 1 [4] 0 [5] 1 [6] 1 \r\n"
    "    CWPBB[0] 1,0.042 [1] 2,0.042 [2] 3,0.084 [3] 2,0.044 [4] 1,0.084 [5] 1,0.085 [6] 3,0.043 \r\n"
    "    CWPX [0] 0.01 [1] 0.02 [2] 0.03 [3] 0.04 [4] 0.05 [5] 0.06 [6] 0.70 \r\n"
    "    CWPBN[0] 30 [1] 31 [2] 32 [3] 33 [4] 34 [5] 35 [6] 36 \r\n"
    "    CBTBB[0] 0, 1.001, 30.00 [1] 1, 2.002, 30.02 [2] 3, 3.003, 50.03 [3] 4, 4.004, 30.04 "
    "[4] 5, 5.005, 50.05 [5] 6, 6.006, 50.06 [6] 7, 7.007, 30.07 \r\n"
    "    CWTTBP[0] 0.132 [1] 0.131[2] 0.29 [3] 0.18 [4] 0.27 [5] 0.26 [6] 0.15 \r\n"
    "    CWS 69.69\r\n"
    "    CHS 1\r\n"
    "    C232B 921600\r\n"
    "    C485B 2400\r\n"
    "    C422B 38400\r\n"
    "CSHOW\r\n"
)

I2C_TABLE = (
    "ENGI2CSHOW\r\n"
    "RTC,0x68,00 30 12 04 17 04 13\r\n"
    "RCV,0x20,0A 0B 0C 0D\r\n"
    "RCV,0x21,ZZ 0B\r\n"
    "EEPROM,0x50,1016-0001-00  REV:XC1  SER#0042\r\n"
    "EEPROM,0x51,1020-0003  REV:A2  SER#0007\r\n"
    "EEPROM,0x52,9999-0001  REV:A1  SER#0001\r\n"
    "EEPROM,0x54,--\r\n"
    "EEPROM,xyz,1015  REV:A1  SER#0001\r\n"
)

DSDIR_LISTING = (
    "DSDIR\r\n"
    "Total Space:                       3781.500 MB\r\n"
    "Used  Space:                          0.017 MB\r\n"
    "\r\n"
    "A0000001.ENS 2013/04/17 05:47:18      0.012\r\n"
    "A0000002.ENS 2013/04/17 06:00:00      0.005 MB\r\n"
    "garbage line\r\n"
    "DSDIR\r\n"
)


# ─── BREAK ───────────────────────────────────────────────────────────

def test_decode_break():
    """Banner yields serial number, firmware and hardware name."""
    info = decode_break(BREAK_BANNER)
    assert info.serial_number.subsystems_string() == "2"
    assert (info.firmware.major, info.firmware.minor, info.firmware.revision) == (0, 2, 5)
    assert info.hardware == "ADCP2"


def test_decode_break_missing_serial():
    """A banner without SN: is malformed."""
    with pytest.raises(MalformedInput):
        decode_break("ADCP2\r\nFW: 00.02.05\r\n")


def test_decode_break_missing_firmware():
    """A banner without FW: is malformed."""
    with pytest.raises(MalformedInput):
        decode_break("ADCP2\r\nSN: 01200000000000000000000000000004\r\n")


# ─── STIME / ENGPNI ──────────────────────────────────────────────────

def test_decode_stime():
    """Instrument time is read with either separator."""
    assert decode_stime("STIME\r\n2013/04/17 05:47:18\r\n") == datetime(2013, 4, 17, 5, 47, 18)
    assert decode_stime("2013/04/17,05:47:18") == datetime(2013, 4, 17, 5, 47, 18)


def test_decode_stime_malformed():
    """Missing or impossible timestamps raise."""
    with pytest.raises(MalformedInput):
        decode_stime("no time here")
    with pytest.raises(MalformedInput):
        decode_stime("2013/02/30 05:47:18")


def test_decode_eng_pni():
    """Heading, pitch and roll are read as floats."""
    hpr = decode_eng_pni("ENGPNI\r\nH=234.5, P=-1.25, R=0.5\r\n")
    assert (hpr.heading, hpr.pitch, hpr.roll) == (234.5, -1.25, 0.5)


def test_decode_eng_pni_malformed():
    """Missing compass line raises."""
    with pytest.raises(MalformedInput):
        decode_eng_pni("ENGPNI\r\nERROR\r\n")


# ─── ENGI2CSHOW ──────────────────────────────────────────────────────

def test_decode_i2c_register_banks():
    """RTC and receiver rows become register banks keyed by address."""
    devs = decode_eng_i2c_show(I2C_TABLE)
    assert devs.rtc == {0x68: [0x00, 0x30, 0x12, 0x04, 0x17, 0x04, 0x13]}
    assert devs.receiver == {0x20: [0x0A, 0x0B, 0x0C, 0x0D]}


def test_decode_i2c_boards():
    """Known board IDs fill their slots; unknown and bad rows are skipped."""
    devs = decode_eng_i2c_show(I2C_TABLE)
    assert devs.io_board.board_id == BoardId.IO
    assert devs.io_board.revision == "XC1"
    assert devs.io_board.serial == "0042"
    assert devs.xmitter_board.serial == "0007"
    assert devs.backplane_board is None
    assert devs.receiver_board is None


def test_decode_i2c_empty():
    """An empty table yields empty banks."""
    devs = decode_eng_i2c_show("")
    assert devs.rtc == {}
    assert devs.io_board is None
    assert devs.to_dict()["rtc"] == {}


# ─── DSDIR ───────────────────────────────────────────────────────────

def test_decode_dsdir():
    """Space totals and one entry per file row."""
    listing = decode_dsdir(DSDIR_LISTING)
    assert listing.total_space_mb == 3781.5
    assert listing.used_space_mb == 0.017
    assert [e.file_name for e in listing.entries] == ["A0000001.ENS", "A0000002.ENS"]
    assert listing.entries[0].modify_time == datetime(2013, 4, 17, 5, 47, 18)
    assert listing.entries[1].file_size_mb == 0.005


def test_decode_dsdir_missing_totals():
    """A listing without totals is malformed."""
    with pytest.raises(MalformedInput):
        decode_dsdir("A0000001.ENS 2013/04/17 05:47:18      0.012\r\n")


# ─── CSHOW ───────────────────────────────────────────────────────────

def test_decode_cshow_instrument_commands():
    """Instrument-wide values are applied to the command set."""
    serial = SerialNumber("01200000000000000000000000000004")
    config = decode_cshow(CSHOW_SINGLE, serial)
    cmds = config.commands
    assert cmds.mode == AdcpMode.PROFILE
    assert cmds.cei == TimeValue(0, 0, 1, 0)
    assert cmds.cepo == "2"
    assert (cmds.cetfp_year, cmds.cetfp_month, cmds.cetfp_day) == (2012, 9, 24)
    assert (cmds.cetfp_hour, cmds.cetfp_minute, cmds.cetfp_second) == (12, 30, 10)
    assert cmds.cetfp_hundredth == 25
    assert cmds.cerecord_ensemble_ping is True
    assert cmds.cerecord_single_ping is True
    assert cmds.ceoutput == OutputMode.BINARY
    assert cmds.cws == 17.0
    assert cmds.ctd == 22.1
    assert cmds.cwss == 1500.01
    assert cmds.cho == 12.654
    assert cmds.chs == HeadingSource.INTERNAL
    assert cmds.c485b == Baudrate.BAUD_460800
    assert cmds.c422b == Baudrate.BAUD_19200


def test_decode_cshow_subsystem_commands():
    """Indexed values are applied to the matching configuration."""
    serial = SerialNumber("01200000000000000000000000000004")
    config = decode_cshow(CSHOW_SINGLE, serial)
    assert len(config) == 1
    sub = config.get(Subsystem("2", 0), 0).commands
    assert sub.cbi_burst_interval == TimeValue(0, 0, 1, 0)
    assert sub.cbi_num_ensembles == 100
    assert sub.cwpbb_transmit_pulse_type == TransmitPulseType.BROADBAND
    assert sub.cwpbb_lag_length == 0.042
    assert sub.cwpbl == 0.1
    assert sub.cwpx == 0.01
    assert sub.cwpai == TimeValue(3, 2, 0, 10)
    assert sub.cbtbb_mode == BottomTrackMode.BROADBAND_NON_CODED
    assert sub.cbtbb_pulse_to_pulse_lag == 1.023
    assert sub.cbtmx == 75.0
    assert sub.cwtbs == 2.01
    assert sub.cwttbp == 0.13


def test_decode_cshow_multiple_configurations():
    """Values on one line are spread across configurations by index."""
    serial = SerialNumber("01230000000000000000000000000004")
    config = decode_cshow(CSHOW_MULTI, serial)
    assert config.cepo == "2232332"
    assert len(config) == 7
    assert config.get_by_index(2).subsystem == Subsystem("3", 1)
    assert [config.get_by_index(i).commands.cwpbn for i in range(7)] == [30, 31, 32, 33, 34, 35, 36]
    assert [config.get_by_index(i).commands.cwpon for i in range(7)] == [
        True, False, True, True, False, True, True,
    ]
    assert config.get_by_index(6).commands.cwpbb_transmit_pulse_type == 3
    assert config.get_by_index(6).commands.cbtbb_mode == BottomTrackMode(7)
    assert config.get_by_index(4).commands.cbtbb_long_range_depth == 50.05
    assert config.get_by_index(1).commands.cwttbp == 0.131
    assert config.get_by_index(2).commands.cwttbp == 0.29
    assert config.get_by_index(5).commands.cbi_burst_interval == TimeValue(0, 0, 1, 5)
    assert config.commands.c232b == Baudrate.BAUD_921600
    assert config.commands.c485b == Baudrate.BAUD_2400


def test_decode_cshow_cepo_not_fitted():
    """A CEPO the serial cannot support leaves no configurations."""
    serial = SerialNumber("01300000000000000000000000000004")
    config = decode_cshow(CSHOW_SINGLE, serial)
    assert config.cepo == ""
    assert len(config) == 0
    assert config.commands.cws == 17.0


# ─── DISPATCH ────────────────────────────────────────────────────────

def test_parse_response_dispatch():
    """Decoders are picked by command name; unknown commands echo the text."""
    assert parse_response("stime", "2013/04/17 05:47:18") == datetime(2013, 4, 17, 5, 47, 18)
    assert parse_response("ENGPNI", "H=1, P=2, R=3").heading == 1.0
    assert parse_response("CSAVE", "ok") == "ok"
    serial = SerialNumber("01200000000000000000000000000004")
    assert parse_response("CSHOW", CSHOW_SINGLE, serial).cepo == "2"
