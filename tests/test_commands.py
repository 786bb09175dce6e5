"""Tests for the instrument command set and the command builders."""

from datetime import datetime

import pytest

from adcp_config_mcp.models.commands import (
    AdcpMode,
    Baudrate,
    HeadingSource,
    OutputMode,
    ValidatedCommandSet,
)
from adcp_config_mcp.models.fields import format_float
from adcp_config_mcp.models.time_value import TimeValue
from adcp_config_mcp.protocol.commands import (
    Mnemonic,
    build_break,
    build_cdefault,
    build_command,
    build_csave,
    build_cshow,
    build_dsdir,
    build_eng_i2c_show,
    build_eng_pni,
    build_indexed_command,
    build_sleep,
    build_start_pinging,
    build_stime,
    build_stop_pinging,
    terminate,
)

WHEN = datetime(2013, 4, 17, 5, 47, 18)


def test_defaults():
    """A new command set holds the instrument defaults."""
    cmds = ValidatedCommandSet()
    assert cmds.mode == AdcpMode.PROFILE
    assert cmds.cei == TimeValue(0, 0, 1, 0)
    assert cmds.ceoutput == OutputMode.BINARY
    assert cmds.cepo == ""
    assert cmds.cwt == 15.0
    assert cmds.cwss == 1500.0
    assert cmds.chs == HeadingSource.INTERNAL
    assert cmds.c232b == Baudrate.BAUD_115200
    assert cmds.c422b == Baudrate.BAUD_230400


def test_in_range_value_is_kept():
    """Valid assignments are stored as given."""
    cmds = ValidatedCommandSet()
    cmds.cwt = 22.5
    cmds.cho = -179.5
    assert cmds.cwt == 22.5
    assert cmds.cho == -179.5


def test_out_of_range_value_stores_default():
    """Invalid assignments fall back to the field default."""
    cmds = ValidatedCommandSet()
    cmds.cwt = 22.5
    cmds.cwt = 500
    assert cmds.cwt == 15.0

    cmds.cho = 181
    assert cmds.cho == 0.0

    cmds.cwss = "fast"
    assert cmds.cwss == 1500.0


def test_none_stores_default():
    """Assigning None resets the field."""
    cmds = ValidatedCommandSet()
    cmds.c232b = 9600
    cmds.c232b = None
    assert cmds.c232b == Baudrate.BAUD_115200


def test_baudrate_must_be_listed():
    """Baud rates outside the supported list are rejected."""
    cmds = ValidatedCommandSet()
    cmds.c485b = "460800"
    assert cmds.c485b == Baudrate.BAUD_460800
    cmds.c485b = 12345
    assert cmds.c485b == Baudrate.BAUD_115200


def test_cetfp_components_validated_separately():
    """A bad year falls back to the default year only."""
    cmds = ValidatedCommandSet()
    cmds.set_cetfp(datetime(1999, 9, 24, 12, 30, 10, 250000))
    assert cmds.cetfp_year == 2012
    assert cmds.cetfp_month == 9
    assert cmds.cetfp_hundredth == 25


def test_command_strings():
    """Rendered commands use the device text form."""
    cmds = ValidatedCommandSet()
    assert cmds.to_command_string("mode") == "CPROFILE"
    assert cmds.to_command_string("cwt") == "CWT 15"
    assert cmds.to_command_string("cei") == "CEI 00:00:01.00"
    assert cmds.to_command_string("cerecord") == "CERECORD 0,0"
    assert cmds.to_command_string("c422b") == "C422B 230400"
    assert cmds.to_command_string("cetfp") == "CETFP 2012/01/01,01:00:00.00"

    cmds.cho = 12.654
    assert cmds.to_command_string("cho") == "CHO 12.654"

    cmds.mode = "dvl"
    assert cmds.to_command_string("mode") == "CDVL"


def test_unknown_command_raises():
    """Rendering a name that is not a command raises."""
    with pytest.raises(ValueError):
        ValidatedCommandSet().to_command_string("cxyz")


def test_command_list_order():
    """Mode first, then the clock, then every setting in fixed order."""
    cmds = ValidatedCommandSet()
    cmds.cepo = "22"
    assert cmds.get_command_list(WHEN) == [
        "CPROFILE",
        "STIME 2013/04/17,05:47:18",
        "CEI 00:00:01.00",
        "CERECORD 0,0",
        "CEOUTPUT 1",
        "CEPO 22",
        "CWS 0",
        "CWT 15",
        "CTD 0",
        "CWSS 1500",
        "CHS 1",
        "CHO 0",
        "C232B 115200",
        "C485B 115200",
        "C422B 230400",
    ]


def test_deployment_command_list():
    """CETFP is only sent when deploying."""
    assert ValidatedCommandSet().get_deployment_command_list() == [
        "CETFP 2012/01/01,01:00:00.00"
    ]


def test_dict_roundtrip():
    """from_dict(to_dict()) keeps every value."""
    cmds = ValidatedCommandSet()
    cmds.cei = "00:00:02.50"
    cmds.chs = HeadingSource.SERIAL
    cmds.cerecord_single_ping = True
    assert ValidatedCommandSet.from_dict(cmds.to_dict()) == cmds


def test_build_command():
    """Value is optional; mnemonics may not contain spaces."""
    assert build_command(Mnemonic.CWT, "15") == "CWT 15"
    assert build_command(Mnemonic.CSHOW) == "CSHOW"
    with pytest.raises(ValueError):
        build_command("CW T", "15")
    with pytest.raises(ValueError):
        build_command("")


def test_build_indexed_command():
    """Subsystem commands carry the CEPO index in brackets."""
    assert build_indexed_command(Mnemonic.CWPBN, 1, 30) == "CWPBN[1] 30"
    with pytest.raises(ValueError):
        build_indexed_command(Mnemonic.CWPBN, -1, 30)


def test_build_stime():
    """STIME renders the date with a comma before the time."""
    assert build_stime(WHEN) == "STIME 2013/04/17,05:47:18"
    with pytest.raises(ValueError):
        build_stime(datetime(1999, 1, 1))


def test_direct_command_builders():
    """Direct commands are bare mnemonics."""
    assert build_break() == "BREAK"
    assert build_start_pinging() == "START"
    assert build_stop_pinging() == "STOP"
    assert build_cshow() == "CSHOW"
    assert build_csave() == "CSAVE"
    assert build_cdefault() == "CDEFAULT"
    assert build_sleep() == "SLEEP"
    assert build_dsdir() == "DSDIR"
    assert build_eng_pni() == "ENGPNI"
    assert build_eng_i2c_show() == "ENGI2CSHOW"


def test_terminate():
    """Each line ends with a carriage return."""
    assert terminate(["BREAK", "CSHOW"]) == b"BREAK\rCSHOW\r"


def test_format_float_fixed_point():
    """Floats render without exponent or trailing zeros."""
    assert format_float(15.0) == "15"
    assert format_float(12.654) == "12.654"
    assert format_float(0.042) == "0.042"
    assert format_float(0.00001) == "0.00001"
    assert format_float(1.5e-7) == "0.00000015"
    assert format_float(1e16) == "10000000000000000"


def test_enum_field_rejects_fractional_values():
    """Fractional numbers are not truncated into enum members."""
    cmds = ValidatedCommandSet()
    cmds.ceoutput = 2
    cmds.ceoutput = 1.5
    assert cmds.ceoutput == OutputMode.BINARY
    cmds.ceoutput = 2.0
    assert cmds.ceoutput == OutputMode.ASCII
