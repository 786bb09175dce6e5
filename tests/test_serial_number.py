"""Tests for serial number decoding and the subsystem catalog."""

import pytest

from adcp_config_mcp.errors import MalformedInput
from adcp_config_mcp.models.serial_number import DVL_SERIAL, SerialNumber
from adcp_config_mcp.models.subsystem import Frequency, Subsystem, describe_code, is_known_code


def test_fields():
    """Base hardware, subsystems, spare and system serial slices."""
    serial = SerialNumber("01230000000000000000000000000004")
    assert serial.base_hardware == "01"
    assert serial.subsystem_field == "230000000000000"
    assert serial.spare == "000000000"
    assert serial.system_serial == "000004"
    assert serial.subsystems_string() == "23"


def test_inventory_order_and_index():
    """Subsystems keep serial order; index is the ordinal among distinct codes."""
    serial = SerialNumber("01340000000000000000000000000001")
    assert serial.subsystems == (Subsystem("3", 0), Subsystem("4", 1))


def test_inventory_deduplicates():
    """A code listed twice appears once, at its first position."""
    serial = SerialNumber("01232000000000000000000000000001")
    assert [ss.code for ss in serial.subsystems] == ["2", "3"]
    assert serial.find("3") == Subsystem("3", 1)


def test_empty_serial_has_no_subsystems():
    """The default serial number has no subsystems."""
    serial = SerialNumber()
    assert serial.subsystems == ()
    assert serial.find("2") is None


def test_dvl_serial():
    """The DVL serial number decodes to a single H subsystem."""
    serial = SerialNumber(DVL_SERIAL)
    assert serial.subsystems_string() == "H"
    assert serial.system_serial == "999999"


def test_wrong_length_raises():
    """Serial numbers must be exactly 32 characters."""
    with pytest.raises(MalformedInput):
        SerialNumber("0123")
    with pytest.raises(MalformedInput):
        SerialNumber("0123000000000000000000000000000$")


def test_with_and_without_subsystem():
    """Adding and removing codes returns new serial numbers."""
    serial = SerialNumber("01200000000000000000000000000004")
    added = serial.with_subsystem("3")
    assert added.subsystems_string() == "23"
    assert serial.subsystems_string() == "2"

    removed = added.without_subsystem("2")
    assert removed.subsystems_string() == "3"
    assert removed.find("3") == Subsystem("3", 0)


def test_description():
    """Description lists each subsystem and the system serial."""
    serial = SerialNumber("01230000000000000000000000000004")
    assert serial.description() == (
        "0: 1.2 MHz 4 beam 20 degree piston; "
        "1: 600 kHz 4 beam 20 degree piston; ADCP: 000004"
    )


def test_subsystem_catalog():
    """Subsystem properties come from the code catalog."""
    ss = Subsystem("3", 1)
    assert ss.frequency == Frequency.KHZ_600
    assert str(ss) == "[1] 600 kHz 4 beam 20 degree piston"
    assert Subsystem("F").is_vertical_beam
    assert not Subsystem("2").is_vertical_beam
    assert Subsystem("M").frequency == Frequency.KHZ_38


def test_subsystem_code_must_be_one_character():
    """Multi-character codes should raise."""
    with pytest.raises(ValueError):
        Subsystem("23")


def test_subsystem_at_slot():
    """Raw slots resolve to inventory entries; empty slots give None."""
    serial = SerialNumber("01230000000000000000000000000004")
    assert serial.subsystem_at(1) == Subsystem("3", 1)
    assert serial.subsystem_at(2) is None
    assert serial.subsystem_at(15) is None
    assert serial.has("2")
    assert not serial.has("4")


def test_describe_unknown_code():
    """Codes outside the catalog are described as unknown."""
    assert describe_code("2") == "1.2 MHz 4 beam 20 degree piston"
    assert describe_code("~").startswith("Unknown subsystem")
    assert is_known_code("e")
    assert not is_known_code("0")
