"""MCP server entry point for ADCP configuration.

Exposes tools, resources, and prompts via the Model Context Protocol
using the official Python MCP SDK with stdio transport.  The server keeps
one configuration session in memory; it never talks to an instrument, it
only prepares command lists and decodes pasted responses.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .errors import CepoError, MalformedInput
from .models.configuration import CepoAllocator
from .models.deployment import battery_list
from .models.firmware import Firmware
from .models.serial_number import SerialNumber
from .models.subsystem import SUBSYSTEM_CATALOG, Subsystem
from .protocol.commands import Mnemonic
from .protocol.parser import parse_response

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "adcp-config",
    instructions="Prepare ADCP command lists and decode instrument responses",
)

# Global session state
_session: CepoAllocator = CepoAllocator()


def _config_summary(allocator: CepoAllocator) -> list[dict[str, Any]]:
    return [
        {
            "label": allocator.label(config),
            "code": config.subsystem.code,
            "subsystem_index": config.subsystem.index,
            "cepo_index": config.cepo_index,
            "description": str(config),
        }
        for config in allocator.subsystem_config_list()
    ]


def _result_to_dict(result: Any) -> Any:
    if hasattr(result, "to_dict"):
        return result.to_dict()
    if hasattr(result, "isoformat"):
        return result.isoformat()
    return result


# ─── SESSION TOOLS ───────────────────────────────────────────────────

@mcp.tool()
def set_serial_number(serial_number: str) -> dict[str, Any]:
    """Set the instrument serial number for the session.

    Changing the serial number clears the CEPO and every configuration.

    Args:
        serial_number: 32-character serial number, e.g.
            "01230000000000000000000000000004".
    """
    try:
        serial = SerialNumber(serial_number)
    except MalformedInput as exc:
        return {"error": str(exc)}
    _session.serial_number = serial
    return serial.to_dict()


@mcp.tool()
def set_cepo(cepo: str) -> dict[str, Any]:
    """Allocate one configuration per CEPO character.

    Every character must be a subsystem code present in the serial number;
    otherwise nothing is allocated and the CEPO is cleared.

    Args:
        cepo: Subsystem codes in ensemble ping order, e.g. "2323".
    """
    configs = _session.set_cepo(cepo)
    if not configs:
        return {
            "error": f"CEPO {cepo!r} does not match subsystems "
                     f"{_session.serial_number.subsystems_string()!r}",
            "cepo": _session.cepo,
        }
    return {"cepo": _session.cepo, "configurations": _config_summary(_session)}


@mcp.tool()
def validate_cepo(cepo: str) -> dict[str, Any]:
    """Check a CEPO against the session serial number without changing anything."""
    return {"cepo": cepo, "valid": _session.validate_cepo(cepo)}


@mcp.tool()
def add_configuration(code: str) -> dict[str, Any]:
    """Append a configuration for a subsystem to the end of the CEPO.

    Args:
        code: Subsystem code character, e.g. "2".
    """
    try:
        config = _session.add_configuration(Subsystem(code=code))
    except (CepoError, ValueError) as exc:
        return {"error": str(exc)}
    return {
        "added": str(config),
        "cepo": _session.cepo,
        "configurations": _config_summary(_session),
    }


@mcp.tool()
def remove_configuration(cepo_index: int) -> dict[str, Any]:
    """Remove the configuration at a CEPO position; later ones move down.

    Args:
        cepo_index: Position within the CEPO string (0-based).
    """
    config = _session.get_by_index(cepo_index)
    if config is None or not _session.remove_configuration(config):
        return {"error": f"No configuration at CEPO index {cepo_index}"}
    return {"cepo": _session.cepo, "configurations": _config_summary(_session)}


@mcp.tool()
def list_configurations() -> dict[str, Any]:
    """List the allocated configurations in CEPO order."""
    return {
        "serial_number": _session.serial_number.value,
        "cepo": _session.cepo,
        "configurations": _config_summary(_session),
    }


# ─── COMMAND TOOLS ───────────────────────────────────────────────────

@mcp.tool()
def set_command(name: str, value: str) -> dict[str, Any]:
    """Set an instrument-wide command.

    Out-of-range values are replaced by the command's default; the
    response reports the value actually stored.

    Args:
        name: Field name, e.g. "cwt", "cei", "c232b", "mode".
        value: New value as text, e.g. "15.5", "00:00:02.00", "115200".
    """
    commands = _session.commands
    if name not in commands.VALIDATORS or name == "cepo":
        return {"error": f"Unknown command field {name!r}"}
    setattr(commands, name, value)
    stored = commands.to_dict()[name]
    return {"name": name, "requested": value, "stored": stored}


@mcp.tool()
def set_subsystem_command(cepo_index: int, name: str, value: str) -> dict[str, Any]:
    """Set a command on one subsystem configuration.

    Args:
        cepo_index: Position of the configuration within the CEPO.
        name: Field name, e.g. "cwpbn", "cwpbb_lag_length", "cbton".
        value: New value as text.
    """
    config = _session.get_by_index(cepo_index)
    if config is None:
        return {"error": f"No configuration at CEPO index {cepo_index}"}
    if name not in config.commands.VALIDATORS:
        return {"error": f"Unknown subsystem command field {name!r}"}
    setattr(config.commands, name, value)
    stored = config.commands.to_dict()[name]
    return {"cepo_index": cepo_index, "name": name, "requested": value, "stored": stored}


@mcp.tool()
def set_deployment_option(name: str, value: str) -> dict[str, Any]:
    """Set a deployment planning option.

    Out-of-range values are replaced by the option's default.

    Args:
        name: Option name, e.g. "duration", "num_batteries", "battery_type",
            "depth_to_bottom", "deployment_mode".
        value: New value as text, e.g. "30", "lithium_7dd", "self_contained".
    """
    options = _session.deployment_options
    if name not in options.VALIDATORS:
        return {"error": f"Unknown deployment option {name!r}"}
    setattr(options, name, value)
    stored = options.to_dict()[name]
    return {"name": name, "requested": value, "stored": stored}


@mcp.tool()
def get_command_list() -> dict[str, Any]:
    """Render every command line to send to the instrument, in order."""
    commands = _session.get_command_list()
    return {"commands": commands, "count": len(commands)}


# ─── DECODING TOOLS ──────────────────────────────────────────────────

@mcp.tool()
def decode_response(command: str, text: str) -> dict[str, Any]:
    """Decode a response captured from the instrument.

    Args:
        command: Command that produced the text: BREAK, STIME, ENGPNI,
            ENGI2CSHOW, DSDIR or CSHOW.
        text: Raw response text.
    """
    global _session
    try:
        result = parse_response(command, text, _session.serial_number)
    except MalformedInput as exc:
        return {"error": str(exc)}
    if isinstance(result, str):
        return {"error": f"No decoder for {command!r}"}
    if isinstance(result, CepoAllocator):
        _session = result
        return {"loaded": True, "configuration": result.to_dict()}
    return {"command": command.strip().upper(), "result": _result_to_dict(result)}


@mcp.tool()
def decode_firmware(hex_bytes: str) -> dict[str, Any]:
    """Decode a 4-byte firmware token.

    Args:
        hex_bytes: Hex string, e.g. "00020533" (major, minor, revision, code).
    """
    try:
        firmware = Firmware.decode(bytes.fromhex(hex_bytes))
    except ValueError as exc:
        return {"error": str(exc)}
    result = firmware.to_dict()
    result["subsystem"] = firmware.subsystem(_session.serial_number).to_dict()
    return result


@mcp.tool()
def encode_firmware(major: int, minor: int, revision: int, code: str) -> dict[str, Any]:
    """Encode a firmware version into its 4-byte token.

    Args:
        major: Major version 0-255.
        minor: Minor version 0-255.
        revision: Revision 0-255.
        code: Subsystem code character.
    """
    if len(code) != 1:
        return {"error": "Subsystem code must be one character"}
    try:
        firmware = Firmware(ord(code), major, minor, revision)
    except ValueError as exc:
        return {"error": str(exc)}
    return {"hex": firmware.encode().hex(), "firmware": str(firmware)}


# ─── IMPORT / EXPORT TOOLS ───────────────────────────────────────────

@mcp.tool()
def export_configuration() -> dict[str, Any]:
    """Export the whole session configuration as JSON text."""
    return {"json": _session.to_json()}


@mcp.tool()
def import_configuration(json_text: str) -> dict[str, Any]:
    """Replace the session configuration with previously exported JSON."""
    global _session
    try:
        _session = CepoAllocator.from_json(json_text)
    except (ValueError, TypeError, KeyError) as exc:
        return {"error": str(exc)}
    return {"cepo": _session.cepo, "configurations": _config_summary(_session)}


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("adcp://configuration")
def resource_configuration() -> str:
    """Full session configuration."""
    return json.dumps(_session.to_dict())


@mcp.resource("adcp://commands/list")
def resource_command_list() -> str:
    """Command lines for the current configuration."""
    return json.dumps({"commands": _session.get_command_list()})


@mcp.resource("adcp://subsystems/catalog")
def resource_subsystem_catalog() -> str:
    """Known subsystem codes with descriptions and frequencies."""
    subsystems = [
        {"code": code, "description": desc, "frequency_khz": int(freq)}
        for code, (desc, freq) in SUBSYSTEM_CATALOG.items()
    ]
    return json.dumps({"subsystems": subsystems, "count": len(subsystems)})


@mcp.resource("adcp://deployment/batteries")
def resource_batteries() -> str:
    """Battery types available for deployment planning."""
    batteries = [{"name": b.name, "watt_hours": int(b)} for b in battery_list()]
    return json.dumps({"batteries": batteries})


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def plan_deployment(goal: str) -> str:
    """Guide the AI through configuring the instrument for a deployment.

    Args:
        goal: What the deployment should measure, e.g. "river discharge".
    """
    return f"""Configure the ADCP for: {goal}
Steps:
- Paste the {Mnemonic.BREAK} banner into decode_response to learn the serial number
- Call set_serial_number, then set_cepo with the subsystems to ping
- Adjust bin size (cwpbs), bin count (cwpbn) and blank (cwpbl) per subsystem
- Set salinity (cws), temperature (cwt) and ensemble interval (cei)
- Call get_command_list and review every line before sending

Use the adcp://subsystems/catalog resource to pick subsystem codes."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
