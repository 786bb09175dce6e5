"""CEPO subsystem configuration allocation.

The CEPO string names, one character per slot, which subsystem each
configuration uses.  With serial number ``01230000000000000000000000000004``
(subsystems ``2`` and ``3``) the CEPO ``"223"`` allocates three
configurations::

    (Subsystem('2', 0), 0)  (Subsystem('2', 0), 1)  (Subsystem('3', 1), 2)

Each configuration is keyed by ``(subsystem, cepo_index)``; the index is its
character position in the CEPO string.  At all times
``len(cepo) == len(subsystem_configs)`` and ``cepo[c.cepo_index] ==
c.subsystem.code``.

The allocator does no locking; callers sharing one across threads must
serialize mutations.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime

from ..errors import CepoError, MalformedInput
from .commands import ValidatedCommandSet
from .deployment import DeploymentOptions
from .serial_number import SerialNumber
from .subsystem import Subsystem
from .subsystem_commands import SubsystemCommandSet

logger = logging.getLogger(__name__)

ConfigKey = tuple[Subsystem, int]


class AdcpSubsystemConfig:
    """One allocated configuration slot: a subsystem, its CEPO position and commands."""

    def __init__(self, subsystem: Subsystem, cepo_index: int) -> None:
        self.subsystem = subsystem
        self.commands = SubsystemCommandSet(subsystem, cepo_index)
        self._cepo_index = cepo_index

    @property
    def cepo_index(self) -> int:
        return self._cepo_index

    @cepo_index.setter
    def cepo_index(self, value: int) -> None:
        self._cepo_index = value
        self.commands.cepo_index = value

    @property
    def key(self) -> ConfigKey:
        return (self.subsystem, self._cepo_index)

    def to_dict(self) -> dict:
        return {
            "subsystem": self.subsystem.to_dict(),
            "cepo_index": self._cepo_index,
            "description": str(self),
            "commands": self.commands.to_dict(),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AdcpSubsystemConfig):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"[{self._cepo_index}] {self.subsystem.description}"

    def __repr__(self) -> str:
        return (
            f"AdcpSubsystemConfig(subsystem={self.subsystem!r}, "
            f"cepo_index={self._cepo_index})"
        )


class CepoAllocator:
    """ADCP configuration: instrument commands plus one config per CEPO character.

    Args:
        serial_number: Serial number whose inventory the CEPO is checked
            against.  Defaults to an empty serial (no subsystems).
        cepo: Optional CEPO to allocate immediately.
    """

    def __init__(self, serial_number: SerialNumber | None = None, cepo: str | None = None) -> None:
        self._cepo = ""
        self.commands = ValidatedCommandSet()
        self.deployment_options = DeploymentOptions()
        self.subsystem_configs: dict[ConfigKey, AdcpSubsystemConfig] = {}
        self._serial_number = serial_number or SerialNumber()
        if cepo is not None:
            self.set_cepo(cepo, self._serial_number)

    @classmethod
    def with_default_cepo(cls, serial_number: SerialNumber) -> CepoAllocator:
        """One configuration per fitted subsystem, in serial number order."""
        return cls(serial_number, serial_number.subsystems_string())

    # ─── STATE ─────────────────────────────────────────────────────────

    @property
    def cepo(self) -> str:
        return self._cepo

    @property
    def commands(self) -> ValidatedCommandSet:
        """Instrument commands; their CEPO field always mirrors :attr:`cepo`."""
        self._commands.cepo = self._cepo
        return self._commands

    @commands.setter
    def commands(self, value: ValidatedCommandSet) -> None:
        self._commands = value
        value.cepo = self._cepo

    def _store_cepo(self, cepo: str) -> None:
        self._cepo = cepo
        self._commands.cepo = cepo

    @property
    def serial_number(self) -> SerialNumber:
        return self._serial_number

    @serial_number.setter
    def serial_number(self, value: SerialNumber) -> None:
        """Changing the serial number drops every configuration."""
        self._serial_number = value
        self._reset()

    def _reset(self) -> None:
        self.subsystem_configs.clear()
        self._store_cepo("")

    def __len__(self) -> int:
        return len(self.subsystem_configs)

    def subsystem_config_list(self) -> list[AdcpSubsystemConfig]:
        """Configurations in CEPO order."""
        return sorted(self.subsystem_configs.values(), key=lambda c: c.cepo_index)

    # ─── CEPO OPERATIONS ───────────────────────────────────────────────

    def validate_cepo(self, cepo: str, serial_number: SerialNumber | None = None) -> bool:
        """True if ``cepo`` is non-empty and every code is fitted in the serial number."""
        serial_number = serial_number or self._serial_number
        if not isinstance(cepo, str) or not cepo:
            return False
        return all(serial_number.has(code) for code in cepo)

    def set_cepo(
        self, cepo: str, serial_number: SerialNumber | None = None
    ) -> dict[ConfigKey, AdcpSubsystemConfig]:
        """Replace every configuration with one per CEPO character.

        All or nothing: if any character is not a fitted subsystem (or the
        CEPO is empty) the configurations are cleared, the CEPO becomes
        ``""`` and an empty mapping is returned.

        Args:
            cepo: Subsystem codes in configuration order, e.g. ``"2323"``.
            serial_number: Serial number to check against; replaces the
                stored one.  Defaults to the stored serial number.

        Returns:
            The new configurations keyed by ``(subsystem, cepo_index)``.
        """
        if serial_number is not None:
            self._serial_number = serial_number
        if not self.validate_cepo(cepo, self._serial_number):
            logger.warning(
                "Rejected CEPO %r for subsystems %r",
                cepo, self._serial_number.subsystems_string(),
            )
            self._reset()
            return {}

        self.subsystem_configs.clear()
        for index, code in enumerate(cepo):
            config = AdcpSubsystemConfig(self._serial_number.find(code), index)
            self.subsystem_configs[config.key] = config
        self._store_cepo(cepo)
        logger.info("CEPO set to %r (%d configurations)", cepo, len(cepo))
        return dict(self.subsystem_configs)

    def exists(self, subsystem: Subsystem, cepo_index: int) -> bool:
        return (subsystem, cepo_index) in self.subsystem_configs

    def get(self, subsystem: Subsystem, cepo_index: int) -> AdcpSubsystemConfig | None:
        return self.subsystem_configs.get((subsystem, cepo_index))

    def get_by_index(self, cepo_index: int) -> AdcpSubsystemConfig | None:
        """Configuration at a CEPO position, whatever its subsystem."""
        for config in self.subsystem_configs.values():
            if config.cepo_index == cepo_index:
                return config
        return None

    def add_configuration(self, subsystem: Subsystem) -> AdcpSubsystemConfig:
        """Append a configuration for ``subsystem`` to the end of the CEPO.

        Raises:
            CepoError: If the subsystem is not fitted in the serial number.
        """
        fitted = self._serial_number.find(subsystem.code)
        if fitted is None:
            raise CepoError(
                f"Subsystem {subsystem.code!r} is not in serial number {self._serial_number}"
            )
        config = AdcpSubsystemConfig(fitted, len(self.cepo))
        self.subsystem_configs[config.key] = config
        self._store_cepo(self._cepo + fitted.code)
        logger.info("Added %s, CEPO now %r", config, self.cepo)
        return config

    def remove_configuration(self, config: AdcpSubsystemConfig) -> bool:
        """Remove a configuration and close the gap in the CEPO indexes.

        Returns:
            False, with nothing changed, if the configuration is not one
            currently held by this allocator.  A handle to an already
            removed configuration is never matched to the entry that took
            over its index.
        """
        if self.subsystem_configs.get(config.key) is not config:
            return False

        removed = self.subsystem_configs.pop(config.key)
        remaining = self.subsystem_config_list()
        self.subsystem_configs.clear()
        for index, other in enumerate(remaining):
            other.cepo_index = index
            self.subsystem_configs[other.key] = other

        cepo = self._cepo
        self._store_cepo(cepo[:removed.cepo_index] + cepo[removed.cepo_index + 1:])
        logger.info("Removed %s, CEPO now %r", removed, self.cepo)
        return True

    def occurrence(self, config: AdcpSubsystemConfig) -> int:
        """How many earlier configurations use the same subsystem."""
        return sum(
            1 for other in self.subsystem_configs.values()
            if other.subsystem == config.subsystem and other.cepo_index < config.cepo_index
        )

    def label(self, config: AdcpSubsystemConfig) -> str:
        """Display label such as ``"2_1"`` (code, occurrence of that code)."""
        return f"{config.subsystem.code}_{self.occurrence(config)}"

    # ─── COMMANDS ──────────────────────────────────────────────────────

    def get_command_list(self, when: datetime | None = None) -> list[str]:
        """Instrument commands followed by every configuration's commands in CEPO order."""
        commands = self.commands.get_command_list(when)
        for config in self.subsystem_config_list():
            commands.extend(config.commands.get_command_list())
        return commands

    # ─── SERIALIZATION ─────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "serial_number": self._serial_number.value,
            "cepo": self.cepo,
            "commands": self.commands.to_dict(),
            "deployment_options": self.deployment_options.to_dict(),
            "subsystem_configs": [c.to_dict() for c in self.subsystem_config_list()],
        }

    @classmethod
    def from_dict(cls, data: dict) -> CepoAllocator:
        """Rebuild a configuration from :meth:`to_dict` output.

        Raises:
            MalformedInput: If a stored configuration does not match the CEPO.
        """
        allocator = cls(SerialNumber(data["serial_number"]))
        allocator.commands = ValidatedCommandSet.from_dict(data.get("commands", {}))
        allocator.deployment_options = DeploymentOptions.from_dict(
            data.get("deployment_options", {})
        )
        cepo = data.get("cepo", "")
        if cepo:
            allocator.set_cepo(cepo)
        else:
            allocator._reset()

        for entry in data.get("subsystem_configs", []):
            subsystem = Subsystem.from_dict(entry["subsystem"])
            config = allocator.get(subsystem, entry["cepo_index"])
            if config is None:
                raise MalformedInput(
                    f"Configuration {subsystem.code!r}[{entry['cepo_index']}] "
                    f"does not match CEPO {cepo!r}"
                )
            config.commands.update_from_dict(entry.get("commands", {}))
        return allocator

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, text: str) -> CepoAllocator:
        """Rebuild from :meth:`to_json` text.

        Raises:
            MalformedInput: If the text is not valid configuration JSON.
            ValueError: If a stored subsystem code is not one character.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedInput(f"Invalid configuration JSON: {exc}") from exc
        if not isinstance(data, dict) or not isinstance(data.get("serial_number"), str):
            raise MalformedInput("Configuration JSON must be an object with a serial_number string")
        try:
            return cls.from_dict(data)
        except (KeyError, TypeError, AttributeError) as exc:
            raise MalformedInput(f"Invalid configuration JSON: {exc!r}") from exc

    def __repr__(self) -> str:
        return (
            f"CepoAllocator(serial_number={self._serial_number.value!r}, "
            f"cepo={self.cepo!r})"
        )
