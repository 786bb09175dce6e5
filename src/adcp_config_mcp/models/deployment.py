"""Deployment planning options stored alongside a configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, ClassVar

from .fields import BoundedFields, enum_member, int_range, to_plain

UINT32_MAX = 2**32 - 1
INT64_MAX = 2**63 - 1


class BatteryType(IntEnum):
    """Battery pack, valued by its capacity in watt-hours."""

    ALKALINE_14D = 360
    ALKALINE_38C = 440
    ALKALINE_21D = 540
    LITHIUM_7DD = 800


class DeploymentMode(IntEnum):
    DIRECT_READING = 0
    SELF_CONTAINED = 1
    WAVES = 2
    RIVER = 3
    DVL = 4
    VM = 5


MIN_DURATION = 1
MIN_NUM_BATTERIES = 0
MIN_DEPTH_TO_BOTTOM = 0

DEFAULT_DURATION = 1
DEFAULT_NUM_BATTERIES = 1
DEFAULT_BATTERY_TYPE = BatteryType.ALKALINE_38C
DEFAULT_DEPTH_TO_BOTTOM = 100
DEFAULT_DEPLOYMENT_MODE = DeploymentMode.DIRECT_READING
DEFAULT_MEMORY_CARD_USED = 0
DEFAULT_MEMORY_CARD_TOTAL = 0


@dataclass
class DeploymentOptions(BoundedFields):
    """Duration (days), batteries, depth to bottom (m), mode and memory card usage (bytes)."""

    VALIDATORS: ClassVar[dict] = {
        "duration": int_range(MIN_DURATION, UINT32_MAX),
        "num_batteries": int_range(MIN_NUM_BATTERIES, UINT32_MAX),
        "battery_type": enum_member(BatteryType),
        "depth_to_bottom": int_range(MIN_DEPTH_TO_BOTTOM, UINT32_MAX),
        "deployment_mode": enum_member(DeploymentMode),
        "memory_card_used": int_range(0, INT64_MAX),
        "memory_card_total": int_range(0, INT64_MAX),
    }

    DEFAULTS: ClassVar[dict] = {
        "duration": DEFAULT_DURATION,
        "num_batteries": DEFAULT_NUM_BATTERIES,
        "battery_type": DEFAULT_BATTERY_TYPE,
        "depth_to_bottom": DEFAULT_DEPTH_TO_BOTTOM,
        "deployment_mode": DEFAULT_DEPLOYMENT_MODE,
        "memory_card_used": DEFAULT_MEMORY_CARD_USED,
        "memory_card_total": DEFAULT_MEMORY_CARD_TOTAL,
    }

    duration: int = DEFAULT_DURATION
    num_batteries: int = DEFAULT_NUM_BATTERIES
    battery_type: BatteryType = DEFAULT_BATTERY_TYPE
    depth_to_bottom: int = DEFAULT_DEPTH_TO_BOTTOM
    deployment_mode: DeploymentMode = DEFAULT_DEPLOYMENT_MODE
    memory_card_used: int = DEFAULT_MEMORY_CARD_USED
    memory_card_total: int = DEFAULT_MEMORY_CARD_TOTAL

    def default_for(self, name: str) -> Any:
        return self.DEFAULTS[name]

    def set_defaults(self) -> None:
        for name in self.VALIDATORS:
            setattr(self, name, None)

    def to_dict(self) -> dict:
        return {name: to_plain(getattr(self, name)) for name in self.VALIDATORS}

    @classmethod
    def from_dict(cls, data: dict) -> DeploymentOptions:
        options = cls()
        for name in cls.VALIDATORS:
            if name in data:
                setattr(options, name, data[name])
        return options


def battery_list() -> list[BatteryType]:
    """Battery types in the order they are offered for selection."""
    return [
        BatteryType.ALKALINE_38C,
        BatteryType.ALKALINE_14D,
        BatteryType.ALKALINE_21D,
        BatteryType.LITHIUM_7DD,
    ]
