"""Data models for the instrument configuration and its command sets."""

from .time_value import TimeValue
from .subsystem import Subsystem, Frequency
from .serial_number import SerialNumber
from .firmware import Firmware, firmware_version_list
from .commands import ValidatedCommandSet
from .subsystem_commands import SubsystemCommandSet
from .deployment import DeploymentOptions
from .configuration import AdcpSubsystemConfig, CepoAllocator
