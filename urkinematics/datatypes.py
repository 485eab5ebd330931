"""Robot mode enumerations, version information and formatting helpers."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum


class RobotMode(IntEnum):
    NO_CONTROLLER = -1
    DISCONNECTED = 0
    CONFIRM_SAFETY = 1
    BOOTING = 2
    POWER_OFF = 3
    POWER_ON = 4
    IDLE = 5
    BACKDRIVE = 6
    RUNNING = 7
    UPDATING_FIRMWARE = 8


class SafetyMode(IntEnum):
    NORMAL = 1
    REDUCED = 2
    PROTECTIVE_STOP = 3
    RECOVERY = 4
    SAFEGUARD_STOP = 5
    SYSTEM_EMERGENCY_STOP = 6
    ROBOT_EMERGENCY_STOP = 7
    VIOLATION = 8
    FAULT = 9
    VALIDATE_JOINT_ID = 10
    UNDEFINED_SAFETY_MODE = 11


class SafetyStatus(IntEnum):
    """Safety status; only reported by newer controller software."""

    NORMAL = 1
    REDUCED = 2
    PROTECTIVE_STOP = 3
    RECOVERY = 4
    SAFEGUARD_STOP = 5
    SYSTEM_EMERGENCY_STOP = 6
    ROBOT_EMERGENCY_STOP = 7
    VIOLATION = 8
    FAULT = 9
    VALIDATE_JOINT_ID = 10
    UNDEFINED_SAFETY_MODE = 11
    AUTOMATIC_MODE_SAFEGUARD_STOP = 12
    SYSTEM_THREE_POSITION_ENABLING_STOP = 13


def _enum_name(enum_type: type[IntEnum], value: int, label: str) -> str:
    try:
        return enum_type(int(value)).name
    except ValueError:
        raise ValueError(f"Unknown {label}: {int(value)}") from None


def robot_mode_string(mode: int) -> str:
    """Return the name of a robot mode; raise ValueError for unknown values."""
    return _enum_name(RobotMode, mode, "robot mode")


def safety_mode_string(mode: int) -> str:
    """Return the name of a safety mode; raise ValueError for unknown values."""
    return _enum_name(SafetyMode, mode, "safety mode")


def safety_status_string(status: int) -> str:
    """Return the name of a safety status; raise ValueError for unknown values."""
    return _enum_name(SafetyStatus, status, "safety status")


def _format_item(value: object) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def format_array(item: Iterable[object]) -> str:
    """Format a sequence as ``[a, b, c]``."""
    return "[" + ", ".join(_format_item(value) for value in item) + "]"


@dataclass
class VersionInformation:
    """A robot's software version."""

    major: int = 0
    minor: int = 0
    bugfix: int = 0
    build: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.bugfix}-{self.build}"