import pytest

from urkinematics.datatypes import (
    RobotMode,
    SafetyMode,
    SafetyStatus,
    VersionInformation,
    format_array,
    robot_mode_string,
    safety_mode_string,
    safety_status_string,
)


def test_robot_mode_string_known():
    assert robot_mode_string(RobotMode.RUNNING) == "RUNNING"
    assert robot_mode_string(-1) == "NO_CONTROLLER"


@pytest.mark.parametrize("mode", list(RobotMode))
def test_robot_mode_string_matches_name(mode):
    assert robot_mode_string(int(mode)) == mode.name


@pytest.mark.parametrize("mode", list(SafetyMode))
def test_safety_mode_string_matches_name(mode):
    assert safety_mode_string(mode) == mode.name


@pytest.mark.parametrize("status", list(SafetyStatus))
def test_safety_status_string_matches_name(status):
    assert safety_status_string(status) == status.name


def test_safety_status_extended_values():
    assert safety_status_string(13) == "SYSTEM_THREE_POSITION_ENABLING_STOP"
    with pytest.raises(ValueError, match="Unknown safety mode: 13"):
        safety_mode_string(13)


def test_unknown_values_raise():
    with pytest.raises(ValueError, match="Unknown robot mode: 42"):
        robot_mode_string(42)
    with pytest.raises(ValueError, match="Unknown safety status: 0"):
        safety_status_string(0)


def test_format_array():
    assert format_array([1, 2, 3]) == "[1, 2, 3]"
    assert format_array([]) == "[]"
    assert format_array((0.5,)) == "[0.5]"


def test_version_information():
    assert str(VersionInformation(5, 4, 3, 2)) == "5.4.3-2"
    default = VersionInformation()
    assert (default.major, default.minor, default.bugfix, default.build) == (0, 0, 0, 0)