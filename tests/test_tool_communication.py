import pytest

from urkinematics.tool_communication import Limited, Parity, ToolVoltage


def test_enum_values():
    assert ToolVoltage(12) is ToolVoltage.VOLTAGE_12V
    assert ToolVoltage(24) is ToolVoltage.VOLTAGE_24V
    assert Parity(2) is Parity.EVEN


def test_limited_starts_at_lower():
    value = Limited(1, 2)
    assert value.data == 1
    assert (value.lower, value.upper) == (1, 2)


def test_limited_accepts_bounds():
    value = Limited(1.0, 40.0)
    value.data = 40.0
    assert value.data == 40.0
    value.data = 1.0
    assert value.data == 1.0


@pytest.mark.parametrize("bad", [0, 3])
def test_limited_rejects_out_of_range(bad):
    value = Limited(1, 2)
    with pytest.raises(ValueError, match="Given data is out of range"):
        value.data = bad
    assert value.data == 1