# urkinematics

A library for working with the kinematics and the binary protocol data of
Universal Robots arms.

The centrepiece is a calibration correction. The factory calibration of a UR
arm is reported as Denavit–Hartenberg parameters which, taken literally, can
place the upper arm and forearm segments metres away from where they
physically are. `Calibration` rebuilds the kinematic chain so that the
shoulder and elbow offsets are zero while the forward kinematics stay the
same, and exports the result as a YAML-ready mapping of link poses.

## Modules

- `urkinematics.calibration` — `DHSegment`, `DHRobot` and `Calibration`
  (chain building, correction, forward kinematics, YAML-ready export).
  `LINK_NAMES` lists the six link names used in the export.
- `urkinematics.bin_parser` — `BinParser` for reading big-endian packages
  (`ValueKind` names the field types), plus `serialize` and
  `serialize_string` for writing values.
- `urkinematics.pipeline` — producer/consumer plumbing: the abstract
  `Package`, `Parser`, `Producer` and `Consumer`, plus `MultiConsumer`,
  `ShellConsumer`, `Notifier` and a threaded `Pipeline` with a bounded queue
  of 32 packages.
- `urkinematics.calibration_consumer` — `CalibrationConsumer`, which turns a
  package carrying DH parameters into corrected calibration parameters.
- `urkinematics.calibration_correction` — `ParameterMissingError`,
  `get_required_parameter` and `write_calibration_data` for storing the
  result as a YAML file.
- `urkinematics.controller_stopper` — `ControllerInfo` and
  `ControllerStopper`, which stops every running controller except a
  configured set when the robot stops and starts them again when it resumes.
- `urkinematics.datatypes` — `RobotMode`, `SafetyMode`, `SafetyStatus`,
  `robot_mode_string`, `safety_mode_string`, `safety_status_string`,
  `VersionInformation` and `format_array`.
- `urkinematics.tool_communication` — `ToolVoltage`, `Parity` and the
  range-checked `Limited` value.
- `urkinematics.exceptions` — `UrException` and its subclasses
  `VersionMismatch`, `ToolCommNotAvailable` and `TimeoutException`.

## Correcting a calibration

```python
import math

from urkinematics.calibration import Calibration, DHRobot, DHSegment

# An ideal UR10: d, a, theta, alpha for each joint
robot = DHRobot([
    DHSegment(0.1273, 0.0, 0.0, math.pi / 2),
    DHSegment(0.0, -0.612, 0.0, 0.0),
    DHSegment(0.0, -0.5723, 0.0, 0.0),
    DHSegment(0.163941, 0.0, 0.0, math.pi / 2),
    DHSegment(0.1157, 0.0, 0.0, -math.pi / 2),
    DHSegment(0.0922, 0.0, 0.0, 0.0),
])

calibration = Calibration(robot)
joints = [0.1, -0.4, 0.9, 0.0, 0.3, 0.0]
before = calibration.calc_forward_kinematics(joints, 6)

calibration.correct_chain()
after = calibration.calc_forward_kinematics(joints, 6)
# `before` and `after` are 4x4 numpy arrays describing the same tool pose

params = calibration.to_yaml()
print(params["kinematics"]["upper_arm"])
```

Factory deltas are added segment by segment: `robot + deltas` gives a new
`DHRobot` whose parameters are the element-wise sums; robots with different
numbers of segments raise `ValueError`.

`calc_forward_kinematics` takes exactly six joint values and a link number
from 0 to 6 (counting from 1; 0 gives the identity).

`to_yaml` returns a nested dict under the key `kinematics` with one entry per
link (`shoulder`, `upper_arm`, `forearm`, `wrist_1`, `wrist_2`, `wrist_3`),
each holding `x`, `y`, `z`, `roll`, `pitch` and `yaw`.

To store it:

```python
from urkinematics.calibration_correction import write_calibration_data

path = write_calibration_data(params, "calibration.yaml")
```

It returns the absolute path written and overwrites an existing file.

## Reading binary data

```python
from urkinematics.bin_parser import BinParser, ValueKind, serialize

data = serialize(ValueKind.UINT32, 5) + serialize(ValueKind.DOUBLE, 1.5)
parser = BinParser(data)
assert parser.parse(ValueKind.UINT32) == 5
with parser.sub_parser(8) as sub:
    assert sub.parse(ValueKind.DOUBLE) == 1.5
assert parser.empty()
```

A sub-parser hands its position back to its parent when it is closed.

## Consuming kinematics packages

`CalibrationConsumer.consume` accepts any package that has `dh_theta`,
`dh_a`, `dh_d` and `dh_alpha` sequences and a `to_hash()` method; other
packages are ignored. Once such a package was consumed, `is_calibrated` is
true and `calibration_parameters()` returns the corrected parameters with the
package's hash stored under `kinematics.hash`.

## Stopping controllers

`ControllerStopper` works with any object providing
`list_controllers()` (returning `ControllerInfo` items) and
`switch_controllers(start_controllers, stop_controllers)` (returning whether
the switch succeeded). By default `joint_state_controller` is never stopped.
Call `robot_running_callback(running)` whenever the robot's running state is
reported; only changes trigger a switch.

## Errors

Invalid input is reported with exceptions: reading past the end of a buffer
raises `UrException`; setting a `Limited` value out of range raises
`ValueError`; unknown mode values passed to the `*_string` helpers raise
`ValueError`; asking a `CalibrationConsumer` for parameters before any
kinematics data arrived raises `UrException`; a missing required parameter
raises `ParameterMissingError`; `write_calibration_data` raises `ValueError`
for missing data and `FileNotFoundError` when the target directory does not
exist.

## What this package does not do

It does not open network connections to a robot: there is no socket stream,
no concrete primary-interface parser and no package classes for the robot's
messages, so packages fed to a `Pipeline` or a `CalibrationConsumer` have to
come from your own `Producer`, `Parser` and `Package` implementations. It
does not talk to a controller manager itself; you supply that object. It
provides no command-line tool.

## Testing

The test suite uses pytest and is installed with the `test` extra:

```
pip install -e .[test]
pytest
```