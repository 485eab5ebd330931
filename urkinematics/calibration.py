"""Kinematic chain built from DH parameters, with correction of calibrated UR arms.

Universal Robots ship a factory calibration of their DH parameters. Those
parameters can describe a chain in which the upper arm and forearm segments are
drawn far away from their physical position. :class:`Calibration` turns such a
chain into an equivalent one whose shoulder and elbow offsets are zero.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

LINK_NAMES: tuple[str, ...] = (
    "shoulder",
    "upper_arm",
    "forearm",
    "wrist_1",
    "wrist_2",
    "wrist_3",
)


@dataclass(frozen=True)
class DHSegment:
    """One DH-parametrized link."""

    d: float = 0.0
    a: float = 0.0
    theta: float = 0.0
    alpha: float = 0.0

    def __add__(self, other: "DHSegment") -> "DHSegment":
        if not isinstance(other, DHSegment):
            return NotImplemented
        return DHSegment(
            self.d + other.d,
            self.a + other.a,
            self.theta + other.theta,
            self.alpha + other.alpha,
        )


@dataclass
class DHRobot:
    """A robot described by a list of DH segments."""

    segments: list[DHSegment] = field(default_factory=list)
    delta_theta_correction2: float = 0.0
    delta_theta_correction3: float = 0.0

    def __add__(self, other: "DHRobot") -> "DHRobot":
        """Add two robots segment by segment."""
        if not isinstance(other, DHRobot):
            return NotImplemented
        if len(self.segments) != len(other.segments):
            raise ValueError(
                f"Cannot add robots with {len(self.segments)} and {len(other.segments)} segments"
            )
        return DHRobot([mine + theirs for mine, theirs in zip(self.segments, other.segments)])


def _rot_z(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def _rot_x(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def _euler_xyz(rot: np.ndarray) -> tuple[float, float, float]:
    """Angles (r, p, y) with ``rot == Rx(r) @ Ry(p) @ Rz(y)`` and ``r`` in [0, pi]."""
    res0 = math.atan2(rot[1, 2], rot[2, 2])
    c2 = math.hypot(rot[0, 0], rot[0, 1])
    if res0 > 0.0:
        res0 -= math.pi
        res1 = math.atan2(-rot[0, 2], -c2)
    else:
        res1 = math.atan2(-rot[0, 2], c2)
    s1, c1 = math.sin(res0), math.cos(res0)
    res2 = math.atan2(s1 * rot[2, 0] - c1 * rot[1, 0], c1 * rot[1, 1] - s1 * rot[2, 1])
    return -res0, -res1, -res2


class Calibration:
    """Kinematic chain of a robot, correctable so that shoulder and elbow offsets are zero.

    Each DH segment yields two 4x4 transforms: one holding ``d`` and ``theta``,
    one holding ``a`` and ``alpha``.
    """

    def __init__(self, robot: DHRobot) -> None:
        self._robot = DHRobot(
            list(robot.segments),
            robot.delta_theta_correction2,
            robot.delta_theta_correction3,
        )
        self._chain: list[np.ndarray] = []
        self._build_chain()

    @property
    def robot(self) -> DHRobot:
        return self._robot

    @property
    def chain(self) -> list[np.ndarray]:
        """Copies of the transforms, two per joint, from base to tool."""
        return [matrix.copy() for matrix in self._chain]

    def _build_chain(self) -> None:
        self._chain = []
        for segment in self._robot.segments:
            seg1 = np.eye(4)
            seg1[:3, :3] = _rot_z(segment.theta)
            seg1[2, 3] = segment.d
            self._chain.append(seg1)

            seg2 = np.eye(4)
            seg2[:3, :3] = _rot_x(segment.alpha)
            seg2[0, 3] = segment.a
            self._chain.append(seg2)

    def correct_chain(self) -> None:
        """Move the shoulder and elbow offsets to zero while keeping the kinematics."""
        self._correct_axis(1)
        self._correct_axis(2)

    def _correct_axis(self, link_index: int) -> None:
        # Setting d of this segment to zero moves the following passive segment along
        # this joint's axis. Its end point has to move along the next joint's axis
        # instead; that axis is intersected with this segment's XY-plane to find the
        # new arm length and angle, and the next joint's d is shifted to compensate.
        first = self._chain[2 * link_index]
        if first[2, 3] == 0.0:
            return

        fk_next_passive = first @ self._chain[2 * link_index + 1]
        passive = fk_next_passive[:3, 3].copy()
        following = (fk_next_passive @ self._chain[2 * link_index + 2])[:3, 3]

        origin = passive
        direction = following - passive
        direction = direction / np.linalg.norm(direction)

        normal = np.array([0.0, 0.0, 1.0])
        plane_point = np.zeros(3)
        offset = -float(normal @ plane_point)

        intersection_param = -(offset + float(normal @ origin)) / float(normal @ direction)
        intersection = origin + intersection_param * direction - plane_point
        new_theta = math.atan(intersection[1] / intersection[0])
        # Upper and lower arm segments of UR robots have negative length in DH terms.
        new_length = -float(np.linalg.norm(intersection))

        sign_dir = 1.0 if direction[2] > 0 else -1.0
        distance_correction = intersection_param * sign_dir

        segment = self._robot.segments[link_index]

        first[2, 3] = 0.0
        first[:3, :3] = _rot_z(new_theta)

        passive_mat = self._chain[2 * link_index + 1]
        passive_mat[0, 3] = new_length
        passive_mat[:3, :3] = _rot_z(segment.theta - new_theta) @ _rot_x(segment.alpha)

        self._chain[2 * link_index + 2][2, 3] -= distance_correction

    def simplified(self) -> list[np.ndarray]:
        """The chain with one transform per joint, from base to tool."""
        if not self._chain:
            return []
        result = [self._chain[0].copy()]
        for index in range(1, len(self._chain) - 1, 2):
            result.append(self._chain[index] @ self._chain[index + 1])
        result.append(self._chain[-1].copy())
        return result

    def calc_forward_kinematics(self, joint_values: Sequence[float], link_nr: int = 6) -> np.ndarray:
        """Pose of link ``link_nr`` (counting from 1) in base coordinates."""
        values = np.asarray(joint_values, dtype=float).reshape(-1)
        if values.shape[0] != 6:
            raise ValueError(f"Expected 6 joint values, got {values.shape[0]}")
        chain = self.simplified()
        if not 0 <= link_nr <= min(len(chain), values.shape[0]):
            raise ValueError(f"Link number {link_nr} is out of range")

        output = np.eye(4)
        for transform, angle in zip(chain[:link_nr], values[:link_nr]):
            rotation = np.eye(4)
            rotation[:3, :3] = _rot_z(float(angle))
            output = output @ (transform @ rotation)
        return output

    def to_yaml(self) -> dict[str, dict[str, dict[str, float]]]:
        """Position and roll/pitch/yaw of each simplified transform, keyed by link name."""
        chain = self.simplified()
        kinematics: dict[str, dict[str, float]] = {}
        for name, transform in zip(LINK_NAMES, chain):
            roll, pitch, yaw = _euler_xyz(transform[:3, :3])
            kinematics[name] = {
                "x": float(transform[0, 3]),
                "y": float(transform[1, 3]),
                "z": float(transform[2, 3]),
                "roll": float(roll),
                "pitch": float(pitch),
                "yaw": float(yaw),
            }
        return {"kinematics": kinematics}