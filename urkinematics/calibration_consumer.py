"""Consumer that derives a corrected calibration from kinematics packages."""

from __future__ import annotations

import copy
import logging
from collections.abc import Sequence
from typing import Any, Optional, Protocol, runtime_checkable

from urkinematics.calibration import Calibration, DHRobot, DHSegment
from urkinematics.exceptions import UrException
from urkinematics.pipeline import Consumer, Package

logger = logging.getLogger(__name__)


@runtime_checkable
class KinematicsData(Protocol):
    """A package carrying the robot's calibrated DH parameters."""

    dh_theta: Sequence[float]
    dh_a: Sequence[float]
    dh_d: Sequence[float]
    dh_alpha: Sequence[float]

    def to_hash(self) -> str:
        """A hash identifying this calibration."""


class CalibrationConsumer(Consumer):
    """Consumes packages until one carries kinematics data, then stores its corrected calibration."""

    def __init__(self) -> None:
        self._calibrated = False
        self._parameters: Optional[dict[str, Any]] = None

    @property
    def is_calibrated(self) -> bool:
        return self._calibrated

    def consume(self, product: Package) -> bool:
        """Compute the calibration if ``product`` holds kinematics data; always succeeds."""
        if isinstance(product, KinematicsData):
            logger.info("%s", product)
            robot = DHRobot(
                [
                    DHSegment(float(d), float(a), float(theta), float(alpha))
                    for d, a, theta, alpha in zip(
                        product.dh_d, product.dh_a, product.dh_theta, product.dh_alpha
                    )
                ]
            )
            calibration = Calibration(robot)
            calibration.correct_chain()

            parameters: dict[str, Any] = calibration.to_yaml()
            parameters["kinematics"]["hash"] = product.to_hash()
            self._parameters = parameters
            self._calibrated = True
        return True

    def calibration_parameters(self) -> dict[str, Any]:
        """The calibration computed so far; raises UrException if none was received yet."""
        if not self._calibrated or self._parameters is None:
            raise UrException("Cannot get calibration, as no calibration data received yet")
        return copy.deepcopy(self._parameters)