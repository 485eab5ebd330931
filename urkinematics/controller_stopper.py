"""Stops controllers while the robot is not running and restarts them afterwards."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_CONSISTENT_CONTROLLERS: tuple[str, ...] = ("joint_state_controller",)


@dataclass(frozen=True)
class ControllerInfo:
    """A controller known to the controller manager and its state."""

    name: str
    state: str


class ControllerManager(Protocol):
    """The controller manager services the stopper relies on."""

    def list_controllers(self) -> Iterable[ControllerInfo]:
        """All known controllers."""

    def switch_controllers(
        self, start_controllers: Sequence[str], stop_controllers: Sequence[str]
    ) -> bool:
        """Strictly start and stop the given controllers; return whether the call succeeded."""


class ControllerStopper:
    """Reacts to changes of the robot's running state by stopping or restarting controllers.

    Controllers listed as consistent are never stopped.
    """

    def __init__(
        self,
        controller_manager: ControllerManager,
        consistent_controllers: Optional[Iterable[str]] = None,
    ) -> None:
        self.controller_manager = controller_manager
        self.consistent_controllers: list[str] = list(
            DEFAULT_CONSISTENT_CONTROLLERS if consistent_controllers is None else consistent_controllers
        )
        self.stopped_controllers: list[str] = []
        self.robot_running = True

    def wait_for_controllers(self, poll_interval: float = 1.0) -> list[str]:
        """Poll until at least one stoppable controller is running and return them."""
        logger.debug("Waiting for running controllers")
        while not self.find_stoppable_controllers():
            time.sleep(poll_interval)
        logger.debug("Initialization finished")
        return list(self.stopped_controllers)

    def find_stoppable_controllers(self) -> list[str]:
        """Record and return the running controllers that are not consistent."""
        self.stopped_controllers = [
            controller.name
            for controller in self.controller_manager.list_controllers()
            if controller.state == "running" and controller.name not in self.consistent_controllers
        ]
        return list(self.stopped_controllers)

    def robot_running_callback(self, running: bool) -> None:
        """Handle a new robot running state; only changes of the state trigger an action."""
        running = bool(running)
        logger.debug("robot_running_callback with data %s", running)
        if running and not self.robot_running:
            logger.debug("Starting controllers")
            if not self.controller_manager.switch_controllers(list(self.stopped_controllers), []):
                logger.error("Could not activate requested controllers")
        elif not running and self.robot_running:
            logger.debug("Stopping controllers")
            self.find_stoppable_controllers()
            if not self.controller_manager.switch_controllers([], list(self.stopped_controllers)):
                logger.error("Could not stop requested controllers")
        self.robot_running = running