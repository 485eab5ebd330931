"""Exception hierarchy used throughout the package."""

from __future__ import annotations


class UrException(RuntimeError):
    """Base class for all errors raised by this package."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)


class VersionMismatch(UrException):
    """Raised when the robot's control software version is not supported."""

    def __init__(self, text: str = "", version_required: int = 0, version_actual: int = 0) -> None:
        self.text = text
        self.version_required = version_required
        self.version_actual = version_actual
        super().__init__(
            f"{text}(Required version: {version_required}, actual version: {version_actual})"
        )


class ToolCommNotAvailable(VersionMismatch):
    """Raised when communication with the tool is not possible on this robot."""


class TimeoutException(UrException):
    """Raised when an operation exceeds its configured timeout (given in seconds)."""

    def __init__(self, text: str, timeout: float) -> None:
        self.text = text
        self.timeout = float(timeout)
        super().__init__(f"{text}(Configured timeout: {self.timeout:g} sec)")