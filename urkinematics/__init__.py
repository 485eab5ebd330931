"""Calibration correction, binary data parsing, pipeline and controller helpers for Universal Robots arms."""

__version__ = "0.1.0"