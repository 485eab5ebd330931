"""Helpers for reading required settings and writing calibration files."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from urkinematics.exceptions import UrException

logger = logging.getLogger(__name__)


class ParameterMissingError(UrException):
    """Raised when a required parameter is not configured."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Cannot find required parameter {name} on the parameter server.")


def get_required_parameter(params: Mapping[str, Any], name: str) -> Any:
    """Return ``params[name]``; raise ParameterMissingError if it is absent."""
    try:
        return params[name]
    except KeyError:
        raise ParameterMissingError(name) from None


def write_calibration_data(
    data: Optional[Mapping[str, Any]], output_filename: Union[str, Path]
) -> Path:
    """Write ``data`` as YAML to ``output_filename`` and return the absolute path written.

    Raises ValueError if there is no data and FileNotFoundError if the target
    directory does not exist; an existing file is overwritten.
    """
    if data is None:
        raise ValueError("Calibration data not yet set.")

    out_path = Path(output_filename).absolute()
    dst_path = out_path.parent
    if not dst_path.exists():
        raise FileNotFoundError(f"Parent folder {dst_path} does not exist.")

    logger.info("Writing calibration data to %s", out_path)
    if out_path.exists():
        logger.warning("Output file %s already exists. Overwriting.", output_filename)

    with out_path.open("w", encoding="utf-8") as stream:
        yaml.safe_dump(dict(data), stream, default_flow_style=False, sort_keys=False)
    logger.info("Wrote output.")
    return out_path