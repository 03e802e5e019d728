"""
Persistence of the last used analysis options.

Options are stored as JSON outside the analysis core; the core only ever
receives an explicit CDAOptions value.
"""

import json
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, Union

from ..errors import ConfigurationError
from ..types import CDAOptions, RadiusBoundary

logger = logging.getLogger(__name__)

_INTEGER_FIELDS = ("maximum_radius", "random_radius", "permutations", "histogram_bins")
_OPTIONAL_INTEGER_FIELDS = ("seed", "workers")
_BOOLEAN_FIELDS = ("sub_random_samples", "expand_confined")


def options_to_dict(options: CDAOptions) -> Dict[str, Any]:
    """JSON-compatible dictionary of the options."""
    data = asdict(options)
    data["radius_boundary"] = options.radius_boundary.value
    return data


def options_from_dict(data: Dict[str, Any]) -> CDAOptions:
    """
    Build options from a dictionary, ignoring unknown keys.

    Missing keys take their default values.

    Raises
    ------
    ConfigurationError
        If a value has the wrong type or the options are invalid
    """
    known = {field.name for field in fields(CDAOptions)}
    values = {key: value for key, value in data.items() if key in known}

    try:
        for key in _INTEGER_FIELDS:
            if key in values:
                values[key] = _as_int(key, values[key])
        for key in _OPTIONAL_INTEGER_FIELDS:
            if values.get(key) is not None:
                values[key] = _as_int(key, values[key])
        for key in _BOOLEAN_FIELDS:
            if key in values and not isinstance(values[key], bool):
                raise ConfigurationError(f"{key} must be true or false")
        if "p_value" in values:
            values["p_value"] = float(values["p_value"])
        if "radius_boundary" in values:
            values["radius_boundary"] = RadiusBoundary(values["radius_boundary"])
    except ConfigurationError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e

    return CDAOptions(**values).validate()


def _as_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise ConfigurationError(f"{key} must be an integer: {value!r}")
    return int(value)


def save_options(path: Union[str, Path], options: CDAOptions) -> Path:
    """
    Save options as JSON.

    Returns
    -------
    Path
        The written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(options_to_dict(options), f, indent=2)
    logger.debug("Saved options to %s", path)
    return path


def load_options(path: Union[str, Path]) -> CDAOptions:
    """
    Load options saved by save_options.

    A missing file yields the default options.

    Raises
    ------
    ConfigurationError
        If the file is not valid JSON or holds invalid values
    """
    path = Path(path)
    if not path.exists():
        logger.debug("No saved options at %s; using defaults", path)
        return CDAOptions()

    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Settings file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} does not hold an object")
    return options_from_dict(data)
