import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import devhost.settings as default_settings

log = logging.getLogger(__name__)


def read_overrides(path: Path) -> Dict[str, Any]:
    """
    Reads the runtime overrides file.

    A missing file means no overrides. A file that cannot be read or does not
    hold a JSON object is reported and ignored.

    :param path: The overrides file.
    :return: The raw overrides, possibly empty.
    """
    if not path.is_file():
        return {}
    try:
        with path.open('r', encoding='utf-8') as f:
            overrides = json.load(f)
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        log.error(f"Ignoring overrides file '{path}', it could not be read: {e}")
        return {}
    if not isinstance(overrides, dict):
        log.error(f"Ignoring overrides file '{path}', it must contain a JSON object.")
        return {}
    return overrides


def coerce_override(key: str, value: Any, default: Any) -> Any:
    """
    Converts an override to the type of the setting it replaces.

    Flag lists may be given as one space separated string, numbers may be
    given as strings.

    :raises ValueError: If the value cannot stand in for the default.
    """
    if isinstance(default, list):
        if isinstance(value, str):
            return value.split()
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return value
        raise ValueError(f"{key} expects a list of strings")
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        raise ValueError(f"{key} expects true or false")
    if isinstance(default, (int, float)):
        if isinstance(value, bool):
            raise ValueError(f"{key} expects a number")
        try:
            return type(default)(value)
        except (TypeError, ValueError):
            raise ValueError(f"{key} expects a number") from None
    return str(value)


class MergedSettings:
    """
    Attribute access to the supervisor configuration.

    Values come from `settings.py` (which already reflects the environment and
    `.env`), then from the overrides file for keys in `MODIFIABLE_SETTINGS`.
    """

    def __init__(self, overrides_path: Optional[Path] = None) -> None:
        for key in dir(default_settings):
            if key.isupper():
                setattr(self, key, getattr(default_settings, key))
        if overrides_path is not None:
            self.OVERRIDES_JSON_PATH = Path(overrides_path)
        self.apply_overrides(read_overrides(self.OVERRIDES_JSON_PATH))

    def apply_overrides(self, overrides: Dict[str, Any]) -> None:
        """Applies the modifiable overrides, warning about everything else."""
        if overrides:
            log.info(f"Applying runtime overrides from {self.OVERRIDES_JSON_PATH}")
        for key, value in overrides.items():
            if not hasattr(self, key):
                log.warning(f"Unknown setting '{key}' in overrides. Ignoring.")
                continue
            if key not in self.MODIFIABLE_SETTINGS:
                log.warning(f"Setting '{key}' is not modifiable. Ignoring.")
                continue
            try:
                value = coerce_override(key, value, getattr(default_settings, key))
            except ValueError as e:
                log.warning(f"Invalid override ignored: {e}")
                continue
            setattr(self, key, value)
            log.debug(f"Override applied: {key} = {value!r}")


effective_settings = MergedSettings()
