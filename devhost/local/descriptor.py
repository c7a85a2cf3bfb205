import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

log = logging.getLogger(__name__)


def load_descriptor(path: Path) -> Dict[str, Any]:
    """
    Reads the module manifest (descriptor) from disk.

    The descriptor is advisory context only, so any read or parse problem
    degrades to an empty mapping instead of aborting the run.

    :param path: The path to the JSON manifest file.
    :return: The parsed manifest, or an empty dictionary if it could not be read.
    """
    try:
        with Path(path).open('r', encoding='utf-8') as f:
            descriptor = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        log.warning(f"Manifest not parseable, continuing anyway: {e}")
        return {}

    if not isinstance(descriptor, dict):
        log.warning(f"Manifest at '{path}' is not a JSON object, continuing anyway.")
        return {}
    return descriptor


def describe_descriptor(descriptor: Dict[str, Any]) -> Tuple[Optional[Any], Optional[Any]]:
    """Returns the (id, api) pair shown in the startup banner."""
    return descriptor.get("id"), descriptor.get("api")
