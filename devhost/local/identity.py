import time
import secrets
from typing import Optional

from devhost.local.config import effective_settings as config


def generate_connection_id(explicit: Optional[str] = None) -> str:
    """
    Returns the connection identity for this run.

    An explicit identity is returned exactly as given. Otherwise a new one is
    built as `devhost-<epoch milliseconds>-<hex suffix>`.

    :param explicit: An identity supplied by the operator, if any.
    :return: A non-empty identity string.
    """
    if explicit:
        return explicit

    timestamp = int(time.time() * 1000)
    suffix = format(secrets.randbits(config.CONNECTION_ID_SUFFIX_BITS), "x")
    return f"{config.CONNECTION_ID_PREFIX}-{timestamp}-{suffix}"
