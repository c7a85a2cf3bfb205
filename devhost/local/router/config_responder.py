import logging
from typing import Any, Dict, Optional, Tuple

from devhost.local.config import effective_settings

log = logging.getLogger(__name__)

SET_CONFIG_TYPE = "set-config"


def parse_credentials(auth: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Splits a `user:pass` string on its first colon.

    :param auth: The credential string given by the operator, if any.
    :return: (username, password) with a missing side as an empty string, or None without credentials.
    """
    if not auth:
        return None
    username, _, password = auth.partition(":")
    return username, password


def build_synthetic_config(auth: Optional[str] = None, settings=effective_settings) -> Dict[str, Any]:
    """
    Builds the minimal configuration handed to the module.

    A new dictionary is built on every call; nothing is cached.

    :param auth: Optional `user:pass` credentials.
    :param settings: The settings object providing host, port and protocol.
    :return dict: host, port and protocol, plus username and password when credentials were given.
    """
    config = {
        "host": settings.CONFIG_HOST,
        "port": settings.CONFIG_PORT,
        "protocol": settings.CONFIG_PROTOCOL,
    }
    credentials = parse_credentials(auth)
    if credentials is not None:
        config["username"], config["password"] = credentials
    return config


def respond_to_config_request(channel, auth: Optional[str] = None, settings=effective_settings) -> bool:
    """
    Answers a `get-config` request with a single `set-config` message.

    :param channel: The channel to reply on.
    :param auth: Optional `user:pass` credentials.
    :param settings: The settings object providing the defaults.
    :return: Whether the reply was sent.
    """
    log.info("get-config -> providing minimal config")
    config = build_synthetic_config(auth, settings)
    return channel.send({"type": SET_CONFIG_TYPE, "payload": config})
