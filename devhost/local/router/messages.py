"""
Inbound message shapes.

The module's protocol is only partially known, so inbound messages are parsed
into a small tagged union over the recognized `type` values plus an `Unknown`
variant that carries everything else untouched. Parsing never fails.
"""
import json
from collections import namedtuple
from typing import Any, Optional

Announce = namedtuple('Announce', ['type', 'payload', 'raw'])
Log = namedtuple('Log', ['type', 'level', 'text', 'raw'])
GetConfig = namedtuple('GetConfig', ['type', 'raw'])
Ping = namedtuple('Ping', ['type', 'raw'])
Ready = namedtuple('Ready', ['type', 'payload', 'raw'])
# 'type' is None for untyped values (non-objects, or objects without a string type)
Unknown = namedtuple('Unknown', ['type', 'raw'])

DEFAULT_LOG_LEVEL = "info"


def declared_type(raw: Any) -> Optional[str]:
    """Returns the message's `type` if it is an object with a non-empty string type."""
    if isinstance(raw, dict):
        value = raw.get("type")
        if isinstance(value, str) and value:
            return value
    return None


def to_loggable(raw: Any) -> str:
    """Best-effort single-line rendering of any inbound value."""
    if isinstance(raw, (dict, list)):
        try:
            return json.dumps(raw)
        except (TypeError, ValueError, RecursionError):
            return f"<unrenderable {type(raw).__name__}>"
    return str(raw)


def _payload_or(raw: dict, default: Any) -> Any:
    payload = raw.get("payload")
    return default if payload is None else payload


def _parse_announce(raw: dict) -> Announce:
    return Announce("announce", _payload_or(raw, raw), raw)


def _parse_log(raw: dict) -> Log:
    level = raw.get("level") or DEFAULT_LOG_LEVEL
    text = raw.get("text") or to_loggable(raw)
    return Log("log", str(level), str(text), raw)


def _parse_ready(raw: dict) -> Ready:
    return Ready("ready", _payload_or(raw, ""), raw)


PARSERS = {
    "announce": _parse_announce,
    "log": _parse_log,
    "get-config": lambda raw: GetConfig("get-config", raw),
    "ping": lambda raw: Ping("ping", raw),
    "ready": _parse_ready,
}


def parse_message(raw: Any):
    """
    Parses one inbound value into its variant.

    :param raw: The decoded value exactly as received from the channel.
    :return: One of Announce, Log, GetConfig, Ping, Ready or Unknown.
    """
    message_type = declared_type(raw)
    parser = PARSERS.get(message_type)
    if parser is None:
        return Unknown(message_type, raw)
    return parser(raw)
