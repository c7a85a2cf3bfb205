import logging
from typing import Any, Callable, Dict, Optional

from devhost.local.config import effective_settings
from devhost.local.router.config_responder import respond_to_config_request
from devhost.local.router.messages import declared_type, parse_message, to_loggable

log = logging.getLogger(__name__)
# Relayed module logs go to their own logger so the console prints them raw.
module_log = logging.getLogger("module")


def _level_number(level: str) -> int:
    """Maps a module log level name to a logging level, INFO for anything unrecognized."""
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


class MessageRouter:
    """
    Dispatches inbound module messages to handlers by their declared type.

    Messages are handled one at a time in arrival order. Types without a
    handler, and untyped values, go to the catch-all handler. A failing
    handler is logged and does not affect the next message.
    """

    def __init__(self, channel, auth: Optional[str] = None, settings=effective_settings) -> None:
        """
        Initializes the router and its handler table.

        :param channel: The channel used for replies (needs a `send` method).
        :param auth: Optional `user:pass` credentials for the synthetic config.
        :param settings: The settings object used by the config responder.
        """
        self.channel = channel
        self.auth = auth
        self.settings = settings
        self.ready = False
        self.handlers: Dict[str, Callable[[Any], None]] = {
            "announce": self._on_announce,
            "log": self._on_log,
            "get-config": self._on_get_config,
            "ping": self._on_ping,
            "ready": self._on_ready,
        }

    def register(self, message_type: str, handler: Callable[[Any], None]) -> None:
        """
        Adds or replaces the handler for a message type.

        :param message_type: The `type` value the handler is responsible for.
        :param handler: Called with the raw message exactly as received.
        """
        self.handlers[message_type] = handler

    def dispatch(self, raw: Any) -> None:
        """
        Routes one inbound message.

        :param raw: The decoded value as received from the channel.
        """
        message_type = declared_type(raw)
        handler = self.handlers.get(message_type) if message_type else None
        if handler is None:
            handler = self.catch_all
        try:
            handler(raw)
        except Exception as e:
            log.error(f"error in handler for '{message_type}': {e}", exc_info=True)

    async def run(self) -> None:
        """
        Consumes the channel until the module closes it.

        :raises ChannelError: If the channel fails; the caller decides what that means.
        """
        async for raw in self.channel.messages():
            self.dispatch(raw)

    #* --- Handlers (each receives the raw message) ---
    def _on_announce(self, raw) -> None:
        log.info(f"announce -> {to_loggable(parse_message(raw).payload)}")

    def _on_log(self, raw) -> None:
        message = parse_message(raw)
        module_log.log(_level_number(message.level), f"[module-log:{message.level}] {message.text}")

    def _on_get_config(self, raw) -> None:
        respond_to_config_request(self.channel, self.auth, self.settings)

    def _on_ping(self, raw) -> None:
        self.channel.send({"type": "pong"})

    def _on_ready(self, raw) -> None:
        self.ready = True
        log.info(f"module READY: {to_loggable(parse_message(raw).payload)}")

    def catch_all(self, raw) -> None:
        log.info(f"[ipc message] {to_loggable(raw)}")
