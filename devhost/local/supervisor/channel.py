"""
The dedicated message channel between the supervisor and the module.

Messages travel as one JSON document per line over a UNIX socket pair. This is
the same framing Node.js uses for its `fork()` IPC channel in `json`
serialization mode, so a Node module attaches to it through `NODE_CHANNEL_FD`
without any module-side changes.
"""
import json
import socket
import asyncio
import logging
from typing import Any, AsyncIterator

from devhost.local.supervisor.errors import ChannelError

log = logging.getLogger(__name__)

# Largest single message accepted from the module.
MAX_LINE_BYTES = 16 * 1024 * 1024
# Outbound bytes the module may leave unread before further sends are refused.
MAX_PENDING_BYTES = 16 * 1024 * 1024


def encode_message(message: Any) -> bytes:
    """Serializes one outbound message into a channel frame."""
    return json.dumps(message, separators=(",", ":")).encode("utf-8") + b"\n"


def decode_line(line: bytes) -> Any:
    """
    Decodes one inbound frame.

    A frame that is not valid JSON, or nests deeper than the decoder can
    follow, is returned as its decoded text so it can still be logged by the
    catch-all handler.

    :param line: The raw frame, without its trailing newline.
    :return: The decoded JSON value, or the text itself.
    """
    text = line.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        log.debug(f"Inbound frame is not JSON, passing it on as text: {text[:200]!r}")
        return text


class MessageChannel:
    """
    Owns the parent end of the module's message channel.

    Sending is synchronous and refused once the channel is disconnected.
    Receiving is an async iterator that yields messages in arrival order.
    """

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._reader = reader
        self._writer = writer
        self.connected = True

    @classmethod
    async def from_socket(cls, sock: socket.socket) -> "MessageChannel":
        """Wraps a connected stream socket (the parent end of the socket pair)."""
        reader, writer = await asyncio.open_connection(sock=sock, limit=MAX_LINE_BYTES)
        return cls(reader, writer)

    def send(self, message: Any) -> bool:
        """
        Sends one message to the module.

        :param message: Any JSON-serializable value.
        :return: True if the message was handed to the transport, False if refused.
        """
        if not self.connected or self._writer.is_closing():
            log.error("child not connected, message not sent")
            return False
        pending = self._writer.transport.get_write_buffer_size()
        if pending > MAX_PENDING_BYTES:
            log.warning(f"module is not reading its channel ({pending} bytes pending), message not sent")
            return False
        try:
            frame = encode_message(message)
        except (TypeError, ValueError, RecursionError) as e:
            log.error(f"Message is not JSON-serializable, not sent: {e}")
            return False
        try:
            self._writer.write(frame)
        except (OSError, RuntimeError) as e:
            self.connected = False
            log.error(f"Failed to write to the module channel: {e}")
            return False
        log.debug(f"-> {frame.decode('utf-8').rstrip()}")
        return True

    async def messages(self) -> AsyncIterator[Any]:
        """
        Yields inbound messages until the module closes its end.

        :raises ChannelError: If the transport fails while reading.
        """
        while self.connected:
            try:
                line = await self._reader.readline()
            except (OSError, ValueError) as e:
                # ValueError is raised by StreamReader when a frame exceeds the limit
                self.connected = False
                raise ChannelError(f"channel read failed: {e}") from e

            if not line:
                log.debug("Module closed its end of the channel.")
                self.connected = False
                return

            line = line.strip()
            if not line:
                continue
            yield decode_line(line)

    def close(self) -> None:
        """Closes the parent end of the channel. Safe to call more than once."""
        self.connected = False
        if not self._writer.is_closing():
            self._writer.close()
