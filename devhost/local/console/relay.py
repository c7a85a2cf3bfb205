import sys
import json
import asyncio
import logging
import threading
from typing import Any, Optional, TextIO

from devhost.local.config import effective_settings as config

log = logging.getLogger(__name__)


def _post(loop: asyncio.AbstractEventLoop, queue: asyncio.Queue, item: Optional[str]) -> bool:
    """Hands one line to the event loop. Returns False once the loop is gone."""
    try:
        loop.call_soon_threadsafe(queue.put_nowait, item)
        return True
    except RuntimeError:
        return False


def _read_lines(stream: TextIO, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue) -> None:
    """Target function for the reader thread. Forwards each input line, then None at EOF."""
    try:
        for line in iter(stream.readline, ""):
            if not _post(loop, queue, line):
                return
    except (OSError, ValueError) as e:
        log.debug(f"Console reader exited: {e}")
    _post(loop, queue, None)


class ConsoleRelay:
    """
    Relays JSON typed by the operator to the module, one line per message.

    Input is read by a daemon thread so a pending read never blocks the event
    loop or the supervisor's exit.
    """

    def __init__(self, channel, stream: Optional[TextIO] = None, err: Optional[TextIO] = None) -> None:
        self.channel = channel
        self.stream = stream or sys.stdin
        self.err = err or sys.stderr

    def print_banner(self) -> None:
        """Prints the usage hint for the console."""
        print("\n[REPL] Type a JSON object to send over the channel, e.g.:")
        print(f"  {config.REPL_EXAMPLE}")
        print("CTRL+C to quit.\n")

    def handle_line(self, line: str) -> bool:
        """
        Parses one input line and sends it to the module.

        :param line: The raw input line.
        :return: True if a message was sent, False if the line was blank, invalid or refused.
        """
        text = line.strip()
        if not text:
            return False
        try:
            message: Any = json.loads(text)
        except (ValueError, RecursionError) as e:
            print(f"[REPL] Invalid JSON: {e}", file=self.err)
            return False
        return self.channel.send(message)

    async def run(self) -> None:
        """Reads and relays lines until the input stream ends."""
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        reader = threading.Thread(target=_read_lines, args=(self.stream, loop, queue), daemon=True)
        reader.name = "ConsoleReaderThread"
        reader.start()

        while True:
            line = await queue.get()
            if line is None:
                log.debug("Console input closed, relay stopped.")
                return
            self.handle_line(line)
