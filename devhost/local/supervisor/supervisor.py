import signal
import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

from devhost.local.config import effective_settings as config
from devhost.local.console import ConsoleRelay
from devhost.local.descriptor import describe_descriptor
from devhost.local.router import MessageRouter
from devhost.local.supervisor import process_utils, shutdown
from devhost.local.supervisor.errors import ChannelError

log = logging.getLogger(__name__)

# How long the router may keep draining the channel after the module exits.
CHANNEL_DRAIN_TIMEOUT = 1.0


def exit_status(returncode: int) -> Tuple[Optional[int], Optional[str]]:
    """
    Splits an asyncio return code into (exit code, signal name).

    A negative return code means the process was killed by that signal and
    has no exit code of its own.
    """
    if returncode is not None and returncode < 0:
        try:
            return None, signal.Signals(-returncode).name
        except ValueError:
            return None, str(-returncode)
    return returncode, None


class ModuleHost:
    """
    Supervises exactly one module process for the lifetime of a run.

    The host owns the child process, its message channel and the router's
    ready state. Inbound routing, the operator console and the exit monitor
    run as independent tasks on one event loop.
    """

    def __init__(self, paths: process_utils.LaunchPaths, connection_id: str, descriptor: Dict[str, Any],
                 auth: Optional[str] = None, source_maps: bool = False) -> None:
        """
        Initializes the ModuleHost state.

        :param paths: The resolved and checked launch paths.
        :param connection_id: The connection identity for this run.
        :param descriptor: The loaded module manifest (may be empty).
        :param auth: Optional `user:pass` credentials for the synthetic config.
        :param source_maps: Whether to enable source map support in the interpreter.
        """
        self.paths = paths
        self.connection_id = connection_id
        self.descriptor = descriptor
        self.auth = auth
        self.source_maps = source_maps
        self.process: Optional[asyncio.subprocess.Process] = None
        self.channel = None
        self.router: Optional[MessageRouter] = None

    @property
    def ready(self) -> bool:
        return bool(self.router and self.router.ready)

    def log_banner(self) -> None:
        """Logs the startup summary for the operator."""
        module_id, api = describe_descriptor(self.descriptor)
        log.info("=" * 20 + " DevHost " + "=" * 20)
        log.info(f"CWD           : {self.paths.cwd}")
        log.info(f"ENTRY         : {self.paths.entry}")
        log.info(f"MANIFEST      : {self.paths.manifest}")
        log.info(f"Manifest id   : {module_id} api: {api}")
        log.info(f"Connection ID : {self.connection_id}")

    async def run(self, console: bool = True) -> int:
        """
        Starts the module and supervises it until it exits.

        :param console: Whether to relay operator input from stdin.
        :return: The exit code to terminate the supervisor with.
        """
        self.log_banner()
        self.process, self.channel = await process_utils.launch_module(
            self.paths, self.connection_id, self.source_maps
        )
        self.router = MessageRouter(self.channel, self.auth)

        router_task = asyncio.create_task(self._route(), name="MessageRouter")
        tasks = [router_task]
        if console:
            relay = ConsoleRelay(self.channel)
            relay.print_banner()
            tasks.append(asyncio.create_task(relay.run(), name="ConsoleRelay"))

        try:
            code = await self._wait_for_exit()
            # Let messages sent right before the exit reach the router
            await asyncio.wait({router_task}, timeout=CHANNEL_DRAIN_TIMEOUT)
            return code
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            self.channel.close()

    async def _route(self) -> None:
        """Inbound task: routes messages until the channel closes or fails."""
        try:
            await self.router.run()
        except ChannelError as e:
            # The exit monitor decides about termination
            log.error(f"child error: {e}")
        except Exception as e:
            log.error(f"Message router stopped unexpectedly: {e}", exc_info=True)

    async def _wait_for_exit(self) -> int:
        """Exit monitor: waits for the module and mirrors its exit code."""
        returncode = await self.process.wait()
        code, signal_name = exit_status(returncode)
        log.info(f"child exited code={code} signal={signal_name or ''}")
        return code if code is not None else 0

    def stop(self) -> None:
        """Terminates the module process tree if it is still running."""
        if self.process is None or self.process.returncode is not None:
            return
        shutdown.terminate_child(self.process.pid)
