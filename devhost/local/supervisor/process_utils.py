import os
import sys
import socket
import asyncio
import logging
from pathlib import Path
from collections import namedtuple
from typing import Dict, List, Mapping, Optional, Tuple

from devhost.local.config import effective_settings as config
from devhost.local.supervisor.channel import MessageChannel
from devhost.local.supervisor.errors import LaunchError

log = logging.getLogger(__name__)

LaunchPaths = namedtuple('LaunchPaths', ['cwd', 'entry', 'manifest'])


#* --- Path Resolution ---
def _resolve_against(base: Path, value: str) -> Path:
    """Returns `value` as an absolute path, relative paths being taken from `base`."""
    path = Path(value)
    return path if path.is_absolute() else (base / path).resolve()


def resolve_paths(module: str, manifest: str, cwd: Optional[str] = None) -> LaunchPaths:
    """
    Resolves the working directory, module entry and manifest paths.

    The working directory defaults to the current one. Relative entry and
    manifest paths are resolved against the working directory, not against
    the directory the supervisor was started from.

    :param module: The module entry path as given on the command line.
    :param manifest: The manifest path as given on the command line.
    :param cwd: The working directory for the module, if given.
    :return LaunchPaths: The three absolute paths.
    """
    base = _resolve_against(Path.cwd(), cwd) if cwd else Path.cwd()
    return LaunchPaths(base, _resolve_against(base, module), _resolve_against(base, manifest))


def check_launch_paths(paths: LaunchPaths) -> None:
    """
    Verifies that the module entry and the manifest exist.

    :param paths: The resolved launch paths.
    :raises LaunchError: If either file is missing.
    """
    if not paths.entry.exists():
        raise LaunchError(f"Module entry not found: {paths.entry}")
    if not paths.manifest.exists():
        raise LaunchError(f"Manifest not found: {paths.manifest}")


#* --- Child Environment & Command ---
def build_child_env(paths: LaunchPaths, connection_id: str, base_env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Builds the environment for the module process.

    The parent environment is copied and overlaid with the manifest path, the
    connection identity (under both identity keys) and the execution mode. An
    execution mode already present in the parent environment is kept.

    :param paths: The resolved launch paths.
    :param connection_id: The connection identity for this run.
    :param base_env: The environment to start from, defaults to `os.environ`.
    :return dict: The complete child environment.
    """
    env = dict(os.environ if base_env is None else base_env)
    env.update({
        config.ENV_MANIFEST_KEY: str(paths.manifest),
        config.ENV_CONNECTION_KEY: connection_id,
        config.ENV_INSTANCE_KEY: connection_id,
        config.ENV_MODE_KEY: env.get(config.ENV_MODE_KEY) or config.EXECUTION_MODE,
    })
    return env


def build_command(paths: LaunchPaths, source_maps: bool = False) -> List[str]:
    """Returns the interpreter command line that runs the module entry."""
    flags = list(config.INTERPRETER_FLAGS)
    if source_maps and config.SOURCE_MAPS_FLAG not in flags:
        flags.append(config.SOURCE_MAPS_FLAG)
    return [config.INTERPRETER, *flags, str(paths.entry)]


#* --- Process Creation ---
async def launch_module(paths: LaunchPaths, connection_id: str, source_maps: bool = False) -> Tuple[asyncio.subprocess.Process, MessageChannel]:
    """
    Spawns the module with inherited standard streams and a dedicated channel.

    The child end of a socket pair is handed to the module as an inherited
    descriptor whose number is published in the child environment.

    :param paths: The resolved launch paths.
    :param connection_id: The connection identity for this run.
    :param source_maps: Whether to enable source map support in the interpreter.
    :return tuple: The spawned process and the parent end of its channel.
    """
    if sys.platform == "win32":
        raise LaunchError("Passing the message channel to the module requires a POSIX platform.")

    parent_sock, child_sock = socket.socketpair()
    try:
        env = build_child_env(paths, connection_id)
        env[config.ENV_CHANNEL_FD_KEY] = str(child_sock.fileno())
        env[config.ENV_CHANNEL_MODE_KEY] = "json"
        args = build_command(paths, source_maps)

        log.info(f"Starting module: {' '.join(args)}")
        process = await asyncio.create_subprocess_exec(
            *args,
            cwd=str(paths.cwd),
            env=env,
            pass_fds=(child_sock.fileno(),),
        )
    except Exception as e:
        parent_sock.close()
        log.critical(f"Failed to start module '{paths.entry}': {e}", exc_info=True)
        raise
    finally:
        # The module holds its own copy now
        child_sock.close()

    channel = await MessageChannel.from_socket(parent_sock)
    log.info(f"Module started successfully with PID: {process.pid}")
    return process, channel
