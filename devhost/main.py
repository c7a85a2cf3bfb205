import sys
import asyncio
import logging
import argparse
from typing import List, Optional

# Basic console logger for messages BEFORE full setup is complete.
# This logger will be replaced by the full setup later.
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)-8s - [devhost] - %(message)s',
    stream=sys.stdout
)
log = logging.getLogger("devhost")

import setproctitle
from devhost.log import setup_logging
from devhost.local.descriptor import load_descriptor
from devhost.local.identity import generate_connection_id
from devhost.local.supervisor import LaunchError, ModuleHost
from devhost.local.supervisor.process_utils import check_launch_paths, resolve_paths

USAGE = (
    "Usage: devhost --module <path> --manifest <path> [--cwd <dir>] "
    "[--auth user:pass] [--conn-id id] [--source-maps] [--verbose]"
)
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    """Returns the command-line parser for the supervisor."""
    parser = argparse.ArgumentParser(
        prog="devhost",
        description="Run a plugin module outside its host application and talk to it over its message channel.",
    )
    parser.add_argument("--module", help="Module entry file, relative to --cwd.")
    parser.add_argument("--manifest", help="Module manifest (JSON), relative to --cwd.")
    parser.add_argument("--cwd", help="Working directory for the module (default: current directory).")
    parser.add_argument("--auth", help="Credentials for the synthetic config, as user:pass.")
    parser.add_argument("--conn-id", dest="conn_id", help="Connection identity (default: generated).")
    parser.add_argument("--source-maps", dest="source_maps", action="store_true",
                        help="Start the interpreter with source map support.")
    parser.add_argument("--verbose", action="store_true", help="Show DEBUG output on the console.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    The main entry point for the supervisor.

    :param argv: Command-line arguments, defaults to `sys.argv[1:]`.
    :return int: The exit code, mirroring the module's own exit code.
    """
    args = build_parser().parse_args(argv)
    console_level = logging.DEBUG if args.verbose else logging.INFO

    if not args.module or not args.manifest:
        print(USAGE, file=sys.stderr)
        return 1

    paths = resolve_paths(args.module, args.manifest, args.cwd)
    try:
        check_launch_paths(paths)
    except LaunchError as e:
        print(e, file=sys.stderr)
        return 1

    connection_id = generate_connection_id(args.conn_id)
    setup_logging(console_level, connection_id)
    setproctitle.setproctitle(f"DevHost - Supervisor ({connection_id})")

    descriptor = load_descriptor(paths.manifest)
    host = ModuleHost(paths, connection_id, descriptor, auth=args.auth, source_maps=args.source_maps)

    try:
        return asyncio.run(host.run())
    except KeyboardInterrupt:
        log.warning("Interrupted by user, stopping module.")
        host.stop()
        return EXIT_INTERRUPTED
    except (LaunchError, OSError) as e:
        log.critical(f"Failed to start module: {e}")
        return 1


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
