"""
Sends a single PTZ control command to a camera and prints the reply.

Usage:
    devhost-ptz --ip 192.168.0.10 --cmd "#R01"
    devhost-ptz --ip 192.168.0.10 --pan 50 --tilt 50
    devhost-ptz --ip 192.168.0.10 --preset 01
"""
import sys
import argparse
from typing import List, Optional

import requests

PTZ_PATH = "/cgi-bin/aw_ptz"
REQUEST_TIMEOUT = 5


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="devhost-ptz", description="Send one PTZ command to a camera.")
    parser.add_argument("--ip", help="Camera address.")
    parser.add_argument("--cmd", help='Raw command (e.g. "#PTS5050").')
    parser.add_argument("--pan", help="Pan value (00-99).")
    parser.add_argument("--tilt", help="Tilt value (00-99).")
    parser.add_argument("--preset", help="Preset to recall (00-99).")
    return parser


def build_command(cmd: Optional[str] = None, pan: Optional[str] = None, tilt: Optional[str] = None,
                  preset: Optional[str] = None) -> Optional[str]:
    """
    Returns the command to send, or None if the arguments don't describe one.

    A raw command wins over pan/tilt, which wins over a preset recall.
    """
    if cmd:
        return cmd
    if pan and tilt:
        return f"#PTS{pan}{tilt}"
    if preset:
        return f"#R{preset.zfill(2)}"
    return None


def send_to_camera(ip: str, command: str) -> requests.Response:
    """
    Sends the command in one GET request.

    :param ip: The camera address.
    :param command: The PTZ command string.
    :return: The camera's HTTP response.
    :raises requests.RequestException: If the request fails.
    """
    url = f"http://{ip}{PTZ_PATH}"
    params = {"cmd": command, "res": "1"}
    print(f"-> Sending: {url}?cmd={command}&res=1")
    return requests.get(url, params=params, timeout=REQUEST_TIMEOUT)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    command = build_command(args.cmd, args.pan, args.tilt, args.preset)
    if not args.ip or not command:
        parser.print_help()
        return 0

    try:
        response = send_to_camera(args.ip, command)
    except requests.RequestException as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Reply: {response.status_code} - {response.text}")
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
