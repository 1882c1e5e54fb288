"""Command-line entry point that runs the lobby and the WebSocket proxy."""

from __future__ import annotations

import argparse
import logging
import queue
import time
from typing import Sequence

from .proxy import DEFAULT_HOST, DEFAULT_PORT, Proxy
from .room_keeper import RoomKeeper


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid port {value!r}") from exc
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {port}")
    return port


def _duration(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid duration {value!r}") from exc
    if seconds < 0:
        raise argparse.ArgumentTypeError("duration must not be negative")
    return seconds


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="snakeserver", description="Multiplayer snake server.")
    parser.add_argument("--host", default=DEFAULT_HOST, help="address to listen on")
    parser.add_argument("--port", type=_port, default=DEFAULT_PORT, help="port to listen on")
    parser.add_argument(
        "--duration",
        type=_duration,
        default=None,
        help="stop after this many seconds (default: run until interrupted)",
    )
    parser.add_argument("--verbose", action="store_true", help="log debug messages")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    received_queue: queue.Queue = queue.Queue()
    send_queue: queue.Queue = queue.Queue()
    keeper = RoomKeeper(received_queue, send_queue)
    proxy = Proxy(received_queue, send_queue, args.host, args.port)

    keeper.start()
    try:
        proxy.start()
        if args.duration is None:
            while True:
                time.sleep(1)
        else:
            time.sleep(args.duration)
    except KeyboardInterrupt:
        pass
    finally:
        proxy.stop()
        keeper.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())