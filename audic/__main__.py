# Audic
# Copyright (C) 2026 Audic contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Play a file or stream from the command line.

    python -m audic SOURCE [--loop] [--volume 0.5] [--start 30] [-v]

Exits when playback ends or on SIGINT/SIGTERM.
"""

import argparse
import asyncio
import logging
import signal
import sys

from .player import Audic
from .vlc import VlcError

log = logging.getLogger("audic")


def _volume(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text}")
    if not 0 <= value <= 1:
        raise argparse.ArgumentTypeError("volume must be between 0 and 1")
    return value


def _position(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text}")
    if value < 0:
        raise argparse.ArgumentTypeError("start position must be >= 0")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="audic", description="Play audio through VLC")
    parser.add_argument("source", help="File path or URI to play")
    parser.add_argument("--loop", action="store_true", help="Loop until interrupted")
    parser.add_argument("--volume", type=_volume, default=None,
                        help="Volume between 0 and 1 (default: 1)")
    parser.add_argument("--start", type=_position, default=0,
                        help="Start position in whole seconds")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")
    return parser


async def play_until_done(player: Audic, stop_event: asyncio.Event,
                          *, volume: float | None = None, start: int = 0,
                          looped: bool = False) -> None:
    """Start *player* and return once playback has ended or *stop_event* is set."""
    await player.ready()
    if volume is not None:
        await player.set_volume(volume)
    await player.play(looped=looped)
    if start:
        await player.seek(start)

    started = False
    while not stop_event.is_set():
        if player.duration:
            started = True
        elif started and not player.current_time:
            log.info("Playback finished")
            return
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=player.poll_interval)
        except asyncio.TimeoutError:
            pass
    log.info("Interrupted")


async def run(args) -> int:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            pass  # Windows: Ctrl+C raises KeyboardInterrupt instead

    player = Audic(args.source)
    try:
        await play_until_done(player, stop_event, volume=args.volume,
                              start=args.start, looped=args.loop)
    except VlcError as e:
        log.error("Playback failed: %s", e)
        return 1
    finally:
        await player.destroy()
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
