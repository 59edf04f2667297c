# Audic
# Copyright (C) 2026 Audic contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Audic — an audio object backed by a VLC process.

Two independent data flows:

  commands  facade → session    play(), pause(), volume/src/current_time setters
  status    session → facade    poll task refreshes duration/current_time/playing

Usage:

    async with Audic("track.mp3") as audio:
        audio.volume = 0.5           # fire-and-forget
        await audio.seek(30)         # or await the returned task
        await audio.play()

Setters return immediately; the command runs in a background task once the
VLC session is ready.  ``set_volume()``, ``set_src()`` and ``seek()`` return
that task so callers can await it and see command errors.

The object is not safe for concurrent callers: overlapping setters share one
session and their commands may interleave.
"""

import asyncio
import logging
import math

from .config import cfg
from .vlc import VlcError, acquire as acquire_vlc

log = logging.getLogger(__name__)

POLL_INTERVAL = 1.0   # seconds between status polls
VOLUME_SCALE = 256    # VLC's volume for 100%


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class Audic:
    """Play audio through VLC with an HTML5-audio-like interface.

    Must be created while an asyncio event loop is running; setup starts
    immediately as a task on that loop.  Call ``destroy()`` (or use
    ``async with``) when done, otherwise the VLC process keeps running.
    """

    def __init__(self, src: str | None = None, *, acquire=None,
                 poll_interval: float | None = None):
        if src is not None and not isinstance(src, str):
            raise TypeError(f"src must be a string, got {type(src).__name__}")

        #: Whether the audio is currently playing.
        self.playing: bool = False
        #: Duration in seconds, from the latest poll (None before the first).
        self.duration: float | None = None

        self._src = src
        self._volume: float = 1
        self._current_time: float = 0
        self._session = None
        self._poll_task: asyncio.Task | None = None
        self._pending: set[asyncio.Task] = set()
        self._acquire = acquire or acquire_vlc
        if poll_interval is None:
            poll_interval = float(cfg("poll", "interval", default=POLL_INTERVAL))
        self._poll_interval = poll_interval

        loop = asyncio.get_running_loop()
        self._setup = loop.create_task(self._run_setup(src))

    # ── Setup + polling ──

    async def _run_setup(self, src):
        self._session = await self._acquire()
        try:
            if src:
                await self._session.command("in_enqueue", {"input": src})
        except asyncio.CancelledError:
            await self._session.kill()
            raise
        self._poll_task = asyncio.create_task(self._poll_loop())

    async def _poll_loop(self):
        """Refresh duration/current_time every poll interval."""
        while True:
            await asyncio.sleep(self._poll_interval)
            try:
                self._apply_status(await self._session.info())
            except Exception as e:
                log.warning("Status poll failed: %s", e)

    def _apply_status(self, status: dict):
        duration = status.get("length", 0)
        current_time = status.get("time", 0)
        self.duration = duration
        self._current_time = current_time
        # Nothing loaded or the stream ended
        if duration == 0 and current_time == 0:
            self.playing = False

    async def ready(self) -> None:
        """Wait for the VLC session to be set up."""
        await self._setup

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    # ── Playback ──

    async def play(self, looped: bool = False) -> None:
        """Start playing the audio."""
        if self.playing:
            return
        self.playing = True
        await self._setup
        if looped:
            await self._session.command("pl_loop")
        await self._session.command("pl_pause", {"id": 0})

    async def pause(self) -> None:
        """Pause the audio playback."""
        if not self.playing:
            return
        self.playing = False
        await self._setup
        await self._session.command("pl_pause", {"id": 0})

    # ── Background commands ──

    def _dispatch(self, coro, what: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)

        def _done(t: asyncio.Task):
            self._pending.discard(t)
            if not t.cancelled() and t.exception() is not None:
                log.warning("%s failed: %s", what, t.exception())

        task.add_done_callback(_done)
        return task

    async def _send_volume(self, value: float):
        await self._setup
        await self._session.command(
            "volume", {"val": math.floor(value * VOLUME_SCALE + 0.5)})

    async def _load_src(self, value: str):
        await self._setup
        await self._session.command("pl_empty")
        await self._session.command("in_enqueue", {"input": value})
        self.playing = False

    async def _send_seek(self, seconds: int):
        await self._setup
        await self._session.command("seek", {"val": seconds})

    # ── Volume ──

    @property
    def volume(self) -> float:
        """The volume of the audio, 0–1."""
        return self._volume

    @volume.setter
    def volume(self, value: float):
        self.set_volume(value)

    def set_volume(self, value: float) -> asyncio.Task:
        """Set the volume (0–1) and return the task sending it to VLC."""
        if not _is_number(value):
            raise TypeError(f"volume must be a number, got {type(value).__name__}")
        if not 0 <= value <= 1:
            raise ValueError(f"volume must be between 0 and 1, got {value}")
        self._volume = value
        return self._dispatch(self._send_volume(value), "Volume change")

    # ── Source ──

    @property
    def src(self) -> str | None:
        """The source URI or path of the audio."""
        return self._src

    @src.setter
    def src(self, value: str):
        self.set_src(value)

    def set_src(self, value: str) -> asyncio.Task:
        """Replace the queued source.  Playback does not start automatically."""
        if not isinstance(value, str):
            raise TypeError(f"src must be a string, got {type(value).__name__}")
        self._src = value
        return self._dispatch(self._load_src(value), "Source change")

    # ── Position ──

    @property
    def current_time(self) -> float:
        """The playback position in seconds, as of the latest poll."""
        return self._current_time

    @current_time.setter
    def current_time(self, value: int):
        self.seek(value)

    def seek(self, seconds: int) -> asyncio.Task:
        """Seek to *seconds*.  ``current_time`` follows on the next poll."""
        if not _is_number(seconds) or (
                isinstance(seconds, float) and not seconds.is_integer()):
            raise TypeError(f"seek position must be an integer, got {seconds!r}")
        if seconds < 0:
            raise ValueError(f"seek position must be >= 0, got {seconds}")
        return self._dispatch(self._send_seek(int(seconds)), "Seek")

    # ── Teardown ──

    async def destroy(self) -> None:
        """Stop polling and terminate the VLC process."""
        if self._poll_task:
            self._poll_task.cancel()
            try:
                await self._poll_task
            except (asyncio.CancelledError, Exception):
                pass
            self._poll_task = None

        if not self._setup.done():
            self._setup.cancel()
            try:
                await self._setup
            except (asyncio.CancelledError, VlcError):
                pass
        elif not self._setup.cancelled() and self._setup.exception() is not None:
            log.warning("Setup had failed: %s", self._setup.exception())

        if self._session is not None:
            await self._session.kill()
            log.info("Player destroyed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.destroy()
