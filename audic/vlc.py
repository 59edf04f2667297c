# Audic
# Copyright (C) 2026 Audic contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
VLC control session — launches a VLC process and talks to its HTTP interface.

VLC HTTP API (``--extraintf http``, basic auth with an empty user name):
  GET /requests/status.json                      — current status (length, time, state, ...)
  GET /requests/status.json?command=in_enqueue&input=URI
  GET /requests/status.json?command=pl_pause&id=0 — toggle pause
  GET /requests/status.json?command=pl_loop       — toggle playlist loop
  GET /requests/status.json?command=pl_empty      — clear the playlist
  GET /requests/status.json?command=volume&val=N  — 0–256 (256 = 100%)
  GET /requests/status.json?command=seek&val=S    — absolute seconds

Usage:
    session = await acquire()
    await session.command("in_enqueue", {"input": "track.mp3"})
    status = await session.info()
    await session.kill()
"""

import asyncio
import logging
import os
import platform
import secrets
import socket
from shutil import which

import aiohttp

from .config import cfg

log = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
STARTUP_TIMEOUT = 10      # seconds to wait for the HTTP interface
STARTUP_POLL = 0.1        # seconds between readiness probes
HTTP_TIMEOUT = 5          # total timeout per request
KILL_TIMEOUT = 2          # grace period between terminate() and kill()

# Stock install locations when vlc is not on PATH
_PLATFORM_PATHS = {
    "Darwin": ["/Applications/VLC.app/Contents/MacOS/VLC"],
    "Windows": [
        r"C:\Program Files\VideoLAN\VLC\vlc.exe",
        r"C:\Program Files (x86)\VideoLAN\VLC\vlc.exe",
    ],
}


class VlcError(RuntimeError):
    """Raised when VLC cannot be launched or a request to it fails."""


def find_vlc() -> str:
    """Locate the VLC executable.

    Checks the configured ``vlc.path`` first, then ``vlc``/``cvlc`` on PATH,
    then the platform's default install location.
    """
    configured = cfg("vlc", "path")
    if configured:
        return configured
    for name in ("vlc", "cvlc"):
        found = which(name)
        if found:
            return found
    for candidate in _PLATFORM_PATHS.get(platform.system(), []):
        if os.path.exists(candidate):
            return candidate
    raise VlcError("VLC executable not found — install VLC or set vlc.path in the config")


def _free_port(host: str) -> int:
    """Ask the OS for an unused TCP port on *host*."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


def _extra_args() -> list[str]:
    extra = cfg("vlc", "args", default=[])
    if not isinstance(extra, list):
        return []
    return [str(a) for a in extra]


class VlcSession:
    """An HTTP control channel to one running VLC process."""

    def __init__(self, process, host: str, port: int, password: str,
                 timeout: float = HTTP_TIMEOUT):
        self.process = process
        self.host = host
        self.port = port
        self._timeout = timeout
        self._http: aiohttp.ClientSession | None = aiohttp.ClientSession(
            headers={"Authorization": aiohttp.BasicAuth("", password).encode()},
            timeout=aiohttp.ClientTimeout(total=timeout),
        )

    @property
    def status_url(self) -> str:
        return f"http://{self.host}:{self.port}/requests/status.json"

    @property
    def closed(self) -> bool:
        return self._http is None

    async def _request(self, params: dict | None = None) -> dict:
        if self._http is None:
            raise VlcError("VLC session is closed")
        try:
            async with self._http.get(self.status_url, params=params) as resp:
                resp.raise_for_status()
                return await resp.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise VlcError(f"VLC did not answer within {self._timeout}s") from e
        except aiohttp.ClientError as e:
            raise VlcError(f"VLC request failed: {e}") from e
        except ValueError as e:
            raise VlcError(f"VLC sent an invalid status reply: {e}") from e

    async def command(self, name: str, args: dict | None = None) -> dict:
        """Send *name* with optional *args* as query parameters."""
        params = {"command": name}
        for key, value in (args or {}).items():
            params[key] = str(value)
        log.debug("-> VLC %s %s", name, args or "")
        return await self._request(params)

    async def info(self) -> dict:
        """Return VLC's current status dict."""
        return await self._request()

    async def kill(self) -> None:
        """Close the HTTP session and stop the VLC process."""
        if self._http is not None:
            await self._http.close()
            self._http = None

        if self.process.returncode is not None:
            return
        try:
            self.process.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(self.process.wait(), KILL_TIMEOUT)
        except asyncio.TimeoutError:
            log.warning("VLC ignored terminate — killing pid %s", self.process.pid)
            self.process.kill()
            await self.process.wait()
        log.info("VLC stopped (pid %s)", self.process.pid)


async def acquire(*, executable: str | None = None, host: str | None = None,
                  startup_timeout: float | None = None) -> VlcSession:
    """Launch VLC with its HTTP interface and wait until it answers."""
    executable = executable or find_vlc()
    host = host or cfg("vlc", "host", default=DEFAULT_HOST)
    if startup_timeout is None:
        startup_timeout = float(cfg("vlc", "startup_timeout", default=STARTUP_TIMEOUT))
    http_timeout = float(cfg("http", "timeout", default=HTTP_TIMEOUT))

    port = _free_port(host)
    password = secrets.token_hex(16)
    cmd = [
        "--intf", "dummy",
        "--extraintf", "http",
        "--http-host", host,
        "--http-port", str(port),
        "--http-password", password,
        *_extra_args(),
    ]

    try:
        process = await asyncio.create_subprocess_exec(
            executable, *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as e:
        raise VlcError(f"Could not launch {executable}: {e}") from e
    log.info("Launched VLC pid %s (%s), HTTP on %s:%d",
             process.pid, executable, host, port)

    session = VlcSession(process, host, port, password, timeout=http_timeout)
    loop = asyncio.get_running_loop()
    deadline = loop.time() + startup_timeout
    try:
        while True:
            await asyncio.sleep(STARTUP_POLL)
            if process.returncode is not None:
                raise VlcError(f"VLC exited immediately (code {process.returncode})")
            try:
                await session.info()
                break
            except VlcError:
                if loop.time() >= deadline:
                    raise VlcError(
                        f"Could not connect to VLC HTTP interface on {host}:{port}")
    except BaseException:
        await session.kill()
        raise

    log.info("VLC session ready on %s:%d", host, port)
    return session
