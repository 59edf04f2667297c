"""Pytest configuration and fixtures for Audic tests."""

import asyncio

import pytest

from audic import config
from audic.vlc import VlcError


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config loader at an empty temp dir for every test."""
    monkeypatch.setenv("AUDIC_CONFIG", str(tmp_path / "missing.json"))
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    config._config = None
    yield tmp_path
    config._config = None


class FakeSession:
    """In-memory stand-in for VlcSession that records every command."""

    def __init__(self, status=None):
        self.commands = []
        self.status = status if status is not None else {"length": 120, "time": 5}
        self.info_calls = 0
        self.commands_before_first_poll = None
        self.fail_commands = set()
        self.killed = False

    async def command(self, name, args=None):
        if name in self.fail_commands:
            raise VlcError(f"{name} rejected")
        self.commands.append((name, args))
        return {}

    async def info(self):
        if self.info_calls == 0:
            self.commands_before_first_poll = list(self.commands)
        self.info_calls += 1
        if isinstance(self.status, Exception):
            raise self.status
        return dict(self.status)

    async def kill(self):
        self.killed = True


def acquire_for(session, gate: asyncio.Event | None = None):
    """Build an ``acquire`` callable returning *session*, optionally after *gate*."""

    async def _acquire():
        if gate is not None:
            await gate.wait()
        return session

    return _acquire


async def wait_until(predicate, timeout=1.0):
    """Poll *predicate* until it is true or *timeout* seconds pass."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def session():
    return FakeSession()
