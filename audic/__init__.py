# Audic
# Copyright (C) 2026 Audic contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Audic — play audio through a VLC process from asyncio code.

  player.py  — the Audic facade (play/pause, volume, src, current_time)
  vlc.py     — launches VLC and talks to its HTTP interface
  config.py  — optional JSON config (VLC path, timeouts, poll interval)
"""

from .player import Audic
from .vlc import VlcError, VlcSession, acquire, find_vlc

__all__ = [
    "Audic",
    "VlcError",
    "VlcSession",
    "acquire",
    "find_vlc",
]

__version__ = "0.1.0"
