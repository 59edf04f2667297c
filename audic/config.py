# Audic
# Copyright (C) 2026 Audic contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Shared configuration loader for Audic.

Loads a single JSON config file.  Search order:
  1. $AUDIC_CONFIG                  (explicit override)
  2. ~/.config/audic/config.json    (per-user)
  3. audic.json                     (CWD — handy for local dev)

Usage:
    from audic.config import cfg

    vlc_path      = cfg("vlc", "path")
    poll_interval = cfg("poll", "interval", default=1.0)
    vlc           = cfg("vlc")  # returns the whole dict
"""

import json
import logging
import os

logger = logging.getLogger(__name__)

_config: dict | None = None

KNOWN_SECTIONS = ("vlc", "http", "poll")


def _search_paths() -> list[str]:
    paths = []
    override = os.environ.get("AUDIC_CONFIG")
    if override:
        paths.append(override)
    paths.append(os.path.expanduser("~/.config/audic/config.json"))
    paths.append("audic.json")
    return paths


def _positive(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _section(config: dict, name: str) -> dict:
    val = config.get(name)
    return val if isinstance(val, dict) else {}


def _validate(config: dict, path: str) -> None:
    """Warn about unknown sections or suspicious values."""
    for section in config:
        if section not in KNOWN_SECTIONS:
            logger.warning("Config %s: unknown section '%s'", path, section)
    vlc = _section(config, "vlc")
    if "args" in vlc and not isinstance(vlc["args"], list):
        logger.warning("Config %s: vlc.args must be a list — ignoring it", path)
    if "startup_timeout" in vlc and not _positive(vlc["startup_timeout"]):
        logger.warning("Config %s: vlc.startup_timeout must be positive", path)
    http = _section(config, "http")
    if "timeout" in http and not _positive(http["timeout"]):
        logger.warning("Config %s: http.timeout must be positive", path)
    poll = _section(config, "poll")
    if "interval" in poll and not _positive(poll["interval"]):
        logger.warning("Config %s: poll.interval must be positive", path)


def load_config() -> dict:
    """Load config from the first JSON file found. Cached after first call."""
    global _config
    if _config is not None:
        return _config

    for path in _search_paths():
        try:
            with open(path) as f:
                loaded = json.load(f)
        except FileNotFoundError:
            continue
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in %s: %s", path, e)
            continue
        if not isinstance(loaded, dict):
            logger.error("Config %s: top level must be an object", path)
            continue
        _config = loaded
        logger.info("Config loaded from %s", path)
        _validate(_config, path)
        return _config

    logger.debug("No config file found — using defaults")
    _config = {}
    return _config


def cfg(section: str, key: str | None = None, *, default=None):
    """Read a config value.

    cfg("vlc")                        → config["vlc"]
    cfg("vlc", "path")                → config["vlc"]["path"]
    cfg("poll", "interval", default=1.0)  → config["poll"]["interval"] or 1.0
    """
    config = load_config()
    val = config.get(section)
    if key is None:
        return val if val is not None else default
    if isinstance(val, dict):
        return val.get(key, default)
    return default


def reload_config():
    """Force re-read from disk (for testing or hot-reload)."""
    global _config
    _config = None
    return load_config()
