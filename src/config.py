"""Configuration and environment helpers for the cache host process.

Provides small helpers to read typed environment variables and exposes
the settings the server passes into the CacheManager it owns. The cache
engine itself never reads the environment.
"""

from __future__ import annotations

import logging
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_log_level(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        return default
    return level


# Sweep due entries after every write (off: sweep only on keys/size/stats)
CACHE_SWEEP_ON_WRITE = _env_bool("CACHE_SWEEP_ON_WRITE", True)

# Memory estimate tuning
CACHE_FALLBACK_ENTRY_BYTES = _env_int("CACHE_FALLBACK_ENTRY_BYTES", 1024)
CACHE_BYTES_PER_CHAR = _env_int("CACHE_BYTES_PER_CHAR", 2)

# Logging goes to stderr; stdout carries the stdio transport
LOG_LEVEL = _env_log_level("LOG_LEVEL", "WARNING")
