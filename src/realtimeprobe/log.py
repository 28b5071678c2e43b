# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for realtimeprobe."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = os.getenv("REALTIMEPROBE_LOG_LEVEL", "WARNING").upper()

# Client libraries that log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "azure")


def resolve_level(level: str | None = None, *, verbose: bool = False) -> int:
    """Numeric level for a name; ``verbose`` forces DEBUG so every attempt outcome is logged."""
    if verbose:
        return logging.DEBUG
    return getattr(logging, (level or DEFAULT_LOG_LEVEL).upper(), logging.WARNING)


def setup_logging(level: str | None = None, *, verbose: bool = False) -> int:
    """Configure standard logging for CLI/library use and return the effective level."""
    effective_level = resolve_level(level, verbose=verbose)
    logging.basicConfig(
        level=effective_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s" if verbose else "%(levelname)s %(name)s: %(message)s",
    )
    noisy_level = logging.DEBUG if effective_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
    return effective_level


__all__ = ["resolve_level", "setup_logging"]
