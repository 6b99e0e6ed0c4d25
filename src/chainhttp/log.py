# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for chainhttp."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = os.getenv("CHAINHTTP_LOG_LEVEL", "WARNING").upper()
TRACE_LOGGER_NAME = "chainhttp.trace"


def setup_logging(level: str | None = None) -> None:
    """Configure standard logging for CLI/library use."""
    effective_level = (level or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, effective_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def get_trace_logger() -> logging.Logger:
    """Return the logger request/response traces are written to."""
    return logging.getLogger(TRACE_LOGGER_NAME)


__all__ = ["TRACE_LOGGER_NAME", "get_trace_logger", "setup_logging"]
