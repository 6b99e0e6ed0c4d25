# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for chainhttp."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"chainhttp/{__version__}"

TIMEOUT_10 = 10.0
TIMEOUT_20 = 20.0


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ClientSettings:
    """Client and transport defaults."""

    timeout: float = TIMEOUT_10
    slow_threshold: float = 5.0
    verify_ssl: bool = True
    follow_redirects: bool = True
    log_colors: bool = True
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls) -> "ClientSettings":
        """Create settings from environment variables (evaluated at call time)."""
        timeout = _float_env("CHAINHTTP_TIMEOUT", cls.timeout)
        if timeout <= 0:
            timeout = cls.timeout
        slow_threshold = _float_env("CHAINHTTP_SLOW_THRESHOLD", cls.slow_threshold)
        if slow_threshold < 0:
            slow_threshold = cls.slow_threshold
        return cls(
            timeout=timeout,
            slow_threshold=slow_threshold,
            verify_ssl=_bool_env("CHAINHTTP_VERIFY_SSL", cls.verify_ssl),
            follow_redirects=_bool_env("CHAINHTTP_REDIRECTS", cls.follow_redirects),
            log_colors=_bool_env("CHAINHTTP_LOG_COLORS", cls.log_colors),
            user_agent=os.getenv("CHAINHTTP_USER_AGENT", cls.user_agent),
        )


def load_client_settings() -> ClientSettings:
    """Load client settings from environment with sensible defaults."""
    return ClientSettings.from_env()
