# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport abstraction and factory."""

from __future__ import annotations

import httpx

from ..config import ClientSettings, load_client_settings

# Anything that sends one request and returns one response.
Transport = httpx.BaseTransport


def create_default_transport(settings: ClientSettings | None = None) -> Transport:
    """Factory for the default httpx-backed transport."""
    settings = settings or load_client_settings()
    return httpx.HTTPTransport(verify=settings.verify_ssl)


__all__ = ["Transport", "create_default_transport"]
