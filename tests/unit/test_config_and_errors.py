# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
import socket
import ssl

import httpx

from chainhttp import config, log
from chainhttp.config import DEFAULT_USER_AGENT, TIMEOUT_10, TIMEOUT_20
from chainhttp.errors import (
    ErrorCategory,
    InternalServerError,
    StatusError,
    TransportError,
    UnsupportedFormatError,
    categorize_exception,
    error_category_to_reason,
)
from chainhttp.http.client import new_default_client


def test_client_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("CHAINHTTP_TIMEOUT", "5.5")
    monkeypatch.setenv("CHAINHTTP_SLOW_THRESHOLD", "0.25")
    monkeypatch.setenv("CHAINHTTP_VERIFY_SSL", "0")
    monkeypatch.setenv("CHAINHTTP_REDIRECTS", "false")
    monkeypatch.setenv("CHAINHTTP_LOG_COLORS", "no")
    monkeypatch.setenv("CHAINHTTP_USER_AGENT", "CustomAgent/1.0")

    settings = config.load_client_settings()

    assert settings.timeout == 5.5
    assert settings.slow_threshold == 0.25
    assert settings.verify_ssl is False
    assert settings.follow_redirects is False
    assert settings.log_colors is False
    assert settings.user_agent == "CustomAgent/1.0"


def test_client_settings_invalid_env_fall_back(monkeypatch):
    monkeypatch.setenv("CHAINHTTP_TIMEOUT", "not-a-number")
    monkeypatch.setenv("CHAINHTTP_SLOW_THRESHOLD", "-3")
    monkeypatch.delenv("CHAINHTTP_USER_AGENT", raising=False)

    settings = config.load_client_settings()

    assert settings.timeout == config.ClientSettings.timeout
    assert settings.slow_threshold == config.ClientSettings.slow_threshold
    assert settings.user_agent == DEFAULT_USER_AGENT


def test_non_positive_timeout_falls_back(monkeypatch):
    monkeypatch.setenv("CHAINHTTP_TIMEOUT", "0")
    assert config.load_client_settings().timeout == TIMEOUT_10


def test_load_client_settings_reads_env_at_call_time(monkeypatch):
    monkeypatch.setenv("CHAINHTTP_TIMEOUT", "7.7")
    assert config.load_client_settings().timeout == 7.7
    monkeypatch.setenv("CHAINHTTP_TIMEOUT", str(TIMEOUT_20))
    assert new_default_client().option.timeout == 20.0


def test_setup_logging_uses_level(monkeypatch):
    captured = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))
    log.setup_logging("debug")
    assert captured["level"] == logging.DEBUG
    log.setup_logging("nonsense")
    assert captured["level"] == logging.WARNING
    assert log.get_trace_logger().name == "chainhttp.trace"


def test_categorize_exception():
    request = httpx.Request("GET", "http://example")
    assert categorize_exception(httpx.ConnectTimeout("t", request=request)) is ErrorCategory.TIMEOUT
    assert categorize_exception(httpx.ConnectError("c", request=request)) is ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(ConnectionResetError()) is ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(ssl.SSLError("bad cert")) is ErrorCategory.SSL_ERROR
    assert categorize_exception(socket.gaierror("no such host")) is ErrorCategory.DNS_ERROR
    assert categorize_exception(ValueError("x")) is ErrorCategory.UNKNOWN_ERROR

    try:
        try:
            raise socket.gaierror("no such host")
        except socket.gaierror as inner:
            raise httpx.ConnectError("wrapped", request=request) from inner
    except httpx.ConnectError as exc:
        assert categorize_exception(exc) is ErrorCategory.DNS_ERROR


def test_error_reasons_and_attributes():
    assert error_category_to_reason(ErrorCategory.DNS_ERROR) == "DNS resolution failure"
    assert error_category_to_reason(None) == ""

    error = TransportError.from_exception(httpx.ReadTimeout("slow", request=httpx.Request("GET", "http://x")))
    assert error.category is ErrorCategory.TIMEOUT
    assert error.retry_safe is False
    assert str(error) == "slow"

    server = InternalServerError(status_code=503, body=b"overloaded")
    assert isinstance(server, StatusError)
    assert str(server) == "internal server error"
    assert "xml" in str(UnsupportedFormatError("xml"))
