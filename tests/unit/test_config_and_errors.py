# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
import socket
import ssl

import httpx
import pytest

from realtimeprobe import config
from realtimeprobe.config import DEFAULT_USER_AGENT, ProbeSettings, parse_protocol_sets
from realtimeprobe.errors import ErrorCategory, HandshakeError, categorize_exception, error_category_to_reason
from realtimeprobe.log import NOISY_LOGGERS, resolve_level, setup_logging

ENV_VARS = [
    "AZURE_OPENAI_ENDPOINT",
    "AZURE_OPENAI_API_KEY",
    "AZURE_OPENAI_REALTIME_DEPLOYMENT",
    "AZURE_OPENAI_API_VERSION",
    "REALTIMEPROBE_API_VERSIONS",
    "REALTIMEPROBE_PATHS",
    "REALTIMEPROBE_PARAM_NAMES",
    "REALTIMEPROBE_PROTOCOLS",
    "REALTIMEPROBE_AUTH_SCHEME",
    "REALTIMEPROBE_BETA_HEADER",
    "REALTIMEPROBE_TIMEOUT",
    "REALTIMEPROBE_CONCURRENCY",
    "REALTIMEPROBE_MAX_REDIRECTS",
    "REALTIMEPROBE_VERIFY_SSL",
    "REALTIMEPROBE_USER_AGENT",
    "SELF_BASE_URL",
    "ACS_CONNECTION_STRING",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults():
    settings = config.load_settings()
    assert settings.endpoint == ""
    assert settings.api_key is None
    assert settings.deployment == "gpt-realtime"
    assert settings.versions == ["2024-10-01-preview", "2025-08-28"]
    assert settings.timeout == 7.0
    assert settings.concurrency == 1
    assert settings.max_redirect_hops == 1
    assert settings.user_agent == DEFAULT_USER_AGENT
    assert settings.credential_headers() == {"OpenAI-Beta": "realtime=v1"}
    assert settings.acs_connection_string is None


def test_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://aoai.example.com///")
    monkeypatch.setenv("AZURE_OPENAI_API_KEY", "secret")
    monkeypatch.setenv("AZURE_OPENAI_REALTIME_DEPLOYMENT", "my-rt")
    monkeypatch.setenv("AZURE_OPENAI_API_VERSION", "2025-08-28")
    monkeypatch.setenv("REALTIMEPROBE_API_VERSIONS", "2025-08-28, 2024-12-17")
    monkeypatch.setenv("REALTIMEPROBE_PATHS", "openai/v1/realtime")
    monkeypatch.setenv("REALTIMEPROBE_PROTOCOLS", "realtime,openai-beta.realtime-v1;oai-realtime")
    monkeypatch.setenv("REALTIMEPROBE_AUTH_SCHEME", "API-KEY")
    monkeypatch.setenv("REALTIMEPROBE_BETA_HEADER", "")
    monkeypatch.setenv("REALTIMEPROBE_TIMEOUT", "2.5")
    monkeypatch.setenv("REALTIMEPROBE_CONCURRENCY", "4")
    monkeypatch.setenv("REALTIMEPROBE_VERIFY_SSL", "off")
    monkeypatch.setenv("SELF_BASE_URL", "https://bot.example.com/")
    monkeypatch.setenv("ACS_CONNECTION_STRING", "endpoint=https://acs.example.com/;accesskey=abc")

    settings = config.load_settings()

    assert settings.endpoint == "https://aoai.example.com"
    assert settings.deployment == "my-rt"
    assert settings.versions == ["2025-08-28", "2024-12-17"]
    assert settings.paths == ("openai/v1/realtime",)
    assert settings.protocol_sets == (("realtime", "openai-beta.realtime-v1"), ("oai-realtime",))
    assert settings.auth_scheme == "api-key"
    assert settings.credential_headers() == {"api-key": "secret"}
    assert settings.timeout == 2.5
    assert settings.concurrency == 4
    assert settings.verify_ssl is False
    assert settings.self_base_url == "https://bot.example.com"
    assert settings.acs_connection_string == "endpoint=https://acs.example.com/;accesskey=abc"
    assert settings.summary()["HAS_ACS_CONNECTION_STRING"] is True
    assert "accesskey" not in repr(settings.summary())


def test_settings_invalid_env_fall_back(monkeypatch):
    monkeypatch.setenv("REALTIMEPROBE_TIMEOUT", "soon")
    monkeypatch.setenv("REALTIMEPROBE_CONCURRENCY", "-3")
    monkeypatch.setenv("REALTIMEPROBE_MAX_REDIRECTS", "many")
    monkeypatch.setenv("REALTIMEPROBE_AUTH_SCHEME", "digest")
    monkeypatch.setenv("REALTIMEPROBE_PATHS", " , ")

    settings = config.load_settings()

    assert settings.timeout == ProbeSettings.timeout
    assert settings.concurrency == 1
    assert settings.max_redirect_hops == ProbeSettings.max_redirect_hops
    assert settings.auth_scheme == "bearer"
    assert settings.paths == config.DEFAULT_PATHS


def test_load_settings_reads_env_at_call_time(monkeypatch):
    monkeypatch.setenv("REALTIMEPROBE_TIMEOUT", "1.5")
    assert config.load_settings().timeout == 1.5
    monkeypatch.setenv("REALTIMEPROBE_TIMEOUT", "3")
    assert config.load_settings().timeout == 3.0


def test_summary_redacts_api_key():
    summary = ProbeSettings(endpoint="https://h", api_key="secret").summary()
    assert summary["HAS_API_KEY"] is True
    assert "secret" not in repr(summary)


def test_bearer_headers_and_extra_headers():
    settings = ProbeSettings(api_key="k", extra_headers={"X-Trace": "1"})
    assert settings.credential_headers() == {"Authorization": "Bearer k", "OpenAI-Beta": "realtime=v1", "X-Trace": "1"}


def test_parse_protocol_sets():
    assert parse_protocol_sets("a, b ; c;;") == (("a", "b"), ("c",))
    assert parse_protocol_sets("") == ()


def _chained(outer, inner):
    try:
        try:
            raise inner
        except type(inner) as exc:
            raise outer from exc
    except type(outer) as exc:
        return exc


@pytest.mark.parametrize(
    "exc,expected",
    [
        (httpx.ConnectTimeout("slow"), ErrorCategory.TIMEOUT),
        (httpx.ConnectError("refused"), ErrorCategory.CONNECTION_ERROR),
        (httpx.RemoteProtocolError("closed"), ErrorCategory.PROTOCOL_ERROR),
        (HandshakeError("bad accept"), ErrorCategory.PROTOCOL_ERROR),
        (ssl.SSLError("bad cert"), ErrorCategory.SSL_ERROR),
        (socket.gaierror("no such host"), ErrorCategory.DNS_ERROR),
        (ConnectionResetError("reset"), ErrorCategory.CONNECTION_ERROR),
        (RuntimeError("boom"), ErrorCategory.UNKNOWN_ERROR),
    ],
)
def test_categorize_exception(exc, expected):
    assert categorize_exception(exc) == expected


def test_categorize_exception_inspects_cause_chain():
    wrapped_dns = _chained(httpx.ConnectError("[Errno -2] Name or service not known"), socket.gaierror(-2, "unknown"))
    assert categorize_exception(wrapped_dns) == ErrorCategory.DNS_ERROR
    wrapped_tls = _chained(httpx.ConnectError("handshake failed"), ssl.SSLError("cert verify failed"))
    assert categorize_exception(wrapped_tls) == ErrorCategory.SSL_ERROR


def test_error_category_reason():
    assert error_category_to_reason(ErrorCategory.DNS_ERROR) == "DNS resolution failure"
    assert error_category_to_reason(None) == ""


@pytest.fixture
def restore_library_loggers():
    levels = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def test_resolve_level():
    assert resolve_level("info") == logging.INFO
    assert resolve_level("nonsense") == logging.WARNING
    assert resolve_level("error", verbose=True) == logging.DEBUG


def test_setup_logging_quiets_client_libraries_unless_verbose(restore_library_loggers):
    assert setup_logging("INFO") == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING

    assert setup_logging(verbose=True) == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.DEBUG
