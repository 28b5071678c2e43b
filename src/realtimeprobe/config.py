# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for realtimeprobe."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

from .version import __version__

DEFAULT_USER_AGENT = f"realtimeprobe/{__version__}"
DEFAULT_DEPLOYMENT = "gpt-realtime"
DEFAULT_API_VERSIONS: tuple[str, ...] = ("2024-10-01-preview", "2025-08-28")
DEFAULT_PATHS: tuple[str, ...] = ("openai/realtime", "openai/realtime/audio")
DEFAULT_PARAM_NAMES: tuple[str, ...] = ("deployment", "deploymentId")
DEFAULT_PROTOCOL_SETS: tuple[tuple[str, ...], ...] = (("realtime",), ("oai-realtime",))
AUTH_SCHEMES = ("bearer", "api-key")


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or default


def parse_protocol_sets(raw: str) -> tuple[tuple[str, ...], ...]:
    """Parse ``a,b;c`` into ``(("a", "b"), ("c",))``."""
    sets: list[tuple[str, ...]] = []
    for chunk in str(raw or "").split(";"):
        tokens = tuple(token.strip() for token in chunk.split(",") if token.strip())
        if tokens:
            sets.append(tokens)
    return tuple(sets)


def _protocol_sets_env(name: str, default: tuple[tuple[str, ...], ...]) -> tuple[tuple[str, ...], ...]:
    value = os.getenv(name)
    if value is None:
        return default
    return parse_protocol_sets(value) or default


def unique(values: Any) -> list[Any]:
    """Drop falsy entries and duplicates, keeping first-seen order."""
    seen: set[Any] = set()
    out: list[Any] = []
    for value in values or ():
        if not value or value in seen:
            continue
        seen.add(value)
        out.append(value)
    return out


@dataclass(frozen=True)
class ProbeSettings:
    """Probe configuration, built once at process start and passed explicitly."""

    endpoint: str = ""
    api_key: str | None = None
    deployment: str = DEFAULT_DEPLOYMENT
    api_version: str | None = None
    fallback_versions: tuple[str, ...] = DEFAULT_API_VERSIONS
    paths: tuple[str, ...] = DEFAULT_PATHS
    param_names: tuple[str, ...] = DEFAULT_PARAM_NAMES
    protocol_sets: tuple[tuple[str, ...], ...] = DEFAULT_PROTOCOL_SETS
    auth_scheme: str = "bearer"
    beta_header: str = "realtime=v1"
    timeout: float = 7.0
    concurrency: int = 1
    max_redirect_hops: int = 1
    verify_ssl: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    self_base_url: str = ""
    acs_connection_string: str | None = None
    extra_headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "ProbeSettings":
        """Create settings from environment variables (evaluated at call time)."""
        auth_scheme = os.getenv("REALTIMEPROBE_AUTH_SCHEME", cls.auth_scheme).strip().lower()
        if auth_scheme not in AUTH_SCHEMES:
            auth_scheme = cls.auth_scheme
        concurrency = _int_env("REALTIMEPROBE_CONCURRENCY", cls.concurrency)
        max_redirect_hops = _int_env("REALTIMEPROBE_MAX_REDIRECTS", cls.max_redirect_hops)
        timeout = _float_env("REALTIMEPROBE_TIMEOUT", cls.timeout)
        return cls(
            endpoint=os.getenv("AZURE_OPENAI_ENDPOINT", "").strip().rstrip("/"),
            api_key=os.getenv("AZURE_OPENAI_API_KEY") or None,
            deployment=os.getenv("AZURE_OPENAI_REALTIME_DEPLOYMENT") or cls.deployment,
            api_version=os.getenv("AZURE_OPENAI_API_VERSION") or None,
            fallback_versions=_list_env("REALTIMEPROBE_API_VERSIONS", cls.fallback_versions),
            paths=_list_env("REALTIMEPROBE_PATHS", cls.paths),
            param_names=_list_env("REALTIMEPROBE_PARAM_NAMES", cls.param_names),
            protocol_sets=_protocol_sets_env("REALTIMEPROBE_PROTOCOLS", cls.protocol_sets),
            auth_scheme=auth_scheme,
            beta_header=os.getenv("REALTIMEPROBE_BETA_HEADER", cls.beta_header).strip(),
            timeout=timeout if timeout > 0 else cls.timeout,
            concurrency=max(1, concurrency),
            max_redirect_hops=max(0, max_redirect_hops),
            verify_ssl=_bool_env("REALTIMEPROBE_VERIFY_SSL", cls.verify_ssl),
            user_agent=os.getenv("REALTIMEPROBE_USER_AGENT", cls.user_agent),
            self_base_url=os.getenv("SELF_BASE_URL", "").strip().rstrip("/"),
            acs_connection_string=os.getenv("ACS_CONNECTION_STRING") or None,
        )

    @property
    def versions(self) -> list[str]:
        """Operator-declared version first, then the known fallbacks."""
        return unique([self.api_version, *self.fallback_versions])

    def credential_headers(self) -> dict[str, str]:
        """Headers carrying the API key and fixed protocol-negotiation values."""
        headers: dict[str, str] = {}
        if self.api_key:
            if self.auth_scheme == "api-key":
                headers["api-key"] = self.api_key
            else:
                headers["Authorization"] = f"Bearer {self.api_key}"
        if self.beta_header:
            headers["OpenAI-Beta"] = self.beta_header
        headers.update(self.extra_headers)
        return headers

    def summary(self) -> dict[str, Any]:
        """Redacted view of the settings, safe to print."""
        return {
            "AZURE_OPENAI_ENDPOINT": self.endpoint,
            "AZURE_OPENAI_API_VERSION": self.api_version,
            "AZURE_OPENAI_REALTIME_DEPLOYMENT": self.deployment,
            "HAS_API_KEY": bool(self.api_key),
            "auth_scheme": self.auth_scheme,
            "versions": self.versions,
            "paths": list(self.paths),
            "param_names": list(self.param_names),
            "protocol_sets": [list(tokens) for tokens in self.protocol_sets],
            "timeout": self.timeout,
            "concurrency": self.concurrency,
            "max_redirect_hops": self.max_redirect_hops,
            "verify_ssl": self.verify_ssl,
            "SELF_BASE_URL": self.self_base_url,
            "HAS_ACS_CONNECTION_STRING": bool(self.acs_connection_string),
        }


def load_settings() -> ProbeSettings:
    """Load probe settings from environment with sensible defaults."""
    return ProbeSettings.from_env()


__all__ = [
    "AUTH_SCHEMES",
    "DEFAULT_API_VERSIONS",
    "DEFAULT_PARAM_NAMES",
    "DEFAULT_PATHS",
    "DEFAULT_PROTOCOL_SETS",
    "DEFAULT_USER_AGENT",
    "ProbeSettings",
    "load_settings",
    "parse_protocol_sets",
    "unique",
]
