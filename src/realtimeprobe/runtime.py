# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level facade wiring settings, candidate generation and the probe runner."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .config import ProbeSettings, load_settings
from .errors import ConfigurationError
from .models import EndpointCandidate, ProbeRequest, ProbeTrace
from .probe.candidates import candidates_for_request
from .probe.runner import ProbeRunner
from .transport.client import HandshakeTransport, create_default_transport


def _as_tuple(values: Sequence[Any] | None) -> tuple[Any, ...] | None:
    return tuple(values) if values else None


class RealtimeProbe:
    """
    Convenience wrapper around one immutable ProbeSettings value.

    All runs share the same settings and transport; each run gets a fresh trace.
    """

    def __init__(self, settings: ProbeSettings | None = None, transport: HandshakeTransport | None = None):
        self.settings = settings or load_settings()
        self.runner = ProbeRunner(transport or create_default_transport(self.settings))

    def build_request(
        self,
        *,
        versions: Sequence[str] | None = None,
        paths: Sequence[str] | None = None,
        param_names: Sequence[str] | None = None,
        protocol_sets: Sequence[Sequence[str]] | None = None,
        timeout: float | None = None,
        concurrency: int | None = None,
        max_redirect_hops: int | None = None,
    ) -> ProbeRequest:
        """Fail fast on missing endpoint/credentials, then layer overrides onto the settings."""
        if not self.settings.endpoint:
            raise ConfigurationError("Missing AZURE_OPENAI_ENDPOINT")
        if not self.settings.api_key:
            raise ConfigurationError("Missing AZURE_OPENAI_API_KEY")
        if not self.settings.deployment:
            raise ConfigurationError("Missing AZURE_OPENAI_REALTIME_DEPLOYMENT")
        return ProbeRequest.from_settings(
            self.settings,
            versions=_as_tuple(versions),
            paths=_as_tuple(paths),
            param_names=_as_tuple(param_names),
            protocol_sets=tuple(tuple(tokens) for tokens in protocol_sets) if protocol_sets else None,
            timeout=timeout,
            concurrency=concurrency,
            max_redirect_hops=max_redirect_hops,
        )

    def candidates(self, **overrides: Any) -> list[EndpointCandidate]:
        return candidates_for_request(self.build_request(**overrides))

    def discover(self, **overrides: Any) -> ProbeTrace:
        """Try every candidate combination until one handshake succeeds."""
        request = self.build_request(**overrides)
        return self.run_request(request)

    async def adiscover(self, **overrides: Any) -> ProbeTrace:
        request = self.build_request(**overrides)
        return await self.runner.arun(
            candidates_for_request(request),
            timeout=request.timeout,
            headers=request.headers,
            max_redirect_hops=request.max_redirect_hops,
            concurrency=request.concurrency,
        )

    def run_request(self, request: ProbeRequest) -> ProbeTrace:
        candidates = candidates_for_request(request)
        return self.runner.run(
            candidates,
            timeout=request.timeout,
            headers=request.headers,
            max_redirect_hops=request.max_redirect_hops,
            concurrency=request.concurrency,
        )

    def probe_once(
        self,
        *,
        version: str | None = None,
        path: str | None = None,
        param_name: str | None = None,
        protocols: Sequence[str] | None = None,
        timeout: float | None = None,
    ) -> ProbeTrace:
        """Try exactly one endpoint shape; unspecified parts default to the first configured value."""
        defaults = self.settings
        version = version or next(iter(defaults.versions), None)
        path = path or next(iter(defaults.paths), None)
        param_name = param_name or next(iter(defaults.param_names), None)
        protocol_set = tuple(protocols) if protocols is not None else next(iter(defaults.protocol_sets), None)
        if not (version and path and param_name) or protocol_set is None:
            raise ConfigurationError("probe_once needs a version, path, param name and protocol set")
        request = self.build_request(
            versions=[version],
            paths=[path],
            param_names=[param_name],
            protocol_sets=[protocol_set],
            timeout=timeout,
            concurrency=1,
        )
        return self.run_request(request)

    def environment(self) -> dict[str, Any]:
        """Redacted configuration summary."""
        return self.settings.summary()

    def close(self) -> None:
        if hasattr(self.runner.transport, "close"):
            self.runner.transport.close()

    def __enter__(self) -> RealtimeProbe:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()
