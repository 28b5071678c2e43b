# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe invocation bundle."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from ..config import ProbeSettings


@dataclass(frozen=True)
class ProbeRequest:
    """
    Everything one discovery run needs.

    `headers` are opaque credential/negotiation headers sent with every handshake.
    List fields are tried in order, so the most likely value goes first.
    """

    base_endpoint: str
    deployment_id: str
    versions: tuple[str, ...] = ()
    paths: tuple[str, ...] = ()
    param_names: tuple[str, ...] = ()
    protocol_sets: tuple[tuple[str, ...], ...] = ()
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float = 7.0
    concurrency: int = 1
    max_redirect_hops: int = 1

    @classmethod
    def from_settings(cls, settings: ProbeSettings, **overrides: Any) -> ProbeRequest:
        """Build a request from settings; None-valued overrides are ignored."""
        request = cls(
            base_endpoint=settings.endpoint,
            deployment_id=settings.deployment,
            versions=tuple(settings.versions),
            paths=tuple(settings.paths),
            param_names=tuple(settings.param_names),
            protocol_sets=tuple(tuple(tokens) for tokens in settings.protocol_sets),
            headers=settings.credential_headers(),
            timeout=settings.timeout,
            concurrency=settings.concurrency,
            max_redirect_hops=settings.max_redirect_hops,
        )
        filtered = {key: value for key, value in overrides.items() if value is not None}
        return replace(request, **filtered) if filtered else request


__all__ = ["ProbeRequest"]
