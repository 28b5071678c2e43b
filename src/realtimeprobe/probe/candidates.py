# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Candidate endpoint generation."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from urllib.parse import urlencode, urlsplit

from ..config import unique
from ..errors import ConfigurationError
from ..models import EndpointCandidate, ProbeRequest
from ..transport.headers import header_value
from ..transport.url import resolve_location, to_websocket_url

VERSION_PARAM = "api-version"
CREDENTIAL_HEADERS = ("authorization", "api-key")


def normalize_base_endpoint(base_endpoint: str) -> str:
    """
    Validate an http(s) base URL and return its ws(s) form without trailing slashes.

    Raises ConfigurationError for anything that is not an absolute http(s) URL with a host.
    """
    raw = str(base_endpoint or "").strip().rstrip("/")
    if not raw:
        raise ConfigurationError("Missing base endpoint")
    parts = urlsplit(raw)
    if parts.scheme.lower() not in {"http", "https"} or not parts.hostname:
        raise ConfigurationError(f"Base endpoint must be an http(s) URL with a host: {base_endpoint!r}")
    if parts.query or parts.fragment:
        raise ConfigurationError(f"Base endpoint must not carry a query or fragment: {base_endpoint!r}")
    try:
        parts.port
    except ValueError as exc:
        raise ConfigurationError(f"Invalid port in base endpoint: {base_endpoint!r}") from exc
    ws_base = to_websocket_url(raw)
    if ws_base is None:  # pragma: no cover - guarded by the scheme check above
        raise ConfigurationError(f"Cannot derive a WebSocket URL from {base_endpoint!r}")
    return ws_base.rstrip("/")


def _clean(values: Iterable[str] | None) -> list[str]:
    return unique(str(value).strip() for value in (values or ()) if value)


def _clean_protocol_sets(sets: Iterable[Sequence[str] | None] | None) -> list[tuple[str, ...]]:
    # An empty set is a real candidate: the handshake then offers no sub-protocol.
    cleaned: list[tuple[str, ...]] = []
    for tokens in sets or ():
        protocols = tuple(_clean(tokens))
        if protocols not in cleaned:
            cleaned.append(protocols)
    return cleaned


def generate_candidates(
    base_endpoint: str,
    versions: Iterable[str],
    paths: Iterable[str],
    param_names: Iterable[str],
    protocol_sets: Iterable[Sequence[str]],
    deployment_id: str,
) -> list[EndpointCandidate]:
    """
    Enumerate version x path x param name x protocol set, outermost first.

    List order is priority order: the runner stops at the first success, so the most
    likely value belongs at the front of each list. Candidates that end up with the same
    URL and protocol tuple are emitted once.
    """
    ws_base = normalize_base_endpoint(base_endpoint)
    deployment = str(deployment_id or "").strip()
    if not deployment:
        raise ConfigurationError("Missing deployment id")

    dimensions = {
        "versions": _clean(versions),
        "paths": [path.strip("/") for path in _clean(paths) if path.strip("/")],
        "param_names": _clean(param_names),
        "protocol_sets": _clean_protocol_sets(protocol_sets),
    }
    for name, values in dimensions.items():
        if not values:
            raise ConfigurationError(f"No {name.replace('_', ' ')} to probe")

    candidates: list[EndpointCandidate] = []
    seen: set[tuple[str, tuple[str, ...]]] = set()
    for version in dimensions["versions"]:
        for path in dimensions["paths"]:
            for param in dimensions["param_names"]:
                query = urlencode([(VERSION_PARAM, version), (param, deployment)])
                url = f"{ws_base}/{path}?{query}"
                for protocols in dimensions["protocol_sets"]:
                    candidate = EndpointCandidate(url=url, protocols=protocols)
                    if candidate.key in seen:
                        continue
                    seen.add(candidate.key)
                    candidates.append(candidate)
    return candidates


def candidates_for_request(request: ProbeRequest) -> list[EndpointCandidate]:
    """Validate a probe request and expand it into candidates."""
    if not any(header_value(request.headers, name).strip() for name in CREDENTIAL_HEADERS):
        raise ConfigurationError("Missing credential header (Authorization or api-key)")
    candidates = generate_candidates(
        request.base_endpoint,
        request.versions,
        request.paths,
        request.param_names,
        request.protocol_sets,
        request.deployment_id,
    )
    if not candidates:  # pragma: no cover - every dimension is checked non-empty
        raise ConfigurationError("Empty candidate set")
    return candidates


def candidate_from_redirect(location: str | None, origin: EndpointCandidate) -> EndpointCandidate | None:
    """Follow-up candidate for a redirect, keeping the origin's protocol tokens."""
    url = resolve_location(location or "", origin.url)
    if url is None:
        return None
    return EndpointCandidate(url=url, protocols=origin.protocols)


__all__ = [
    "CREDENTIAL_HEADERS",
    "VERSION_PARAM",
    "candidate_from_redirect",
    "candidates_for_request",
    "generate_candidates",
    "normalize_base_endpoint",
]
