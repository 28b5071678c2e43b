# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Scheme rewriting between HTTP and WebSocket URLs."""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit, urlunsplit

_TO_WS = {"http": "ws", "https": "wss", "ws": "ws", "wss": "wss"}
_TO_HTTP = {"ws": "http", "wss": "https", "http": "http", "https": "https"}


def _swap_scheme(url: str, mapping: dict[str, str]) -> str | None:
    parts = urlsplit(str(url or "").strip())
    scheme = mapping.get(parts.scheme.lower())
    if scheme is None or not parts.netloc:
        return None
    return urlunsplit((scheme, parts.netloc, parts.path, parts.query, parts.fragment))


def to_websocket_url(url: str) -> str | None:
    """
    Rewrite an http(s) URL to its ws(s) equivalent, preserving host, port, path and query.

    Returns None for URLs without a host or with an unrelated scheme.
    """
    return _swap_scheme(url, _TO_WS)


def to_http_url(url: str) -> str | None:
    """Rewrite a ws(s) URL to the http(s) URL used to carry the upgrade request."""
    return _swap_scheme(url, _TO_HTTP)


def resolve_location(location: str, origin_url: str) -> str | None:
    """Resolve a (possibly relative) `Location` header against the URL that produced it."""
    if not location:
        return None
    origin_http = to_http_url(origin_url) or origin_url
    return to_websocket_url(urljoin(origin_http, location.strip()))


__all__ = ["resolve_location", "to_http_url", "to_websocket_url"]
