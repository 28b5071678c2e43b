# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header helpers for the WebSocket upgrade handshake.

HTTP header field names are case-insensitive (RFC 9110), and servers differ in how they
case `Location` or `Sec-WebSocket-Accept`, so lookups go through `header_value`.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
from collections.abc import Mapping
from typing import Any

WEBSOCKET_GUID = "258EAFA5-E914-47DA-95CA-C5AB0DC85B11"
WEBSOCKET_VERSION = "13"


def _coerce_headers_mapping(headers: Any) -> Mapping[object, object] | None:
    """
    Best-effort coercion of "dict-like" header containers into a Mapping.

    Accepts plain dicts, httpx.Headers and iterable-of-pairs.
    """
    if not headers:
        return None
    if isinstance(headers, Mapping):
        return headers

    items = getattr(headers, "items", None)
    if callable(items):
        try:
            return dict(items())
        except (TypeError, ValueError):
            pass

    try:
        return dict(headers)
    except (TypeError, ValueError):
        return None


def normalize_headers(headers: Mapping[object, object] | None) -> dict[str, str]:
    """Return a lowercase-keyed copy of a header mapping."""
    coerced = _coerce_headers_mapping(headers)
    if not coerced:
        return {}
    out: dict[str, str] = {}
    for key, value in coerced.items():
        if key is None:
            continue
        name = str(key).strip().lower()
        if not name:
            continue
        out[name] = "" if value is None else str(value)
    return out


def header_value(headers: Mapping[object, object] | None, name: str, default: str = "") -> str:
    """Return a header value using case-insensitive key matching."""
    if not headers or not name:
        return default

    coerced = _coerce_headers_mapping(headers)
    if not coerced:
        return default

    lower = str(name).lower()
    for key, value in coerced.items():
        if key is None:
            continue
        if str(key).lower() == lower:
            return default if value is None else str(value).strip()

    return default


def generate_websocket_key() -> str:
    return base64.b64encode(secrets.token_bytes(16)).decode("ascii")


def websocket_accept(key: str) -> str:
    """Expected `Sec-WebSocket-Accept` value for a given `Sec-WebSocket-Key` (RFC 6455 4.2.2)."""
    digest = hashlib.sha1((key + WEBSOCKET_GUID).encode("ascii")).digest()
    return base64.b64encode(digest).decode("ascii")


def build_upgrade_headers(
    key: str,
    protocols: tuple[str, ...] = (),
    extra: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Upgrade headers plus caller-supplied credential headers (which never override the upgrade set)."""
    headers: dict[str, str] = {}
    reserved = {"upgrade", "connection", "sec-websocket-key", "sec-websocket-version", "sec-websocket-protocol"}
    for name, value in (extra or {}).items():
        if str(name).lower() in reserved:
            continue
        headers[str(name)] = str(value)
    headers["Upgrade"] = "websocket"
    headers["Connection"] = "Upgrade"
    headers["Sec-WebSocket-Key"] = key
    headers["Sec-WebSocket-Version"] = WEBSOCKET_VERSION
    if protocols:
        headers["Sec-WebSocket-Protocol"] = ", ".join(protocols)
    return headers


__all__ = [
    "WEBSOCKET_GUID",
    "WEBSOCKET_VERSION",
    "build_upgrade_headers",
    "generate_websocket_key",
    "header_value",
    "normalize_headers",
    "websocket_accept",
]
