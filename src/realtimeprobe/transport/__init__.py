# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""WebSocket handshake transport layer."""

from .client import HandshakeTransport, create_default_transport
from .headers import build_upgrade_headers, header_value, normalize_headers, websocket_accept
from .httpx_transport import HttpxHandshakeTransport
from .models import HandshakeRequest, HandshakeResponse, Headers
from .url import resolve_location, to_http_url, to_websocket_url

__all__ = [
    "HandshakeRequest",
    "HandshakeResponse",
    "HandshakeTransport",
    "Headers",
    "HttpxHandshakeTransport",
    "build_upgrade_headers",
    "create_default_transport",
    "header_value",
    "normalize_headers",
    "resolve_location",
    "to_http_url",
    "to_websocket_url",
    "websocket_accept",
]
