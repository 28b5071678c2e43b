# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Handshake transport abstraction and factory."""

from typing import Protocol

from ..config import ProbeSettings, load_settings
from .models import HandshakeRequest, HandshakeResponse


class HandshakeTransport(Protocol):
    """
    Minimal protocol for issuing one WebSocket upgrade handshake.

    Implementations return the remote's HTTP answer and must have released the
    connection by the time they return or raise. Failures below HTTP are raised.
    """

    async def handshake(self, request: HandshakeRequest) -> HandshakeResponse: ...


def create_default_transport(settings: ProbeSettings | None = None) -> HandshakeTransport:
    """Factory for the default httpx-backed transport."""
    from .httpx_transport import HttpxHandshakeTransport

    return HttpxHandshakeTransport(settings or load_settings())
