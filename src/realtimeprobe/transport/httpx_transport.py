# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed WebSocket handshake transport."""

from __future__ import annotations

import httpx

from ..config import ProbeSettings, load_settings
from ..errors import HandshakeError
from .headers import build_upgrade_headers, generate_websocket_key, header_value, normalize_headers, websocket_accept
from .models import HandshakeRequest, HandshakeResponse
from .url import to_http_url

DEFAULT_MAX_BODY_BYTES = 2048


class HttpxHandshakeTransport:
    """
    Sends the RFC 6455 upgrade request over a fresh httpx.AsyncClient per attempt.

    Redirects are never followed here; the runner decides what to do with a 3xx.
    On 101 the connection is closed without exchanging any frames.
    """

    def __init__(
        self,
        settings: ProbeSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        max_body_bytes: int = DEFAULT_MAX_BODY_BYTES,
    ):
        self.settings = settings or load_settings()
        self._transport = transport
        self.max_body_bytes = max_body_bytes

    async def handshake(self, request: HandshakeRequest) -> HandshakeResponse:
        http_url = to_http_url(request.url)
        if http_url is None:
            raise HandshakeError(f"Unsupported handshake URL: {request.url}")

        key = generate_websocket_key()
        headers = build_upgrade_headers(key, request.protocols, request.headers)
        headers.setdefault("User-Agent", self.settings.user_agent)
        timeout = request.timeout if request.timeout is not None else self.settings.timeout

        async with httpx.AsyncClient(
            follow_redirects=False,
            timeout=timeout,
            verify=self.settings.verify_ssl,
            transport=self._transport,
        ) as client:
            async with client.stream("GET", http_url, headers=headers) as resp:
                response_headers = normalize_headers(resp.headers)
                if resp.status_code == 101:
                    accept = header_value(response_headers, "sec-websocket-accept")
                    if accept != websocket_accept(key):
                        raise HandshakeError("101 response without a matching Sec-WebSocket-Accept")
                    return HandshakeResponse(status_code=101, headers=response_headers)

                snippet, truncated = await self._read_snippet(resp)
                return HandshakeResponse(
                    status_code=resp.status_code,
                    headers=response_headers,
                    body_snippet=snippet,
                    meta={"body_truncated": truncated},
                )

    def close(self) -> None:
        """Nothing to release: each handshake opens and closes its own client."""

    async def _read_snippet(self, resp: httpx.Response) -> tuple[str, bool]:
        limit = self.max_body_bytes
        if limit <= 0:
            return "", False
        content = bytearray()
        truncated = False
        async for chunk in resp.aiter_bytes():
            if not chunk:
                continue
            remaining = limit - len(content)
            if len(chunk) > remaining:
                content.extend(chunk[:remaining])
                truncated = True
                break
            content.extend(chunk)

        encoding = resp.encoding or "utf-8"
        try:
            text = bytes(content).decode(encoding, errors="replace")
        except LookupError:
            text = bytes(content).decode("utf-8", errors="replace")
        return text.strip(), truncated


__all__ = ["DEFAULT_MAX_BODY_BYTES", "HttpxHandshakeTransport"]
