# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Handshake request/response models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

Headers = dict[str, str]


@dataclass
class HandshakeRequest:
    """Normalized upgrade request consumed by HandshakeTransport implementations."""

    url: str
    protocols: tuple[str, ...] = ()
    headers: Headers | None = None
    timeout: float | None = None


@dataclass
class HandshakeResponse:
    """What the remote answered to an upgrade request, captured before the connection is closed."""

    status_code: int
    headers: Headers = field(default_factory=dict)
    body_snippet: str = ""
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def upgraded(self) -> bool:
        return self.status_code == 101


__all__ = ["HandshakeRequest", "HandshakeResponse", "Headers"]
