# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Endpoint candidate model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class EndpointCandidate:
    """One concrete guess at the streaming endpoint shape: URL plus offered sub-protocols."""

    url: str
    protocols: tuple[str, ...] = ()

    @property
    def protocol_header(self) -> str:
        """Value for the ``Sec-WebSocket-Protocol`` request header."""
        return ", ".join(self.protocols)

    @property
    def key(self) -> tuple[str, tuple[str, ...]]:
        return (self.url, self.protocols)

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "protocols": list(self.protocols)}


__all__ = ["EndpointCandidate"]
