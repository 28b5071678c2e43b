# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Attempt outcome and probe trace models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..errors import ErrorCategory
from .candidate import EndpointCandidate


class AttemptOutcome(str, Enum):
    CONNECTED = "CONNECTED"
    REJECTED = "REJECTED"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    TIMED_OUT = "TIMED_OUT"


_DETAIL_FIELDS: dict[AttemptOutcome, frozenset[str]] = {
    AttemptOutcome.CONNECTED: frozenset({"negotiated_protocol"}),
    AttemptOutcome.REJECTED: frozenset({"status_code", "location", "body_snippet"}),
    AttemptOutcome.TRANSPORT_ERROR: frozenset({"error_message", "error_category"}),
    AttemptOutcome.TIMED_OUT: frozenset(),
}
_ALL_DETAIL_FIELDS = frozenset().union(*_DETAIL_FIELDS.values())


@dataclass(frozen=True)
class AttemptResult:
    """
    Outcome of one handshake attempt.

    Only the detail fields belonging to ``outcome`` may be populated; use the
    ``connected``/``rejected``/``transport_error``/``timed_out`` constructors.
    """

    candidate: EndpointCandidate
    outcome: AttemptOutcome
    status_code: int | None = None
    location: str | None = None
    body_snippet: str | None = None
    error_message: str | None = None
    error_category: ErrorCategory | None = None
    negotiated_protocol: str | None = None
    redirected_from: AttemptResult | None = None
    elapsed: float = 0.0

    def __post_init__(self) -> None:
        allowed = _DETAIL_FIELDS[self.outcome]
        for name in _ALL_DETAIL_FIELDS - allowed:
            if getattr(self, name) is not None:
                raise ValueError(f"{name} is not valid for a {self.outcome.value} attempt")
        if self.outcome == AttemptOutcome.REJECTED and self.status_code is None:
            raise ValueError("rejected attempts require a status code")
        if self.outcome == AttemptOutcome.TRANSPORT_ERROR and not self.error_message:
            raise ValueError("transport errors require a message")

    @classmethod
    def connected(cls, candidate: EndpointCandidate, *, negotiated_protocol: str | None = None, **kwargs: Any) -> AttemptResult:
        return cls(candidate, AttemptOutcome.CONNECTED, negotiated_protocol=negotiated_protocol, **kwargs)

    @classmethod
    def rejected(
        cls,
        candidate: EndpointCandidate,
        status_code: int,
        location: str | None = None,
        *,
        body_snippet: str | None = None,
        **kwargs: Any,
    ) -> AttemptResult:
        return cls(
            candidate,
            AttemptOutcome.REJECTED,
            status_code=status_code,
            location=location,
            body_snippet=body_snippet,
            **kwargs,
        )

    @classmethod
    def transport_error(
        cls,
        candidate: EndpointCandidate,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR,
        **kwargs: Any,
    ) -> AttemptResult:
        return cls(
            candidate,
            AttemptOutcome.TRANSPORT_ERROR,
            error_message=message,
            error_category=category,
            **kwargs,
        )

    @classmethod
    def timed_out(cls, candidate: EndpointCandidate, **kwargs: Any) -> AttemptResult:
        return cls(candidate, AttemptOutcome.TIMED_OUT, **kwargs)

    @property
    def ok(self) -> bool:
        return self.outcome == AttemptOutcome.CONNECTED

    @property
    def summary(self) -> str:
        """Short outcome label, e.g. ``OK``, ``HTTP 404``, ``timeout``."""
        if self.outcome == AttemptOutcome.CONNECTED:
            return "OK"
        if self.outcome == AttemptOutcome.REJECTED:
            if self.location:
                return f"HTTP {self.status_code} -> {self.location}"
            return f"HTTP {self.status_code}"
        if self.outcome == AttemptOutcome.TIMED_OUT:
            return "timeout"
        return self.error_message or "error"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "url": self.candidate.url,
            "protocols": list(self.candidate.protocols),
            "outcome": self.outcome.value,
            "elapsed": round(self.elapsed, 3),
        }
        for name in sorted(_DETAIL_FIELDS[self.outcome]):
            value = getattr(self, name)
            if value is not None:
                data[name] = value.value if isinstance(value, Enum) else value
        if self.redirected_from is not None:
            data["redirected_from"] = self.redirected_from.candidate.url
        return data


@dataclass(frozen=True)
class ProbeTrace:
    """Ordered record of every attempt made during one probing run."""

    attempts: tuple[AttemptResult, ...] = ()

    @property
    def winner(self) -> AttemptResult | None:
        for attempt in self.attempts:
            if attempt.outcome == AttemptOutcome.CONNECTED:
                return attempt
        return None

    @property
    def succeeded(self) -> bool:
        return self.winner is not None

    def __len__(self) -> int:
        return len(self.attempts)

    def __iter__(self):
        return iter(self.attempts)

    def __getitem__(self, index: int) -> AttemptResult:
        return self.attempts[index]

    def to_dict(self) -> dict[str, Any]:
        winner = self.winner
        return {
            "status": "SUCCESS" if winner is not None else "FAILED",
            "winner": winner.to_dict() if winner is not None else None,
            "attempts": [attempt.to_dict() for attempt in self.attempts],
        }


__all__ = ["AttemptOutcome", "AttemptResult", "ProbeTrace"]
