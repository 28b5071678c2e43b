# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Plain-text rendering of probe traces."""

from __future__ import annotations

from ..errors import error_category_to_reason
from ..models import AttemptOutcome, AttemptResult, ProbeTrace


def format_attempt(attempt: AttemptResult) -> str:
    """One trace line: ``- <url> [<protocols>] -> <outcome>``."""
    prefix = "  (redirect) " if attempt.redirected_from is not None else "- "
    line = f"{prefix}{attempt.candidate.url} [{attempt.candidate.protocol_header}] -> {attempt.summary}"
    if attempt.outcome == AttemptOutcome.TRANSPORT_ERROR:
        reason = error_category_to_reason(attempt.error_category)
        if reason:
            line = f"{line} ({reason})"
    return line


def render_trace(trace: ProbeTrace, *, verbose: bool = False) -> str:
    """Success or failure report followed by the full trace."""
    lines: list[str] = []
    winner = trace.winner
    if winner is not None:
        lines.append("SUCCESS")
        lines.append(f"URL: {winner.candidate.url}")
        lines.append(f"Proto: {winner.candidate.protocol_header}")
        if winner.negotiated_protocol:
            lines.append(f"Negotiated: {winner.negotiated_protocol}")
        lines.append("")
        lines.append("Full trace:")
    else:
        lines.append("All attempts failed.")
        lines.append("")
        lines.append("Trace:")

    for attempt in trace:
        lines.append(format_attempt(attempt))
        if verbose and attempt.body_snippet:
            lines.append(f"    {attempt.body_snippet}")
    return "\n".join(lines)


__all__ = ["format_attempt", "render_trace"]
