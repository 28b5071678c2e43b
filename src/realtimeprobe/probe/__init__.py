# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Candidate generation, probe runner and trace rendering."""

from .candidates import (
    candidate_from_redirect,
    candidates_for_request,
    generate_candidates,
    normalize_base_endpoint,
)
from .report import format_attempt, render_trace
from .runner import DEFAULT_TIMEOUT, REDIRECT_STATUSES, ProbeRunner

__all__ = [
    "DEFAULT_TIMEOUT",
    "REDIRECT_STATUSES",
    "ProbeRunner",
    "candidate_from_redirect",
    "candidates_for_request",
    "format_attempt",
    "generate_candidates",
    "normalize_base_endpoint",
    "render_trace",
]
