# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
realtimeprobe package entrypoint.

This package discovers which realtime WebSocket endpoint shape (API version, URL path,
deployment query parameter and sub-protocol) a provider currently accepts. Candidates are
generated deterministically, attempted with a bounded per-attempt timeout, and every
outcome is returned as a structured trace. The handshake transport is injectable, and
domain objects are modeled with typed dataclasses.
"""

from .config import ProbeSettings, load_settings
from .errors import ConfigurationError, ErrorCategory
from .log import setup_logging
from .models import AttemptOutcome, AttemptResult, EndpointCandidate, ProbeRequest, ProbeTrace
from .probe import ProbeRunner, generate_candidates, render_trace
from .runtime import RealtimeProbe
from .transport import HandshakeRequest, HandshakeResponse, HandshakeTransport, HttpxHandshakeTransport, create_default_transport
from .version import __version__

__all__ = [
    "AttemptOutcome",
    "AttemptResult",
    "ConfigurationError",
    "EndpointCandidate",
    "ErrorCategory",
    "HandshakeRequest",
    "HandshakeResponse",
    "HandshakeTransport",
    "HttpxHandshakeTransport",
    "ProbeRequest",
    "ProbeRunner",
    "ProbeSettings",
    "ProbeTrace",
    "RealtimeProbe",
    "create_default_transport",
    "generate_candidates",
    "load_settings",
    "render_trace",
    "setup_logging",
    "__version__",
]
