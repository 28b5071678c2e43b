# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Domain models for candidates, attempts and traces."""

from .attempt import AttemptOutcome, AttemptResult, ProbeTrace
from .candidate import EndpointCandidate
from .request import ProbeRequest

__all__ = [
    "AttemptOutcome",
    "AttemptResult",
    "EndpointCandidate",
    "ProbeRequest",
    "ProbeTrace",
]
