# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from realtimeprobe.config import ProbeSettings
from realtimeprobe.errors import ErrorCategory
from realtimeprobe.models import AttemptOutcome, AttemptResult, EndpointCandidate, ProbeRequest, ProbeTrace

CANDIDATE = EndpointCandidate(url="wss://host.example/rt", protocols=("realtime", "oai-realtime"))


def test_candidate_is_immutable_and_renders_protocol_header():
    assert CANDIDATE.protocol_header == "realtime, oai-realtime"
    assert CANDIDATE.to_dict() == {"url": "wss://host.example/rt", "protocols": ["realtime", "oai-realtime"]}
    with pytest.raises(AttributeError):
        CANDIDATE.url = "wss://other"  # type: ignore[misc]


def test_outcome_details_must_match_variant():
    with pytest.raises(ValueError):
        AttemptResult(CANDIDATE, AttemptOutcome.CONNECTED, status_code=200)
    with pytest.raises(ValueError):
        AttemptResult(CANDIDATE, AttemptOutcome.TIMED_OUT, error_message="late")
    with pytest.raises(ValueError):
        AttemptResult(CANDIDATE, AttemptOutcome.REJECTED)
    with pytest.raises(ValueError):
        AttemptResult(CANDIDATE, AttemptOutcome.TRANSPORT_ERROR)


def test_attempt_summaries():
    assert AttemptResult.connected(CANDIDATE).summary == "OK"
    assert AttemptResult.rejected(CANDIDATE, 404).summary == "HTTP 404"
    assert AttemptResult.rejected(CANDIDATE, 302, "https://x/").summary == "HTTP 302 -> https://x/"
    assert AttemptResult.timed_out(CANDIDATE).summary == "timeout"
    assert AttemptResult.transport_error(CANDIDATE, "refused").summary == "refused"


def test_attempt_to_dict_only_includes_its_variant():
    origin = AttemptResult.rejected(CANDIDATE, 302, "https://x/")
    followed = AttemptResult.transport_error(
        EndpointCandidate(url="wss://x/"),
        "tls failure",
        ErrorCategory.SSL_ERROR,
        redirected_from=origin,
        elapsed=0.12345,
    )
    data = followed.to_dict()
    assert data == {
        "url": "wss://x/",
        "protocols": [],
        "outcome": "TRANSPORT_ERROR",
        "elapsed": 0.123,
        "error_category": "SSL_ERROR",
        "error_message": "tls failure",
        "redirected_from": "wss://host.example/rt",
    }
    assert "status_code" not in data


def test_trace_winner_is_first_connected_entry():
    first_ok = AttemptResult.connected(CANDIDATE)
    later_ok = AttemptResult.connected(EndpointCandidate(url="wss://other/"))
    trace = ProbeTrace(attempts=(AttemptResult.timed_out(CANDIDATE), first_ok, later_ok))
    assert trace.winner is first_ok
    assert trace.succeeded is True
    assert len(trace) == 3
    data = trace.to_dict()
    assert data["status"] == "SUCCESS"
    assert data["winner"]["outcome"] == "CONNECTED"
    assert len(data["attempts"]) == 3


def test_empty_trace_has_no_winner():
    trace = ProbeTrace()
    assert trace.winner is None
    assert trace.to_dict() == {"status": "FAILED", "winner": None, "attempts": []}


def test_probe_request_from_settings_with_overrides():
    settings = ProbeSettings(endpoint="https://h", api_key="k", api_version="custom", timeout=3.0)
    request = ProbeRequest.from_settings(settings, paths=("only",), concurrency=None)

    assert request.base_endpoint == "https://h"
    assert request.versions == ("custom", "2024-10-01-preview", "2025-08-28")
    assert request.paths == ("only",)
    assert request.concurrency == 1
    assert request.timeout == 3.0
    assert request.headers["Authorization"] == "Bearer k"
