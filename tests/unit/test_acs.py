# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import json
from types import SimpleNamespace

import pytest

from realtimeprobe import acs
from realtimeprobe.acs import AcsCallAnswerer, create_call_answerer
from realtimeprobe.cli import main as cli
from realtimeprobe.config import ProbeSettings
from realtimeprobe.errors import ConfigurationError
from realtimeprobe.webhook import INCOMING_CALL_EVENT, handle_events

SETTINGS = ProbeSettings(
    self_base_url="https://bot.example.com",
    acs_connection_string="endpoint=https://acs.example.com/;accesskey=abc",
)


class FakeCallAutomationClient:
    def __init__(self):
        self.calls = []

    def answer_call(self, *, incoming_call_context, callback_url):
        self.calls.append((incoming_call_context, callback_url))
        return SimpleNamespace(call_connection_id=f"conn-{len(self.calls)}")


def _incoming(context="ctx-1"):
    return {"eventType": INCOMING_CALL_EVENT, "data": {"incomingCallContext": context}}


def test_answerer_forwards_context_and_callback():
    client = FakeCallAutomationClient()
    answerer = AcsCallAnswerer(client)
    assert answerer.answer_call("ctx-1", callback_uri="https://bot.example.com/acs/inbound") == "conn-1"
    assert client.calls == [("ctx-1", "https://bot.example.com/acs/inbound")]


def test_webhook_answers_through_acs_client():
    client = FakeCallAutomationClient()
    reply = handle_events([_incoming("a")], settings=SETTINGS, answerer=AcsCallAnswerer(client))
    assert reply.answered == ["conn-1"]
    assert client.calls == [("a", "https://bot.example.com/acs/inbound")]


def test_create_call_answerer_uses_connection_string(monkeypatch):
    client = FakeCallAutomationClient()
    seen = []

    def fake_connect(connection_string):
        seen.append(connection_string)
        return client

    monkeypatch.setattr(acs, "_connect", fake_connect)
    answerer = create_call_answerer(SETTINGS)
    assert isinstance(answerer, AcsCallAnswerer)
    assert answerer.client is client
    assert seen == [SETTINGS.acs_connection_string]


def test_create_call_answerer_without_acs_is_none():
    assert create_call_answerer(ProbeSettings(self_base_url="https://bot.example.com")) is None


def test_create_call_answerer_requires_self_base_url(monkeypatch):
    monkeypatch.setattr(acs, "_connect", lambda connection_string: pytest.fail("must not connect"))
    with pytest.raises(ConfigurationError):
        create_call_answerer(ProbeSettings(acs_connection_string="endpoint=x"))


def test_cli_webhook_answers_incoming_calls(tmp_path, monkeypatch, capsys):
    client = FakeCallAutomationClient()
    monkeypatch.setattr(acs, "_connect", lambda connection_string: client)
    payload = tmp_path / "call.json"
    payload.write_text(json.dumps([_incoming("ctx-9")]), encoding="utf-8")

    code = cli.main(["webhook", str(payload)], settings=SETTINGS)
    data = json.loads(capsys.readouterr().out)
    assert code == cli.EXIT_OK
    assert data == {"status_code": 200, "body": None, "answered": ["conn-1"]}
    assert client.calls == [("ctx-9", "https://bot.example.com/acs/inbound")]


def test_cli_webhook_reports_incomplete_acs_config(tmp_path, capsys):
    payload = tmp_path / "call.json"
    payload.write_text(json.dumps([_incoming()]), encoding="utf-8")
    code = cli.main(["webhook", str(payload)], settings=ProbeSettings(acs_connection_string="endpoint=x"))
    assert code == cli.EXIT_CONFIG_ERROR
    assert "SELF_BASE_URL" in capsys.readouterr().err
