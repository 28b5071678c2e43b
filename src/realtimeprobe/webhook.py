# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Inbound call-notification handling.

Framework-agnostic: the caller parses the JSON body, passes it here and writes the
returned WebhookReply back. Nothing in this module touches the probe runner.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from .config import ProbeSettings
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

SUBSCRIPTION_VALIDATION_EVENT = "Microsoft.EventGrid.SubscriptionValidationEvent"
INCOMING_CALL_EVENT = "IncomingCall"
CALLBACK_PATH = "/acs/inbound"


class CallAnswerer(Protocol):
    """Answers an incoming call; returns the call connection id."""

    def answer_call(self, incoming_call_context: str, *, callback_uri: str) -> str: ...


@dataclass
class WebhookReply:
    status_code: int = 200
    body: dict[str, Any] | None = None
    answered: list[str] = field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps(self.body) if self.body is not None else ""


def callback_uri(settings: ProbeSettings) -> str:
    """Absolute URL the call-automation service posts mid-call events to."""
    if not settings.self_base_url:
        raise ConfigurationError("SELF_BASE_URL is required to answer calls")
    return f"{settings.self_base_url}{CALLBACK_PATH}"


def _events(payload: Any) -> list[Mapping[str, Any]]:
    if isinstance(payload, list):
        return [event for event in payload if isinstance(event, Mapping)]
    if isinstance(payload, Mapping):
        return [payload]
    return []


def handle_events(
    payload: Any,
    *,
    settings: ProbeSettings,
    answerer: CallAnswerer | None = None,
) -> WebhookReply:
    """
    Process one webhook delivery.

    A subscription-validation event short-circuits the batch and echoes its code.
    Incoming calls are answered when an answerer is configured; a failed answer is
    logged and does not change the reply.
    """
    reply = WebhookReply()
    for event in _events(payload):
        event_type = event.get("eventType")
        data = event.get("data") if isinstance(event.get("data"), Mapping) else {}

        if event_type == SUBSCRIPTION_VALIDATION_EVENT:
            code = data.get("validationCode")
            logger.info("Event Grid subscription validation: %s", code)
            return WebhookReply(status_code=200, body={"validationResponse": code})

        if event_type == INCOMING_CALL_EVENT:
            logger.info("Incoming call: %s", json.dumps(dict(data), default=str))
            if answerer is None:
                logger.warning("No call answerer configured; skipping incoming call")
                continue
            if not settings.self_base_url:
                logger.warning("SELF_BASE_URL is not set; cannot answer incoming call")
                continue
            context = data.get("incomingCallContext")
            if not context:
                logger.warning("Incoming call event without incomingCallContext")
                continue
            try:
                connection_id = answerer.answer_call(str(context), callback_uri=callback_uri(settings))
            except Exception as exc:  # noqa: BLE001
                logger.error("Error answering call: %s", exc)
                continue
            logger.info("Answered call: %s", connection_id)
            reply.answered.append(connection_id)

    return reply


__all__ = [
    "CALLBACK_PATH",
    "INCOMING_CALL_EVENT",
    "SUBSCRIPTION_VALIDATION_EVENT",
    "CallAnswerer",
    "WebhookReply",
    "callback_uri",
    "handle_events",
]
