# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Azure Communication Services call answering for the inbound webhook."""

from __future__ import annotations

import logging
from typing import Any

from .config import ProbeSettings
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def _connect(connection_string: str) -> Any:
    try:
        from azure.communication.callautomation import CallAutomationClient
    except ImportError as exc:
        raise ConfigurationError(
            "ACS_CONNECTION_STRING is set but azure-communication-callautomation is not installed "
            "(pip install 'realtimeprobe[acs]')"
        ) from exc
    return CallAutomationClient.from_connection_string(connection_string)


class AcsCallAnswerer:
    """CallAnswerer backed by a CallAutomationClient."""

    def __init__(self, client: Any):
        self.client = client

    def answer_call(self, incoming_call_context: str, *, callback_uri: str) -> str:
        result = self.client.answer_call(incoming_call_context=incoming_call_context, callback_url=callback_uri)
        return str(getattr(result, "call_connection_id", "") or "")


def create_call_answerer(settings: ProbeSettings) -> AcsCallAnswerer | None:
    """
    Build the answerer from settings, or None when ACS is not configured.

    Answering needs an absolute callback URL, so SELF_BASE_URL is required alongside
    the connection string.
    """
    if not settings.acs_connection_string:
        return None
    if not settings.self_base_url:
        raise ConfigurationError("ACS_CONNECTION_STRING is set but SELF_BASE_URL is missing")
    logger.debug("Answering incoming calls through ACS")
    return AcsCallAnswerer(_connect(settings.acs_connection_string))


__all__ = ["AcsCallAnswerer", "create_call_answerer"]
