"""
Unit tests for the call initiation and TwiML helpers.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from convai_bridge.handlers.call_handlers import (
    OutboundCallRequest,
    build_callback_url,
    build_stream_twiml,
)
from convai_bridge.services.twilio_calls import OutboundCallService


def test_identity_skips_missing_fields():
    request = OutboundCallRequest(number="+1555", user_name="Ana", user_id="")
    assert request.identity() == {"user_name": "Ana"}


def test_callback_url_encodes_identity():
    url = build_callback_url("bridge.example.com", {"user_name": "Ana & Bo", "user_id": "4 2"})
    assert url == (
        "https://bridge.example.com/outbound-call-twiml?user_name=Ana+%26+Bo&user_id=4+2"
    )


def test_callback_url_without_identity():
    assert build_callback_url("h.example", {}) == "https://h.example/outbound-call-twiml"


def test_stream_twiml_escapes_values():
    twiml = build_stream_twiml("h.example", {"user_name": 'Ana "<Bo>"'})
    assert "wss://h.example/outbound-media-stream" in twiml
    assert "<Bo>" not in twiml


@pytest.mark.asyncio
async def test_place_call_uses_configured_number(settings):
    twilio_client = MagicMock()
    twilio_client.calls.create.return_value = SimpleNamespace(sid="CA999")
    service = OutboundCallService(settings, client=twilio_client)

    sid = await service.place_call("+15557654321", "https://h.example/outbound-call-twiml")

    assert sid == "CA999"
    twilio_client.calls.create.assert_called_once_with(
        from_="+15550001111",
        to="+15557654321",
        url="https://h.example/outbound-call-twiml",
    )


def test_twilio_client_created_lazily(settings, monkeypatch):
    created = []

    def fake_client(account_sid, auth_token):
        created.append((account_sid, auth_token))
        return MagicMock()

    monkeypatch.setattr("convai_bridge.services.twilio_calls.Client", fake_client)
    service = OutboundCallService(settings)
    assert created == []

    first = service.client
    assert service.client is first
    assert created == [("ACtest", "twilio-token")]
