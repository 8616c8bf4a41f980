"""
Unit tests for the ElevenLabs Conversational AI message models.
"""

import json

import pytest

from convai_bridge.exceptions import ProtocolError
from convai_bridge.models.agent_schemas import (
    AgentAudioMessage,
    AgentPingMessage,
    InitiationClientDataMessage,
    InitiationMetadataMessage,
    PongMessage,
    UnhandledAgentMessage,
    UserAudioChunkMessage,
    parse_agent_event,
)


def test_parse_audio_message():
    event = parse_agent_event(
        json.dumps({"type": "audio", "audio_event": {"audio_base_64": "QUJD", "event_id": 3}})
    )
    assert isinstance(event, AgentAudioMessage)
    assert event.audio_event.audio_base_64 == "QUJD"


def test_parse_ping_message():
    event = parse_agent_event(
        json.dumps({"type": "ping", "ping_event": {"event_id": 7, "ping_ms": 50}})
    )
    assert isinstance(event, AgentPingMessage)
    assert event.ping_event.event_id == 7


def test_parse_metadata_message():
    event = parse_agent_event(
        json.dumps(
            {
                "type": "conversation_initiation_metadata",
                "conversation_initiation_metadata_event": {"conversation_id": "conv-1"},
            }
        )
    )
    assert isinstance(event, InitiationMetadataMessage)


def test_parse_bytes_frame():
    event = parse_agent_event(b'{"type": "agent_response", "agent_response_event": {}}')
    assert isinstance(event, UnhandledAgentMessage)
    assert event.type == "agent_response"


@pytest.mark.parametrize(
    "frame",
    [
        "{broken",
        json.dumps({"no_type": True}),
        json.dumps({"type": "audio", "audio_event": {}}),
        json.dumps({"type": "audio", "audio_event": {"audio_base_64": ""}}),
        json.dumps({"type": "ping"}),
        json.dumps({"type": "ping", "ping_event": {}}),
    ],
)
def test_malformed_frames_raise_protocol_error(frame):
    with pytest.raises(ProtocolError):
        parse_agent_event(frame)


def test_outbound_messages():
    initiation = InitiationClientDataMessage(
        dynamic_variables={"user_name": "Ana", "user_id": "42"}
    )
    assert json.loads(initiation.model_dump_json()) == {
        "type": "conversation_initiation_client_data",
        "dynamic_variables": {"user_name": "Ana", "user_id": "42"},
    }
    assert json.loads(UserAudioChunkMessage(user_audio_chunk="QUJD").model_dump_json()) == {
        "user_audio_chunk": "QUJD"
    }
    assert json.loads(PongMessage(event_id=7).model_dump_json()) == {
        "type": "pong",
        "event_id": 7,
    }
