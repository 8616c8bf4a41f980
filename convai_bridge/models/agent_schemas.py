"""
Pydantic models for the ElevenLabs Conversational AI websocket protocol.

This module provides type-safe models for the messages exchanged with the agent
backend, including both incoming and outgoing message formats.
"""

import json
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from convai_bridge.config.constants import (
    AGENT_MESSAGE_AUDIO,
    AGENT_MESSAGE_INITIATION_CLIENT_DATA,
    AGENT_MESSAGE_INITIATION_METADATA,
    AGENT_MESSAGE_PING,
    AGENT_MESSAGE_PONG,
)
from convai_bridge.exceptions import ProtocolError


class AgentBaseMessage(BaseModel):
    """Base model for agent backend messages."""

    type: str


# Incoming
class InitiationMetadataMessage(AgentBaseMessage):
    """Sent once by the backend after the conversation is set up."""

    type: Literal["conversation_initiation_metadata"]
    conversation_initiation_metadata_event: Optional[Dict[str, Any]] = None


class AudioEvent(BaseModel):
    audio_base_64: str = Field(..., min_length=1)
    event_id: Optional[int] = None


class AgentAudioMessage(AgentBaseMessage):
    """A frame of agent speech for the caller."""

    type: Literal["audio"]
    audio_event: AudioEvent


class PingEvent(BaseModel):
    event_id: Union[int, str]
    ping_ms: Optional[int] = None


class AgentPingMessage(AgentBaseMessage):
    """Keep-alive that must be answered with a pong carrying the same id."""

    type: Literal["ping"]
    ping_event: PingEvent


class UnhandledAgentMessage(AgentBaseMessage):
    """Any other message type (transcripts, agent_response, interruption...)."""


AgentEvent = Union[
    InitiationMetadataMessage, AgentAudioMessage, AgentPingMessage, UnhandledAgentMessage
]

_MESSAGE_MODELS = {
    AGENT_MESSAGE_INITIATION_METADATA: InitiationMetadataMessage,
    AGENT_MESSAGE_AUDIO: AgentAudioMessage,
    AGENT_MESSAGE_PING: AgentPingMessage,
}


# Outgoing
class InitiationClientDataMessage(AgentBaseMessage):
    """First message sent on a new conversation."""

    type: Literal["conversation_initiation_client_data"] = AGENT_MESSAGE_INITIATION_CLIENT_DATA
    dynamic_variables: Dict[str, str] = Field(default_factory=dict)


class UserAudioChunkMessage(BaseModel):
    """Caller audio forwarded to the agent."""

    user_audio_chunk: str


class PongMessage(AgentBaseMessage):
    type: Literal["pong"] = AGENT_MESSAGE_PONG
    event_id: Union[int, str]


def parse_agent_event(raw: Union[str, bytes]) -> AgentEvent:
    """
    Parse one frame received from the agent backend.

    Raises:
        ProtocolError: If the frame is not JSON or does not match its message schema
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError, UnicodeDecodeError) as e:
        raise ProtocolError(f"Agent frame is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        raise ProtocolError("Agent frame has no type field")

    model = _MESSAGE_MODELS.get(data["type"], UnhandledAgentMessage)
    try:
        return model(**data)
    except ValidationError as e:
        raise ProtocolError(f"Invalid {data['type']} message: {e}") from e
