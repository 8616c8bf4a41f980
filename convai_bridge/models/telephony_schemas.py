"""
Pydantic models for Twilio Media Streams message schemas.

This module defines the frames exchanged with the telephony provider over the
media stream websocket and a parser that turns one raw text frame into a typed
event, providing type validation and documentation.
"""

import base64
import binascii
import json
from typing import Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from convai_bridge.config.constants import (
    TELEPHONY_EVENT_MEDIA,
    TELEPHONY_EVENT_START,
    TELEPHONY_EVENT_STOP,
)
from convai_bridge.exceptions import ProtocolError


class StartPayload(BaseModel):
    """Nested ``start`` object describing the new stream."""

    streamSid: str = Field(..., description="Stream identifier assigned by Twilio")
    callSid: str = Field(..., description="Call identifier assigned by Twilio")
    customParameters: Dict[str, str] = Field(
        default_factory=dict, description="Parameters declared in the TwiML <Stream>"
    )

    @field_validator("customParameters", mode="before")
    def default_custom_parameters(cls, v):
        """Treat an explicit null as no parameters and render other values as text."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            return v
        return {
            str(name): value if isinstance(value, str) else json.dumps(value)
            for name, value in v.items()
            if value is not None
        }


class MediaPayload(BaseModel):
    """Nested ``media`` object carrying one audio frame."""

    payload: str = Field(..., description="Base64-encoded audio data")
    track: Optional[str] = None
    chunk: Optional[str] = None
    timestamp: Optional[str] = None

    @field_validator("payload")
    def validate_payload(cls, v):
        """Validate that the payload is non-empty base64."""
        if not v:
            raise ValueError("Media payload cannot be empty")
        try:
            base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("Invalid base64 encoded audio data")
        return v


class StreamStartMessage(BaseModel):
    """``start`` event: the stream is open and its identifiers are known."""

    event: Literal["start"]
    start: StartPayload


class StreamMediaMessage(BaseModel):
    """``media`` event: one frame of caller audio."""

    event: Literal["media"]
    media: MediaPayload


class StreamStopMessage(BaseModel):
    """``stop`` event: the call has ended."""

    event: Literal["stop"]
    streamSid: Optional[str] = None


class UnhandledStreamMessage(BaseModel):
    """Any other event (``connected``, ``mark``, ``dtmf``...)."""

    event: str


TelephonyEvent = Union[
    StreamStartMessage, StreamMediaMessage, StreamStopMessage, UnhandledStreamMessage
]

_EVENT_MODELS = {
    TELEPHONY_EVENT_START: StreamStartMessage,
    TELEPHONY_EVENT_MEDIA: StreamMediaMessage,
    TELEPHONY_EVENT_STOP: StreamStopMessage,
}


class OutboundMedia(BaseModel):
    payload: str


class OutboundMediaMessage(BaseModel):
    """Audio frame sent to Twilio for playback to the caller."""

    event: Literal["media"] = "media"
    streamSid: str
    media: OutboundMedia


def parse_telephony_event(raw: str) -> TelephonyEvent:
    """
    Parse one text frame received from Twilio.

    Args:
        raw: The JSON text frame

    Returns:
        The typed event; unknown event names become ``UnhandledStreamMessage``

    Raises:
        ProtocolError: If the frame is not JSON or does not match its event schema
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise ProtocolError(f"Telephony frame is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("event"), str):
        raise ProtocolError("Telephony frame has no event field")

    model = _EVENT_MODELS.get(data["event"], UnhandledStreamMessage)
    try:
        return model(**data)
    except ValidationError as e:
        raise ProtocolError(f"Invalid {data['event']} frame: {e}") from e
