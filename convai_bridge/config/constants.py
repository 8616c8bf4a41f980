"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the application,
providing a centralized location for protocol names and default values so that both
channel adapters and the HTTP layer agree on them.
"""

# Logger name used throughout the application
LOGGER_NAME = "convai_bridge"

# Default ElevenLabs endpoint issuing signed conversation URLs
DEFAULT_SIGNED_URL_ENDPOINT = (
    "https://api.elevenlabs.io/v1/convai/conversation/get_signed_url"
)
SIGNED_URL_API_KEY_HEADER = "xi-api-key"

# Placeholders for caller identity fields the call did not supply
DEFAULT_USER_NAME = "Guest"
DEFAULT_USER_ID = "0000"

# Path of the provider media stream websocket
MEDIA_STREAM_PATH = "/outbound-media-stream"
TWIML_PATH = "/outbound-call-twiml"

# Twilio Media Streams event names
TELEPHONY_EVENT_START = "start"
TELEPHONY_EVENT_MEDIA = "media"
TELEPHONY_EVENT_STOP = "stop"

# ElevenLabs Conversational AI message types
AGENT_MESSAGE_INITIATION_CLIENT_DATA = "conversation_initiation_client_data"
AGENT_MESSAGE_INITIATION_METADATA = "conversation_initiation_metadata"
AGENT_MESSAGE_AUDIO = "audio"
AGENT_MESSAGE_PING = "ping"
AGENT_MESSAGE_PONG = "pong"
