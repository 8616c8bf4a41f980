"""
Models module for data structures and state management in the call bridge.

Key components:
- telephony_schemas: Pydantic models and the frame parser for Twilio Media Streams.
- agent_schemas: Pydantic models and the frame parser for the ElevenLabs
  Conversational AI websocket.
- session: The ``Session`` model, its ``SessionState`` lifecycle and the
  ``SessionRegistry`` of active calls.
- events: Lifecycle notifications channels report to their bridge.

Usage examples:
```python
from convai_bridge.models.telephony_schemas import parse_telephony_event

event = parse_telephony_event('{"event": "stop", "streamSid": "MZ123"}')
```
"""

from convai_bridge.models.agent_schemas import (
    AgentAudioMessage,
    AgentEvent,
    AgentPingMessage,
    InitiationClientDataMessage,
    InitiationMetadataMessage,
    PongMessage,
    UnhandledAgentMessage,
    UserAudioChunkMessage,
    parse_agent_event,
)
from convai_bridge.models.events import (
    AgentUnavailable,
    ChannelClosed,
    ChannelOpened,
    ChannelSide,
)
from convai_bridge.models.session import (
    Session,
    SessionRegistry,
    SessionState,
    build_dynamic_variables,
)
from convai_bridge.models.telephony_schemas import (
    OutboundMediaMessage,
    StreamMediaMessage,
    StreamStartMessage,
    StreamStopMessage,
    TelephonyEvent,
    UnhandledStreamMessage,
    parse_telephony_event,
)
