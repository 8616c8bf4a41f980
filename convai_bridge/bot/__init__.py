"""
Bot module: the per-call core that bridges Twilio media streams to an
ElevenLabs Conversational AI agent.

Key components:
- TelephonyChannel: wraps the provider's media stream websocket, parses its frames
  and writes agent audio back to the caller.
- AgentChannel: owns the websocket to the agent backend, parses its messages and
  sends initiation data, caller audio and pong replies.
- SessionBridge: state machine that owns both channels for one call, relays audio
  and control in both directions and tears both sides down together.

Usage examples:
```python
from convai_bridge.bot import SessionBridge
from convai_bridge.services.signed_url import SignedUrlRequester

async def serve_call(websocket, settings):
    bridge = SessionBridge(websocket, SignedUrlRequester(settings))
    await bridge.run()  # returns once the call is over and both sides are closed
```
"""

from convai_bridge.bot.agent_channel import AgentChannel
from convai_bridge.bot.session_bridge import SessionBridge
from convai_bridge.bot.telephony_channel import TelephonyChannel

__all__ = ["AgentChannel", "SessionBridge", "TelephonyChannel"]
