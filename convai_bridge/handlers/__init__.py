"""
Handlers module for the HTTP side of the call bridge.

Key components:
- call_handlers: places outbound calls through Twilio and builds the TwiML that
  points a connected call at the media stream endpoint.

Usage examples:
```python
from convai_bridge.handlers.call_handlers import build_stream_twiml

twiml = build_stream_twiml("bridge.example.com", {"user_name": "Ana", "user_id": "42"})
```
"""
