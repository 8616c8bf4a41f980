"""
ElevenLabs Call Bridge - Twilio Media Streams to ElevenLabs Conversational AI

This application lets an AI voice agent hold a phone conversation. Twilio streams
the call's audio over a websocket; for every call the service opens a second
websocket to an ElevenLabs agent and relays audio in both directions until either
side hangs up.

Architecture Overview:
- FastAPI server exposing HTTP endpoints to place calls and a websocket endpoint for
  Twilio Media Streams
- One session bridge per call, owning both connections and tearing them down together
- Signed, single-use conversation URLs requested from ElevenLabs for each call

Key Components:
- bot: Telephony channel, agent channel and the per-call session bridge
- config: Constants, console logging and the immutable startup settings
- handlers: HTTP handlers for placing calls and generating TwiML
- models: Wire schemas for both protocols and the session model
- services: Clients for the ElevenLabs signed-URL API and the Twilio REST API
- websocket_manager: Accepts media stream connections and runs their bridges

Getting Started:
1. Set up environment variables (or a .env file):
   - ELEVENLABS_API_KEY, ELEVENLABS_AGENT_ID
   - TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, TWILIO_PHONE_NUMBER
   - PORT (default 8000), HOST (default 0.0.0.0), LOG_LEVEL (default INFO)

2. Start the server:
   ```bash
   python run.py
   ```

3. Place a call:
   ```bash
   curl -X POST https://your-host/outbound-call \
        -H "Content-Type: application/json" \
        -d '{"number": "+15551234567", "user_name": "Ana", "user_id": "42"}'
   ```
"""
