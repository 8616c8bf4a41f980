"""
Handlers for placing outbound calls and serving their TwiML.

Placing a call asks Twilio to fetch TwiML from this service once the callee
answers; that TwiML connects the call's audio to the media stream endpoint and
replays the caller identity fields as stream parameters.
"""

import logging
from typing import Dict, Optional
from urllib.parse import urlencode

from fastapi.responses import JSONResponse
from pydantic import BaseModel
from twilio.twiml.voice_response import Connect, VoiceResponse

from convai_bridge.config.constants import LOGGER_NAME, MEDIA_STREAM_PATH, TWIML_PATH
from convai_bridge.services.twilio_calls import OutboundCallService

logger = logging.getLogger(LOGGER_NAME)

IDENTITY_FIELDS = ("user_name", "user_id")


class OutboundCallRequest(BaseModel):
    """Body of ``POST /outbound-call``."""

    number: Optional[str] = None
    user_name: Optional[str] = None
    user_id: Optional[str] = None

    def identity(self) -> Dict[str, str]:
        """Caller identity fields that were actually supplied."""
        return {
            name: getattr(self, name) for name in IDENTITY_FIELDS if getattr(self, name)
        }


def build_callback_url(host: str, identity: Dict[str, str]) -> str:
    url = f"https://{host}{TWIML_PATH}"
    if identity:
        url += "?" + urlencode(identity)
    return url


async def handle_outbound_call(
    payload: OutboundCallRequest, host: str, call_service: OutboundCallService
) -> JSONResponse:
    """
    Place a call to ``payload.number``.

    Returns:
        JSONResponse: 200 with the call SID, 400 when no number was given, or 500
        when Twilio could not place the call
    """
    number = (payload.number or "").strip()
    if not number:
        return JSONResponse(status_code=400, content={"error": "Phone number is required"})

    callback_url = build_callback_url(host, payload.identity())
    try:
        call_sid = await call_service.place_call(number, callback_url)
    except Exception as e:
        logger.error(f"Error initiating outbound call: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to initiate call"},
        )

    return JSONResponse(
        content={"success": True, "message": "Call initiated", "callSid": call_sid}
    )


def build_stream_twiml(host: str, parameters: Dict[str, str]) -> str:
    """
    Build TwiML that connects the call to the media stream endpoint.

    Args:
        host: Public host name of this service
        parameters: Caller identity fields, sent as ``<Parameter>`` elements

    Returns:
        str: The TwiML document
    """
    response = VoiceResponse()
    connect = Connect()
    stream = connect.stream(url=f"wss://{host}{MEDIA_STREAM_PATH}")
    for name, value in parameters.items():
        stream.parameter(name=name, value=value)
    response.append(connect)
    return str(response)
