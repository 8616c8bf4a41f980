"""
FastAPI server bridging Twilio phone calls to an ElevenLabs Conversational AI agent.

This module builds the FastAPI application: HTTP endpoints to place an outbound
call and serve its TwiML, and the websocket endpoint Twilio streams call audio
to. Every media stream connection is bridged to its own agent conversation.

The application is created by ``create_app``; settings are loaded once, and a
missing required variable stops startup with ``ConfigurationError``.
"""

import os
from typing import Optional

from fastapi import FastAPI, Request, WebSocket
from fastapi.responses import Response

from convai_bridge.config.constants import MEDIA_STREAM_PATH, TWIML_PATH
from convai_bridge.config.logging_config import configure_logging
from convai_bridge.config.settings import Settings, load_settings
from convai_bridge.handlers.call_handlers import (
    IDENTITY_FIELDS,
    OutboundCallRequest,
    build_stream_twiml,
    handle_outbound_call,
)
from convai_bridge.services.signed_url import SignedUrlRequester
from convai_bridge.services.twilio_calls import OutboundCallService
from convai_bridge.websocket_manager import MediaStreamManager

APP_NAME = "ElevenLabs Call Bridge"
APP_VERSION = "1.0.0"


def create_app(
    settings: Optional[Settings] = None,
    call_service: Optional[OutboundCallService] = None,
    media_stream_manager: Optional[MediaStreamManager] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Startup configuration; loaded from the environment when omitted
        call_service: Places outbound calls; built from ``settings`` when omitted
        media_stream_manager: Serves media streams; built from ``settings`` when omitted

    Raises:
        ConfigurationError: If settings are loaded here and a required value is missing
    """
    if settings is None:
        settings = load_settings()
    logger = configure_logging(settings.log_level)

    app = FastAPI(
        title=APP_NAME,
        description="Connects Twilio Media Streams to ElevenLabs Conversational AI agents",
        version=APP_VERSION,
    )
    app.state.settings = settings
    app.state.call_service = call_service or OutboundCallService(settings)
    app.state.media_stream_manager = media_stream_manager or MediaStreamManager(
        SignedUrlRequester(settings)
    )

    @app.get("/")
    async def root():
        """Liveness check and basic information about the API."""
        return {
            "message": "Server is running",
            "name": APP_NAME,
            "version": APP_VERSION,
            "endpoints": {
                "/outbound-call": "Place an outbound call answered by the agent",
                TWIML_PATH: "TwiML connecting a call to the media stream",
                MEDIA_STREAM_PATH: "WebSocket endpoint for Twilio Media Streams",
                "/health": "Health check endpoint",
            },
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring system status."""
        return {
            "status": "healthy",
            "agent_configured": bool(settings.elevenlabs_agent_id),
            "active_sessions": len(app.state.media_stream_manager.session_registry),
        }

    @app.post("/outbound-call")
    async def outbound_call(payload: OutboundCallRequest, request: Request):
        """Place an outbound call whose audio is bridged to the agent."""
        host = request.headers.get("host", "")
        return await handle_outbound_call(payload, host, app.state.call_service)

    @app.api_route(TWIML_PATH, methods=["GET", "POST"])
    async def outbound_call_twiml(request: Request):
        """TwiML instructing Twilio to stream the call's audio to this service."""
        parameters = {
            name: request.query_params[name]
            for name in IDENTITY_FIELDS
            if request.query_params.get(name)
        }
        host = request.headers.get("host", "")
        return Response(content=build_stream_twiml(host, parameters), media_type="text/xml")

    @app.websocket(MEDIA_STREAM_PATH)
    async def media_stream(websocket: WebSocket):
        """WebSocket endpoint for Twilio Media Streams."""
        await app.state.media_stream_manager.handle_websocket(websocket)

    logger.info(f"{APP_NAME} configured for agent {settings.elevenlabs_agent_id}")
    return app


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "0.0.0.0")
    uvicorn.run("convai_bridge.main:create_app", factory=True, host=host, port=port)
