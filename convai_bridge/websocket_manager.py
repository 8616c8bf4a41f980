"""
WebSocket connection manager for Twilio media streams.

This module accepts the provider's media stream connections and runs one
``SessionBridge`` per connection until the call ends. Sessions are independent;
the only thing they share is the immutable settings and the registry used to
report how many calls are active.
"""

import logging

from fastapi import WebSocket

from convai_bridge.bot.session_bridge import SessionBridge
from convai_bridge.config.constants import LOGGER_NAME
from convai_bridge.models.session import SessionRegistry
from convai_bridge.services.signed_url import SignedUrlRequester

logger = logging.getLogger(LOGGER_NAME)


class MediaStreamManager:
    """Serves media stream websockets, one bridged session per connection."""

    def __init__(self, requester: SignedUrlRequester, bridge_factory=SessionBridge):
        self.requester = requester
        self.session_registry = SessionRegistry()
        self._bridge_factory = bridge_factory

    async def handle_websocket(self, websocket: WebSocket):
        """Handle a media stream connection throughout its lifecycle.

        Args:
            websocket (WebSocket): The FastAPI WebSocket connection object

        The connection stays open until Twilio sends ``stop`` or disconnects, or
        the agent side goes away. Errors are contained to this call.
        """
        await websocket.accept()
        logger.info("[Server] Twilio connected to outbound media stream")

        bridge = self._bridge_factory(
            websocket, self.requester, registry=self.session_registry
        )
        try:
            await bridge.run()
        except Exception as e:
            logger.error(f"Error in media stream connection: {e}", exc_info=True)
        finally:
            logger.info("[Twilio] Media stream handler finished")
