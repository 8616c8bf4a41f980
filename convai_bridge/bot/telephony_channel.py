"""
Media stream channel opened by Twilio for one call.

The channel reads frames from the provider websocket and posts parsed events to
the owning session bridge; it also writes agent audio back to the caller.
"""

import logging
from typing import Any, Callable, Dict

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from convai_bridge.config.constants import LOGGER_NAME
from convai_bridge.exceptions import ChannelError, ProtocolError
from convai_bridge.models.events import ChannelClosed, ChannelSide
from convai_bridge.models.telephony_schemas import (
    OutboundMedia,
    OutboundMediaMessage,
    StreamMediaMessage,
    TelephonyEvent,
    parse_telephony_event,
)

logger = logging.getLogger(LOGGER_NAME)


class TelephonyChannel:
    """Wraps the accepted provider websocket for the lifetime of a call."""

    def __init__(self, websocket: WebSocket, sink: Callable[[Any], None]):
        self.websocket = websocket
        self._sink = sink
        self._closed = False

    @property
    def is_open(self) -> bool:
        return (
            not self._closed
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def receive_loop(self) -> None:
        """
        Read frames until the provider disconnects.

        Malformed frames, binary frames included, are logged and skipped. The end
        of the stream is always reported as ``ChannelClosed``, carrying a
        ``ChannelError`` if the socket failed.
        """
        error = None
        try:
            while True:
                message = await self.websocket.receive()
                if message["type"] == "websocket.disconnect":
                    logger.info(
                        f"[Twilio] Client disconnected (code {message.get('code', 1000)})"
                    )
                    break
                try:
                    event = self._parse_frame(message)
                except ProtocolError as e:
                    logger.warning(f"[Twilio] Discarding frame: {e}")
                    continue
                if not isinstance(event, StreamMediaMessage):
                    logger.info(f"[Twilio] Received event: {event.event}")
                self._sink(event)
        except RuntimeError as e:
            # raised by starlette when reading from a socket we already closed
            if not self._closed:
                logger.warning(f"[Twilio] Connection error: {e}")
                error = ChannelError(str(e))
        except Exception as e:
            logger.error(f"[Twilio] Unexpected error reading media stream: {e}", exc_info=True)
            error = ChannelError(str(e))
        finally:
            if not self._closed:
                self._sink(ChannelClosed(ChannelSide.TELEPHONY, error))

    @staticmethod
    def _parse_frame(message: Dict[str, Any]) -> TelephonyEvent:
        text = message.get("text")
        if text is None:
            raise ProtocolError("Media stream frames must be text")
        return parse_telephony_event(text)

    async def send_media(self, stream_sid: str, payload: str) -> bool:
        """
        Send one base64 audio frame to the caller on ``stream_sid``.

        Returns:
            bool: True if the frame was written
        """
        if not self.is_open:
            logger.debug("Telephony channel not open, media frame not sent")
            return False
        message = OutboundMediaMessage(
            streamSid=stream_sid, media=OutboundMedia(payload=payload)
        )
        try:
            await self.websocket.send_text(message.model_dump_json())
            return True
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.warning(f"[Twilio] Failed to send media: {e}")
            return False

    async def close(self) -> None:
        """Close the provider socket if it is still connected; repeat calls are no-ops."""
        if self._closed:
            return
        was_open = self.is_open
        self._closed = True
        if was_open:
            try:
                await self.websocket.close()
                logger.info("[Twilio] Media stream closed")
            except RuntimeError as e:
                logger.debug(f"[Twilio] Socket already closed: {e}")
