"""
Websocket channel to the ElevenLabs Conversational AI backend.

The channel owns one connection for the lifetime of a call. It never acts on what
it receives: parsed messages and lifecycle changes are posted to the owning
session bridge, which decides what to do with them.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional, Union

import websockets
from pydantic import BaseModel
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException

from convai_bridge.config.constants import LOGGER_NAME
from convai_bridge.exceptions import ChannelError, ProtocolError
from convai_bridge.models.agent_schemas import (
    InitiationClientDataMessage,
    PongMessage,
    UserAudioChunkMessage,
    parse_agent_event,
)
from convai_bridge.models.events import ChannelClosed, ChannelOpened, ChannelSide

logger = logging.getLogger(LOGGER_NAME)

CONNECTION_TIMEOUT = 10  # seconds

# WebSocket configuration for low latency
WS_MAX_SIZE = 16 * 1024 * 1024  # 16MB - large enough for audio chunks
WS_MAX_QUEUE = 32

EventSink = Callable[[Any], None]


class AgentChannel:
    """
    Streaming connection to the agent backend for one conversation.

    Outbound traffic is limited to the initiation message, caller audio and pong
    replies. Inbound frames are parsed and handed to ``sink``; frames that fail to
    parse are logged and dropped.
    """

    def __init__(self, sink: EventSink, connect_timeout: float = CONNECTION_TIMEOUT):
        self._sink = sink
        self.connect_timeout = connect_timeout
        self.ws = None
        self._recv_task: Optional[asyncio.Task] = None
        self._connection_active = False
        self._is_closing = False

    @property
    def is_open(self) -> bool:
        return self._connection_active and not self._is_closing

    async def open(self, url: str) -> None:
        """
        Connect to ``url`` and start receiving.

        Completion is reported by posting ``ChannelOpened`` to the sink, after which
        inbound messages start flowing.

        Raises:
            ChannelError: If the connection cannot be established
        """
        if self._is_closing:
            logger.warning("Cannot open agent channel - channel is closing")
            return

        try:
            connection_start = time.time()
            self.ws = await asyncio.wait_for(
                websockets.connect(
                    url,
                    max_size=WS_MAX_SIZE,
                    max_queue=WS_MAX_QUEUE,
                    compression=None,
                ),
                timeout=self.connect_timeout,
            )
            logger.debug(
                f"Agent websocket connected in {time.time() - connection_start:.2f} seconds"
            )
        except asyncio.TimeoutError as e:
            raise ChannelError(
                f"Timeout while connecting to agent backend (after {self.connect_timeout}s)"
            ) from e
        except (OSError, WebSocketException) as e:
            raise ChannelError(f"Failed to connect to agent backend: {e}") from e

        if self._is_closing:
            # close() ran while the handshake was in flight
            await self.ws.close()
            return

        self._connection_active = True
        self._sink(ChannelOpened(ChannelSide.AGENT))
        self._recv_task = asyncio.create_task(self._recv_loop())
        logger.info("[ElevenLabs] Connected to Conversational AI")

    async def _recv_loop(self) -> None:
        error: Optional[Exception] = None
        try:
            async for message in self.ws:
                try:
                    event = parse_agent_event(message)
                except ProtocolError as e:
                    logger.warning(f"[ElevenLabs] Discarding frame: {e}")
                    continue
                self._sink(event)
        except ConnectionClosedError as e:
            logger.warning(f"[ElevenLabs] Connection closed with error: {e}")
            error = ChannelError(str(e))
        except OSError as e:
            logger.error(f"[ElevenLabs] Connection error: {e}")
            error = ChannelError(str(e))

        self._connection_active = False
        if not self._is_closing:
            logger.info("[ElevenLabs] Disconnected")
            self._sink(ChannelClosed(ChannelSide.AGENT, error))

    async def _send(self, message: BaseModel) -> bool:
        if not self.is_open:
            logger.debug("Agent channel not open, frame not sent")
            return False
        try:
            await self.ws.send(message.model_dump_json())
            return True
        except ConnectionClosed as e:
            # the receive loop reports the close
            logger.warning(f"[ElevenLabs] Send failed, connection closed: {e}")
            return False

    async def send_initiation(self, dynamic_variables: Dict[str, str]) -> bool:
        """Send the conversation initiation message carrying the caller's variables."""
        logger.info(f"[ElevenLabs] Sending user data: {dynamic_variables}")
        return await self._send(
            InitiationClientDataMessage(dynamic_variables=dynamic_variables)
        )

    async def send_audio(self, payload: str) -> bool:
        """
        Forward one base64 audio frame from the caller.

        Returns:
            bool: True if the frame was sent, False if the channel is not open
        """
        return await self._send(UserAudioChunkMessage(user_audio_chunk=payload))

    async def send_pong(self, event_id: Union[int, str]) -> bool:
        return await self._send(PongMessage(event_id=event_id))

    async def close(self) -> None:
        """Close the connection; calling it again is a no-op."""
        if self._is_closing:
            return
        self._is_closing = True
        self._connection_active = False

        if self.ws is not None:
            logger.info("[ElevenLabs] Closing connection")
            try:
                await self.ws.close()
            except (OSError, WebSocketException) as e:
                logger.warning(f"Error closing agent websocket: {e}")

        if self._recv_task is not None and not self._recv_task.done():
            self._recv_task.cancel()
            try:
                await self._recv_task
            except asyncio.CancelledError:
                pass
