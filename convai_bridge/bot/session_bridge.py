"""
Bridge between a Twilio media stream and an ElevenLabs agent conversation.

This module provides the per-call orchestrator. Both channels post what they
receive into one queue owned by the bridge, and the bridge handles those events
one at a time, so every state change and relay decision for a call is serialized
without locks.

Lifecycle: ``IDLE`` → ``AWAITING_AGENT`` (stream started, agent connecting) →
``BRIDGED`` (audio flows both ways) → ``CLOSING`` → ``CLOSED``. Any stop,
disconnect or failure on either side drives the call to ``CLOSED`` and closes
both channels.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from convai_bridge.bot.agent_channel import AgentChannel
from convai_bridge.bot.telephony_channel import TelephonyChannel
from convai_bridge.config.constants import LOGGER_NAME
from convai_bridge.exceptions import ChannelError, UpstreamError
from convai_bridge.models.agent_schemas import (
    AgentAudioMessage,
    AgentPingMessage,
    InitiationMetadataMessage,
    UnhandledAgentMessage,
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
    StreamMediaMessage,
    StreamStartMessage,
    StreamStopMessage,
    UnhandledStreamMessage,
)
from convai_bridge.services.signed_url import SignedUrlRequester

logger = logging.getLogger(LOGGER_NAME)

EventHandler = Callable[[Any], Awaitable[None]]


class SessionBridge:
    """
    Owns both channels of one call and relays between them.

    Args:
        websocket: The accepted Twilio media stream websocket
        requester: Issues the signed URL for the agent conversation
        registry: Optional registry the session is published in while active
        agent_factory: Builds the agent channel; receives the bridge's event sink
    """

    def __init__(
        self,
        websocket,
        requester: SignedUrlRequester,
        registry: Optional[SessionRegistry] = None,
        agent_factory: Callable[[Callable[[Any], None]], AgentChannel] = AgentChannel,
        telephony_factory: Callable[..., TelephonyChannel] = TelephonyChannel,
    ):
        self.session = Session()
        self.requester = requester
        self.registry = registry
        self.queue: asyncio.Queue = asyncio.Queue()
        self.telephony = telephony_factory(websocket, self.post)
        self.agent: Optional[AgentChannel] = None
        self._agent_factory = agent_factory
        self._establish_task: Optional[asyncio.Task] = None
        self._reader_task: Optional[asyncio.Task] = None

        self.handlers: Dict[type, EventHandler] = {
            StreamStartMessage: self._on_stream_start,
            StreamMediaMessage: self._on_stream_media,
            StreamStopMessage: self._on_stream_stop,
            UnhandledStreamMessage: self._on_unhandled_stream_event,
            InitiationMetadataMessage: self._on_initiation_metadata,
            AgentAudioMessage: self._on_agent_audio,
            AgentPingMessage: self._on_agent_ping,
            UnhandledAgentMessage: self._on_unhandled_agent_message,
            ChannelOpened: self._on_channel_opened,
            ChannelClosed: self._on_channel_closed,
            AgentUnavailable: self._on_agent_unavailable,
        }

    @property
    def state(self) -> SessionState:
        return self.session.state

    def post(self, event: Any) -> None:
        """Queue an event from either channel for in-order handling."""
        self.queue.put_nowait(event)

    async def run(self) -> None:
        """Serve the call until both channels are closed."""
        self._reader_task = asyncio.create_task(self.telephony.receive_loop())
        try:
            while self.state is not SessionState.CLOSED:
                event = await self.queue.get()
                await self.dispatch(event)
        finally:
            await self.close("bridge stopped")
            if self._reader_task is not None and not self._reader_task.done():
                self._reader_task.cancel()
                try:
                    await self._reader_task
                except asyncio.CancelledError:
                    pass

    async def dispatch(self, event: Any) -> None:
        """Handle one event; errors are logged and never escape the session."""
        if self.state is SessionState.CLOSED:
            logger.debug(f"Session closed, ignoring {type(event).__name__}")
            return

        handler = self.handlers.get(type(event))
        if handler is None:
            logger.warning(f"No handler for event {type(event).__name__}")
            return

        try:
            await handler(event)
        except Exception as e:
            logger.error(
                f"Error handling {type(event).__name__} for stream "
                f"{self.session.stream_sid}: {e}",
                exc_info=True,
            )

    # Telephony events

    async def _on_stream_start(self, event: StreamStartMessage) -> None:
        if self.state is not SessionState.IDLE:
            logger.warning(
                f"[Twilio] Duplicate start for stream {self.session.stream_sid} ignored"
            )
            return

        start = event.start
        self.session.stream_sid = start.streamSid
        self.session.call_sid = start.callSid
        self.session.dynamic_variables = build_dynamic_variables(start.customParameters)
        self.session.state = SessionState.AWAITING_AGENT
        if self.registry is not None:
            self.registry.add_session(self.session)
        logger.info(
            f"[Twilio] Stream started: StreamSid={start.streamSid}, CallSid={start.callSid}"
        )

        self.agent = self._agent_factory(self.post)
        self._establish_task = asyncio.create_task(self._establish_agent(self.agent))

    async def _establish_agent(self, agent: AgentChannel) -> None:
        try:
            url = await self.requester.acquire_session_url()
            await agent.open(url)
        except (UpstreamError, ChannelError) as e:
            self.post(AgentUnavailable(e))
        except Exception as e:
            logger.error(f"Unexpected error connecting to agent: {e}", exc_info=True)
            self.post(AgentUnavailable(ChannelError(str(e))))

    async def _on_stream_media(self, event: StreamMediaMessage) -> None:
        if self.state is not SessionState.BRIDGED:
            logger.debug(f"Dropping caller audio in state {self.state.value}")
            return
        await self.agent.send_audio(event.media.payload)

    async def _on_stream_stop(self, event: StreamStopMessage) -> None:
        logger.info(f"[Twilio] Stream {self.session.stream_sid} ended")
        await self.close("telephony stop")

    async def _on_unhandled_stream_event(self, event: UnhandledStreamMessage) -> None:
        logger.info(f"[Twilio] Unhandled event: {event.event}")

    # Agent events

    async def _on_initiation_metadata(self, event: InitiationMetadataMessage) -> None:
        logger.info("[ElevenLabs] Metadata received")

    async def _on_agent_audio(self, event: AgentAudioMessage) -> None:
        if self.state is not SessionState.BRIDGED:
            return
        if self.session.stream_sid is None:
            logger.debug("Dropping agent audio, stream id unknown")
            return
        await self.telephony.send_media(
            self.session.stream_sid, event.audio_event.audio_base_64
        )

    async def _on_agent_ping(self, event: AgentPingMessage) -> None:
        if self.state is not SessionState.BRIDGED:
            return
        await self.agent.send_pong(event.ping_event.event_id)

    async def _on_unhandled_agent_message(self, event: UnhandledAgentMessage) -> None:
        logger.debug(f"[ElevenLabs] Unhandled message type: {event.type}")

    # Lifecycle

    async def _on_channel_opened(self, event: ChannelOpened) -> None:
        if event.side is not ChannelSide.AGENT or self.state is not SessionState.AWAITING_AGENT:
            return
        self.session.agent_connected = True
        self.session.state = SessionState.BRIDGED
        logger.info(f"Session {self.session.stream_sid} bridged to agent")
        await self.agent.send_initiation(self.session.dynamic_variables)

    async def _on_channel_closed(self, event: ChannelClosed) -> None:
        if event.side is ChannelSide.TELEPHONY:
            self.session.telephony_connected = False
        else:
            self.session.agent_connected = False

        if event.error is not None:
            logger.warning(f"{event.side.value} channel failed: {event.error}")
        await self.close(f"{event.side.value} channel closed")

    async def _on_agent_unavailable(self, event: AgentUnavailable) -> None:
        if isinstance(event.error, UpstreamError):
            logger.error(
                f"UpstreamError for stream {self.session.stream_sid}: {event.error}"
            )
        else:
            logger.error(
                f"Agent connection failed for stream {self.session.stream_sid}: {event.error}"
            )
        await self.close("agent unavailable")

    async def close(self, reason: str) -> None:
        """
        Close both channels and end the session.

        Safe to call any number of times; only the first call has any effect.
        """
        if self.session.is_terminating:
            return
        self.session.state = SessionState.CLOSING
        logger.info(f"Closing session {self.session.stream_sid}: {reason}")

        if self._establish_task is not None and not self._establish_task.done():
            self._establish_task.cancel()
            try:
                await self._establish_task
            except asyncio.CancelledError:
                pass

        if self.agent is not None:
            await self.agent.close()
            self.session.agent_connected = False
        await self.telephony.close()
        self.session.telephony_connected = False

        if self.registry is not None:
            self.registry.remove_session(self.session.stream_sid)
        self.session.state = SessionState.CLOSED
        logger.info(f"Session {self.session.stream_sid} closed")
