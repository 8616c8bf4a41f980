"""
Unit tests for the Twilio media stream channel.
"""

import json
from unittest.mock import AsyncMock

import pytest
from fastapi import WebSocket
from starlette.websockets import WebSocketState

from convai_bridge.bot.telephony_channel import TelephonyChannel
from convai_bridge.exceptions import ChannelError
from convai_bridge.models.events import ChannelClosed, ChannelSide
from convai_bridge.models.telephony_schemas import (
    StreamMediaMessage,
    StreamStartMessage,
    StreamStopMessage,
)

START_FRAME = json.dumps(
    {"event": "start", "start": {"streamSid": "S1", "callSid": "C1", "customParameters": {}}}
)
MEDIA_FRAME = json.dumps({"event": "media", "media": {"payload": "QUJD"}})
STOP_FRAME = json.dumps({"event": "stop", "streamSid": "S1"})


def text_message(text):
    return {"type": "websocket.receive", "text": text}


DISCONNECT = {"type": "websocket.disconnect", "code": 1000}


@pytest.fixture
def websocket():
    """Create a connected mock WebSocket."""
    mock = AsyncMock(spec=WebSocket)
    mock.client_state = WebSocketState.CONNECTED
    mock.application_state = WebSocketState.CONNECTED
    return mock


@pytest.fixture
def events():
    return []


@pytest.fixture
def channel(websocket, events):
    return TelephonyChannel(websocket, events.append)


@pytest.mark.asyncio
async def test_receive_loop_posts_events_in_order(channel, websocket, events):
    websocket.receive.side_effect = [
        text_message(START_FRAME),
        text_message(MEDIA_FRAME),
        text_message("{not json"),
        text_message(STOP_FRAME),
        DISCONNECT,
    ]

    await channel.receive_loop()

    assert isinstance(events[0], StreamStartMessage)
    assert isinstance(events[1], StreamMediaMessage)
    assert isinstance(events[2], StreamStopMessage)
    assert events[3] == ChannelClosed(ChannelSide.TELEPHONY, None)
    assert len(events) == 4


@pytest.mark.asyncio
async def test_receive_loop_skips_binary_frames(channel, websocket, events):
    """A binary frame is discarded and the frames after it are still read"""
    websocket.receive.side_effect = [
        {"type": "websocket.receive", "bytes": b"\x00\x01\x02"},
        text_message(STOP_FRAME),
        DISCONNECT,
    ]

    await channel.receive_loop()

    assert isinstance(events[0], StreamStopMessage)
    assert events[1] == ChannelClosed(ChannelSide.TELEPHONY, None)
    assert len(events) == 2


@pytest.mark.asyncio
async def test_receive_loop_binary_frame_on_starlette_socket(events):
    incoming = [
        {"type": "websocket.connect"},
        {"type": "websocket.receive", "bytes": b"\xff\xfe"},
        text_message(STOP_FRAME),
        DISCONNECT,
    ]
    sent = []

    async def receive():
        return incoming.pop(0)

    async def send(message):
        sent.append(message)

    websocket = WebSocket(
        {"type": "websocket", "path": "/outbound-media-stream", "headers": []},
        receive=receive,
        send=send,
    )
    await websocket.accept()
    channel = TelephonyChannel(websocket, events.append)

    await channel.receive_loop()

    assert [type(event) for event in events] == [StreamStopMessage, ChannelClosed]
    assert events[1].error is None
    assert incoming == []


@pytest.mark.asyncio
async def test_receive_loop_reports_socket_failure(channel, websocket, events):
    websocket.receive.side_effect = RuntimeError("socket broke")

    await channel.receive_loop()

    assert len(events) == 1
    assert events[0].side is ChannelSide.TELEPHONY
    assert isinstance(events[0].error, ChannelError)


@pytest.mark.asyncio
async def test_receive_loop_reports_unexpected_error(channel, websocket, events):
    websocket.receive.side_effect = [text_message(START_FRAME), KeyError("text")]

    await channel.receive_loop()

    assert isinstance(events[0], StreamStartMessage)
    assert events[1].side is ChannelSide.TELEPHONY
    assert isinstance(events[1].error, ChannelError)


@pytest.mark.asyncio
async def test_receive_loop_silent_after_close(channel, websocket, events):
    await channel.close()
    websocket.receive.side_effect = RuntimeError("WebSocket is not connected")

    await channel.receive_loop()

    assert events == []


@pytest.mark.asyncio
async def test_send_media(channel, websocket):
    assert await channel.send_media("S1", "QUJD") is True

    sent = json.loads(websocket.send_text.call_args.args[0])
    assert sent == {"event": "media", "streamSid": "S1", "media": {"payload": "QUJD"}}


@pytest.mark.asyncio
async def test_send_media_after_disconnect(channel, websocket):
    websocket.client_state = WebSocketState.DISCONNECTED

    assert await channel.send_media("S1", "QUJD") is False
    websocket.send_text.assert_not_called()


@pytest.mark.asyncio
async def test_close_is_idempotent(channel, websocket):
    await channel.close()
    await channel.close()

    websocket.close.assert_called_once()
    assert not channel.is_open


@pytest.mark.asyncio
async def test_close_skips_disconnected_socket(channel, websocket):
    websocket.client_state = WebSocketState.DISCONNECTED

    await channel.close()

    websocket.close.assert_not_called()
