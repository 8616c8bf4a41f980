from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import WebSocket

from convai_bridge.models.session import SessionRegistry
from convai_bridge.websocket_manager import MediaStreamManager


@pytest.fixture
def websocket():
    return AsyncMock(spec=WebSocket)


@pytest.fixture
def requester():
    return AsyncMock()


def make_manager(requester, bridge):
    factory = MagicMock(return_value=bridge)
    return MediaStreamManager(requester, bridge_factory=factory), factory


@pytest.mark.asyncio
async def test_manager_initialization(requester):
    manager = MediaStreamManager(requester)
    assert manager.requester is requester
    assert isinstance(manager.session_registry, SessionRegistry)
    assert len(manager.session_registry) == 0


@pytest.mark.asyncio
async def test_handle_websocket_runs_one_bridge(requester, websocket):
    """Test that each connection is accepted and served by its own bridge"""
    bridge = MagicMock()
    bridge.run = AsyncMock()
    manager, factory = make_manager(requester, bridge)

    await manager.handle_websocket(websocket)

    websocket.accept.assert_called_once()
    factory.assert_called_once_with(
        websocket, requester, registry=manager.session_registry
    )
    bridge.run.assert_awaited_once()


@pytest.mark.asyncio
async def test_handle_websocket_contains_bridge_errors(requester, websocket):
    """Test that a failing session does not propagate out of the endpoint"""
    bridge = MagicMock()
    bridge.run = AsyncMock(side_effect=Exception("Test exception"))
    manager, _ = make_manager(requester, bridge)

    # Should not raise
    await manager.handle_websocket(websocket)

    websocket.accept.assert_called_once()
