"""
Session state for one bridged call.

This module provides the ``Session`` model describing a live call-to-agent pairing,
the ``SessionState`` lifecycle it moves through, and the ``SessionRegistry`` that
tracks every active session in the process for observability.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field

from convai_bridge.config.constants import DEFAULT_USER_ID, DEFAULT_USER_NAME


class SessionState(str, Enum):
    """Lifecycle of a bridged call."""

    IDLE = "idle"
    AWAITING_AGENT = "awaiting_agent"
    BRIDGED = "bridged"
    CLOSING = "closing"
    CLOSED = "closed"


class Session(BaseModel):
    """One live pairing of a telephony stream with an agent conversation."""

    stream_sid: Optional[str] = None
    call_sid: Optional[str] = None
    dynamic_variables: Dict[str, str] = Field(default_factory=dict)
    telephony_connected: bool = True
    agent_connected: bool = False
    state: SessionState = SessionState.IDLE

    @property
    def is_terminating(self) -> bool:
        return self.state in (SessionState.CLOSING, SessionState.CLOSED)


def build_dynamic_variables(custom_parameters: Optional[Dict[str, str]]) -> Dict[str, str]:
    """
    Turn the stream's custom parameters into the agent's dynamic variables.

    Every supplied parameter is passed through; ``user_name`` and ``user_id``
    fall back to placeholders when absent or empty.
    """
    variables = dict(custom_parameters or {})
    variables["user_name"] = variables.get("user_name") or DEFAULT_USER_NAME
    variables["user_id"] = variables.get("user_id") or DEFAULT_USER_ID
    return variables


class SessionRegistry:
    """
    Registry of active sessions keyed by stream id.

    Sessions share nothing through the registry; it exists so the HTTP layer can
    report how many calls are currently bridged.
    """

    def __init__(self):
        """Initialize an empty registry."""
        self.active_sessions: Dict[str, Session] = {}

    def add_session(self, session: Session):
        """
        Register a session under its stream id.

        Args:
            session: A session whose ``stream_sid`` is known
        """
        if session.stream_sid is None:
            raise ValueError("Cannot register a session without a stream id")
        self.active_sessions[session.stream_sid] = session

    def get_session(self, stream_sid: str) -> Optional[Session]:
        return self.active_sessions.get(stream_sid)

    def remove_session(self, stream_sid: Optional[str]):
        """Remove a session; unknown ids are ignored."""
        if stream_sid in self.active_sessions:
            del self.active_sessions[stream_sid]

    def __len__(self) -> int:
        return len(self.active_sessions)
