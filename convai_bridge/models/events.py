"""Lifecycle notifications that channels report to their session bridge."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ChannelSide(str, Enum):
    TELEPHONY = "telephony"
    AGENT = "agent"


@dataclass
class ChannelOpened:
    """The channel is ready to carry audio."""

    side: ChannelSide


@dataclass
class ChannelClosed:
    """The channel went away; ``error`` is set when it failed rather than closed."""

    side: ChannelSide
    error: Optional[Exception] = None


@dataclass
class AgentUnavailable:
    """The agent channel could not be established for this call."""

    error: Exception
