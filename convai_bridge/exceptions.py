"""Error types raised while bridging a call to the agent backend."""


class BridgeError(Exception):
    """Base class for all bridge errors."""


class ConfigurationError(BridgeError):
    """Required startup configuration is missing or malformed."""


class UpstreamError(BridgeError):
    """The agent backend did not issue a signed session URL."""


class ProtocolError(BridgeError):
    """A frame on either channel could not be parsed."""


class ChannelError(BridgeError):
    """The underlying connection of a channel failed."""
