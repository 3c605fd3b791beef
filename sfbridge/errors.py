"""Error taxonomy for the bridge.

Startup errors (configuration, authentication, sink connection) are fatal
before the subscription loop starts. Per-event errors are contained by the
forwarder. Subscription errors end the loop.
"""


class BridgeError(Exception):
    """Base class for all bridge errors."""

    exit_code = 1


class ConfigurationError(BridgeError):
    """Missing or malformed configuration."""

    exit_code = 2


class AuthenticationError(BridgeError):
    """Event source session could not be established."""

    exit_code = 3


class SinkConnectionError(BridgeError):
    """Message queue publisher could not be created."""

    exit_code = 4


class EventProcessingError(BridgeError):
    """A single inbound event could not be turned into an envelope."""


class PublishError(BridgeError):
    """A single envelope could not be delivered to the message queue."""


class SubscriptionError(BridgeError):
    """The subscription to the event source failed or was lost."""


class HttpServerError(BridgeError):
    """The health/metrics HTTP server could not start."""

    exit_code = 5
