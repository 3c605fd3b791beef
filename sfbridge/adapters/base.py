"""Base adapter interfaces for the event source and the message queue sink."""
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, Tuple


class Publisher(ABC):
    """Abstract interface for message queue publishers."""

    @abstractmethod
    async def connect(self) -> None:
        """
        Create the underlying client.

        Raises:
            SinkConnectionError: If the broker cannot be reached
        """
        pass

    @abstractmethod
    async def publish(self, topic: str, value: Any) -> None:
        """
        Publish one JSON-serializable value to a topic.

        Args:
            topic: Destination topic (or stream) name
            value: JSON-serializable message value, sent as UTF-8 JSON

        Raises:
            TypeError: If value is not JSON-serializable
            PublishError: If the broker rejects or does not acknowledge the message
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the broker is reachable.

        Returns:
            True if healthy, False otherwise
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Flush pending messages and release the client."""
        pass


class EventSource(ABC):
    """Abstract interface for push-style event sources."""

    @abstractmethod
    async def open_session(self) -> Tuple[str, str]:
        """
        Authenticate against the event source.

        Returns:
            (session_id, endpoint) tokens handed to the subscription

        Raises:
            AuthenticationError: If the session cannot be established
        """
        pass

    @abstractmethod
    def subscribe(self, channel: str) -> AsyncIterator[Dict[str, Any]]:
        """
        Subscribe to a named channel.

        Yields inbound events in delivery order until the subscription ends.

        Raises:
            SubscriptionError: If the subscription fails or the connection is lost
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the subscription and the session."""
        pass
