"""In-memory adapters for dry runs and tests."""
import asyncio
from typing import Any, AsyncIterator, Dict, Iterable, List, Tuple
import orjson
import structlog
from .base import EventSource, Publisher

log = structlog.get_logger()


class InMemoryPublisher(Publisher):
    """Publisher that keeps every message in a buffer instead of a broker."""

    def __init__(self):
        self.messages: List[Tuple[str, Any]] = []
        self.closed = False

    async def connect(self) -> None:
        log.info("publisher.connected", adapter="memory")

    async def publish(self, topic: str, value: Any) -> None:
        # Serialize so non-JSON values fail the same way a real broker would
        orjson.dumps(value)
        self.messages.append((topic, value))
        log.debug("message.published", topic=topic, adapter="memory")

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        self.closed = True


class InMemoryEventSource(EventSource):
    """Event source that replays a fixed list of events.

    When ``error`` is given it is raised after the last event, which models
    a lost connection.
    """

    def __init__(self, events: Iterable[Dict[str, Any]] = (), error: BaseException | None = None):
        self._events = list(events)
        self._error = error
        self.close_calls = 0

    async def open_session(self) -> Tuple[str, str]:
        return "memory-session", "memory://local"

    async def subscribe(self, channel: str) -> AsyncIterator[Dict[str, Any]]:
        log.info("subscription.opened", channel=channel, adapter="memory")
        for event in self._events:
            await asyncio.sleep(0)
            yield event
        if self._error is not None:
            raise self._error

    async def close(self) -> None:
        self.close_calls += 1
