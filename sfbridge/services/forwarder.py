"""Event forwarder: one subscription in, one topic out, in arrival order."""
import asyncio
import time
from typing import Any, AsyncIterator, Dict
from pydantic import BaseModel
import structlog
from ..adapters.base import EventSource, Publisher
from ..config import BridgeConfig
from ..errors import BridgeError, PublishError, SubscriptionError
from ..event_models import build_envelope, extract_replay_id
from ..metrics import Metrics

log = structlog.get_logger()

_STOPPED = object()


async def _receive(events: AsyncIterator[Dict[str, Any]]) -> Any:
    return await events.__anext__()


class ForwarderStats(BaseModel):
    received: int = 0
    forwarded: int = 0
    failed: int = 0


class EventForwarder:
    """
    Bridges one event source channel to one message queue topic.

    A single flow of control awaits each inbound event, wraps it in an
    envelope and publishes it before awaiting the next one. Per-event
    failures are logged and skipped; a subscription failure ends the loop.
    The subscription is closed exactly once on every exit path.
    """

    def __init__(
        self,
        config: BridgeConfig,
        source: EventSource,
        publisher: Publisher,
        metrics: Metrics | None = None,
    ):
        self._config = config
        self._source = source
        self._publisher = publisher
        self._metrics = metrics or Metrics()
        self._stop_requested = asyncio.Event()
        self._seq = 0
        self.stats = ForwarderStats()

    @property
    def channel(self) -> str:
        return self._config.source.channel

    @property
    def topic(self) -> str:
        return self._config.sink.topic

    @property
    def publisher(self) -> Publisher:
        return self._publisher

    def stop(self) -> None:
        """Request shutdown; the in-flight event is finished first."""
        if not self._stop_requested.is_set():
            log.info("forwarder.stop_requested")
            self._stop_requested.set()

    async def start(self) -> None:
        """
        Connect the publisher and open the event source session.

        Raises:
            SinkConnectionError: If the message queue is unreachable
            AuthenticationError: If the event source rejects the credentials
        """
        await self._publisher.connect()
        session_id, endpoint = await self._source.open_session()
        log.info("forwarder.started", channel=self.channel, topic=self.topic, endpoint=endpoint)

    async def run(self) -> ForwarderStats:
        """
        Start, forward events until the subscription ends or stop() is
        called, then close the subscription and the publisher.

        Returns:
            Counters for received, forwarded and failed events

        Raises:
            SubscriptionError: If the subscription fails or the connection is lost
        """
        try:
            await self.start()
            await self._consume()
        finally:
            await self._close_source()
            await self._close_publisher()
        log.info("forwarder.stopped", **self.stats.model_dump())
        return self.stats

    async def _consume(self) -> None:
        events = self._source.subscribe(self.channel)
        self._metrics.set_subscription_active(self.channel, True)
        try:
            while not self._stop_requested.is_set():
                try:
                    event = await self._next_event(events)
                except StopAsyncIteration:
                    log.info("subscription.ended", channel=self.channel)
                    break
                if event is _STOPPED:
                    break
                await self.forward(event)
        except SubscriptionError as e:
            log.error("subscription.failed", channel=self.channel, error=str(e))
            raise
        except BridgeError:
            raise
        except Exception as e:
            log.error("subscription.failed", channel=self.channel, error=str(e), error_type=type(e).__name__)
            raise SubscriptionError(f"subscription to {self.channel} failed: {e}") from e
        finally:
            self._metrics.set_subscription_active(self.channel, False)
            await events.aclose()

    async def _next_event(self, events: AsyncIterator[Dict[str, Any]]) -> Any:
        """Await the next event, or return _STOPPED if stop() wins the race."""
        next_event = asyncio.ensure_future(_receive(events))
        stopped = asyncio.ensure_future(self._stop_requested.wait())
        try:
            done, _ = await asyncio.wait(
                {next_event, stopped}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            next_event.cancel()
            await asyncio.wait({next_event})
            raise
        finally:
            stopped.cancel()
        if next_event in done:
            return next_event.result()
        next_event.cancel()
        await asyncio.wait({next_event})
        return _STOPPED

    async def forward(self, event: Any) -> bool:
        """
        Wrap one event and publish it to the configured topic.

        Failures are logged once and contained.

        Returns:
            True if the envelope was published, False if the event was dropped
        """
        self._seq += 1
        self.stats.received += 1
        self._metrics.record_received(self.channel)

        with structlog.contextvars.bound_contextvars(
            seq=self._seq, replay_id=extract_replay_id(event)
        ):
            try:
                envelope = build_envelope(event, self._config.sink.event_type)
            except Exception as e:
                return self._drop("envelope", e)

            try:
                await self._publish(envelope.model_dump())
            except Exception as e:
                return self._drop("publish", e)

            self.stats.forwarded += 1
            log.info("event.forwarded", topic=self.topic, timestamp=envelope.timestamp)
            return True

    async def _publish(self, value: Dict[str, Any]) -> None:
        sink = self._config.sink
        attempts = sink.publish_retries + 1
        start = time.perf_counter()
        for attempt in range(1, attempts + 1):
            try:
                await self._publisher.publish(sink.topic, value)
                break
            except PublishError as e:
                if attempt == attempts:
                    raise
                log.warning("publish.retry", attempt=attempt, max_attempts=attempts, error=str(e))
                self._metrics.record_retry(sink.topic)
                await asyncio.sleep(sink.retry_backoff * attempt)
        self._metrics.record_forwarded(sink.topic, time.perf_counter() - start)

    def _drop(self, stage: str, error: Exception) -> bool:
        self.stats.failed += 1
        self._metrics.record_failed(stage)
        log.error(
            "event.failed",
            stage=stage,
            seq=self._seq,
            error=str(error),
            error_type=type(error).__name__,
        )
        return False

    async def _close_source(self) -> None:
        try:
            await self._source.close()
        except Exception as e:
            log.error("subscription.close_failed", error=str(e), error_type=type(e).__name__)
        else:
            log.info("subscription.closed", channel=self.channel)

    async def _close_publisher(self) -> None:
        try:
            await self._publisher.close()
        except Exception as e:
            log.error("publisher.close_failed", error=str(e), error_type=type(e).__name__)
