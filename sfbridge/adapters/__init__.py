"""Source and sink adapters, selected from configuration."""
import structlog
from .base import EventSource, Publisher
from .kafka_producer import KafkaPublisher
from .memory import InMemoryEventSource, InMemoryPublisher
from .redis_stream import RedisStreamPublisher
from .salesforce import SalesforceEventSource
from ..config import SinkConfig, SourceConfig

log = structlog.get_logger()


def create_publisher(sink: SinkConfig) -> Publisher:
    """Build the publisher named by ``sink.adapter``."""
    log.info("adapter.selected", role="sink", type=sink.adapter)
    if sink.adapter == "redis":
        return RedisStreamPublisher(sink.brokers, timeout=sink.publish_timeout)
    if sink.adapter == "memory":
        return InMemoryPublisher()
    return KafkaPublisher(
        sink.brokers,
        client_id=sink.client_id,
        acks=sink.acks,
        publish_timeout=sink.publish_timeout,
    )


def create_event_source(source: SourceConfig) -> EventSource:
    """Build the event source named by ``source.adapter``."""
    log.info("adapter.selected", role="source", type=source.adapter)
    if source.adapter == "memory":
        return InMemoryEventSource(source.connection_params.get("events", []))
    return SalesforceEventSource(source.connection_params, replay=source.replay)


__all__ = [
    "EventSource",
    "Publisher",
    "KafkaPublisher",
    "RedisStreamPublisher",
    "InMemoryPublisher",
    "InMemoryEventSource",
    "SalesforceEventSource",
    "create_publisher",
    "create_event_source",
]
