"""Kafka publisher backed by kafka-python."""
import asyncio
from typing import Any, List
import structlog
import orjson
from kafka import KafkaProducer
from kafka.errors import KafkaError
from .base import Publisher
from ..errors import PublishError, SinkConnectionError

log = structlog.get_logger()


class KafkaPublisher(Publisher):
    """Kafka implementation of the publisher.

    Values are serialized with orjson, which always emits UTF-8 bytes.
    kafka-python is blocking, so producer calls run in a worker thread.
    """

    def __init__(
        self,
        brokers: List[str],
        client_id: str = "sfbridge",
        acks: int | str = 1,
        publish_timeout: float = 10.0,
    ):
        self.brokers = list(brokers)
        self.client_id = client_id
        self.acks = acks
        self.publish_timeout = publish_timeout
        self._producer: KafkaProducer | None = None

    def _create_producer(self) -> KafkaProducer:
        return KafkaProducer(
            bootstrap_servers=self.brokers,
            client_id=self.client_id,
            acks=self.acks,
            value_serializer=orjson.dumps,
        )

    async def connect(self) -> None:
        try:
            self._producer = await asyncio.to_thread(self._create_producer)
        except KafkaError as e:
            raise SinkConnectionError(f"cannot connect to kafka brokers {self.brokers}: {e}") from e
        log.info("publisher.connected", adapter="kafka", brokers=self.brokers)

    def _send(self, topic: str, value: Any):
        future = self._producer.send(topic, value)
        return future.get(timeout=self.publish_timeout)

    async def publish(self, topic: str, value: Any) -> None:
        if self._producer is None:
            raise PublishError("kafka publisher is not connected")
        try:
            metadata = await asyncio.to_thread(self._send, topic, value)
        except KafkaError as e:
            raise PublishError(f"kafka send to {topic} failed: {e}") from e
        log.debug(
            "message.published",
            topic=topic,
            partition=metadata.partition,
            offset=metadata.offset,
            adapter="kafka",
        )

    async def health_check(self) -> bool:
        if self._producer is None:
            return False
        try:
            return bool(self._producer.bootstrap_connected())
        except Exception as e:
            log.warning("kafka.health_check_failed", error=str(e))
            return False

    async def close(self) -> None:
        if self._producer is not None:
            producer, self._producer = self._producer, None
            await asyncio.to_thread(producer.close, self.publish_timeout)
