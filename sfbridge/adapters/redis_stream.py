"""Redis Streams publisher."""
import asyncio
from typing import Any, List
import structlog
import orjson
from redis import Redis
from redis.exceptions import RedisError
from .base import Publisher
from ..errors import PublishError, SinkConnectionError

log = structlog.get_logger()


class RedisStreamPublisher(Publisher):
    """Redis Streams implementation of the publisher.

    Each topic maps to a stream key; the envelope is stored as UTF-8 JSON
    under the ``data`` field of the stream entry.
    """

    def __init__(self, brokers: List[str], maxlen: int = 10000, timeout: float = 5.0):
        """
        Initialize Redis stream publisher.

        Args:
            brokers: Redis addresses ("host:port" or "redis://..."); the first is used
            maxlen: Approximate cap on stream length
            timeout: Socket connect/read timeout in seconds
        """
        address = brokers[0]
        self.redis_url = address if "://" in address else f"redis://{address}"
        self.maxlen = maxlen
        self.timeout = timeout
        self._client: Redis | None = None

    def _get_client(self) -> Redis:
        """Get or create Redis client."""
        if self._client is None:
            self._client = Redis.from_url(
                self.redis_url,
                decode_responses=False,  # We'll handle encoding ourselves
                socket_connect_timeout=self.timeout,
                socket_timeout=self.timeout,
            )
        return self._client

    async def connect(self) -> None:
        try:
            await asyncio.to_thread(self._get_client().ping)
        except RedisError as e:
            raise SinkConnectionError(f"cannot reach redis at {self.redis_url}: {e}") from e
        log.info("publisher.connected", adapter="redis_stream", url=self.redis_url)

    async def publish(self, topic: str, value: Any) -> None:
        data = orjson.dumps(value)
        try:
            await asyncio.to_thread(
                self._get_client().xadd,
                topic,
                {"data": data},
                id="*",
                maxlen=self.maxlen,
                approximate=True,
            )
        except RedisError as e:
            raise PublishError(f"redis xadd to {topic} failed: {e}") from e

    async def health_check(self) -> bool:
        try:
            return bool(await asyncio.to_thread(self._get_client().ping))
        except Exception as e:
            log.warning("redis.health_check_failed", error=str(e))
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            self._client.close()
            self._client = None
