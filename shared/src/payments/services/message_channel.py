"""Redis pub/sub message channel for payment notifications.

Messages are JSON envelopes published with PUBLISH on ``<prefix><topic>``.
Publishing is fire-and-forget: no acknowledgement is awaited and nothing is
retried. Failures never raise; they come back as a PublishResult so the
caller decides what to do with them.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import TYPE_CHECKING, Any

import redis

from payments.models.messages import PublishResult

if TYPE_CHECKING:
    from payments.config import Settings

logger = logging.getLogger(__name__)


class MessageChannel:
    """Publisher bound to one redis connection pool.

    Built once at startup and shared by all requests; redis-py clients are
    thread-safe.
    """

    def __init__(
        self,
        client: redis.Redis,
        *,
        source: str = "",
        prefix: str = "",
    ) -> None:
        self._client = client
        self._source = source
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, *, source: str = "", prefix: str = "") -> MessageChannel:
        """Create a channel from a redis URL (redis://host:port/db)."""
        client = redis.from_url(url, decode_responses=True)
        return cls(client, source=source, prefix=prefix)

    @classmethod
    def from_settings(cls, settings: Settings) -> MessageChannel:
        return cls.from_url(
            settings.redis_url,
            source=settings.service_name,
            prefix=settings.channel_prefix,
        )

    def channel_name(self, topic: str) -> str:
        return f"{self._prefix}{topic}"

    def emit(
        self,
        topic: str,
        payload: dict[str, Any],
        *,
        msg_id: str | None = None,
    ) -> PublishResult:
        """Publish one message on a topic.

        Returns a PublishResult; never raises on broker or encoding failure.
        """
        if msg_id is None:
            msg_id = uuid.uuid4().hex[:16]

        try:
            envelope = json.dumps(
                {
                    "msg_id": msg_id,
                    "topic": topic,
                    "source": self._source,
                    "ts": time.strftime("%Y-%m-%dT%H:%M:%S+00:00", time.gmtime()),
                    "data": payload,
                }
            )
            receivers = self._client.publish(self.channel_name(topic), envelope)
        except (redis.RedisError, TypeError, ValueError) as e:
            logger.warning(
                "Channel publish failed: topic=%s msg_id=%s", topic, msg_id,
                exc_info=True,
            )
            return PublishResult(topic=topic, delivered=False, error=str(e))

        logger.info(
            "Published %s msg_id=%s to %s subscriber(s)", topic, msg_id, receivers,
        )
        return PublishResult(topic=topic, delivered=True, receivers=receivers)

    def ping(self) -> bool:
        """Check broker reachability."""
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            logger.warning("Channel ping failed", exc_info=True)
            return False

    def close(self) -> None:
        """Release the underlying connection pool."""
        try:
            self._client.close()
        except redis.RedisError:
            logger.warning("Channel close failed", exc_info=True)
