import logging

import redis

from complaint_portal.core.errors import NotificationError

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """Pushes complaint IDs onto named Redis list queues for downstream consumers."""

    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, redis_url: str) -> "NotificationPublisher":
        client = redis.Redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        logger.info("Notification publisher initialized")
        return cls(client)

    def publish(self, queue_name: str, payload: str) -> None:
        try:
            self.client.rpush(queue_name, payload)
        except redis.RedisError as exc:
            logger.error("Failed to send message to queue %s: %s", queue_name, exc)
            raise NotificationError(queue_name, exc) from exc

        logger.info("Message sent to queue %s", queue_name)

    def close(self) -> None:
        self.client.close()
