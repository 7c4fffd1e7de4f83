# SPDX-License-Identifier: Apache-2.0

"""
Redis service for session storage.

Thin wrapper over the redis-py client that serializes values as JSON,
traces each call and reports failures as falsy results instead of raising.
"""

import os
import json
from typing import Optional, List, Dict, Any, Union
import redis
from opentelemetry import trace
import logging

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class RedisConnectionError(Exception):
    """Raised when Redis connection fails."""
    pass


class RedisService:
    """Redis key-value operations with JSON values and optional TTL."""

    def __init__(self, redis_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        """
        Initialize the Redis service.

        Args:
            redis_url: Redis connection URL (redis://host:port)
            client: Pre-built client, used as is
        """
        self.redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379")

        if client is not None:
            self.client = client
            return

        try:
            self.client = redis.from_url(self.redis_url, decode_responses=True)
            self._test_connection()
            logger.info(f"Redis service initialized successfully at {self.redis_url}")
        except RedisConnectionError as e:
            # Sessions read as absent until Redis comes back
            logger.error(f"Failed to initialize Redis service: {str(e)}")

    def _test_connection(self) -> None:
        """Test Redis connection."""
        try:
            if not self.client.ping():
                raise RedisConnectionError("Redis ping failed")
        except redis.RedisError as e:
            logger.error(f"Redis connection test failed: {str(e)}")
            raise RedisConnectionError(f"Redis connection failed: {str(e)}")

    def is_available(self) -> bool:
        """Check whether Redis answers a ping."""
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False

    def health_check(self) -> Dict[str, Any]:
        if self.is_available():
            return {'status': 'healthy'}
        return {'status': 'unhealthy', 'error': 'Redis did not answer ping'}

    def set(self, key: str, value: Union[str, Dict, List], ttl: Optional[int] = None) -> bool:
        """
        Set a key-value pair in Redis.

        Args:
            key: Redis key
            value: Value to store (will be JSON serialized if not string)
            ttl: Time to live in seconds

        Returns:
            True if successful, False otherwise
        """
        with tracer.start_as_current_span("redis.set") as span:
            span.set_attributes({
                "redis.key_prefix": key.split(":", 1)[0],
                "redis.ttl": ttl or 0
            })

            try:
                if isinstance(value, (dict, list)):
                    value = json.dumps(value)

                if ttl:
                    result = self.client.setex(key, ttl, value)
                else:
                    result = self.client.set(key, value)

                span.set_attribute("redis.result", "success")
                return bool(result)

            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                logger.error(f"Redis set failed: {str(e)}")
                return False

    def get(self, key: str) -> Optional[Any]:
        """
        Get a value from Redis.

        Returns:
            Decoded JSON value, raw string, or None if absent or unreachable
        """
        with tracer.start_as_current_span("redis.get") as span:
            span.set_attribute("redis.key_prefix", key.split(":", 1)[0])

            try:
                value = self.client.get(key)
            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                logger.error(f"Redis get failed: {str(e)}")
                return None

            if value is None:
                span.set_attribute("redis.result", "not_found")
                return None

            if isinstance(value, bytes):
                value = value.decode("utf-8")
            try:
                return json.loads(value)
            except (json.JSONDecodeError, TypeError):
                return value

    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if a key was removed."""
        with tracer.start_as_current_span("redis.delete") as span:
            span.set_attribute("redis.key_prefix", key.split(":", 1)[0])

            try:
                result = self.client.delete(key)
                span.set_attribute("redis.result", "success")
                return bool(result)
            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                logger.error(f"Redis delete failed: {str(e)}")
                return False

