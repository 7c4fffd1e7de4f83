# SPDX-License-Identifier: Apache-2.0

"""
Server-side login sessions.

A session maps an opaque random token to the identity of the user who
logged in. The store is injected into the application so tests and
alternative deployments can swap the backend.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from typing import Optional

from opentelemetry import trace
from pydantic import ValidationError

from ..middleware.error_handler import StoreError
from ..models.entities import SessionUser
from .redis import RedisService

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = 86400


class SessionStore(ABC):
    """Token to identity mapping."""

    @abstractmethod
    def create(self, user: SessionUser) -> str:
        """Open a session and return its token."""

    @abstractmethod
    def get(self, token: Optional[str]) -> Optional[SessionUser]:
        """Resolve a token; None when absent, expired or unreadable."""

    @abstractmethod
    def destroy(self, token: Optional[str]) -> None:
        """End a session. Unknown tokens are ignored."""


class RedisSessionStore(SessionStore):
    """Sessions stored as JSON values under session:{token} with a TTL."""

    KEY_PREFIX = "session:"

    def __init__(self, redis_service: RedisService, ttl_seconds: int = DEFAULT_SESSION_TTL):
        self.redis = redis_service
        self.ttl_seconds = ttl_seconds

    def _key(self, token: str) -> str:
        return f"{self.KEY_PREFIX}{token}"

    def create(self, user: SessionUser) -> str:
        with tracer.start_as_current_span("sessions.create") as span:
            span.set_attribute("user.id", user.uid)

            token = secrets.token_urlsafe(32)
            if not self.redis.set(self._key(token), user.to_wire(), self.ttl_seconds):
                raise StoreError("Failed to create session")

            logger.info("Session created", extra={"user_id": user.uid})
            return token

    def get(self, token: Optional[str]) -> Optional[SessionUser]:
        if not token:
            return None

        with tracer.start_as_current_span("sessions.get") as span:
            data = self.redis.get(self._key(token))
            if not isinstance(data, dict):
                span.set_attribute("sessions.result", "missing")
                return None

            try:
                user = SessionUser.model_validate(data)
            except ValidationError:
                logger.warning("Discarding malformed session payload")
                return None

            span.set_attribute("sessions.result", "found")
            return user

    def destroy(self, token: Optional[str]) -> None:
        if not token:
            return
        with tracer.start_as_current_span("sessions.destroy"):
            self.redis.delete(self._key(token))
