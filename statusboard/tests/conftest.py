# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.

MongoDB and Redis are replaced by mongomock and fakeredis, which implement
the pymongo and redis-py client APIs in memory.
"""

import os
import pytest
import fakeredis
import mongomock
from datetime import datetime, timedelta

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'

from statusboard.app import create_app
from statusboard.services.auth import AuthService
from statusboard.services.mongodb import MongoDBService
from statusboard.services.news_feed import NewsFeed
from statusboard.services.redis import RedisService
from statusboard.services.sessions import RedisSessionStore
from statusboard.services.status_store import StatusStore

REPORTER_PASSWORD = "reporter-password"
ADMIN_PASSWORD = "admin-password"


class StepClock:
    """Deterministic clock that advances a fixed step on every reading."""

    def __init__(self, start: datetime = datetime(2024, 11, 26, 15, 0, 0), step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def mongodb_service():
    """MongoDB service over an in-memory client."""
    return MongoDBService(
        "mongodb://localhost:27017/statusboard_test",
        "statusboard_test",
        client=mongomock.MongoClient()
    )


@pytest.fixture
def test_db(mongodb_service):
    return mongodb_service.database


@pytest.fixture
def redis_service():
    return RedisService(client=fakeredis.FakeRedis(decode_responses=True))


@pytest.fixture
def status_store(mongodb_service, clock):
    return StatusStore(mongodb_service, clock=clock)


@pytest.fixture
def news_feed(mongodb_service, clock):
    return NewsFeed(mongodb_service, clock=clock)


@pytest.fixture
def auth_service(mongodb_service):
    return AuthService(mongodb_service, bcrypt_rounds=4)


@pytest.fixture
def session_store(redis_service):
    return RedisSessionStore(redis_service, ttl_seconds=3600)


@pytest.fixture
def reporter(auth_service):
    """Regular user allowed to report room statuses."""
    return auth_service.create_user("reporter@example.com", "Reporter", REPORTER_PASSWORD)


@pytest.fixture
def admin(auth_service):
    """Administrator allowed to manage news."""
    return auth_service.create_user("admin@example.com", "Admin", ADMIN_PASSWORD, is_admin=True)


@pytest.fixture
def app(mongodb_service, redis_service, status_store, news_feed, auth_service, session_store):
    """Application wired to in-memory backends."""
    app = create_app(
        {
            'ENVIRONMENT': 'test',
            'OTEL_ENABLED': False,
            'TESTING': True,
            'BCRYPT_ROUNDS': 4,
            'FRONTEND_URL': 'http://board.example.com'
        },
        mongodb_service=mongodb_service,
        redis_service=redis_service,
        status_store=status_store,
        news_feed=news_feed,
        auth_service=auth_service,
        session_store=session_store
    )
    return app


@pytest.fixture
def test_client(app):
    return app.test_client()


@pytest.fixture
def reporter_client(app, reporter):
    """Test client holding a reporter session cookie."""
    client = app.test_client()
    response = client.post('/api/auth/login', json={"email": reporter.email, "password": REPORTER_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def admin_client(app, admin):
    """Test client holding an admin session cookie."""
    client = app.test_client()
    response = client.post('/api/auth/login', json={"email": admin.email, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def passwords():
    """Plain-text passwords of the seeded users."""
    return {"reporter": REPORTER_PASSWORD, "admin": ADMIN_PASSWORD}
