# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - External integrations and side effects.
"""

from .mongodb import MongoDBService
from .redis import RedisService
from .status_store import StatusStore
from .news_feed import NewsFeed
from .auth import AuthService
from .sessions import SessionStore, RedisSessionStore

__all__ = [
    "MongoDBService",
    "RedisService",
    "StatusStore",
    "NewsFeed",
    "AuthService",
    "SessionStore",
    "RedisSessionStore"
]
