# SPDX-License-Identifier: Apache-2.0

"""
News feed persistence.

Items are immutable. Editing is republishing: the old item is removed and a
new one is added, so an edited item gets a new id and creation time and
moves to the top of the feed.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from opentelemetry import trace
from pydantic import ValidationError
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from ..middleware.error_handler import (
    AuthenticationException,
    AuthorizationException,
    StoreError,
    ValidationException
)
from ..models.entities import NewsItem, SessionUser
from .mongodb import NEWS, MongoDBService

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

MAX_LIMIT = 100


def require_admin_actor(actor: Optional[SessionUser]) -> SessionUser:
    """Reject anonymous and non-admin actors."""
    if actor is None:
        raise AuthenticationException("Authentication required")
    if not actor.is_admin:
        raise AuthorizationException("Administrator privileges required")
    return actor


def _clean_content(content: Optional[str]) -> str:
    if not content or not content.strip():
        raise ValidationException("News content cannot be empty")
    return content.strip()


class NewsFeed:
    """Short administrator-published news list."""

    def __init__(self, mongodb: MongoDBService, clock: Callable[[], datetime] = datetime.utcnow,
                 default_limit: int = 20):
        self.mongodb = mongodb
        self._clock = clock
        self.default_limit = default_limit

    @property
    def collection(self):
        return self.mongodb.get_collection(NEWS)

    def _id_filter(self, news_id: str) -> dict:
        # Items written by other tools may carry real ObjectIds
        candidates = [news_id]
        try:
            candidates.append(ObjectId(news_id))
        except (InvalidId, TypeError):
            pass
        return {"_id": {"$in": candidates}}

    def list(self, limit: Optional[int] = None) -> List[NewsItem]:
        """
        List news newest first.

        Args:
            limit: Maximum number of items, clamped to 1..100

        Raises:
            StoreError: If the store cannot be read
        """
        limit = self.default_limit if limit is None else limit
        limit = max(1, min(int(limit), MAX_LIMIT))

        with tracer.start_as_current_span("news_feed.list") as span:
            span.set_attribute("news.limit", limit)

            try:
                cursor = (
                    self.collection.find({})
                    .sort([("createdAt", DESCENDING), ("_id", DESCENDING)])
                    .limit(limit)
                )
                documents = list(cursor)
            except PyMongoError as e:
                logger.error(f"Failed to list news: {e}")
                raise StoreError("Failed to load news") from e

            items = []
            for doc in documents:
                try:
                    items.append(NewsItem.from_document(doc))
                except (KeyError, ValidationError) as e:
                    logger.warning(f"Skipping malformed news document: {e}", extra={"news_id": str(doc.get("_id"))})

            span.set_attribute("news.count", len(items))
            return items

    def add(
        self,
        content: str,
        link: Optional[str] = None,
        link_text: Optional[str] = None,
        actor: Optional[SessionUser] = None
    ) -> str:
        """
        Publish a news item.

        Returns:
            Identifier of the new item
        """
        actor = require_admin_actor(actor)
        content = _clean_content(content)

        item = NewsItem(
            content=content,
            link=link or None,
            link_text=link_text or None,
            created_at=self._clock(),
            created_by=actor.uid
        )
        document = {
            "_id": item.id,
            "content": item.content,
            "link": item.link,
            "linkText": item.link_text,
            "createdAt": item.created_at,
            "createdBy": actor.uid,
            "createdByEmail": actor.email
        }

        with tracer.start_as_current_span("news_feed.add") as span:
            span.set_attributes({"news.id": item.id, "user.id": actor.uid})
            try:
                self.collection.insert_one(document)
            except PyMongoError as e:
                logger.error(f"Failed to add news: {e}", extra={"user_id": actor.uid})
                raise StoreError("Failed to save news") from e

        logger.info("News published", extra={"news_id": item.id, "user_id": actor.uid})
        return item.id

    def remove(self, news_id: str, actor: Optional[SessionUser] = None) -> bool:
        """
        Delete a news item.

        Returns:
            True if an item was deleted; removing a missing item is not an error
        """
        actor = require_admin_actor(actor)

        with tracer.start_as_current_span("news_feed.remove") as span:
            span.set_attributes({"news.id": news_id, "user.id": actor.uid})
            try:
                result = self.collection.delete_one(self._id_filter(news_id))
            except PyMongoError as e:
                logger.error(f"Failed to delete news {news_id}: {e}", extra={"user_id": actor.uid})
                raise StoreError("Failed to delete news") from e

        deleted = result.deleted_count > 0
        logger.info("News deleted" if deleted else "News already absent", extra={
            "news_id": news_id,
            "user_id": actor.uid
        })
        return deleted

    def republish(
        self,
        news_id: str,
        content: str,
        link: Optional[str] = None,
        link_text: Optional[str] = None,
        actor: Optional[SessionUser] = None
    ) -> str:
        """Replace an item by removing it and adding a new one. Returns the new id."""
        require_admin_actor(actor)
        _clean_content(content)
        self.remove(news_id, actor)
        return self.add(content, link, link_text, actor)
