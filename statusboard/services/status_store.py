# SPDX-License-Identifier: Apache-2.0

"""
Room status persistence.

One document per (block, room) in the room_statuses collection. Writes are
whole-record overwrites: the last committed write for a room wins and no
field of an earlier report survives it.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from opentelemetry import trace
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from ..domain.address import is_valid_block, is_valid_room, parse_room_key, room_key
from ..middleware.error_handler import AuthenticationException, StoreError, ValidationException
from ..models.entities import RoomRecord, SessionUser
from ..models.enums import InfoSource, RoomStatus
from .mongodb import ROOM_STATUSES, MongoDBService

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


def _natural_order(doc: dict) -> Tuple[int, int, int]:
    """Sort documents by (floor, unit); unparseable room keys go last."""
    position = parse_room_key(doc.get("room"))
    if position is None:
        return (1, 0, 0)
    return (0, position[0], position[1])


class StatusStore:
    """Reads and writes per-room status records."""

    def __init__(self, mongodb: MongoDBService, clock: Callable[[], datetime] = datetime.utcnow):
        self.mongodb = mongodb
        self._clock = clock

    @property
    def collection(self):
        return self.mongodb.get_collection(ROOM_STATUSES)

    def fetch_block(self, block: str) -> Dict[str, RoomRecord]:
        """
        Load every stored record of one block.

        Args:
            block: Block identifier

        Returns:
            Mapping of room key to record, in floor then unit order

        Raises:
            ValidationException: If the block is unknown
            StoreError: If the store cannot be read
        """
        if not is_valid_block(block):
            raise ValidationException(f"Unknown block: {block}")

        with tracer.start_as_current_span("status_store.fetch_block") as span:
            span.set_attribute("statusboard.block", block)

            try:
                documents = list(self.collection.find({"block": block}, {"_id": 0}))
            except PyMongoError as e:
                span.set_attribute("status_store.result", "error")
                logger.error(f"Failed to fetch block {block}: {e}", extra={"block": block})
                raise StoreError("Failed to load room statuses") from e

            records = {}
            for doc in sorted(documents, key=_natural_order):
                key = doc.get("room")
                if not isinstance(key, str):
                    continue
                records[key] = RoomRecord.from_document(doc)

            span.set_attribute("status_store.record_count", len(records))
            logger.debug(f"Fetched {len(records)} room records for block {block}")
            return records

    def upsert(
        self,
        block: str,
        floor: int,
        unit: int,
        status: Optional[RoomStatus],
        remark: Optional[str] = None,
        source: Optional[InfoSource] = InfoSource.CITIZEN,
        source_url: Optional[str] = None,
        actor: Optional[SessionUser] = None
    ) -> RoomRecord:
        """
        Insert or replace the record of one room.

        updatedAt is stamped server side and kept monotonic per room, so a
        write landing with an older clock reading never moves it backwards.

        Raises:
            AuthenticationException: If there is no acting user
            ValidationException: If the address is outside the address space
            StoreError: If the write fails
        """
        if actor is None:
            raise AuthenticationException("Authentication required")
        if not is_valid_block(block):
            raise ValidationException(f"Unknown block: {block}")
        if not is_valid_room(floor, unit):
            raise ValidationException(f"Room {floor}_{unit} is outside the address space")

        key = room_key(floor, unit)
        now = self._clock()
        document = {
            "block": block,
            "room": key,
            "floor": floor,
            "unit": unit,
            "status": status.value if status else None,
            "remark": remark,
            "source": (source or InfoSource.CITIZEN).value,
            "sourceUrl": source_url,
            "updatedBy": actor.uid,
            "updatedByEmail": actor.email
        }

        with tracer.start_as_current_span("status_store.upsert") as span:
            span.set_attributes({
                "statusboard.block": block,
                "statusboard.room": key,
                "statusboard.status": document["status"] or "none",
                "user.id": actor.uid
            })

            try:
                stored = self.collection.find_one_and_update(
                    {"block": block, "room": key},
                    {"$set": document, "$max": {"updatedAt": now}},
                    upsert=True,
                    return_document=ReturnDocument.AFTER
                )
            except PyMongoError as e:
                span.set_attribute("status_store.result", "error")
                logger.error(f"Failed to update room {block}/{key}: {e}", extra={
                    "block": block,
                    "room": key,
                    "user_id": actor.uid
                })
                raise StoreError("Failed to save room status") from e

            logger.info("Room status updated", extra={
                "block": block,
                "room": key,
                "status": document["status"],
                "user_id": actor.uid
            })
            return RoomRecord.from_document(stored or document)
