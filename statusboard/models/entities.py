# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the status board.
"""

import re
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.timefmt import parse_timestamp
from .base import BaseEntity, WireDatetime, generate_object_id, tolerant_text
from .enums import InfoSource, RoomStatus

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


class RoomRecord(BaseEntity):
    """
    Latest reported state of one room.

    Parsing is tolerant because stored documents are not schema-checked:
    unknown status or source values and unparseable timestamps are read
    as absent instead of failing.
    """

    status: Optional[RoomStatus] = Field(None, description="Reported safety status")
    remark: Optional[str] = Field(None, description="Free-text remark")
    source: Optional[InfoSource] = Field(None, description="Information source")
    source_url: Optional[str] = Field(None, alias="sourceUrl", description="External source link")
    updated_at: Optional[WireDatetime] = Field(None, alias="updatedAt", description="Last write timestamp")
    updated_by: Optional[str] = Field(None, alias="updatedBy", description="UID of the last writer")

    @field_validator('status', mode='before')
    @classmethod
    def tolerate_status(cls, v):
        return RoomStatus.parse(v)

    @field_validator('source', mode='before')
    @classmethod
    def tolerate_source(cls, v):
        return InfoSource.parse(v)

    @field_validator('updated_at', mode='before')
    @classmethod
    def tolerate_timestamp(cls, v):
        return parse_timestamp(v)

    @field_validator('remark', 'source_url', 'updated_by', mode='before')
    @classmethod
    def tolerate_text(cls, v):
        return tolerant_text(v)

    def has_remark(self) -> bool:
        """Check for a remark that is not blank."""
        return bool(self.remark and self.remark.strip())

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "RoomRecord":
        """Build a record from a stored room status document."""
        return cls(
            status=doc.get("status"),
            remark=doc.get("remark"),
            source=doc.get("source"),
            source_url=doc.get("sourceUrl"),
            updated_at=doc.get("updatedAt"),
            updated_by=doc.get("updatedBy")
        )


class NewsItem(BaseEntity):
    """Entry of the news feed. Immutable once created."""

    id: str = Field(default_factory=generate_object_id, description="Opaque identifier")
    content: str = Field(..., description="News text")
    link: Optional[str] = Field(None, description="Optional external link")
    link_text: Optional[str] = Field(None, alias="linkText", description="Label for the link")
    created_at: WireDatetime = Field(default_factory=datetime.utcnow, alias="createdAt", description="Creation timestamp")
    created_by: Optional[str] = Field(None, alias="createdBy", description="UID of the author")

    @field_validator('created_at', mode='before')
    @classmethod
    def normalize_created_at(cls, v):
        return parse_timestamp(v) or v

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "NewsItem":
        """Build a news item from a stored document."""
        created_at = parse_timestamp(doc.get("createdAt")) or datetime.min
        return cls(
            id=str(doc["_id"]),
            content=tolerant_text(doc.get("content")) or "",
            link=tolerant_text(doc.get("link")) or None,
            link_text=tolerant_text(doc.get("linkText")) or None,
            created_at=created_at,
            created_by=tolerant_text(doc.get("createdBy"))
        )


class SessionUser(BaseModel):
    """Identity carried by a login session."""

    uid: str = Field(..., description="User identifier")
    email: str = Field(..., description="User email")
    username: Optional[str] = Field(None, description="Display name")
    is_admin: bool = Field(False, alias="isAdmin", description="Whether the user can manage news")

    model_config = ConfigDict(
        populate_by_name=True
    )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class User(BaseEntity):
    """Stored user account."""

    uid: str = Field(default_factory=lambda: str(uuid.uuid4()), description="User identifier")
    email: str = Field(..., description="User email address")
    username: str = Field(..., min_length=1, max_length=100, description="Display name")
    password_hash: str = Field(..., description="bcrypt password hash")
    is_admin: bool = Field(False, description="Administrator flag")
    created_at: WireDatetime = Field(default_factory=datetime.utcnow, description="Creation timestamp")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Validate email format."""
        if not re.match(EMAIL_PATTERN, v.lower()):
            raise ValueError('Invalid email format')
        return v.lower()

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        if not v.strip():
            raise ValueError('Username cannot be empty')
        return v.strip()

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "User":
        return cls(
            uid=doc["uid"],
            email=doc["email"],
            username=doc.get("username") or doc["email"],
            password_hash=doc["passwordHash"],
            is_admin=bool(doc.get("isAdmin", False)),
            created_at=parse_timestamp(doc.get("createdAt")) or datetime.utcnow()
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "email": self.email,
            "username": self.username,
            "passwordHash": self.password_hash,
            "isAdmin": self.is_admin,
            "createdAt": self.created_at
        }

    def to_session_user(self) -> SessionUser:
        return SessionUser(
            uid=self.uid,
            email=self.email,
            username=self.username,
            is_admin=self.is_admin
        )
