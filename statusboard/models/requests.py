# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for API endpoints.

Payloads are validated here at the boundary; handlers never trust field
presence on raw JSON.
"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..domain.address import FLOORS, UNITS, is_valid_block, is_valid_room
from .entities import EMAIL_PATTERN
from .enums import InfoSource, RoomStatus, SortBy, SortOrder, StatusFilter, ViewMode


class LoginRequest(BaseModel):
    """Request model for user authentication."""

    email: str = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Validate email format."""
        v = v.strip().lower()
        if not re.match(EMAIL_PATTERN, v):
            raise ValueError('Invalid email format')
        return v


class UpsertStatusRequest(BaseModel):
    """Request model for reporting the status of one room."""

    model_config = ConfigDict(populate_by_name=True)

    block: str = Field(..., description="Block identifier (A-H)")
    floor: int = Field(..., ge=FLOORS[0], le=FLOORS[-1], description="Floor number")
    unit: int = Field(..., ge=UNITS[0], le=UNITS[-1], description="Unit number")
    status: Optional[RoomStatus] = Field(None, description="Reported status, null clears it")
    remark: Optional[str] = Field(None, max_length=2000, description="Free-text remark")
    source: InfoSource = Field(InfoSource.CITIZEN, description="Information source")
    source_url: Optional[str] = Field(None, alias="sourceUrl", max_length=2048, description="Source link")

    @field_validator('block', mode='before')
    @classmethod
    def normalize_block(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator('block')
    @classmethod
    def validate_block(cls, v):
        if not is_valid_block(v):
            raise ValueError(f'Unknown block: {v}')
        return v

    @field_validator('status', mode='before')
    @classmethod
    def empty_status_is_none(cls, v):
        if v == "":
            return None
        return v

    @field_validator('source', mode='before')
    @classmethod
    def default_source(cls, v):
        if v is None or v == "":
            return InfoSource.CITIZEN
        return v

    @field_validator('source_url', mode='before')
    @classmethod
    def empty_url_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode='after')
    def validate_room(self):
        if not is_valid_room(self.floor, self.unit):
            raise ValueError(f'Room {self.floor}_{self.unit} is outside the address space')
        return self


class CreateNewsRequest(BaseModel):
    """Request model for publishing a news item."""

    model_config = ConfigDict(populate_by_name=True)

    content: str = Field(..., min_length=1, max_length=5000, description="News text")
    link: Optional[str] = Field(None, max_length=2048, description="Optional external link")
    link_text: Optional[str] = Field(None, alias="linkText", max_length=200, description="Link label")

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        if not v.strip():
            raise ValueError('News content cannot be empty')
        return v.strip()

    @field_validator('link', 'link_text', mode='before')
    @classmethod
    def blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class BoardViewQuery(BaseModel):
    """Query parameters of the board view endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    status_filter: StatusFilter = Field(StatusFilter.ALL, alias="statusFilter", description="Status filter")
    has_remark_filter: bool = Field(False, alias="hasRemarkFilter", description="Only rooms with a remark")
    sort_by: SortBy = Field(SortBy.FLOOR, alias="sortBy", description="List sort key")
    sort_order: SortOrder = Field(SortOrder.DESC, alias="sortOrder", description="List sort direction")
    view: ViewMode = Field(ViewMode.GRID, description="Projection to return")

    @field_validator('status_filter', mode='before')
    @classmethod
    def null_filter_is_unreported(cls, v):
        if v is None or v == "" or v == "null":
            return StatusFilter.UNREPORTED
        return v


class NewsListQuery(BaseModel):
    """Query parameters of the news list endpoint."""

    limit: int = Field(20, ge=1, le=100, description="Maximum number of items")


class BlockPath(BaseModel):
    """Path parameters addressing a block."""

    block: str = Field(..., description="Block identifier (A-H)")


class NewsPath(BaseModel):
    """Path parameters addressing a news item."""

    news_id: str = Field(..., description="News item identifier")
