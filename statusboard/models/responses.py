# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Response models for API endpoints.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .entities import RoomRecord, SessionUser


class SuccessResponse(BaseModel):
    """Generic success response."""

    success: bool = Field(True, description="Operation outcome")


class LoginResponse(SuccessResponse):
    """Successful login."""

    user: SessionUser = Field(..., description="Authenticated user")


class SessionResponse(BaseModel):
    """Session check response; never an error."""

    authenticated: bool = Field(..., description="Whether a session is active")
    user: Optional[SessionUser] = Field(None, description="Session identity")


class BlockUnitsResponse(BaseModel):
    """All stored room records of one block keyed by room key."""

    units: Dict[str, RoomRecord] = Field(default_factory=dict, description="roomKey to record")


class NewsCreatedResponse(SuccessResponse):
    """Successful news creation."""

    id: str = Field(..., description="Identifier of the new item")


class BoardViewResponse(BaseModel):
    """Derived board view for one block."""

    block: str = Field(..., description="Block identifier")
    block_name: str = Field(..., alias="blockName")
    stats: Dict[str, int] = Field(..., description="Counts per status")
    danger_list: List[Dict[str, Any]] = Field(default_factory=list, alias="dangerList")
    filtered_count: int = Field(..., alias="filteredCount")
    total_rooms: int = Field(..., alias="totalRooms")
    grid: Optional[List[Dict[str, Any]]] = Field(None, description="Grid rows, floor ascending")
    list: Optional[List[Dict[str, Any]]] = Field(None, description="Sorted list rows")


class ErrorResponse(BaseModel):
    """Error response in problem-details shape with legacy success/error keys."""

    success: bool = Field(False)
    error: str = Field(..., description="Human readable message")
    type: str = Field(..., description="Error type URI")
    title: str = Field(..., description="Error title")
    status: int = Field(..., description="HTTP status code")
    detail: str = Field(..., description="Error detail")
    instance: str = Field(..., description="Request path")
    errors: Optional[List[Dict[str, Any]]] = Field(None, description="Validation errors")
