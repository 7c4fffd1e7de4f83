# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the status board.
"""

# Base models
from .base import BaseEntity, WireDatetime, generate_object_id

# Enumerations
from .enums import (
    RoomStatus,
    InfoSource,
    StatusFilter,
    SortBy,
    SortOrder,
    ViewMode,
    CellStyle
)

# Core entities
from .entities import (
    RoomRecord,
    NewsItem,
    SessionUser,
    User
)

# Request models
from .requests import (
    LoginRequest,
    UpsertStatusRequest,
    CreateNewsRequest,
    BoardViewQuery,
    NewsListQuery,
    BlockPath,
    NewsPath
)

# Response models
from .responses import (
    SuccessResponse,
    LoginResponse,
    SessionResponse,
    BlockUnitsResponse,
    NewsCreatedResponse,
    BoardViewResponse,
    ErrorResponse
)

__all__ = [
    # Base
    "BaseEntity",
    "WireDatetime",
    "generate_object_id",

    # Enums
    "RoomStatus",
    "InfoSource",
    "StatusFilter",
    "SortBy",
    "SortOrder",
    "ViewMode",
    "CellStyle",

    # Entities
    "RoomRecord",
    "NewsItem",
    "SessionUser",
    "User",

    # Requests
    "LoginRequest",
    "UpsertStatusRequest",
    "CreateNewsRequest",
    "BoardViewQuery",
    "NewsListQuery",
    "BlockPath",
    "NewsPath",

    # Responses
    "SuccessResponse",
    "LoginResponse",
    "SessionResponse",
    "BlockUnitsResponse",
    "NewsCreatedResponse",
    "BoardViewResponse",
    "ErrorResponse"
]
