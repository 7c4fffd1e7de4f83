# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the status board.
"""

import logging
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class RoomStatus(str, Enum):
    """Reported safety state of a single room."""
    SAFE = "safe"
    DANGER = "danger"
    DECEASED = "deceased"
    MIXED = "mixed"
    MISSING = "missing"

    @classmethod
    def parse(cls, value: Any) -> Optional["RoomStatus"]:
        """
        Parse a stored status value.

        Absent and unrecognised values both map to None (unreported), since
        the backing store does not enforce a schema.
        """
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.debug(f"Ignoring unrecognised room status: {value!r}")
            return None


class InfoSource(str, Enum):
    """Where a status report came from."""
    CITIZEN = "citizen"
    FAMILY_MEDIA = "family_media"
    PARTNER = "partner"

    @classmethod
    def parse(cls, value: Any) -> Optional["InfoSource"]:
        """Parse a stored source value, None when absent or unknown."""
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class StatusFilter(str, Enum):
    """Status filter options for the board views."""
    ALL = "all"
    REPORTED = "reported"
    UNREPORTED = "unreported"
    SAFE = "safe"
    DANGER = "danger"
    DECEASED = "deceased"
    MIXED = "mixed"
    MISSING = "missing"

    def as_room_status(self) -> Optional[RoomStatus]:
        """Return the specific status this filter selects, if any."""
        return RoomStatus.parse(self.value)


class SortBy(str, Enum):
    """List view sort keys."""
    FLOOR = "floor"
    UPDATED_AT = "updatedAt"


class SortOrder(str, Enum):
    """Sort direction."""
    ASC = "asc"
    DESC = "desc"


class ViewMode(str, Enum):
    """Board projection returned by the view endpoint."""
    GRID = "grid"
    LIST = "list"


class CellStyle(str, Enum):
    """Display class of a grid cell; one per status plus unreported."""
    UNREPORTED = "unreported"
    SAFE = "safe"
    DANGER = "danger"
    DECEASED = "deceased"
    MIXED = "mixed"
    MISSING = "missing"
