# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base models with common configuration and wire serialization.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, PlainSerializer

from ..domain.timefmt import to_wire


def generate_object_id() -> str:
    """Generate a new MongoDB ObjectId as string."""
    return str(ObjectId())


def tolerant_text(value: Any) -> Optional[str]:
    """Coerce a stored value to text, keeping None as None."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


# Datetimes go over the wire as ISO-8601 with a Z suffix
WireDatetime = Annotated[datetime, PlainSerializer(to_wire, return_type=str, when_used="json")]


class BaseEntity(BaseModel):
    """Base model for everything that crosses the API boundary."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Validate assignment
        validate_assignment=True,
        # Arbitrary types allowed
        arbitrary_types_allowed=True
    )

    def to_wire(self, exclude_none: bool = False) -> Dict[str, Any]:
        """Dump to a JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=exclude_none)
