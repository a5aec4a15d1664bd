"""
Base schema with UTC datetime serialization.

Every timestamp the engine stores is naive UTC; these annotations render
them with a Z suffix so clients never have to guess the zone.
"""

from datetime import datetime
from typing import Annotated

from pydantic import PlainSerializer


def _utc_iso(dt: datetime | None) -> str | None:
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ") if dt else None


# Usage: created_at: UTCDatetime instead of created_at: datetime
UTCDatetime = Annotated[datetime, PlainSerializer(_utc_iso, return_type=str)]

# Optional version for nullable datetime fields
UTCDatetimeOptional = Annotated[
    datetime | None, PlainSerializer(_utc_iso, return_type=str | None)
]
