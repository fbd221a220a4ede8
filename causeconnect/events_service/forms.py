"""
Declarative validators for the post-event form.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_core import PydanticCustomError


def parse_dt(val: Optional[str]) -> Optional[datetime]:
    """
    Safely parse an ISO-8601 or datetime-local string to a datetime object.

    Args:
        val (str): The date string to parse.

    Returns:
        datetime: The parsed datetime, or None if invalid.
    """
    if not val:
        return None
    try:
        # Handles 'YYYY-MM-DD', 'YYYY-MM-DDTHH:MM' and '...Z' or '...+00:00'
        val = val.strip()
        if val.endswith("Z"):
            val = val[:-1] + "+00:00"
        return datetime.fromisoformat(val)
    except (ValueError, TypeError, AttributeError):
        return None


def _required(value: Any, message: str, error_type: str) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise PydanticCustomError(error_type, message)
    return text


class PostEventForm(BaseModel):
    model_config = ConfigDict(validate_default=True)

    name: str = ""
    organization: str = ""
    location: str = ""
    time: Optional[datetime] = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> str:
        return _required(value, "Event name is required", "name_missing")

    @field_validator("organization", mode="before")
    @classmethod
    def validate_organization(cls, value: Any) -> str:
        return _required(value, "Organization name is required", "organization_missing")

    @field_validator("location", mode="before")
    @classmethod
    def validate_location(cls, value: Any) -> str:
        return _required(value, "Location is required", "location_missing")

    @field_validator("time", mode="before")
    @classmethod
    def validate_time(cls, value: Any) -> datetime:
        parsed = value if isinstance(value, datetime) else parse_dt(value)
        if parsed is None:
            raise PydanticCustomError("time_invalid", "Time must be a valid date")
        if parsed.tzinfo is None:
            # Form inputs carry no zone; times are stored as UTC
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
