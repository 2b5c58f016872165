import re
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field, field_validator

from healthtrack.services.clock import as_utc

TIME_OF_DAY = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def check_time_of_day(value: str) -> str:
    """Accepts a 24h "HH:MM" string."""
    if not isinstance(value, str) or not TIME_OF_DAY.match(value):
        raise ValueError(f"'{value}' is not a time of day in HH:MM format")
    return value


def check_time_set(values: List[str]) -> List[str]:
    """At least one time, no repeats. Returned sorted."""
    if not values:
        raise ValueError("at least one time of day is required")
    for value in values:
        check_time_of_day(value)
    if len(set(values)) != len(values):
        raise ValueError("times of day must be unique")
    return sorted(values)


def utc_timestamp(value):
    """SQLite returns stored UTC timestamps naive; label them so JSON carries +00:00."""
    if value is None:
        return value
    return as_utc(value)


def reject_null(value, field_name: str):
    # Validators only run on explicitly supplied values, so this fires for `null` only
    if value is None:
        raise ValueError(f"{field_name} cannot be null")
    return value


# --- Auth ---
class Credentials(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int


class UserResponse(BaseModel):
    id: int
    email: str
    email_confirmed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("email_confirmed_at", "created_at")
    @classmethod
    def in_utc(cls, value):
        return utc_timestamp(value)


class CurrentUser(BaseModel):
    """
    Explicit identity of the caller, handed to every data-access handler.
    """
    id: int
    email: str
    session_id: int
