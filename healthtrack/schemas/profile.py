from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from healthtrack.schemas.common import utc_timestamp


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        extra = "forbid"


class ProfileResponse(BaseModel):
    id: int
    user_id: int
    full_name: Optional[str] = None
    phone: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("updated_at")
    @classmethod
    def in_utc(cls, value):
        return utc_timestamp(value)
