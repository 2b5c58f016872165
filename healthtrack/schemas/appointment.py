from datetime import date, datetime
from typing import Optional, List

from pydantic import BaseModel, Field, field_validator

from healthtrack.schemas.common import check_time_of_day, reject_null, utc_timestamp


class AppointmentBase(BaseModel):
    title: str = Field(..., min_length=1)
    appointment_date: date
    appointment_time: str
    doctor_name: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("appointment_time")
    @classmethod
    def valid_time(cls, value):
        return check_time_of_day(value)


class AppointmentCreate(AppointmentBase):
    pass


class AppointmentPatch(BaseModel):
    """Only the keys listed here can be changed; anything else is a 422."""
    title: Optional[str] = Field(None, min_length=1)
    appointment_date: Optional[date] = None
    appointment_time: Optional[str] = None
    doctor_name: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        extra = "forbid"

    @field_validator("title", "appointment_date", "appointment_time")
    @classmethod
    def not_null(cls, value, info):
        return reject_null(value, info.field_name)

    @field_validator("appointment_time")
    @classmethod
    def valid_time(cls, value):
        return check_time_of_day(value)


class AppointmentResponse(AppointmentBase):
    id: int
    user_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("created_at")
    @classmethod
    def in_utc(cls, value):
        return utc_timestamp(value)


class AppointmentOverview(BaseModel):
    upcoming: List[AppointmentResponse]
    past: List[AppointmentResponse]
