from datetime import date, datetime
from typing import Optional, List

from pydantic import BaseModel, Field, field_validator

from healthtrack.schemas.common import check_time_of_day, check_time_set, reject_null, utc_timestamp


class MedicationBase(BaseModel):
    name: str = Field(..., min_length=1)
    dosage: str = Field(..., min_length=1)
    frequency: str = "daily"  # free text, e.g. "Twice daily"
    time_of_day: List[str] = ["08:00"]
    start_date: Optional[date] = None  # defaults to today when created
    end_date: Optional[date] = None
    notes: Optional[str] = None
    is_active: bool = True

    @field_validator("time_of_day")
    @classmethod
    def valid_times(cls, values):
        return check_time_set(values)


class MedicationCreate(MedicationBase):
    pass


class MedicationPatch(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    dosage: Optional[str] = Field(None, min_length=1)
    frequency: Optional[str] = None
    time_of_day: Optional[List[str]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None

    class Config:
        extra = "forbid"

    @field_validator("name", "dosage", "frequency", "time_of_day", "start_date", "is_active")
    @classmethod
    def not_null(cls, value, info):
        return reject_null(value, info.field_name)

    @field_validator("time_of_day")
    @classmethod
    def valid_times(cls, values):
        return check_time_set(values)


class MedicationResponse(MedicationBase):
    id: int
    user_id: int
    start_date: date
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("created_at")
    @classmethod
    def in_utc(cls, value):
        return utc_timestamp(value)


class TimeOfDayRequest(BaseModel):
    time: str

    @field_validator("time")
    @classmethod
    def valid_time(cls, value):
        return check_time_of_day(value)


# --- Dose logging ---
class DoseLogCreate(BaseModel):
    scheduled_time: str

    @field_validator("scheduled_time")
    @classmethod
    def valid_time(cls, value):
        return check_time_of_day(value)


class MedicationLogResponse(BaseModel):
    id: int
    user_id: int
    medication_id: int
    scheduled_time: str
    taken_at: datetime

    class Config:
        from_attributes = True

    @field_validator("taken_at")
    @classmethod
    def in_utc(cls, value):
        return utc_timestamp(value)


class ScheduledDose(BaseModel):
    """One row of today's schedule: a medication at one of its times."""
    medication_id: int
    name: str
    dosage: str
    time: str
    taken: bool
