import datetime

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, Text, JSON, Boolean
from sqlalchemy.sql import func

from healthtrack.db.base import Base


def _utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


class Medication(Base):
    """
    A medication and its daily dose schedule.
    """
    __tablename__ = "medications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    dosage = Column(String, nullable=False)
    frequency = Column(String, nullable=False, default="daily")

    # Sorted list of "HH:MM" strings, never empty
    time_of_day = Column(JSON, nullable=False, default=list)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    notes = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class MedicationLog(Base):
    """
    Marks one (medication, scheduled time) pair as taken at taken_at.

    medication_id carries no foreign key: logs outlive a deleted medication.
    """
    __tablename__ = "medication_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    medication_id = Column(Integer, nullable=False, index=True)
    scheduled_time = Column(String(5), nullable=False)
    taken_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
