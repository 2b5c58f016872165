from typing import List

from pydantic import BaseModel

from healthtrack.schemas.appointment import AppointmentResponse
from healthtrack.schemas.medication import ScheduledDose


class UpcomingAppointment(AppointmentResponse):
    date_label: str  # "Today", "Tomorrow" or "Sun, Mar 9"


class DashboardResponse(BaseModel):
    upcoming_appointments: List[UpcomingAppointment]
    upcoming_count: int
    active_medications: int
    daily_doses: int
    taken_today: int
    schedule: List[ScheduledDose]
