"""
Derived, display-only state computed from a user's rows.

Nothing here touches the database; callers pass in the lists they already
loaded (usually straight from the query cache).
"""
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from healthtrack.config import settings
from healthtrack.services.clock import as_utc, day_window, wall_clock

UPCOMING_PREVIEW = 3


def appointment_at(appointment, tz=None) -> datetime:
    return wall_clock(appointment.appointment_date, appointment.appointment_time, tz)


def partition_appointments(appointments: Iterable, now: datetime, tz=None) -> Tuple[list, list]:
    """
    Split into (upcoming, past). Upcoming is date+time >= now, past is < now.
    Each half keeps the input order.
    """
    upcoming, past = [], []
    for appointment in appointments:
        if appointment_at(appointment, tz) >= now:
            upcoming.append(appointment)
        else:
            past.append(appointment)
    return upcoming, past


def is_taken_today(logs: Iterable, medication_id: int, scheduled_time: str,
                   window: Optional[Tuple[datetime, datetime]] = None) -> bool:
    """True iff a log matches the medication and time and, given a window, falls inside it."""
    for log in logs:
        if log.medication_id != medication_id or log.scheduled_time != scheduled_time:
            continue
        if window is None:
            return True
        start, end = window
        if start <= as_utc(log.taken_at) < end:
            return True
    return False


def todays_schedule(medications: Iterable, logs: list, window=None) -> List[dict]:
    schedule = []
    for medication in medications:
        if not medication.is_active:
            continue
        for scheduled_time in medication.time_of_day:
            schedule.append({
                "medication_id": medication.id,
                "name": medication.name,
                "dosage": medication.dosage,
                "time": scheduled_time,
                "taken": is_taken_today(logs, medication.id, scheduled_time, window),
            })
    return schedule


def date_label(day: date, today: date) -> str:
    if day == today:
        return "Today"
    if day == today + timedelta(days=1):
        return "Tomorrow"
    return f"{day.strftime('%a, %b')} {day.day}"


def summarize(appointments: list, medications: list, logs: list, now: datetime, tz=None) -> dict:
    """Numbers and previews for the dashboard."""
    window = day_window(now, tz)
    today = now.astimezone(tz or settings.tz).date()
    upcoming, _ = partition_appointments(appointments, now, tz)
    active = [medication for medication in medications if medication.is_active]

    preview = []
    for appointment in upcoming[:UPCOMING_PREVIEW]:
        item = appointment.model_dump()
        item["date_label"] = date_label(appointment.appointment_date, today)
        preview.append(item)

    return {
        "upcoming_appointments": preview,
        "upcoming_count": len(upcoming),
        "active_medications": len(active),
        "daily_doses": sum(len(medication.time_of_day) for medication in active),
        "taken_today": len(logs),
        "schedule": todays_schedule(active, logs, window),
    }
