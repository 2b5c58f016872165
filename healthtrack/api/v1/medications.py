import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from healthtrack.api.deps import get_current_user, get_now, apply_patch
from healthtrack.config import settings
from healthtrack.db.session import get_db
from healthtrack.models.medication import Medication, MedicationLog
from healthtrack.schemas.common import CurrentUser, check_time_of_day
from healthtrack.schemas.medication import (
    MedicationCreate, MedicationPatch, MedicationResponse, TimeOfDayRequest,
    DoseLogCreate, MedicationLogResponse, ScheduledDose,
)
from healthtrack.services.cache import query_cache
from healthtrack.services.clock import as_utc, day_window
from healthtrack.services.views import todays_schedule

router = APIRouter()
logger = logging.getLogger(__name__)

ENTITY = "medications"
LOG_ENTITY = "medication_logs"


def load_medications(db: Session, user: CurrentUser) -> List[MedicationResponse]:
    def query():
        rows = db.query(Medication)\
            .filter(Medication.user_id == user.id)\
            .order_by(Medication.name.asc(), Medication.id.asc())\
            .all()
        return [MedicationResponse.model_validate(row) for row in rows]

    return query_cache.get_or_load(ENTITY, user.id, query)


def load_today_logs(db: Session, user: CurrentUser, now: datetime) -> List[MedicationLogResponse]:
    """Logs whose taken_at falls inside today (midnight to midnight, app zone)."""
    start, end = day_window(now)

    def query():
        rows = db.query(MedicationLog)\
            .filter(MedicationLog.user_id == user.id,
                    MedicationLog.taken_at >= start,
                    MedicationLog.taken_at < end)\
            .order_by(MedicationLog.taken_at.asc())\
            .all()
        return [MedicationLogResponse.model_validate(row) for row in rows]

    # the day is part of the key so a cached "today" never outlives midnight
    return query_cache.get_or_load(LOG_ENTITY, user.id, query, start.isoformat())


def get_owned_medication(db: Session, medication_id: int, user: CurrentUser) -> Medication:
    medication = db.query(Medication).filter(
        Medication.id == medication_id,
        Medication.user_id == user.id,
    ).first()
    if not medication:
        raise HTTPException(status_code=404, detail="Medication not found")
    return medication


def _save(db: Session, medication: Medication, user: CurrentUser) -> Medication:
    db.commit()
    db.refresh(medication)
    query_cache.invalidate(ENTITY, user.id)
    return medication


# --- READ ---
@router.get("", response_model=List[MedicationResponse])
def list_medications(
    active: Optional[bool] = None,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Medications by name. `?active=true|false` narrows to one side of the switch."""
    medications = load_medications(db, user)
    if active is None:
        return medications
    return [medication for medication in medications if medication.is_active == active]


@router.get("/logs/today", response_model=List[MedicationLogResponse])
def list_today_logs(
    user: CurrentUser = Depends(get_current_user),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
):
    return load_today_logs(db, user, now)


@router.get("/schedule/today", response_model=List[ScheduledDose])
def today_schedule(
    user: CurrentUser = Depends(get_current_user),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
):
    """Every (active medication, time) pair with whether it was taken today."""
    logs = load_today_logs(db, user, now)
    return todays_schedule(load_medications(db, user), logs, day_window(now))


@router.get("/{medication_id}", response_model=MedicationResponse)
def get_medication(
    medication_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_owned_medication(db, medication_id, user)


# --- CREATE ---
@router.post("", response_model=MedicationResponse, status_code=status.HTTP_201_CREATED)
def create_medication(
    payload: MedicationCreate,
    user: CurrentUser = Depends(get_current_user),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
):
    data = payload.model_dump()
    if data["start_date"] is None:
        data["start_date"] = now.astimezone(settings.tz).date()

    medication = Medication(**data, user_id=user.id)
    db.add(medication)
    _save(db, medication, user)
    logger.info(f"Created medication {medication.id} ({medication.name}) for user {user.id}")
    return medication


# --- UPDATE ---
@router.patch("/{medication_id}", response_model=MedicationResponse)
def update_medication(
    medication_id: int,
    patch: MedicationPatch,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    medication = get_owned_medication(db, medication_id, user)
    changed = apply_patch(medication, patch)
    _save(db, medication, user)
    logger.info(f"Updated medication {medication_id} for user {user.id}: {changed}")
    return medication


@router.post("/{medication_id}/times", response_model=MedicationResponse)
def add_time_of_day(
    medication_id: int,
    request: TimeOfDayRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Adds a dose time. Adding one that is already scheduled changes nothing."""
    medication = get_owned_medication(db, medication_id, user)
    if request.time in medication.time_of_day:
        return medication

    # Assign a new list: in-place mutation of a JSON column is not tracked
    medication.time_of_day = sorted(medication.time_of_day + [request.time])
    return _save(db, medication, user)


@router.delete("/{medication_id}/times/{time_of_day}", response_model=MedicationResponse)
def remove_time_of_day(
    medication_id: int,
    time_of_day: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        check_time_of_day(time_of_day)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    medication = get_owned_medication(db, medication_id, user)
    if time_of_day not in medication.time_of_day:
        raise HTTPException(status_code=404, detail=f"{time_of_day} is not scheduled for this medication")
    if len(medication.time_of_day) == 1:
        raise HTTPException(status_code=409, detail="A medication needs at least one time of day")

    medication.time_of_day = [t for t in medication.time_of_day if t != time_of_day]
    return _save(db, medication, user)


# --- DELETE ---
@router.delete("/{medication_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_medication(
    medication_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Deletes the medication. Its dose logs are left in place."""
    medication = get_owned_medication(db, medication_id, user)
    db.delete(medication)
    db.commit()

    query_cache.invalidate(ENTITY, user.id)
    logger.info(f"Deleted medication {medication_id} for user {user.id}")
    return None


# --- DOSE LOGGING ---
@router.post("/{medication_id}/logs", response_model=MedicationLogResponse, status_code=status.HTTP_201_CREATED)
def log_dose_taken(
    medication_id: int,
    payload: DoseLogCreate,
    user: CurrentUser = Depends(get_current_user),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
):
    """
    Marks (medication, scheduled_time) as taken now.

    Logging the same pair twice in a day is allowed unless
    REJECT_DUPLICATE_DOSE_LOGS is switched on.
    """
    get_owned_medication(db, medication_id, user)

    if settings.reject_duplicate_dose_logs:
        start, end = day_window(now)
        existing = db.query(MedicationLog).filter(
            MedicationLog.user_id == user.id,
            MedicationLog.medication_id == medication_id,
            MedicationLog.scheduled_time == payload.scheduled_time,
            MedicationLog.taken_at >= start,
            MedicationLog.taken_at < end,
        ).first()
        if existing:
            raise HTTPException(status_code=409, detail="Dose already logged today")

    log = MedicationLog(
        user_id=user.id,
        medication_id=medication_id,
        scheduled_time=payload.scheduled_time,
        taken_at=as_utc(now),
    )
    db.add(log)
    db.commit()
    db.refresh(log)

    query_cache.invalidate(LOG_ENTITY, user.id)
    logger.info(f"Logged dose of medication {medication_id} at {payload.scheduled_time} for user {user.id}")
    return log
