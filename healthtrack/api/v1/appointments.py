import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from healthtrack.api.deps import get_current_user, get_now, apply_patch
from healthtrack.db.session import get_db
from healthtrack.models.appointment import Appointment
from healthtrack.schemas.appointment import (
    AppointmentCreate, AppointmentPatch, AppointmentResponse, AppointmentOverview,
)
from healthtrack.schemas.common import CurrentUser
from healthtrack.services.cache import query_cache
from healthtrack.services.views import partition_appointments

router = APIRouter()
logger = logging.getLogger(__name__)

ENTITY = "appointments"


def load_appointments(db: Session, user: CurrentUser) -> List[AppointmentResponse]:
    """All of the user's appointments, soonest first (date, then time)."""
    def query():
        rows = db.query(Appointment)\
            .filter(Appointment.user_id == user.id)\
            .order_by(Appointment.appointment_date.asc(),
                      Appointment.appointment_time.asc(),
                      Appointment.id.asc())\
            .all()
        return [AppointmentResponse.model_validate(row) for row in rows]

    return query_cache.get_or_load(ENTITY, user.id, query)


def get_owned_appointment(db: Session, appointment_id: int, user: CurrentUser) -> Appointment:
    appointment = db.query(Appointment).filter(
        Appointment.id == appointment_id,
        Appointment.user_id == user.id,
    ).first()
    if not appointment:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appointment


# --- READ ---
@router.get("", response_model=List[AppointmentResponse])
def list_appointments(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return load_appointments(db, user)


@router.get("/overview", response_model=AppointmentOverview)
def appointment_overview(
    user: CurrentUser = Depends(get_current_user),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
):
    """Upcoming (at or after now) and past appointments, each in list order."""
    upcoming, past = partition_appointments(load_appointments(db, user), now)
    return {"upcoming": upcoming, "past": past}


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_owned_appointment(db, appointment_id, user)


# --- CREATE ---
@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    payload: AppointmentCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # Owner always comes from the session, never from the body
    appointment = Appointment(**payload.model_dump(), user_id=user.id)
    db.add(appointment)
    db.commit()
    db.refresh(appointment)

    query_cache.invalidate(ENTITY, user.id)
    logger.info(f"Created appointment {appointment.id} for user {user.id}")
    return appointment


# --- UPDATE ---
@router.patch("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    patch: AppointmentPatch,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Partial update. Only the fields present in the body change."""
    appointment = get_owned_appointment(db, appointment_id, user)
    changed = apply_patch(appointment, patch)
    db.commit()
    db.refresh(appointment)

    query_cache.invalidate(ENTITY, user.id)
    logger.info(f"Updated appointment {appointment_id} for user {user.id}: {changed}")
    return appointment


# --- DELETE ---
@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(
    appointment_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    appointment = get_owned_appointment(db, appointment_id, user)
    db.delete(appointment)
    db.commit()

    query_cache.invalidate(ENTITY, user.id)
    logger.info(f"Deleted appointment {appointment_id} for user {user.id}")
    return None
