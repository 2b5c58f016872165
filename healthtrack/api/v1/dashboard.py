from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from healthtrack.api.deps import get_current_user, get_now
from healthtrack.api.v1.appointments import load_appointments
from healthtrack.api.v1.medications import load_medications, load_today_logs
from healthtrack.db.session import get_db
from healthtrack.schemas.common import CurrentUser
from healthtrack.schemas.dashboard import DashboardResponse
from healthtrack.services.views import summarize

router = APIRouter()


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    user: CurrentUser = Depends(get_current_user),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
):
    """Health overview: next appointments, medication counts and today's doses."""
    return summarize(
        load_appointments(db, user),
        load_medications(db, user),
        load_today_logs(db, user, now),
        now,
    )
