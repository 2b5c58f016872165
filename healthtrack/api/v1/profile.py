import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from healthtrack.api.deps import get_current_user, apply_patch
from healthtrack.db.session import get_db
from healthtrack.models.profile import Profile
from healthtrack.schemas.common import CurrentUser
from healthtrack.schemas.profile import ProfileUpdate, ProfileResponse

router = APIRouter()
logger = logging.getLogger(__name__)


def _find(db: Session, user: CurrentUser):
    return db.query(Profile).filter(Profile.user_id == user.id).first()


@router.get("", response_model=ProfileResponse)
def get_profile(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = _find(db, user)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.put("", response_model=ProfileResponse)
def save_profile(
    update_data: ProfileUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Upsert: the first save creates the row, later saves update it.

    profiles.user_id is unique, so if a concurrent save inserted first our
    insert fails and we fall back to updating the row that won.
    """
    profile = _find(db, user)
    if profile is None:
        profile = Profile(user_id=user.id, **update_data.model_dump(exclude_unset=True))
        db.add(profile)
        try:
            db.commit()
            logger.info(f"Created profile for user {user.id}")
        except IntegrityError:
            db.rollback()
            logger.info(f"Profile for user {user.id} was created concurrently, updating instead")
            profile = _find(db, user)
            apply_patch(profile, update_data)
            db.commit()
    else:
        apply_patch(profile, update_data)
        db.commit()
        logger.info(f"Updated profile for user {user.id}")

    db.refresh(profile)
    return profile
