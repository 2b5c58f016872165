import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from healthtrack.api.deps import get_current_user
from healthtrack.db.session import get_db
from healthtrack.models.user import User, AuthSession
from healthtrack.schemas.common import Credentials, TokenResponse, UserResponse, CurrentUser
from healthtrack.services.tokens import create_access_token, new_jti

router = APIRouter()
logger = logging.getLogger(__name__)


def _normalize(email: str) -> str:
    return email.strip().lower()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register_user(credentials: Credentials, db: Session = Depends(get_db)):
    """Registers an account. There is no mail round-trip, so it is confirmed on creation."""
    email = _normalize(credentials.email)
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(email=email, email_confirmed_at=datetime.now(timezone.utc))
    user.set_password(credentials.password)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id}")
    return user


@router.post("/login", response_model=TokenResponse)
def login(credentials: Credentials, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == _normalize(credentials.email)).first()
    if not user or not user.check_password(credentials.password):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    jti = new_jti()
    db.add(AuthSession(user_id=user.id, jti=jti))
    db.commit()
    token = create_access_token(user.id, jti)
    logger.info(f"User {user.id} signed in")
    return {"access_token": token, "user_id": user.id}


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Sign out: the presenting token stops working, other sessions are untouched."""
    session = db.query(AuthSession).filter(AuthSession.id == user.session_id).first()
    session.revoked_at = datetime.now(timezone.utc)
    db.commit()
    logger.info(f"User {user.id} signed out")
    return None


@router.get("/me", response_model=UserResponse)
def read_current_user(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return db.query(User).filter(User.id == user.id).first()
