from datetime import datetime

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from healthtrack.db.session import get_db
from healthtrack.models.user import AuthSession
from healthtrack.schemas.common import CurrentUser
from healthtrack.services.clock import now_local
from healthtrack.services.tokens import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """
    Resolves the bearer JWT to the signed-in user.
    Missing, malformed, expired and signed-out tokens are all a 401.
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing Authentication Header")

    try:
        claims = decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {e}")

    session = db.query(AuthSession).filter(
        AuthSession.jti == claims["jti"],
        AuthSession.revoked_at.is_(None),
    ).first()
    if not session or str(session.user_id) != claims["sub"]:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    return CurrentUser(id=session.user.id, email=session.user.email, session_id=session.id)


def get_now() -> datetime:
    """Current time in the app's zone. Tests override this to pin the clock."""
    return now_local()


def apply_patch(row, patch) -> list:
    """Copies only the keys the client actually sent onto the row."""
    changes = patch.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(row, field, value)
    return sorted(changes)
