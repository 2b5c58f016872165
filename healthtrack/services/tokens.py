import uuid
from datetime import datetime, timedelta, timezone

import jwt

from healthtrack.config import settings


def new_jti() -> str:
    return uuid.uuid4().hex


def create_access_token(user_id: int, jti: str) -> str:
    """Signed JWT; `jti` names the auth_sessions row that logout revokes."""
    issued = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "jti": jti,
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.jwt_expires_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Raises jwt.InvalidTokenError (incl. ExpiredSignatureError) on a bad token."""
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "jti", "exp"]},
    )
