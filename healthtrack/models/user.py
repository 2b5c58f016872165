from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from werkzeug.security import generate_password_hash, check_password_hash

from healthtrack.db.base import Base


class User(Base):
    """
    The Account Holder. Every other row in the system is owned by one of these.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    email_confirmed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan")
    profile = relationship("Profile", uselist=False, back_populates="user")

    def set_password(self, raw: str):
        self.hashed_password = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        return check_password_hash(self.hashed_password, raw)


class AuthSession(Base):
    """
    One issued access token, matched by its jti. Signing out stamps revoked_at.
    """
    __tablename__ = "auth_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    jti = Column(String(32), unique=True, index=True, nullable=False)  # JWT id claim
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    revoked_at = Column(DateTime(timezone=True))

    user = relationship("User", back_populates="sessions")
