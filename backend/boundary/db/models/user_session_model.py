"""
User session ORM model.

Backing storage for session actors. Rows are addressed by a digest of the
session token, never by the token itself.

Dependencies: sqlalchemy, backend.boundary.db.base
System role: Session persistence with lazily checked expiry
"""

from datetime import datetime

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from backend.boundary.db.base import Base, UTCDateTime


class UserSessionModel(Base):
    """
    Session state for one login.

    Attributes:
        session_key: SHA-256 hex digest of the session token (primary key)
        user_id: Authenticated user identifier
        created_at: Time of the last save (UTC); expiry is measured from here
        version: Incremented on every save
    """

    __tablename__ = "user_sessions"

    session_key: Mapped[str] = mapped_column(String(64), primary_key=True)

    user_id: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
