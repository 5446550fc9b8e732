from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import uuid4

from campus_eats.models.types import UTCDateTime
from campus_eats.utils.clock import utcnow


class UserSession(SQLModel, table=True):
    """One row per login; the access token carries its id and dies with it."""

    __tablename__ = "user_session"
    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)

    user_agent: Optional[str] = None
    ip_address: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    expires_at: datetime = Field(sa_type=UTCDateTime)
    revoked_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
