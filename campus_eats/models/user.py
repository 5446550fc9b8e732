from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import Optional
from datetime import datetime

from campus_eats.models.types import UTCDateTime
from campus_eats.utils.clock import utcnow


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    phone: Optional[str] = None
    password: str
    role: str = Field(default="user")
    # flipped by an admin approving the user's courier verification
    email_verified: bool = Field(default=False)
    # free-form client settings, merged on update
    preferences: dict = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
