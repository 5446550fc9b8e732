from sqlmodel import SQLModel, Field
from sqlalchemy import Index, text
from typing import Optional
from datetime import datetime

from campus_eats.models.types import UTCDateTime
from campus_eats.utils.clock import utcnow


class CourierVerification(SQLModel, table=True):
    __tablename__ = "courier_verification"
    # at most one pending submission per user
    __table_args__ = (
        Index(
            "uq_courier_verification_pending_user",
            "user_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    user_name: str
    user_email: str

    student_card_file_id: str
    selfie_file_id: str

    status: str = Field(default="pending", index=True)
    submitted_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)

    reviewed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    reviewed_by: Optional[int] = Field(default=None, foreign_key="user.id")
    review_notes: Optional[str] = None
