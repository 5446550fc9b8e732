from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from campus_eats.models.types import UTCDateTime
from campus_eats.utils.clock import utcnow


class ChatMessage(SQLModel, table=True):
    __tablename__ = "chat_message"
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: str = Field(foreign_key="order.id", index=True)
    sender_id: int = Field(foreign_key="user.id")
    sender_name: str
    sender_role: str  # customer | delivery
    message: str
    read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
