from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime
from uuid import uuid4

from campus_eats.models.types import UTCDateTime
from campus_eats.utils.clock import utcnow


class ExchangeListing(SQLModel, table=True):
    __tablename__ = "exchange_listing"
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)

    user_id: int = Field(foreign_key="user.id", index=True)
    user_name: str
    # seller's bank card, shown to the buyer for off-platform payment
    user_card_number: str

    item_type: str = Field(default="code")
    item_name: str
    description: str = ""
    price: int

    status: str = Field(default="active", index=True)
    buyer_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)

    flag_count: int = Field(default=0)
    flag_reasons: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    code_value: str
    expires_at: datetime = Field(sa_type=UTCDateTime, index=True)
    payment_confirmed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
