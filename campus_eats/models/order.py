from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import uuid4

from campus_eats.models.types import UTCDateTime
from campus_eats.utils.clock import utcnow


class Order(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)

    restaurant_location: str = Field(index=True)
    restaurant_type: str
    delivery_location: str
    full_name: str
    phone: str
    email: Optional[str] = None
    order_code: Optional[str] = None
    extra_notes: Optional[str] = None

    # computed client-side from the vendor menu, stored as given
    price: float

    status: str = Field(default="pending", index=True)

    delivery_person_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)
    delivery_person_name: Optional[str] = None
    delivery_person_phone: Optional[str] = None

    confirmed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    delivered_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
