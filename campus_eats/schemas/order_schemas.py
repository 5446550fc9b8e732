from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from campus_eats.constants.order_status import OrderStatus
from campus_eats.schemas.base import CamelModel


class OrderCreate(CamelModel):
    restaurant_location: str
    restaurant_type: str
    delivery_location: str
    full_name: str
    phone: str
    price: float = Field(allow_inf_nan=False)
    email: Optional[str] = None
    order_code: Optional[str] = None
    extra_notes: Optional[str] = None


class DeliveryPersonData(CamelModel):
    # defaults to the caller; only checked when supplied
    id: Optional[int] = None
    name: Optional[str] = None
    phone: str = ""


class OrderUpdate(CamelModel):
    action: Literal["confirm", "updateStatus"]
    delivery_person_data: Optional[DeliveryPersonData] = None
    status: Optional[OrderStatus] = None


class OrderRead(CamelModel):
    id: str
    user_id: int
    restaurant_location: str
    restaurant_type: str
    delivery_location: str
    full_name: str
    phone: str
    email: Optional[str] = None
    order_code: Optional[str] = None
    extra_notes: Optional[str] = None
    price: float
    status: OrderStatus
    delivery_person_id: Optional[int] = None
    delivery_person_name: Optional[str] = None
    delivery_person_phone: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class OrderResponse(CamelModel):
    order: OrderRead


class OrderListResponse(CamelModel):
    orders: List[OrderRead]


class OrderEventRead(CamelModel):
    id: str
    event_type: str
    label: str
    meta: Optional[dict] = None
    created_by: str
    created_at: datetime


class OrderTimelineResponse(CamelModel):
    order_id: str
    events: List[OrderEventRead]
