from datetime import datetime
from typing import List, Optional

from campus_eats.schemas.base import CamelModel


class ChatMessageCreate(CamelModel):
    message: str


class ChatMessageRead(CamelModel):
    id: int
    order_id: str
    sender_id: int
    sender_name: str
    sender_role: str
    message: str
    read: bool
    created_at: datetime


class ChatThreadResponse(CamelModel):
    success: bool = True
    messages: List[ChatMessageRead]
    user_role: str
    order_user_id: int
    order_delivery_person_id: Optional[int] = None


class ChatMessageResponse(CamelModel):
    success: bool = True
    message: ChatMessageRead
