from datetime import datetime
from typing import List, Optional

from campus_eats.constants.listing_status import ListingAction, ListingStatus
from campus_eats.schemas.base import CamelModel


class ListingCreate(CamelModel):
    user_card_number: str
    item_name: str
    price: int
    code_value: str
    item_type: str = "code"
    description: str = ""


class ListingUpdate(CamelModel):
    action: ListingAction
    reason: Optional[str] = None


class ListingRead(CamelModel):
    id: str
    user_id: int
    user_name: str
    user_card_number: str
    item_type: str
    item_name: str
    description: str
    price: int
    status: ListingStatus
    buyer_id: Optional[int] = None
    flag_count: int
    flag_reasons: List[str]
    # None unless the viewer is the seller, or the buyer after payment confirmation
    code_value: Optional[str] = None
    expires_at: datetime
    payment_confirmed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ListingResponse(CamelModel):
    listing: ListingRead


class ListingListResponse(CamelModel):
    listings: List[ListingRead]
