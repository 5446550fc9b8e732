from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from campus_eats.constants.listing_status import ListingAction
from campus_eats.database import get_session
from campus_eats.dependencies.context import CallerContext, get_caller
from campus_eats.schemas.exchange_schemas import (
    ListingCreate,
    ListingListResponse,
    ListingResponse,
    ListingUpdate,
)
from campus_eats.services import exchange_lifecycle
from campus_eats.services.exchange_lifecycle import to_listing_read

router = APIRouter()


@router.get("/listings", response_model=ListingListResponse)
def list_listings(
    status_filter: str = Query("active", alias="status"),
    user_id: Optional[int] = Query(None, alias="userId"),
    buyer_id: Optional[int] = Query(None, alias="buyerId"),
    session: Session = Depends(get_session),
    caller: CallerContext = Depends(get_caller),
):
    listings = exchange_lifecycle.list_listings(
        session,
        status_filter=status_filter,
        user_id=user_id,
        buyer_id=buyer_id,
    )
    return {"listings": [to_listing_read(l, caller.user_id) for l in listings]}


@router.post("/listings", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
def create_listing(
    payload: ListingCreate,
    session: Session = Depends(get_session),
    caller: CallerContext = Depends(get_caller),
):
    listing = exchange_lifecycle.create_listing(session, caller, payload)
    return {"listing": to_listing_read(listing, caller.user_id)}


@router.get("/listings/{listing_id}", response_model=ListingResponse)
def get_listing(
    listing_id: str,
    session: Session = Depends(get_session),
    caller: CallerContext = Depends(get_caller),
):
    listing = exchange_lifecycle.get_listing(session, listing_id)
    return {"listing": to_listing_read(listing, caller.user_id)}


ACTIONS = {
    ListingAction.purchase: exchange_lifecycle.purchase_listing,
    ListingAction.confirm_payment: exchange_lifecycle.confirm_payment,
    ListingAction.cancel: exchange_lifecycle.cancel_listing,
    ListingAction.expire: exchange_lifecycle.expire_listing,
}


@router.patch("/listings/{listing_id}", response_model=ListingResponse)
def update_listing(
    listing_id: str,
    payload: ListingUpdate,
    session: Session = Depends(get_session),
    caller: CallerContext = Depends(get_caller),
):
    if payload.action == ListingAction.flag:
        listing = exchange_lifecycle.flag_listing(session, listing_id, caller, payload.reason)
    else:
        listing = ACTIONS[payload.action](session, listing_id, caller)

    return {"listing": to_listing_read(listing, caller.user_id)}


@router.delete("/listings/{listing_id}")
def delete_listing(
    listing_id: str,
    session: Session = Depends(get_session),
    caller: CallerContext = Depends(get_caller),
):
    exchange_lifecycle.delete_listing(session, listing_id, caller)
    return {"message": "Listing deleted successfully"}
