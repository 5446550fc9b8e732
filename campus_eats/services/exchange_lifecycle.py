"""
Exchange listing lifecycle.

    active --flag x3--> flagged
    active --purchase--> sold --confirm_payment--> sold (paymentConfirmedAt set)
    active --cancel--> cancelled
    active --deadline passed--> expired

Expiry is lazy: nothing flips the stored status when the deadline passes.
A listing is overdue once ``expires_at < now``. Reads report an overdue
active listing as expired and every "active" query filters on
``expires_at >= now``. ``jobs/listing_expiry.py`` can persist it.
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import and_, or_, update
from sqlmodel import Session, col, select

from campus_eats.config import settings
from campus_eats.constants.listing_status import ListingStatus
from campus_eats.dependencies.context import CallerContext
from campus_eats.models.exchange_listing import ExchangeListing
from campus_eats.schemas.exchange_schemas import ListingCreate, ListingRead
from campus_eats.utils.clock import calculate_expiration_time, utcnow

logger = logging.getLogger(__name__)

NOT_FOR_SALE = "Listing is not available for purchase"


def effective_status(listing: ExchangeListing, now: Optional[datetime] = None) -> str:
    now = now or utcnow()
    if listing.status == ListingStatus.active.value and listing.expires_at < now:
        return ListingStatus.expired.value
    return listing.status


def can_view_code(listing: ExchangeListing, viewer_id: Optional[int]) -> bool:
    if viewer_id is None:
        return False
    if viewer_id == listing.user_id:
        return True
    return (
        listing.buyer_id is not None
        and viewer_id == listing.buyer_id
        and listing.payment_confirmed_at is not None
    )


def to_listing_read(listing: ExchangeListing, viewer_id: Optional[int]) -> ListingRead:
    read = ListingRead.model_validate(listing)
    return read.model_copy(
        update={
            "status": ListingStatus(effective_status(listing)),
            "flag_reasons": list(listing.flag_reasons or []),
            "code_value": listing.code_value if can_view_code(listing, viewer_id) else None,
        }
    )


def _conditional_update(session: Session, listing_id: str, conditions: list, values: dict) -> bool:
    result = session.exec(
        update(ExchangeListing)
        .where(col(ExchangeListing.id) == listing_id)
        .where(*conditions)
        .values(**values)
    )
    return result.rowcount == 1


def _active_clause(now: datetime):
    return and_(
        col(ExchangeListing.status) == ListingStatus.active.value,
        col(ExchangeListing.expires_at) >= now,
    )


def create_listing(session: Session, caller: CallerContext, payload: ListingCreate) -> ExchangeListing:
    for field in ("user_card_number", "item_name", "code_value"):
        if not getattr(payload, field).strip():
            raise HTTPException(status.HTTP_400_BAD_REQUEST, f"Missing required field: {field}")

    if payload.price > settings.listing_max_price:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            f"Price cannot exceed {settings.listing_max_price:,} Toman",
        )
    if payload.price <= 0:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Price must be greater than 0")

    now = utcnow()
    duplicate = session.exec(
        select(ExchangeListing)
        .where(ExchangeListing.user_id == caller.user_id)
        .where(ExchangeListing.item_name == payload.item_name.strip())
        .where(_active_clause(now))
    ).first()
    if duplicate:
        raise HTTPException(
            status.HTTP_409_CONFLICT,
            "You already have an active listing for this item",
        )

    listing = ExchangeListing(
        user_id=caller.user_id,
        user_name=caller.user.name,
        user_card_number=payload.user_card_number.strip(),
        item_type=payload.item_type,
        item_name=payload.item_name.strip(),
        description=payload.description or "",
        price=payload.price,
        status=ListingStatus.active.value,
        flag_count=0,
        flag_reasons=[],
        code_value=payload.code_value,
        expires_at=calculate_expiration_time(now),
        created_at=now,
        updated_at=now,
    )
    session.add(listing)
    session.commit()
    session.refresh(listing)

    logger.info(f"Listing {listing.id} created by user {caller.user_id}, expires {listing.expires_at}")
    return listing


def get_listing(session: Session, listing_id: str) -> ExchangeListing:
    listing = session.get(ExchangeListing, listing_id)
    if not listing:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Listing not found")
    return listing


def list_listings(
    session: Session,
    *,
    status_filter: str = ListingStatus.active.value,
    user_id: Optional[int] = None,
    buyer_id: Optional[int] = None,
    limit: int = 100,
) -> List[ExchangeListing]:
    now = utcnow()
    query = select(ExchangeListing)

    if status_filter == ListingStatus.active.value:
        query = query.where(_active_clause(now))
    elif status_filter == ListingStatus.expired.value:
        query = query.where(
            or_(
                col(ExchangeListing.status) == ListingStatus.expired.value,
                and_(
                    col(ExchangeListing.status) == ListingStatus.active.value,
                    col(ExchangeListing.expires_at) < now,
                ),
            )
        )
    elif status_filter != "all":
        query = query.where(ExchangeListing.status == status_filter)

    if user_id is not None:
        query = query.where(ExchangeListing.user_id == user_id)
    if buyer_id is not None:
        query = query.where(ExchangeListing.buyer_id == buyer_id)

    return session.exec(
        query.order_by(col(ExchangeListing.created_at).desc()).limit(limit)
    ).all()


def flag_listing(session: Session, listing_id: str, caller: CallerContext, reason: Optional[str]) -> ExchangeListing:
    reason = (reason or "").strip()
    if not reason:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Flag reason is required")

    listing = get_listing(session, listing_id)

    if listing.user_id == caller.user_id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "You cannot flag your own listing")
    if effective_status(listing) != ListingStatus.active.value:
        raise HTTPException(status.HTTP_409_CONFLICT, "Listing can no longer be flagged")

    old_count = listing.flag_count or 0
    new_count = old_count + 1
    values = {
        "flag_count": new_count,
        "flag_reasons": [*(listing.flag_reasons or []), reason],
        "updated_at": utcnow(),
    }
    if new_count >= settings.flag_threshold:
        values["status"] = ListingStatus.flagged.value

    # keyed on the count we read so concurrent flags are never lost
    flagged = _conditional_update(
        session,
        listing_id,
        [
            col(ExchangeListing.status) == ListingStatus.active.value,
            col(ExchangeListing.flag_count) == old_count,
        ],
        values,
    )
    if not flagged:
        session.rollback()
        raise HTTPException(status.HTTP_409_CONFLICT, "Listing changed, refresh and try again")

    session.commit()
    session.refresh(listing)

    if listing.status == ListingStatus.flagged.value:
        logger.warning(f"Listing {listing_id} hidden after {new_count} flags")
    else:
        logger.info(f"Listing {listing_id} flagged by user {caller.user_id} ({new_count})")
    return listing


def purchase_listing(session: Session, listing_id: str, caller: CallerContext) -> ExchangeListing:
    listing = get_listing(session, listing_id)

    if listing.user_id == caller.user_id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "You cannot buy your own listing")
    if effective_status(listing) != ListingStatus.active.value:
        raise HTTPException(status.HTTP_409_CONFLICT, NOT_FOR_SALE)

    now = utcnow()
    purchased = _conditional_update(
        session,
        listing_id,
        [_active_clause(now), col(ExchangeListing.buyer_id).is_(None)],
        {
            "buyer_id": caller.user_id,
            "status": ListingStatus.sold.value,
            "updated_at": now,
        },
    )
    if not purchased:
        session.rollback()
        logger.warning(f"Purchase of listing {listing_id} by user {caller.user_id} lost the race")
        raise HTTPException(status.HTTP_409_CONFLICT, NOT_FOR_SALE)

    session.commit()
    session.refresh(listing)

    logger.info(f"Listing {listing_id} claimed by buyer {caller.user_id}, awaiting payment confirmation")
    return listing


def confirm_payment(session: Session, listing_id: str, caller: CallerContext) -> ExchangeListing:
    listing = get_listing(session, listing_id)

    if listing.user_id != caller.user_id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Only the seller can confirm payment")

    if (
        listing.status != ListingStatus.sold.value
        or listing.buyer_id is None
        or listing.payment_confirmed_at is not None
    ):
        raise HTTPException(
            status.HTTP_409_CONFLICT,
            "Listing has no purchase awaiting payment confirmation",
        )

    now = utcnow()
    confirmed = _conditional_update(
        session,
        listing_id,
        [
            col(ExchangeListing.status) == ListingStatus.sold.value,
            col(ExchangeListing.payment_confirmed_at).is_(None),
        ],
        {"payment_confirmed_at": now, "updated_at": now},
    )
    if not confirmed:
        session.rollback()
        raise HTTPException(
            status.HTTP_409_CONFLICT,
            "Listing has no purchase awaiting payment confirmation",
        )

    session.commit()
    session.refresh(listing)

    logger.info(f"Payment confirmed for listing {listing_id}; code released to buyer {listing.buyer_id}")
    return listing


def cancel_listing(session: Session, listing_id: str, caller: CallerContext) -> ExchangeListing:
    listing = get_listing(session, listing_id)

    if listing.user_id != caller.user_id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Only the seller can cancel the listing")
    if effective_status(listing) != ListingStatus.active.value:
        raise HTTPException(status.HTTP_409_CONFLICT, "Only active listings can be cancelled")

    cancelled = _conditional_update(
        session,
        listing_id,
        [_active_clause(utcnow())],
        {"status": ListingStatus.cancelled.value, "updated_at": utcnow()},
    )
    if not cancelled:
        session.rollback()
        raise HTTPException(status.HTTP_409_CONFLICT, "Only active listings can be cancelled")

    session.commit()
    session.refresh(listing)
    logger.info(f"Listing {listing_id} cancelled by seller")
    return listing


def expire_listing(session: Session, listing_id: str, caller: CallerContext) -> ExchangeListing:
    """Anyone may persist an overdue expiry; the seller may also withdraw early."""
    listing = get_listing(session, listing_id)

    if listing.status != ListingStatus.active.value:
        raise HTTPException(status.HTTP_409_CONFLICT, "Only active listings can expire")

    now = utcnow()
    overdue = listing.expires_at < now
    if not overdue and listing.user_id != caller.user_id:
        raise HTTPException(status.HTTP_409_CONFLICT, "Listing has not reached its deadline")

    expired = _conditional_update(
        session,
        listing_id,
        [col(ExchangeListing.status) == ListingStatus.active.value],
        {"status": ListingStatus.expired.value, "updated_at": now},
    )
    if not expired:
        session.rollback()
        raise HTTPException(status.HTTP_409_CONFLICT, "Only active listings can expire")

    session.commit()
    session.refresh(listing)
    logger.info(f"Listing {listing_id} expired")
    return listing


def delete_listing(session: Session, listing_id: str, caller: CallerContext) -> None:
    listing = get_listing(session, listing_id)

    if listing.user_id != caller.user_id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "You can only delete your own listings")

    session.delete(listing)
    session.commit()
    logger.info(f"Listing {listing_id} deleted by seller")


def expire_overdue_listings(session: Session) -> int:
    """Persist the lazily-derived expired status in bulk."""
    now = utcnow()
    result = session.exec(
        update(ExchangeListing)
        .where(col(ExchangeListing.status) == ListingStatus.active.value)
        .where(col(ExchangeListing.expires_at) < now)
        .values(status=ListingStatus.expired.value, updated_at=now)
    )
    session.commit()
    return result.rowcount
