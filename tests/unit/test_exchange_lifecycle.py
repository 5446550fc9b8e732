from datetime import datetime, timedelta

import pytest
import pytz
from fastapi import HTTPException

from campus_eats.models.exchange_listing import ExchangeListing
from campus_eats.schemas.exchange_schemas import ListingCreate
from campus_eats.services import exchange_lifecycle
from campus_eats.utils.clock import utcnow

TEHRAN = pytz.timezone("Asia/Tehran")


@pytest.fixture
def seller(make_user):
    return make_user("seller")


@pytest.fixture
def buyer(make_user):
    return make_user("buyer")


@pytest.fixture
def new_listing():
    return ListingCreate(
        user_card_number="6037-9911-2233-4455",
        item_name="Self lunch code",
        price=50000,
        code_value="LUNCH-8842",
    )


@pytest.fixture
def listing(session, caller, seller, new_listing):
    return exchange_lifecycle.create_listing(session, caller(seller), new_listing)


def _make_overdue(session, listing):
    listing.expires_at = utcnow() - timedelta(minutes=1)
    session.add(listing)
    session.commit()
    session.refresh(listing)
    return listing


def test_create_listing_defaults(listing, seller):
    assert listing.status == "active"
    assert listing.flag_count == 0
    assert listing.flag_reasons == []
    assert listing.buyer_id is None
    assert listing.user_name == seller.name
    assert listing.expires_at > utcnow()


@pytest.mark.parametrize("price, ok", [(60000, True), (60001, False), (0, False), (-5, False)])
def test_price_bounds(session, caller, seller, new_listing, price, ok):
    new_listing.price = price

    if ok:
        created = exchange_lifecycle.create_listing(session, caller(seller), new_listing)
        assert created.price == price
    else:
        with pytest.raises(HTTPException) as exc:
            exchange_lifecycle.create_listing(session, caller(seller), new_listing)
        assert exc.value.status_code == 400


def test_price_above_cap_message(session, caller, seller, new_listing):
    new_listing.price = 60001

    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.create_listing(session, caller(seller), new_listing)

    assert exc.value.detail == "Price cannot exceed 60,000 Toman"


def test_duplicate_active_listing_is_rejected(session, caller, seller, new_listing, listing):
    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.create_listing(session, caller(seller), new_listing)

    assert exc.value.status_code == 409


def test_relisting_allowed_after_cancel(session, caller, seller, new_listing, listing):
    exchange_lifecycle.cancel_listing(session, listing.id, caller(seller))

    again = exchange_lifecycle.create_listing(session, caller(seller), new_listing)
    assert again.id != listing.id


def test_two_flags_keep_listing_active(session, caller, make_user, listing):
    for name in ("a", "b"):
        exchange_lifecycle.flag_listing(session, listing.id, caller(make_user(name)), "fake code")

    session.refresh(listing)
    assert listing.status == "active"
    assert listing.flag_count == 2
    assert [l.id for l in exchange_lifecycle.list_listings(session)] == [listing.id]


def test_third_flag_hides_listing(session, caller, make_user, listing):
    reasons = ["fake code", "already used", "wrong price"]
    for name, reason in zip(("a", "b", "c"), reasons):
        exchange_lifecycle.flag_listing(session, listing.id, caller(make_user(name)), reason)

    session.refresh(listing)
    assert listing.status == "flagged"
    assert listing.flag_count == 3
    assert listing.flag_reasons == reasons
    assert exchange_lifecycle.list_listings(session) == []


def test_flag_requires_reason(session, caller, buyer, listing):
    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.flag_listing(session, listing.id, caller(buyer), "  ")

    assert exc.value.status_code == 400


def test_seller_cannot_flag_own_listing(session, caller, seller, listing):
    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.flag_listing(session, listing.id, caller(seller), "spam")

    assert exc.value.status_code == 403


def test_flagged_listing_cannot_be_bought(session, caller, make_user, buyer, listing):
    for name in ("a", "b", "c"):
        exchange_lifecycle.flag_listing(session, listing.id, caller(make_user(name)), "scam")

    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.purchase_listing(session, listing.id, caller(buyer))

    assert exc.value.status_code == 409


def test_purchase_claims_listing(session, caller, buyer, listing):
    sold = exchange_lifecycle.purchase_listing(session, listing.id, caller(buyer))

    assert sold.status == "sold"
    assert sold.buyer_id == buyer.id
    assert sold.payment_confirmed_at is None


def test_second_purchase_conflicts(session, caller, make_user, buyer, listing):
    exchange_lifecycle.purchase_listing(session, listing.id, caller(buyer))

    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.purchase_listing(session, listing.id, caller(make_user("late")))

    assert exc.value.status_code == 409
    assert exc.value.detail == "Listing is not available for purchase"
    session.refresh(listing)
    assert listing.buyer_id == buyer.id


def test_seller_cannot_buy_own_listing(session, caller, seller, listing):
    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.purchase_listing(session, listing.id, caller(seller))

    assert exc.value.status_code == 403


def test_overdue_listing_reads_expired_and_cannot_be_bought(session, caller, buyer, listing):
    _make_overdue(session, listing)

    assert listing.status == "active"
    assert exchange_lifecycle.effective_status(listing) == "expired"
    assert exchange_lifecycle.list_listings(session) == []
    assert [l.id for l in exchange_lifecycle.list_listings(session, status_filter="expired")] == [listing.id]

    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.purchase_listing(session, listing.id, caller(buyer))
    assert exc.value.status_code == 409


def test_only_seller_confirms_payment(session, caller, buyer, listing):
    exchange_lifecycle.purchase_listing(session, listing.id, caller(buyer))

    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.confirm_payment(session, listing.id, caller(buyer))

    assert exc.value.status_code == 403


def test_confirm_payment_requires_a_purchase(session, caller, seller, listing):
    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.confirm_payment(session, listing.id, caller(seller))

    assert exc.value.status_code == 409


def test_confirm_payment_twice_conflicts(session, caller, seller, buyer, listing):
    exchange_lifecycle.purchase_listing(session, listing.id, caller(buyer))
    exchange_lifecycle.confirm_payment(session, listing.id, caller(seller))

    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.confirm_payment(session, listing.id, caller(seller))

    assert exc.value.status_code == 409


def test_code_is_released_only_after_payment(session, caller, seller, buyer, make_user, listing):
    stranger = make_user("stranger")

    assert exchange_lifecycle.to_listing_read(listing, seller.id).code_value == "LUNCH-8842"
    assert exchange_lifecycle.to_listing_read(listing, buyer.id).code_value is None
    assert exchange_lifecycle.to_listing_read(listing, None).code_value is None

    exchange_lifecycle.purchase_listing(session, listing.id, caller(buyer))
    assert exchange_lifecycle.to_listing_read(listing, buyer.id).code_value is None

    confirmed = exchange_lifecycle.confirm_payment(session, listing.id, caller(seller))
    assert confirmed.status == "sold"
    assert confirmed.payment_confirmed_at is not None
    assert exchange_lifecycle.to_listing_read(confirmed, buyer.id).code_value == "LUNCH-8842"
    assert exchange_lifecycle.to_listing_read(confirmed, stranger.id).code_value is None


def test_seller_cancels_active_listing(session, caller, seller, listing):
    cancelled = exchange_lifecycle.cancel_listing(session, listing.id, caller(seller))

    assert cancelled.status == "cancelled"


def test_cannot_cancel_sold_listing(session, caller, seller, buyer, listing):
    exchange_lifecycle.purchase_listing(session, listing.id, caller(buyer))

    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.cancel_listing(session, listing.id, caller(seller))

    assert exc.value.status_code == 409


def test_only_seller_cancels(session, caller, buyer, listing):
    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.cancel_listing(session, listing.id, caller(buyer))

    assert exc.value.status_code == 403


def test_anyone_can_persist_overdue_expiry(session, caller, buyer, listing):
    _make_overdue(session, listing)

    expired = exchange_lifecycle.expire_listing(session, listing.id, caller(buyer))

    assert expired.status == "expired"


def test_expiring_before_deadline_needs_the_seller(session, caller, seller, buyer, listing):
    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.expire_listing(session, listing.id, caller(buyer))
    assert exc.value.status_code == 409

    expired = exchange_lifecycle.expire_listing(session, listing.id, caller(seller))
    assert expired.status == "expired"


def test_delete_is_seller_only(session, caller, seller, buyer, listing):
    with pytest.raises(HTTPException) as exc:
        exchange_lifecycle.delete_listing(session, listing.id, caller(buyer))
    assert exc.value.status_code == 403

    listing_id = listing.id
    exchange_lifecycle.delete_listing(session, listing_id, caller(seller))
    assert session.get(ExchangeListing, listing_id) is None


def test_expire_overdue_listings_job(session, caller, seller, make_user, new_listing, listing):
    fresh = exchange_lifecycle.create_listing(
        session, caller(make_user("other")), new_listing
    )
    _make_overdue(session, listing)

    assert exchange_lifecycle.expire_overdue_listings(session) == 1

    session.refresh(listing)
    session.refresh(fresh)
    assert listing.status == "expired"
    assert fresh.status == "active"
    assert exchange_lifecycle.expire_overdue_listings(session) == 0


def test_list_filters_by_seller_and_buyer(session, caller, seller, buyer, make_user, new_listing, listing):
    other_seller = make_user("other")
    other = exchange_lifecycle.create_listing(session, caller(other_seller), new_listing)
    exchange_lifecycle.purchase_listing(session, other.id, caller(buyer))

    mine = exchange_lifecycle.list_listings(session, status_filter="all", user_id=seller.id)
    assert [l.id for l in mine] == [listing.id]

    bought = exchange_lifecycle.list_listings(session, status_filter="sold", buyer_id=buyer.id)
    assert [l.id for l in bought] == [other.id]


def test_read_model_loads_expired_instance(session, caller, seller, listing):
    session.expire(listing)

    read = exchange_lifecycle.to_listing_read(listing, seller.id)

    assert read.id == listing.id
    assert read.status == "active"
    assert read.code_value == "LUNCH-8842"


def test_listing_is_still_active_at_its_deadline(listing):
    assert exchange_lifecycle.effective_status(listing, now=listing.expires_at) == "active"
    assert (
        exchange_lifecycle.effective_status(listing, now=listing.expires_at + timedelta(microseconds=1))
        == "expired"
    )


def test_listing_created_exactly_at_cutoff_is_active(session, caller, seller, new_listing, monkeypatch):
    cutoff = TEHRAN.localize(datetime(2026, 3, 10, 14, 0)).astimezone(pytz.utc)
    monkeypatch.setattr(exchange_lifecycle, "utcnow", lambda: cutoff)

    created = exchange_lifecycle.create_listing(session, caller(seller), new_listing)

    assert created.created_at == cutoff
    assert created.expires_at == cutoff
    assert exchange_lifecycle.effective_status(created, now=cutoff) == "active"
    assert [l.id for l in exchange_lifecycle.list_listings(session)] == [created.id]


def test_deadline_is_computed_from_creation_instant(session, caller, seller, new_listing, monkeypatch):
    # 09:00 UTC is 12:30 in Tehran
    created_at = pytz.utc.localize(datetime(2026, 3, 10, 9, 0))
    monkeypatch.setattr(exchange_lifecycle, "utcnow", lambda: created_at)

    created = exchange_lifecycle.create_listing(session, caller(seller), new_listing)

    assert created.created_at == created_at
    assert created.expires_at == pytz.utc.localize(datetime(2026, 3, 10, 10, 30))
