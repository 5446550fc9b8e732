from datetime import datetime

import pytz
from sqlmodel import Session

from campus_eats.models.order import Order
from campus_eats.models.user import User


def _order(user_id, **extra):
    return Order(
        user_id=user_id,
        restaurant_location="Self",
        restaurant_type="self",
        delivery_location="Library",
        full_name="Sara",
        phone="0911",
        price=18000,
        **extra,
    )


def test_timestamps_come_back_as_aware_utc(engine, make_user):
    user = make_user("sara")

    with Session(engine) as writer:
        order = _order(user.id)
        writer.add(order)
        writer.commit()
        order_id = order.id

    with Session(engine) as reader:
        stored = reader.get(Order, order_id)
        assert stored.created_at.utcoffset().total_seconds() == 0
        assert stored.confirmed_at is None


def test_offsets_are_normalised_to_utc(engine, make_user):
    user = make_user("sara")
    tehran = pytz.timezone("Asia/Tehran")
    confirmed = tehran.localize(datetime(2026, 3, 10, 14, 0))

    with Session(engine) as writer:
        order = _order(user.id, status="confirmed", confirmed_at=confirmed)
        writer.add(order)
        writer.commit()
        order_id = order.id

    with Session(engine) as reader:
        stored = reader.get(Order, order_id)
        assert stored.confirmed_at == pytz.utc.localize(datetime(2026, 3, 10, 10, 30))


def test_naive_values_are_read_as_utc(engine):
    with Session(engine) as writer:
        user = User(
            name="Old row",
            email="old@sharif.edu",
            password="x",
            created_at=datetime(2026, 1, 1, 8, 0),
        )
        writer.add(user)
        writer.commit()
        user_id = user.id

    with Session(engine) as reader:
        assert reader.get(User, user_id).created_at == pytz.utc.localize(datetime(2026, 1, 1, 8, 0))
