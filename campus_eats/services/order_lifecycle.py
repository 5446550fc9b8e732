"""
Order lifecycle: pending -> confirmed -> (waiting_for_payment) -> (food_delivering) -> delivered.

Every transition reads the order, checks who is asking and whether the move
is legal, then writes with a conditional UPDATE that re-checks the status it
read. A zero row count means another request got there first and the caller
gets a 409; nothing from the losing request is written.
"""
import logging
import math
from typing import Iterable, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import delete, update
from sqlmodel import Session, col, select

from campus_eats.constants.order_status import (
    COURIER_ONLY_STATUSES,
    OrderStatus,
    is_valid_transition,
)
from campus_eats.dependencies.context import CallerContext
from campus_eats.models.chat_message import ChatMessage
from campus_eats.models.order import Order
from campus_eats.models.order_event import OrderEvent
from campus_eats.schemas.order_schemas import DeliveryPersonData, OrderCreate
from campus_eats.services.order_event_service import log_order_event
from campus_eats.utils.clock import utcnow

logger = logging.getLogger(__name__)

ORDER_UNAVAILABLE = "Order is no longer available"


def _conditional_update(
    session: Session,
    order_id: str,
    expected_statuses: Iterable[str],
    values: dict,
) -> bool:
    result = session.exec(
        update(Order)
        .where(col(Order.id) == order_id)
        .where(col(Order.status).in_(list(expected_statuses)))
        .values(**values)
    )
    return result.rowcount == 1


def _purge_order_children(session: Session, order_id: str) -> None:
    session.exec(delete(OrderEvent).where(col(OrderEvent.order_id) == order_id))
    session.exec(delete(ChatMessage).where(col(ChatMessage.order_id) == order_id))


def submit_order(session: Session, caller: CallerContext, payload: OrderCreate) -> Order:
    for field in ("restaurant_location", "restaurant_type", "delivery_location", "full_name", "phone"):
        if not getattr(payload, field).strip():
            raise HTTPException(status.HTTP_400_BAD_REQUEST, f"Missing required field: {field}")

    if not math.isfinite(payload.price) or payload.price <= 0:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Price must be a finite number greater than 0")

    now = utcnow()
    order = Order(
        **payload.model_dump(),
        user_id=caller.user_id,
        status=OrderStatus.pending.value,
        created_at=now,
        updated_at=now,
    )
    session.add(order)
    session.flush()

    log_order_event(
        session,
        order_id=order.id,
        event_type="order_placed",
        label="Order placed",
        created_by=f"user:{caller.user_id}",
        meta={"price": order.price},
    )
    session.commit()
    session.refresh(order)

    logger.info(f"Order {order.id} placed by user {caller.user_id} ({order.price})")
    return order


def get_order(session: Session, order_id: str) -> Order:
    order = session.get(Order, order_id)
    if not order:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Order not found")
    return order


def list_orders(
    session: Session,
    *,
    status_filter: Optional[str] = None,
    user_id: Optional[int] = None,
    delivery_person_id: Optional[int] = None,
    restaurant_location: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[Order]:
    query = select(Order)

    if status_filter:
        query = query.where(Order.status == status_filter)
    if user_id is not None:
        query = query.where(Order.user_id == user_id)
    if delivery_person_id is not None:
        query = query.where(Order.delivery_person_id == delivery_person_id)
    if restaurant_location:
        query = query.where(col(Order.restaurant_location).ilike(f"%{restaurant_location}%"))
    if min_price is not None:
        query = query.where(Order.price >= min_price)
    if max_price is not None:
        query = query.where(Order.price <= max_price)

    return session.exec(
        query.order_by(col(Order.created_at).desc()).offset(offset).limit(limit)
    ).all()


def accept_order(
    session: Session,
    order_id: str,
    caller: CallerContext,
    courier: Optional[DeliveryPersonData] = None,
) -> Order:
    """pending -> confirmed. Exactly one courier can win a given order."""
    courier = courier or DeliveryPersonData()

    if not caller.is_courier:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Switch to courier mode to accept orders")
    if not caller.user.email_verified:
        raise HTTPException(
            status.HTTP_403_FORBIDDEN,
            "Courier verification must be approved before accepting orders",
        )
    if courier.id is not None and courier.id != caller.user_id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "You can only accept orders for yourself")

    phone = (courier.phone or caller.user.phone or "").strip()
    if not phone:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            "A phone number is required to accept orders",
        )
    name = (courier.name or "").strip() or (caller.user.name or "").strip()
    if not name:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            "A name is required to accept orders",
        )

    order = get_order(session, order_id)

    if order.user_id == caller.user_id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "You cannot deliver your own order")

    if order.status != OrderStatus.pending.value:
        logger.warning(f"Accept rejected for order {order_id}: status is {order.status}")
        raise HTTPException(status.HTTP_409_CONFLICT, ORDER_UNAVAILABLE)

    now = utcnow()
    accepted = _conditional_update(
        session,
        order_id,
        [OrderStatus.pending.value],
        {
            "status": OrderStatus.confirmed.value,
            "delivery_person_id": caller.user_id,
            "delivery_person_name": name,
            "delivery_person_phone": phone,
            "confirmed_at": now,
            "updated_at": now,
        },
    )
    if not accepted:
        session.rollback()
        logger.warning(f"Accept lost race for order {order_id} (courier {caller.user_id})")
        raise HTTPException(status.HTTP_409_CONFLICT, ORDER_UNAVAILABLE)

    log_order_event(
        session,
        order_id=order_id,
        event_type="order_confirmed",
        label=f"Accepted by {name}",
        created_by=f"user:{caller.user_id}",
    )
    session.commit()
    session.refresh(order)

    logger.info(f"Order {order_id} accepted by courier {caller.user_id}")
    return order


def update_order_status(
    session: Session,
    order_id: str,
    caller: CallerContext,
    new_status: OrderStatus,
) -> Order:
    """
    Advance an accepted order. Delivered may be set by the customer
    (confirming receipt) or the assigned courier; the intermediate
    statuses only by the courier.
    """
    new_status = OrderStatus(new_status).value

    if new_status == OrderStatus.pending.value:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Orders cannot be moved back to pending")
    if new_status == OrderStatus.confirmed.value:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            "Use the confirm action to accept an order",
        )

    order = get_order(session, order_id)

    is_customer = order.user_id == caller.user_id
    is_courier = order.delivery_person_id is not None and order.delivery_person_id == caller.user_id

    if new_status in COURIER_ONLY_STATUSES and not is_courier:
        raise HTTPException(
            status.HTTP_403_FORBIDDEN,
            "Only the assigned courier can update this order",
        )
    if new_status == OrderStatus.delivered.value and not (is_customer or is_courier):
        raise HTTPException(
            status.HTTP_403_FORBIDDEN,
            "Only the customer or the assigned courier can complete this order",
        )

    old_status = order.status

    # repeated "delivered" is a no-op; deliveredAt keeps its first value
    if old_status == OrderStatus.delivered.value and new_status == old_status:
        return order

    if not is_valid_transition(old_status, new_status):
        logger.warning(f"Rejected status change for order {order_id}: {old_status} -> {new_status}")
        raise HTTPException(
            status.HTTP_409_CONFLICT,
            f"Cannot change order status from {old_status} to {new_status}",
        )

    now = utcnow()
    values = {"status": new_status, "updated_at": now}
    if new_status == OrderStatus.delivered.value:
        values["delivered_at"] = now

    if not _conditional_update(session, order_id, [old_status], values):
        session.rollback()
        raise HTTPException(
            status.HTTP_409_CONFLICT,
            "Order status changed, refresh and try again",
        )

    log_order_event(
        session,
        order_id=order_id,
        event_type=f"order_{new_status}",
        label=f"Status changed from {old_status} to {new_status}",
        created_by=f"user:{caller.user_id}",
        meta={"old_status": old_status, "new_status": new_status},
    )
    session.commit()
    session.refresh(order)

    logger.info(f"Order {order_id} moved {old_status} -> {new_status} by user {caller.user_id}")
    return order


def cancel_order(session: Session, order_id: str, caller: CallerContext) -> None:
    """Customer withdraws a pending order; admins may delete any order."""
    order = get_order(session, order_id)

    if caller.is_admin:
        _purge_order_children(session, order_id)
        session.delete(order)
        session.commit()
        logger.info(f"Order {order_id} deleted by admin {caller.user_id}")
        return

    if order.user_id != caller.user_id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Not authorized to cancel this order")

    if order.status != OrderStatus.pending.value:
        raise HTTPException(
            status.HTTP_409_CONFLICT,
            f"Cannot cancel order. Current status: {order.status}",
        )

    _purge_order_children(session, order_id)
    result = session.exec(
        delete(Order)
        .where(col(Order.id) == order_id)
        .where(col(Order.status) == OrderStatus.pending.value)
    )
    if result.rowcount != 1:
        session.rollback()
        raise HTTPException(status.HTTP_409_CONFLICT, ORDER_UNAVAILABLE)

    session.commit()
    logger.info(f"Order {order_id} cancelled by customer {caller.user_id}")
