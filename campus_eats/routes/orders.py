from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session

from campus_eats.constants.order_status import OrderStatus
from campus_eats.database import get_session
from campus_eats.dependencies.context import CallerContext, get_caller
from campus_eats.schemas.order_schemas import (
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    OrderTimelineResponse,
    OrderUpdate,
)
from campus_eats.services import order_lifecycle
from campus_eats.services.order_event_service import get_order_timeline

router = APIRouter()


@router.get("", response_model=OrderListResponse)
def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    user_id: Optional[int] = Query(None, alias="userId"),
    delivery_person_id: Optional[int] = Query(None, alias="deliveryPersonId"),
    restaurant_location: Optional[str] = Query(None, alias="restaurantLocation"),
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: Session = Depends(get_session),
    _: CallerContext = Depends(get_caller),
):
    orders = order_lifecycle.list_orders(
        session,
        status_filter=status_filter.value if status_filter else None,
        user_id=user_id,
        delivery_person_id=delivery_person_id,
        restaurant_location=restaurant_location,
        min_price=min_price,
        max_price=max_price,
        limit=limit,
        offset=offset,
    )
    return {"orders": orders}


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def place_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    caller: CallerContext = Depends(get_caller),
):
    order = order_lifecycle.submit_order(session, caller, payload)
    return {"order": order}


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: str,
    session: Session = Depends(get_session),
    _: CallerContext = Depends(get_caller),
):
    return {"order": order_lifecycle.get_order(session, order_id)}


@router.patch("/{order_id}", response_model=OrderResponse)
def update_order(
    order_id: str,
    payload: OrderUpdate,
    session: Session = Depends(get_session),
    caller: CallerContext = Depends(get_caller),
):
    if payload.action == "confirm":
        if payload.delivery_person_data is None:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "deliveryPersonData is required")
        order = order_lifecycle.accept_order(
            session, order_id, caller, payload.delivery_person_data
        )
    else:
        if payload.status is None:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "status is required")
        order = order_lifecycle.update_order_status(session, order_id, caller, payload.status)

    return {"order": order}


@router.delete("/{order_id}")
def delete_order(
    order_id: str,
    session: Session = Depends(get_session),
    caller: CallerContext = Depends(get_caller),
):
    order_lifecycle.cancel_order(session, order_id, caller)
    return {"message": "Order deleted successfully"}


@router.get("/{order_id}/events", response_model=OrderTimelineResponse)
def order_timeline(
    order_id: str,
    session: Session = Depends(get_session),
    caller: CallerContext = Depends(get_caller),
):
    order = order_lifecycle.get_order(session, order_id)
    if caller.user_id not in (order.user_id, order.delivery_person_id) and not caller.is_admin:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Not allowed")

    return {"order_id": order.id, "events": get_order_timeline(session, order.id)}
