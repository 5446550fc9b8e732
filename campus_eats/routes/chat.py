import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, col, select

from campus_eats.database import get_session
from campus_eats.dependencies.context import CallerContext, get_caller
from campus_eats.models.chat_message import ChatMessage
from campus_eats.models.order import Order
from campus_eats.schemas.chat_schemas import (
    ChatMessageCreate,
    ChatMessageResponse,
    ChatThreadResponse,
)
from campus_eats.services.order_lifecycle import get_order
from campus_eats.utils.clock import utcnow

router = APIRouter()
logger = logging.getLogger(__name__)


def _role_on_order(order: Order, user_id: int) -> str:
    if order.user_id == user_id:
        return "customer"
    if order.delivery_person_id is not None and order.delivery_person_id == user_id:
        return "delivery"
    raise HTTPException(status.HTTP_403_FORBIDDEN, "Unauthorized to access this chat")


@router.get("/{order_id}", response_model=ChatThreadResponse)
def get_messages(
    order_id: str,
    session: Session = Depends(get_session),
    caller: CallerContext = Depends(get_caller),
):
    order = get_order(session, order_id)
    role = _role_on_order(order, caller.user_id)

    messages = session.exec(
        select(ChatMessage)
        .where(ChatMessage.order_id == order_id)
        .order_by(col(ChatMessage.created_at), col(ChatMessage.id))
    ).all()

    return {
        "messages": messages,
        "user_role": role,
        "order_user_id": order.user_id,
        "order_delivery_person_id": order.delivery_person_id,
    }


@router.post("/{order_id}", response_model=ChatMessageResponse, status_code=status.HTTP_201_CREATED)
def send_message(
    order_id: str,
    payload: ChatMessageCreate,
    session: Session = Depends(get_session),
    caller: CallerContext = Depends(get_caller),
):
    text = payload.message.strip()
    if not text:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Message cannot be empty")

    order = get_order(session, order_id)
    role = _role_on_order(order, caller.user_id)

    message = ChatMessage(
        order_id=order_id,
        sender_id=caller.user_id,
        sender_name=caller.user.name,
        sender_role=role,
        message=text,
        created_at=utcnow(),
    )
    session.add(message)
    session.commit()
    session.refresh(message)

    logger.info(f"Chat message {message.id} on order {order_id} from {role} {caller.user_id}")
    return {"message": message}
