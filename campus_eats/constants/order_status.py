from enum import Enum


class OrderStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    waiting_for_payment = "waiting_for_payment"
    food_delivering = "food_delivering"
    delivered = "delivered"


ALLOWED_TRANSITIONS = {
    "pending": ["confirmed"],
    "confirmed": ["waiting_for_payment", "food_delivering", "delivered"],
    "waiting_for_payment": ["food_delivering"],
    "food_delivering": ["delivered"],
    "delivered": [],
}

# only the assigned courier may move an order into these
COURIER_ONLY_STATUSES = {"waiting_for_payment", "food_delivering"}


def is_valid_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, [])
