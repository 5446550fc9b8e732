from enum import Enum


class ListingStatus(str, Enum):
    active = "active"
    sold = "sold"
    cancelled = "cancelled"
    flagged = "flagged"
    expired = "expired"


class ListingAction(str, Enum):
    flag = "flag"
    purchase = "purchase"
    confirm_payment = "confirm_payment"
    cancel = "cancel"
    expire = "expire"

