from enum import Enum


class UserRole(str, Enum):
    user = "user"
    admin = "admin"


class ActingRole(str, Enum):
    customer = "customer"
    courier = "courier"


class VerificationStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
