from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException

from campus_eats.constants.roles import ActingRole
from campus_eats.models.user import User
from campus_eats.utils.token import get_current_user


@dataclass(frozen=True)
class CallerContext:
    """Authenticated caller plus the role they are acting in for this request."""

    user: User
    role: ActingRole = ActingRole.customer

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def is_courier(self) -> bool:
        return self.role == ActingRole.courier

    @property
    def is_admin(self) -> bool:
        return self.user.role == "admin"


def get_caller(
    current_user: User = Depends(get_current_user),
    x_acting_role: Optional[str] = Header(default=None),
) -> CallerContext:
    if x_acting_role is None:
        return CallerContext(user=current_user)

    try:
        role = ActingRole(x_acting_role.lower())
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown acting role: {x_acting_role}",
        )
    return CallerContext(user=current_user, role=role)
