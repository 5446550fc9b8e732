import logging

from fastapi import Depends, HTTPException, status

from campus_eats.constants.roles import UserRole
from campus_eats.models.user import User
from campus_eats.utils.token import get_current_user

logger = logging.getLogger(__name__)


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.admin.value:
        logger.warning(f"User {current_user.id} denied admin access")
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Admin access required")
    return current_user
