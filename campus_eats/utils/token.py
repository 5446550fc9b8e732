import logging
from typing import Optional, Tuple

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlmodel import Session

from campus_eats.config import settings
from campus_eats.database import get_session
from campus_eats.models.user import User
from campus_eats.models.user_session import UserSession
from campus_eats.services.session_service import is_live

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

CREDENTIALS_ERROR = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


def create_access_token(user_session: UserSession) -> str:
    """Token for one login session; it expires with the session."""
    return jwt.encode(
        {
            "sub": str(user_session.user_id),
            "sid": user_session.id,
            "exp": user_session.expires_at,
        },
        settings.secret_key,
        algorithm=settings.algorithm,
    )


def decode_access_token(token: str) -> Optional[Tuple[int, str]]:
    """Return ``(user_id, session_id)`` from the token, or None if it is invalid or expired."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        return None

    try:
        return int(payload["sub"]), str(payload["sid"])
    except (KeyError, TypeError, ValueError):
        return None


def get_current_session(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> UserSession:
    claims = decode_access_token(token)
    if claims is None:
        raise CREDENTIALS_ERROR

    user_id, session_id = claims
    user_session = session.get(UserSession, session_id)
    if user_session is None or user_session.user_id != user_id or not is_live(user_session):
        raise CREDENTIALS_ERROR

    return user_session


def get_current_user(
    user_session: UserSession = Depends(get_current_session),
    session: Session = Depends(get_session),
) -> User:
    user = session.get(User, user_session.user_id)
    if user is None:
        raise CREDENTIALS_ERROR

    return user
