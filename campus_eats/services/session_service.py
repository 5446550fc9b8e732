import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import update
from sqlmodel import Session, col, select

from campus_eats.config import settings
from campus_eats.models.user import User
from campus_eats.models.user_session import UserSession
from campus_eats.utils.clock import utcnow

logger = logging.getLogger(__name__)


def open_session(
    session: Session,
    user: User,
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> UserSession:
    now = utcnow()
    user_session = UserSession(
        user_id=user.id,
        user_agent=user_agent,
        ip_address=ip_address,
        created_at=now,
        expires_at=now + timedelta(minutes=settings.access_token_expire_minutes),
    )
    session.add(user_session)
    session.commit()
    session.refresh(user_session)

    logger.info(f"Session {user_session.id} opened for user {user.id}")
    return user_session


def is_live(user_session: UserSession) -> bool:
    return user_session.revoked_at is None and user_session.expires_at >= utcnow()


def list_live_sessions(session: Session, user_id: int) -> List[UserSession]:
    return session.exec(
        select(UserSession)
        .where(UserSession.user_id == user_id)
        .where(col(UserSession.revoked_at).is_(None))
        .where(col(UserSession.expires_at) >= utcnow())
        .order_by(col(UserSession.created_at).desc())
    ).all()


def revoke_session(session: Session, user_session: UserSession) -> None:
    user_session.revoked_at = utcnow()
    session.add(user_session)
    session.commit()
    logger.info(f"Session {user_session.id} revoked for user {user_session.user_id}")


def revoke_other_sessions(session: Session, user_id: int, keep_session_id: Optional[str] = None) -> int:
    """Sign the user out everywhere except ``keep_session_id``; returns how many were revoked."""
    query = (
        update(UserSession)
        .where(col(UserSession.user_id) == user_id)
        .where(col(UserSession.revoked_at).is_(None))
    )
    if keep_session_id is not None:
        query = query.where(col(UserSession.id) != keep_session_id)

    result = session.exec(query.values(revoked_at=utcnow()))
    session.commit()

    logger.info(f"Revoked {result.rowcount} sessions for user {user_id}")
    return result.rowcount
