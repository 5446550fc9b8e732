import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from sqlmodel import Session, select

from campus_eats.config import settings
from campus_eats.database import get_session
from campus_eats.models.user import User
from campus_eats.models.user_session import UserSession
from campus_eats.schemas.user_schemas import (
    CurrentSessionResponse,
    PasswordChange,
    PreferencesResponse,
    SessionListResponse,
    SessionRead,
    Token,
    UserLogin,
    UserRead,
    UserSignup,
    UserUpdate,
)
from campus_eats.services import session_service
from campus_eats.utils.hash import hash_password, verify_password
from campus_eats.utils.token import create_access_token, get_current_session, get_current_user


router = APIRouter()
logger = logging.getLogger(__name__)


def _session_read(user_session: UserSession, current_id: str) -> SessionRead:
    read = SessionRead.model_validate(user_session)
    return read.model_copy(update={"current": user_session.id == current_id})


@router.post("/signup", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def signup(payload: UserSignup, session: Session = Depends(get_session)):
    email = payload.email.lower()
    existing_user = session.exec(select(User).where(User.email == email)).first()
    if existing_user:
        raise HTTPException(status.HTTP_409_CONFLICT, "Email already registered")

    role = "admin" if email in {e.lower() for e in settings.admin_emails} else "user"

    user = User(
        name=payload.name.strip(),
        email=email,
        phone=payload.phone,
        password=hash_password(payload.password),
        role=role,
        preferences={},
    )

    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@router.post("/login", response_model=Token)
def login(payload: UserLogin, request: Request, session: Session = Depends(get_session)):
    user = session.exec(select(User).where(User.email == payload.email.lower())).first()

    if not user or not verify_password(payload.password, user.password):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid email or password")

    user_session = session_service.open_session(
        session,
        user,
        user_agent=request.headers.get("user-agent"),
        ip_address=request.client.host if request.client else None,
    )
    return Token(access_token=create_access_token(user_session), token_type="bearer")


@router.post("/logout")
@router.delete("/logout")
def logout(
    session: Session = Depends(get_session),
    current_session: UserSession = Depends(get_current_session),
):
    session_service.revoke_session(session, current_session)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/session", response_model=CurrentSessionResponse)
def read_current_session(
    current_session: UserSession = Depends(get_current_session),
    current_user: User = Depends(get_current_user),
):
    return {
        "user": current_user,
        "session": _session_read(current_session, current_session.id),
    }


@router.get("/sessions", response_model=SessionListResponse)
def list_sessions(
    session: Session = Depends(get_session),
    current_session: UserSession = Depends(get_current_session),
):
    sessions = session_service.list_live_sessions(session, current_session.user_id)
    return {
        "sessions": [_session_read(s, current_session.id) for s in sessions],
        "total": len(sessions),
    }


@router.delete("/sessions")
def revoke_sessions(
    session: Session = Depends(get_session),
    current_session: UserSession = Depends(get_current_session),
):
    revoked = session_service.revoke_other_sessions(
        session, current_session.user_id, keep_session_id=current_session.id
    )
    return {"success": True, "message": "Other sessions signed out", "revoked": revoked}


@router.get("/user", response_model=UserRead)
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/user", response_model=UserRead)
def update_current_user(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    if payload.name is not None:
        if not payload.name.strip():
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Name cannot be empty")
        current_user.name = payload.name.strip()
    if payload.phone is not None:
        current_user.phone = payload.phone.strip() or None

    session.add(current_user)
    session.commit()
    session.refresh(current_user)
    return current_user


@router.put("/password")
def change_password(
    payload: PasswordChange,
    session: Session = Depends(get_session),
    current_session: UserSession = Depends(get_current_session),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, current_user.password):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Current password is incorrect")

    current_user.password = hash_password(payload.new_password)
    session.add(current_user)
    session.commit()

    # other devices have to log in again with the new password
    session_service.revoke_other_sessions(session, current_user.id, keep_session_id=current_session.id)
    return {"message": "Password updated"}


@router.get("/preferences", response_model=PreferencesResponse)
def read_preferences(current_user: User = Depends(get_current_user)):
    return {"preferences": current_user.preferences or {}}


@router.put("/preferences", response_model=PreferencesResponse)
@router.patch("/preferences", response_model=PreferencesResponse)
def update_preferences(
    preferences: dict = Body(...),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    # shallow merge; reassigning the dict marks the JSON column dirty
    current_user.preferences = {**(current_user.preferences or {}), **preferences}
    session.add(current_user)
    session.commit()
    session.refresh(current_user)

    logger.info(f"Preferences updated for user {current_user.id}")
    return {
        "preferences": current_user.preferences,
        "message": "Preferences updated successfully",
    }
