import logging
from typing import List, Optional

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select

from campus_eats.constants.roles import VerificationStatus
from campus_eats.models.user import User
from campus_eats.models.verification import CourierVerification
from campus_eats.utils.clock import utcnow
from campus_eats.utils.pagination import paginate
from campus_eats.utils.storage import delete_upload, save_upload

logger = logging.getLogger(__name__)

VERIFICATION_FOLDER = "verifications"


def _discard_uploads(file_ids: List[str]) -> None:
    for file_id in file_ids:
        delete_upload(file_id, VERIFICATION_FOLDER)


def get_latest_verification(session: Session, user_id: int) -> Optional[CourierVerification]:
    return session.exec(
        select(CourierVerification)
        .where(CourierVerification.user_id == user_id)
        .order_by(col(CourierVerification.submitted_at).desc())
    ).first()


def submit_verification(
    session: Session,
    user: User,
    student_card: UploadFile,
    selfie: UploadFile,
) -> CourierVerification:
    """Courier uploads a student card and a selfie for manual review."""
    latest = get_latest_verification(session, user.id)
    if latest and latest.status in (VerificationStatus.pending.value, VerificationStatus.approved.value):
        raise HTTPException(
            status.HTTP_409_CONFLICT,
            f"Verification already {latest.status}",
        )

    saved = []
    try:
        saved.append(save_upload(student_card, VERIFICATION_FOLDER))
        saved.append(save_upload(selfie, VERIFICATION_FOLDER))

        verification = CourierVerification(
            user_id=user.id,
            user_name=user.name,
            user_email=user.email,
            student_card_file_id=saved[0],
            selfie_file_id=saved[1],
            status=VerificationStatus.pending.value,
            submitted_at=utcnow(),
        )
        session.add(verification)
        session.commit()
    except ValueError as e:
        _discard_uploads(saved)
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))
    except IntegrityError:
        # a concurrent submission got its pending row in first
        session.rollback()
        _discard_uploads(saved)
        raise HTTPException(status.HTTP_409_CONFLICT, "Verification already pending")
    except SQLAlchemyError:
        session.rollback()
        _discard_uploads(saved)
        raise

    session.refresh(verification)

    logger.info(f"Verification {verification.id} submitted by user {user.id}")
    return verification


def list_verifications(
    session: Session,
    status_filter: Optional[str] = None,
    limit: int = 25,
    offset: int = 0,
) -> dict:
    query = select(CourierVerification).order_by(col(CourierVerification.submitted_at).desc())
    if status_filter:
        query = query.where(CourierVerification.status == status_filter)

    return paginate(session=session, query=query, limit=limit, offset=offset)


def review_verification(
    session: Session,
    verification_id: int,
    reviewer: User,
    new_status: str,
    review_notes: Optional[str] = None,
) -> CourierVerification:
    verification = session.get(CourierVerification, verification_id)
    if not verification:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Verification not found")

    if new_status not in (VerificationStatus.approved.value, VerificationStatus.rejected.value):
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            'Invalid status. Must be "approved" or "rejected"',
        )

    if verification.status != VerificationStatus.pending.value:
        raise HTTPException(
            status.HTTP_409_CONFLICT,
            f"Verification was already {verification.status}",
        )

    verification.status = new_status
    verification.reviewed_at = utcnow()
    verification.reviewed_by = reviewer.id
    verification.review_notes = review_notes or ""
    session.add(verification)

    if new_status == VerificationStatus.approved.value:
        user = session.get(User, verification.user_id)
        if user:
            user.email_verified = True
            session.add(user)

    session.commit()
    session.refresh(verification)

    logger.info(f"Verification {verification_id} {new_status} by admin {reviewer.id}")
    return verification
