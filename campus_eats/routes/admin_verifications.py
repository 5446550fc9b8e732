from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from campus_eats.constants.roles import VerificationStatus
from campus_eats.database import get_session
from campus_eats.dependencies.admin import require_admin
from campus_eats.models.user import User
from campus_eats.schemas.verification_schemas import (
    VerificationListResponse,
    VerificationReviewRequest,
    VerificationReviewResponse,
)
from campus_eats.services import verification_service

router = APIRouter()


@router.get("", response_model=VerificationListResponse)
def list_verifications(
    status: Optional[VerificationStatus] = None,
    limit: int = Query(25, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: Session = Depends(get_session),
    _: User = Depends(require_admin),
):
    page = verification_service.list_verifications(
        session,
        status_filter=status.value if status else None,
        limit=limit,
        offset=offset,
    )
    return {"data": page["results"], "total": page["total"]}


@router.post("/{verification_id}/review", response_model=VerificationReviewResponse)
def review_verification(
    verification_id: int,
    payload: VerificationReviewRequest,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    verification = verification_service.review_verification(
        session,
        verification_id,
        reviewer=admin,
        new_status=payload.status,
        review_notes=payload.review_notes,
    )
    return {
        "data": verification,
        "message": f"Verification {payload.status} successfully",
    }
