from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlmodel import Session

from campus_eats.database import get_session
from campus_eats.models.user import User
from campus_eats.schemas.verification_schemas import VerificationRead, VerificationStatusResponse
from campus_eats.services import verification_service
from campus_eats.utils.token import get_current_user

router = APIRouter()


@router.post("/verification", response_model=VerificationRead, status_code=status.HTTP_201_CREATED)
def submit_verification(
    student_card: UploadFile = File(...),
    selfie: UploadFile = File(...),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return verification_service.submit_verification(session, current_user, student_card, selfie)


@router.get("/verification", response_model=VerificationStatusResponse)
def get_verification_status(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    verification = verification_service.get_latest_verification(session, current_user.id)
    return {
        "has_verification": verification is not None,
        "data": verification,
    }
