from datetime import datetime
from typing import List, Literal, Optional

from campus_eats.schemas.base import CamelModel


class VerificationRead(CamelModel):
    id: int
    user_id: int
    user_name: str
    user_email: str
    student_card_file_id: str
    selfie_file_id: str
    status: str
    submitted_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    review_notes: Optional[str] = None


class VerificationStatusResponse(CamelModel):
    success: bool = True
    has_verification: bool
    data: Optional[VerificationRead] = None


class VerificationListResponse(CamelModel):
    success: bool = True
    data: List[VerificationRead]
    total: int


class VerificationReviewRequest(CamelModel):
    status: Literal["approved", "rejected"]
    review_notes: Optional[str] = None


class VerificationReviewResponse(CamelModel):
    success: bool = True
    data: VerificationRead
    message: str
