import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, text

from campus_eats.database import get_session
from campus_eats.utils.clock import calculate_expiration_time, to_campus_time, utcnow

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/check")
def health_check(session: Session = Depends(get_session)):
    db_status = "ok"
    try:
        session.exec(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check database ping failed: {e}")
        db_status = "failed"

    now = utcnow()
    return {
        "status": "ok",
        "database": db_status,
        "timestamp": now.isoformat(),
        "campus_time": to_campus_time(now).isoformat(),
        "listing_deadline": to_campus_time(calculate_expiration_time()).isoformat(),
    }
