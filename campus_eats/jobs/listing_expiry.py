import logging

from sqlmodel import Session

from campus_eats.database import engine
from campus_eats.services.exchange_lifecycle import expire_overdue_listings

logger = logging.getLogger(__name__)


def expire_listings():
    """Persist the expired status of every active listing past its deadline."""
    with Session(engine) as session:
        count = expire_overdue_listings(session)

    logger.info(f"Expired {count} overdue listings")
    return count


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    expire_listings()
