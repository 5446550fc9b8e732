from datetime import datetime, time, timedelta
from typing import Optional

import pytz

from campus_eats.config import settings


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp, the form every datetime column holds."""
    return datetime.now(pytz.utc)


def campus_tz():
    return pytz.timezone(settings.timezone)


def to_campus_time(value: datetime) -> datetime:
    """Convert a stored UTC datetime (naive values are read as UTC) to campus local time."""
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(campus_tz())


def calculate_expiration_time(now: Optional[datetime] = None) -> datetime:
    """
    Deadline for a new exchange listing.

    Listings close at the daily cutoff hour (14:00 campus time). A listing
    created at or before today's cutoff expires today; anything created
    after it expires at tomorrow's cutoff. ``now`` may be naive (read as
    campus time) or aware. Returns aware UTC.
    """
    tz = campus_tz()
    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is None:
        now = tz.localize(now)
    else:
        now = now.astimezone(tz)

    cutoff_time = time(settings.listing_expiry_hour, 0, 0)
    cutoff = tz.localize(datetime.combine(now.date(), cutoff_time))

    if now > cutoff:
        cutoff = tz.localize(datetime.combine(now.date() + timedelta(days=1), cutoff_time))

    return cutoff.astimezone(pytz.utc)
