"""
Jour calendaire et bornes de journée dans le fuseau de l'application.

Les dates sont stockées en UTC naïf (datetime.utcnow) ; un datetime naïf
est donc toujours interprété comme UTC.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from app.core.settings import get_settings


def _zone(tz_name: Optional[str]) -> ZoneInfo:
    return ZoneInfo(tz_name or get_settings().APP_TIMEZONE)


def to_utc_naive(moment: datetime) -> datetime:
    """Normalise un datetime en UTC naïf (format de stockage)."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def local_date(moment: datetime, tz_name: Optional[str] = None) -> date:
    """Jour calendaire de `moment` dans le fuseau de l'application."""
    aware = moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)
    return aware.astimezone(_zone(tz_name)).date()


def day_bounds(day: date, tz_name: Optional[str] = None) -> Tuple[datetime, datetime]:
    """Retourne [début du jour, début du lendemain) en UTC naïf."""
    zone = _zone(tz_name)
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return to_utc_naive(start), to_utc_naive(end)
