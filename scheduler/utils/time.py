from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone


def now():
    return timezone.now()


def study_tz():
    return ZoneInfo(settings.STUDY_TIME_ZONE)


def to_local_iso(dt_utc):
    return dt_utc.astimezone(study_tz()).isoformat()


def local_date(dt_utc):
    """Calendar day of ``dt_utc`` in the study time zone."""
    return dt_utc.astimezone(study_tz()).date()
