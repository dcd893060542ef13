from collections import Counter
from datetime import timedelta

import structlog

from ..config import HEATMAP_DAYS
from ..data.repos import logs_for_user
from ..utils.time import local_date

logger = structlog.get_logger()


def study_streak(user_id, now) -> int:
    """Consecutive study days ending today or yesterday."""
    days = sorted(
        {local_date(dt) for dt in logs_for_user(user_id).values_list("reviewed_at", flat=True)},
        reverse=True,
    )
    if not days:
        return 0

    today = local_date(now)
    if days[0] not in (today, today - timedelta(days=1)):
        return 0

    streak = 1
    expected = days[0] - timedelta(days=1)
    for day in days[1:]:
        if day != expected:
            break
        streak += 1
        expected -= timedelta(days=1)
    return streak


def study_heatmap(user_id, now, days=HEATMAP_DAYS) -> dict:
    """Reviews per local day for the last ``days`` days, zero-filled, oldest first."""
    today = local_date(now)
    start = today - timedelta(days=days)
    # one extra day of slack for time zone offsets
    since = now - timedelta(days=days + 1)
    counts = Counter(
        local_date(dt)
        for dt in logs_for_user(user_id, since=since).values_list("reviewed_at", flat=True)
    )
    return {
        (start + timedelta(days=i)).isoformat(): counts.get(start + timedelta(days=i), 0)
        for i in range(days + 1)
    }


def total_cards_studied(user_id) -> int:
    return logs_for_user(user_id).order_by().values("card_id").distinct().count()


def activity_summary(user_id, now) -> dict:
    summary = {
        "streak": study_streak(user_id, now),
        "total_cards_studied": total_cards_studied(user_id),
        "heatmap": study_heatmap(user_id, now),
    }
    logger.info("study_activity",
        user_id=str(user_id),
        streak=summary["streak"],
        total_cards_studied=summary["total_cards_studied"],
    )
    return summary
