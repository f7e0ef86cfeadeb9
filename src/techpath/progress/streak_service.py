"""Daily streak tracking from course-completion days."""

from __future__ import annotations

import logging
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from techpath.db.models import Streak
from techpath.errors import StoreUnavailable, store_errors
from techpath.progress.day_utils import utc_now
from techpath.progress.events import StreakUpdated

logger = logging.getLogger(__name__)

MAX_CONFLICT_RETRIES = 3


async def get_or_create_streak(db: AsyncSession, user_id: str) -> Streak:
    """Get or create the streak row for a user."""
    result = await db.execute(select(Streak).where(Streak.user_id == user_id))
    streak = result.scalar_one_or_none()
    if streak is not None:
        return streak

    streak = Streak(user_id=user_id, current_streak=0, max_streak=0, last_activity_date=None)
    db.add(streak)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        result = await db.execute(select(Streak).where(Streak.user_id == user_id))
        streak = result.scalar_one()
    return streak


def advance_streak(current: int, last_activity: date | None, today: date) -> int | None:
    """New current_streak for activity on ``today``, or None if already counted.

    Activity on or before the last recorded day (a repeat completion, or a
    stale event delivered late) does not move the streak.
    """
    if last_activity is not None and last_activity >= today:
        return None
    if last_activity == today - timedelta(days=1):
        return current + 1
    return 1


async def record_activity(db: AsyncSession, user_id: str, today: date) -> StreakUpdated:
    """Count one activity day. Repeated calls for the same day collapse."""
    for _ in range(MAX_CONFLICT_RETRIES):
        try:
            with store_errors("record_activity"):
                return await _apply_activity(db, user_id, today)
        except StaleDataError:
            await db.rollback()
            logger.info("Concurrent streak update for %s, retrying", user_id)
    raise StoreUnavailable(f"record_activity kept conflicting for {user_id}")


async def _apply_activity(db: AsyncSession, user_id: str, today: date) -> StreakUpdated:
    streak = await get_or_create_streak(db, user_id)
    new_current = advance_streak(streak.current_streak, streak.last_activity_date, today)

    changed = new_current is not None
    if changed:
        streak.current_streak = new_current
        streak.max_streak = max(streak.max_streak, new_current)
        streak.last_activity_date = today
        streak.updated_at = utc_now()
    await db.commit()

    if changed:
        logger.info("Streak for %s is now %d (max %d)", user_id, streak.current_streak, streak.max_streak)
    return StreakUpdated(
        user_id=user_id,
        current_streak=streak.current_streak,
        max_streak=streak.max_streak,
        activity_date=today,
        changed=changed,
    )


async def get_streak(db: AsyncSession, user_id: str, today: date) -> dict:
    """Streak summary for display."""
    with store_errors("get_streak"):
        streak = await get_or_create_streak(db, user_id)
        await db.commit()

    last = streak.last_activity_date
    alive = last is not None and last >= today - timedelta(days=1)
    return {
        "current_streak": streak.current_streak,
        "max_streak": streak.max_streak,
        "last_activity_date": last,
        "is_active_today": last == today,
        # The stored streak is only reset by the next completion
        "effective_streak": streak.current_streak if alive else 0,
    }
