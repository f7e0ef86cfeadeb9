"""Informational notifications for progress events (DB row + Redis pub/sub)."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from techpath.db.models import Notification
from techpath.progress.events import CourseCompleted, StreakUpdated, TrophyAwarded

logger = logging.getLogger(__name__)

NOTIFICATION_CHANNEL = "pubsub:notifications"


class Notifier:
    """Fire-and-forget sink. Failures are logged, never raised."""

    def __init__(self, db: AsyncSession, redis: object | None = None) -> None:
        self.db = db
        self.redis = redis

    async def course_completed(self, event: CourseCompleted) -> None:
        await self._send(
            user_id=event.user_id,
            subtype="course_completed",
            title="Course Complete!",
            description=f'You finished "{event.course_title}" with {round(event.accuracy * 100)}% accuracy.',
            action_url="/progress",
            payload=event.model_dump(mode="json"),
        )

    async def streak_updated(self, event: StreakUpdated) -> None:
        if not event.changed:
            return
        days = "day" if event.current_streak == 1 else "days"
        await self._send(
            user_id=event.user_id,
            subtype="streak_updated",
            title=f"{event.current_streak} {days} streak",
            description="Complete a course tomorrow to keep it going.",
            action_url="/streak",
            payload=event.model_dump(mode="json"),
        )

    async def trophy_awarded(self, event: TrophyAwarded) -> None:
        await self._send(
            user_id=event.user_id,
            subtype="trophy_awarded",
            title=f'Trophy Earned: "{event.trophy_name}"',
            description=None,
            action_url="/trophies",
            payload=event.model_dump(mode="json"),
        )

    async def _send(
        self,
        user_id: str,
        subtype: str,
        title: str,
        description: str | None,
        action_url: str,
        payload: dict,
    ) -> None:
        notification = Notification(
            user_id=user_id,
            type="progress",
            subtype=subtype,
            title=title,
            description=description,
            action_url=action_url,
            notification_metadata=payload,
            created_at=datetime.now(timezone.utc),
        )
        try:
            self.db.add(notification)
            await self.db.commit()
        except (SQLAlchemyError, OSError):
            logger.warning("Failed to persist %s notification", subtype, exc_info=True)
            try:
                await self.db.rollback()
            except (SQLAlchemyError, OSError):
                logger.warning("Rollback after notification failure also failed", exc_info=True)

        if self.redis is not None:
            try:
                await self.redis.publish(  # type: ignore[union-attr]
                    NOTIFICATION_CHANNEL,
                    json.dumps({"user_id": user_id, "subtype": subtype, "title": title, "event": payload}),
                )
            except Exception:
                logger.warning("Failed to publish %s notification", subtype, exc_info=True)
