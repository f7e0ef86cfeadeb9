"""Trophy rule engine: evaluates the trophy catalogue against live aggregates.

Each catalogue row names a ``criteria_type``; ``RULES`` maps that stable
identifier to a predicate over a ``TrophyContext`` snapshot and the row's
``criteria_value``. Display names play no part in evaluation.

The snapshot is rebuilt from the data store on every run, so eligibility is
always derived from current totals rather than from incremental counters.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from techpath.db.models import Course, CourseProgress, Friendship, Streak
from techpath.errors import store_errors
from techpath.progress.day_utils import activity_zone, local_hour
from techpath.progress.events import CourseCompleted, StreakUpdated, TrophyAwarded
from techpath.progress.trophy_service import (
    TrophySpec,
    count_trophies,
    grant_trophy,
    held_trophy_ids,
    list_trophies,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class CompletedCourse:
    course_id: str
    role: str
    completed_at: datetime
    first_attempt_correct: int
    total_questions: int


@dataclass
class TrophyContext:
    """Everything the rules need about one user, read in one pass."""

    user_id: str
    completions: list[CompletedCourse]
    courses_per_role: dict[str, int]
    current_streak: int
    held: set[int]
    friend_trophy_counts: dict[str, int] = field(default_factory=dict)
    tz: ZoneInfo = field(default_factory=activity_zone)


Rule = Callable[[TrophyContext, dict[str, Any]], bool]


def _courses_completed(ctx: TrophyContext, criteria: dict[str, Any]) -> bool:
    return len(ctx.completions) >= int(criteria.get("count", 1))


def _perfect_course(ctx: TrophyContext, criteria: dict[str, Any]) -> bool:
    return any(c.first_attempt_correct >= c.total_questions for c in ctx.completions)


def _role_completion(ctx: TrophyContext, criteria: dict[str, Any]) -> bool:
    percent = int(criteria.get("percent", 100))
    completed_per_role: dict[str, set[str]] = {}
    for c in ctx.completions:
        completed_per_role.setdefault(c.role, set()).add(c.course_id)
    for role, done in completed_per_role.items():
        total = ctx.courses_per_role.get(role, 0)
        if total and len(done) * 100 >= percent * total:
            return True
    return False


def _roles_explored(ctx: TrophyContext, criteria: dict[str, Any]) -> bool:
    return len({c.role for c in ctx.completions}) >= int(criteria.get("count", 3))


def _streak(ctx: TrophyContext, criteria: dict[str, Any]) -> bool:
    return ctx.current_streak >= int(criteria["days"])


def _completed_before_hour(ctx: TrophyContext, criteria: dict[str, Any]) -> bool:
    hour = int(criteria["hour"])
    return any(local_hour(c.completed_at, ctx.tz) < hour for c in ctx.completions)


def _completed_from_hour(ctx: TrophyContext, criteria: dict[str, Any]) -> bool:
    hour = int(criteria["hour"])
    return any(local_hour(c.completed_at, ctx.tz) >= hour for c in ctx.completions)


def _friends_top_trophies(ctx: TrophyContext, criteria: dict[str, Any]) -> bool:
    # Strictly greatest: a tie with any friend excludes the award.
    mine = len(ctx.held)
    if not ctx.friend_trophy_counts or mine == 0:
        return False
    return all(count < mine for count in ctx.friend_trophy_counts.values())


RULES: dict[str, Rule] = {
    "courses_completed": _courses_completed,
    "perfect_course": _perfect_course,
    "role_completion": _role_completion,
    "roles_explored": _roles_explored,
    "streak": _streak,
    "completed_before_hour": _completed_before_hour,
    "completed_from_hour": _completed_from_hour,
    "friends_top_trophies": _friends_top_trophies,
}


class TrophyEngine:
    """Evaluates the trophy catalogue for one user after progress events."""

    def __init__(self, db: AsyncSession, tz: ZoneInfo | None = None) -> None:
        self.db = db
        self.tz = tz or activity_zone()

    async def build_context(self, user_id: str) -> TrophyContext:
        completed = await self.db.execute(
            select(
                CourseProgress.course_id,
                Course.role,
                CourseProgress.completed_at,
                CourseProgress.first_attempt_correct,
                Course.total_questions,
            )
            .join(Course, Course.id == CourseProgress.course_id)
            .where(
                CourseProgress.user_id == user_id,
                CourseProgress.completed_at.is_not(None),
            )
        )
        completions = [CompletedCourse(*row) for row in completed.all()]

        per_role = await self.db.execute(select(Course.role, func.count(Course.id)).group_by(Course.role))
        courses_per_role = {role: count for role, count in per_role.all()}

        streak_result = await self.db.execute(select(Streak.current_streak).where(Streak.user_id == user_id))
        current_streak = streak_result.scalar_one_or_none() or 0

        friends_result = await self.db.execute(select(Friendship.friend_id).where(Friendship.user_id == user_id))
        friend_ids = list(friends_result.scalars())

        return TrophyContext(
            user_id=user_id,
            completions=completions,
            courses_per_role=courses_per_role,
            current_streak=current_streak,
            held=await held_trophy_ids(self.db, user_id),
            friend_trophy_counts=await count_trophies(self.db, friend_ids),
            tz=self.tz,
        )

    async def evaluate(
        self,
        user_id: str,
        trigger: CourseCompleted | StreakUpdated | None = None,
    ) -> list[TrophyAwarded]:
        """Grant every satisfied trophy the user does not hold yet.

        Rules run in catalogue order; trophies granted earlier in the run
        count towards later rules (the social-standing rule runs last).
        """
        with store_errors("evaluate_trophies"):
            catalogue = await list_trophies(self.db)
            ctx = await self.build_context(user_id)
            # Release the read transaction before the per-award commits
            await self.db.commit()

            awarded: list[TrophyAwarded] = []
            for trophy in catalogue:
                if trophy.id in ctx.held:
                    continue
                if not self._satisfied(trophy, ctx):
                    continue
                event = await grant_trophy(self.db, user_id, trophy)
                # Held either way: granted now or by a concurrent evaluation
                ctx.held.add(trophy.id)
                if event is not None:
                    awarded.append(event)

        logger.info(
            "trophies_evaluated",
            user_id=user_id,
            trigger=trigger.kind if trigger is not None else "manual",
            awarded=[e.trophy_slug for e in awarded],
        )
        return awarded

    def _satisfied(self, trophy: TrophySpec, ctx: TrophyContext) -> bool:
        rule = RULES.get(trophy.criteria_type)
        if rule is None:
            logger.warning("unknown_trophy_criteria", slug=trophy.slug, criteria_type=trophy.criteria_type)
            return False
        return rule(ctx, trophy.criteria_value)
