"""Staged progress pipeline.

AnswerSubmitted -> tracker -> CourseCompleted -> streak -> StreakUpdated
-> trophy rules -> TrophyAwarded.

Only the tracker stage is required for the answer to be recorded. If the
streak or trophy stage cannot reach the store, the result is returned with
``evaluation_pending`` set and the caller can re-run those stages later with
``retry_evaluation``; every stage is safe to run again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from zoneinfo import ZoneInfo

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from techpath.errors import StoreUnavailable
from techpath.progress import streak_service
from techpath.progress.course_tracker import AnswerOutcome, CourseProgressTracker, ProgressSnapshot
from techpath.progress.day_utils import activity_day, activity_zone
from techpath.progress.events import AnswerSubmitted, CourseCompleted, StreakUpdated, TrophyAwarded
from techpath.progress.notifications import Notifier
from techpath.progress.trophy_engine import TrophyEngine

logger = structlog.get_logger()


@dataclass
class EvaluationResult:
    """What the streak and trophy stages produced for one completion."""

    streak: StreakUpdated | None = None
    awarded: list[TrophyAwarded] = field(default_factory=list)
    evaluation_pending: bool = False


@dataclass
class PipelineResult:
    outcome: AnswerOutcome
    # Read after later stages may have rolled the session back
    progress: ProgressSnapshot
    streak: StreakUpdated | None = None
    awarded: list[TrophyAwarded] = field(default_factory=list)
    evaluation_pending: bool = False

    @property
    def completed(self) -> CourseCompleted | None:
        return self.outcome.completed


class ProgressPipeline:
    def __init__(self, db: AsyncSession, redis: object | None = None, tz: ZoneInfo | None = None) -> None:
        self.db = db
        self.tz = tz or activity_zone()
        self.tracker = CourseProgressTracker(db)
        self.trophies = TrophyEngine(db, tz=self.tz)
        self.notifier = Notifier(db, redis)

    async def handle(self, event: AnswerSubmitted) -> PipelineResult:
        """Run one answer submission through every stage."""
        outcome = await self.tracker.submit_answer(
            event.user_id,
            event.course_id,
            event.question_index,
            event.is_correct,
            event.is_first_attempt,
        )
        result = PipelineResult(outcome=outcome, progress=ProgressSnapshot.from_model(outcome.progress))
        if outcome.completed is None:
            return result

        if not outcome.already_completed:
            logger.info(
                "course_completed",
                user_id=event.user_id,
                course_id=event.course_id,
                accuracy=outcome.completed.accuracy,
            )
            await self.notifier.course_completed(outcome.completed)

        evaluation = await self._evaluate(outcome.completed)
        result.streak = evaluation.streak
        result.awarded = evaluation.awarded
        result.evaluation_pending = evaluation.evaluation_pending
        return result

    async def retry_evaluation(self, user_id: str, course_id: str) -> EvaluationResult:
        """Re-run the streak and trophy stages for a stored completion."""
        completed = await self.tracker.get_completion(user_id, course_id)
        return await self._evaluate(completed)

    async def _evaluate(self, completed: CourseCompleted) -> EvaluationResult:
        result = EvaluationResult()
        day = activity_day(completed.completed_at, self.tz)

        try:
            result.streak = await streak_service.record_activity(self.db, completed.user_id, day)
        except StoreUnavailable:
            logger.warning("streak_stage_failed", user_id=completed.user_id, course_id=completed.course_id, exc_info=True)
            await self._rollback()
            result.evaluation_pending = True
            return result
        await self.notifier.streak_updated(result.streak)

        try:
            result.awarded = await self.trophies.evaluate(completed.user_id, trigger=completed)
        except StoreUnavailable:
            logger.warning("trophy_stage_failed", user_id=completed.user_id, course_id=completed.course_id, exc_info=True)
            await self._rollback()
            result.evaluation_pending = True
            return result
        for awarded in result.awarded:
            await self.notifier.trophy_awarded(awarded)

        return result

    async def _rollback(self) -> None:
        try:
            await self.db.rollback()
        except (SQLAlchemyError, OSError):
            logger.warning("rollback_failed", exc_info=True)
