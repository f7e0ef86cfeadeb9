"""Course progress tracking: answer counting, first-attempt accuracy, completion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from techpath.database import dialect_insert
from techpath.db.models import Course, CourseProgress
from techpath.errors import InvalidState, NotFound, StoreUnavailable, store_errors
from techpath.progress.day_utils import as_utc, utc_now
from techpath.progress.events import CourseCompleted

logger = logging.getLogger(__name__)

# Optimistic-lock conflicts (same user, same course, concurrent requests)
# are retried this many times before giving up.
MAX_CONFLICT_RETRIES = 3


@dataclass(frozen=True)
class ProgressSnapshot:
    """Detached copy of a progress row, safe to read after a rollback."""

    course_id: str
    questions_answered: int
    total_questions: int
    first_attempt_correct: int
    total_attempts: int
    completed_at: datetime | None
    started_at: datetime
    last_accessed: datetime

    @property
    def accuracy(self) -> float:
        return accuracy_of(self.first_attempt_correct, self.total_attempts)

    @classmethod
    def from_model(cls, progress: CourseProgress) -> ProgressSnapshot:
        return cls(
            course_id=progress.course_id,
            questions_answered=progress.questions_answered,
            total_questions=progress.course.total_questions,
            first_attempt_correct=progress.first_attempt_correct,
            total_attempts=progress.total_attempts,
            completed_at=as_utc(progress.completed_at) if progress.completed_at else None,
            started_at=as_utc(progress.started_at),
            last_accessed=as_utc(progress.last_accessed),
        )


@dataclass
class AnswerOutcome:
    """Result of one submission."""

    progress: CourseProgress
    counted: bool
    already_completed: bool = False
    completed: CourseCompleted | None = None


def accuracy_of(first_attempt_correct: int, total_attempts: int) -> float:
    """First-attempt-correct rate; 0.0 when nothing was attempted."""
    if total_attempts <= 0:
        return 0.0
    return first_attempt_correct / total_attempts


class CourseProgressTracker:
    """Records per-user, per-course answer counts and completion."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # --- Lookups ---

    async def get_course(self, course_id: str) -> Course:
        course = await self.db.get(Course, course_id)
        if course is None:
            raise NotFound(f"Course not found: {course_id}")
        return course

    async def get_progress(self, user_id: str, course_id: str) -> CourseProgress | None:
        result = await self.db.execute(
            select(CourseProgress).where(
                CourseProgress.user_id == user_id,
                CourseProgress.course_id == course_id,
            )
        )
        return result.scalar_one_or_none()

    async def _get_or_create_progress(self, user_id: str, course: Course, now: datetime) -> CourseProgress:
        progress = await self.get_progress(user_id, course.id)
        if progress is not None:
            return progress

        # A concurrent first request may insert the same row; keep whichever landed
        stmt = (
            dialect_insert(self.db)(CourseProgress)
            .values(
                user_id=user_id,
                course_id=course.id,
                questions_answered=0,
                first_attempt_correct=0,
                total_attempts=0,
                current_question_attempts=0,
                started_at=now,
                last_accessed=now,
                version=1,
            )
            .on_conflict_do_nothing(index_elements=["user_id", "course_id"])
        )
        await self.db.execute(stmt)
        progress = await self.get_progress(user_id, course.id)
        if progress is None:
            raise StoreUnavailable(f"Progress row for {user_id}/{course.id} vanished after insert")
        return progress

    # --- Operations ---

    async def start_course(self, user_id: str, course_id: str) -> CourseProgress:
        """Create the progress row on first visit; refresh last_accessed otherwise."""
        with store_errors("start_course"):
            course = await self.get_course(course_id)
            now = utc_now()
            progress = await self._get_or_create_progress(user_id, course, now)
            progress.last_accessed = now
            await self.db.commit()
        return progress

    async def submit_answer(
        self,
        user_id: str,
        course_id: str,
        question_index: int,
        is_correct: bool,
        is_first_attempt: bool,
    ) -> AnswerOutcome:
        """Record one answer submission.

        The question at index ``questions_answered`` is the current one; it is
        counted once answered correctly. Re-sending the question just counted
        is a replay: only ``total_attempts`` moves. ``first_attempt_correct``
        moves only for a correct first try with no earlier submission on that
        question.

        Raises NotFound for an unknown course and InvalidState for an index
        ahead of progress, past the end of the course, or a first attempt on
        a question answered earlier than the previous one.
        """
        for _ in range(MAX_CONFLICT_RETRIES):
            try:
                with store_errors("submit_answer"):
                    return await self._apply_answer(
                        user_id, course_id, question_index, is_correct, is_first_attempt
                    )
            except StaleDataError:
                await self.db.rollback()
                logger.info("Concurrent update on progress %s/%s, retrying", user_id, course_id)
        raise StoreUnavailable(f"submit_answer kept conflicting for {user_id}/{course_id}")

    async def _apply_answer(
        self,
        user_id: str,
        course_id: str,
        question_index: int,
        is_correct: bool,
        is_first_attempt: bool,
    ) -> AnswerOutcome:
        course = await self.get_course(course_id)
        now = utc_now()
        progress = await self._get_or_create_progress(user_id, course, now)

        if progress.completed_at is not None:
            return AnswerOutcome(
                progress=progress,
                counted=False,
                already_completed=True,
                completed=self._completion_event(progress, course),
            )

        answered = progress.questions_answered
        if question_index >= course.total_questions:
            raise InvalidState(
                f"Question {question_index} is out of range for course {course_id} "
                f"({course.total_questions} questions)"
            )
        if question_index > answered:
            raise InvalidState(f"Question {question_index} is ahead of progress ({answered} answered)")
        if question_index < answered - 1 and is_first_attempt:
            raise InvalidState(
                f"First attempt on question {question_index} but {answered} questions are already answered"
            )

        is_current = question_index == answered
        counted = False

        progress.total_attempts += 1
        progress.last_accessed = now

        if is_current:
            if is_first_attempt and is_correct and progress.current_question_attempts == 0:
                progress.first_attempt_correct += 1
            if is_correct:
                progress.questions_answered += 1
                progress.current_question_attempts = 0
                counted = True
            else:
                progress.current_question_attempts += 1

        completed = None
        if progress.questions_answered == course.total_questions:
            progress.completed_at = now
            completed = self._completion_event(progress, course)

        await self.db.commit()

        if completed is not None:
            logger.info("Course %s completed by %s", course_id, user_id)
        return AnswerOutcome(progress=progress, counted=counted, completed=completed)

    async def reset_course(self, user_id: str, course_id: str) -> CourseProgress:
        """Zero all counters for a retry. Streak and trophies are untouched."""
        with store_errors("reset_course"):
            await self.get_course(course_id)
            progress = await self.get_progress(user_id, course_id)
            if progress is None:
                raise InvalidState(f"No progress to reset for course {course_id}")

            progress.questions_answered = 0
            progress.first_attempt_correct = 0
            progress.total_attempts = 0
            progress.current_question_attempts = 0
            progress.completed_at = None
            progress.last_accessed = utc_now()
            await self.db.commit()
        return progress

    async def get_completion(self, user_id: str, course_id: str) -> CourseCompleted:
        """Rebuild the CourseCompleted event of a completed course."""
        with store_errors("get_completion"):
            course = await self.get_course(course_id)
            progress = await self.get_progress(user_id, course_id)
        if progress is None or progress.completed_at is None:
            raise InvalidState(f"Course {course_id} is not completed")
        return self._completion_event(progress, course)

    async def get_overview(self, user_id: str) -> dict:
        """All of a user's course progress, most recently accessed first."""
        with store_errors("get_overview"):
            result = await self.db.execute(
                select(CourseProgress)
                .where(CourseProgress.user_id == user_id)
                .order_by(CourseProgress.last_accessed.desc())
            )
            rows = list(result.scalars().all())

        courses = [
            {
                "course_id": p.course_id,
                "role": p.course.role,
                "difficulty": p.course.difficulty,
                "title": p.course.title,
                "questions_answered": p.questions_answered,
                "total_questions": p.course.total_questions,
                "first_attempt_correct": p.first_attempt_correct,
                "total_attempts": p.total_attempts,
                "accuracy": accuracy_of(p.first_attempt_correct, p.total_attempts),
                "completed_at": as_utc(p.completed_at) if p.completed_at else None,
                "started_at": as_utc(p.started_at),
                "last_accessed": as_utc(p.last_accessed),
            }
            for p in rows
        ]
        total_correct = sum(p.first_attempt_correct for p in rows)
        total_attempts = sum(p.total_attempts for p in rows)
        return {
            "courses": courses,
            "courses_started": len(rows),
            "courses_completed": sum(1 for p in rows if p.completed_at is not None),
            "overall_accuracy": accuracy_of(total_correct, total_attempts),
        }

    @staticmethod
    def _completion_event(progress: CourseProgress, course: Course) -> CourseCompleted:
        if progress.completed_at is None:
            raise InvalidState(f"Course {course.id} is not completed")
        return CourseCompleted(
            user_id=progress.user_id,
            course_id=course.id,
            course_title=course.title,
            accuracy=accuracy_of(progress.first_attempt_correct, progress.total_attempts),
            completed_at=as_utc(progress.completed_at),
        )
