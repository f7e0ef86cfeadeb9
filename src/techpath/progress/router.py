"""Progress, streak and trophy API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from techpath.auth.dependencies import get_current_user
from techpath.content import question_bank
from techpath.database import get_session
from techpath.db.models import User
from techpath.errors import NotFound
from techpath.progress import streak_service, trophy_service
from techpath.progress.course_tracker import CourseProgressTracker, ProgressSnapshot
from techpath.progress.day_utils import today
from techpath.progress.events import AnswerSubmitted, StreakUpdated, TrophyAwarded
from techpath.progress.pipeline import ProgressPipeline
from techpath.progress.schemas import (
    AnswerRequest,
    AnswerResponse,
    AwardedTrophyResponse,
    CourseProgressResponse,
    EvaluationResponse,
    ProgressOverviewResponse,
    StreakResponse,
    StreakUpdateResponse,
    TrophyCatalogueResponse,
    TrophyResponse,
    TrophyShelfResponse,
)
from techpath.redis_client import get_redis_or_none

router = APIRouter(prefix="/api/v1", tags=["Progress"])


def _progress_response(progress: ProgressSnapshot) -> CourseProgressResponse:
    return CourseProgressResponse(
        course_id=progress.course_id,
        questions_answered=progress.questions_answered,
        total_questions=progress.total_questions,
        first_attempt_correct=progress.first_attempt_correct,
        total_attempts=progress.total_attempts,
        accuracy=progress.accuracy,
        completed_at=progress.completed_at,
        started_at=progress.started_at,
        last_accessed=progress.last_accessed,
    )


def _streak_update(event: StreakUpdated | None) -> StreakUpdateResponse | None:
    if event is None:
        return None
    return StreakUpdateResponse(
        current_streak=event.current_streak,
        max_streak=event.max_streak,
        activity_date=event.activity_date,
        changed=event.changed,
    )


def _awarded(events: list[TrophyAwarded]) -> list[AwardedTrophyResponse]:
    return [AwardedTrophyResponse(slug=e.trophy_slug, name=e.trophy_name, earned_at=e.earned_at) for e in events]


# ── Course progress ──


@router.post("/courses/{course_id}/start", response_model=CourseProgressResponse)
async def start_course(
    course_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Open a course: creates the progress row on first visit."""
    progress = await CourseProgressTracker(db).start_course(user.id, course_id)
    return _progress_response(ProgressSnapshot.from_model(progress))


@router.post("/courses/{course_id}/answers", response_model=AnswerResponse)
async def submit_answer(
    course_id: str,
    body: AnswerRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Grade one answer and run it through the progress pipeline."""
    try:
        question = question_bank.get_question(course_id, body.question_index)
    except NotFound:
        # The tracker reports unknown courses (404) and bad indexes (409).
        question = None
    is_correct = question is not None and question.answer == body.selected_option.strip().lower()

    pipeline = ProgressPipeline(db, redis=get_redis_or_none())
    result = await pipeline.handle(
        AnswerSubmitted(
            user_id=user.id,
            course_id=course_id,
            question_index=body.question_index,
            is_correct=is_correct,
            is_first_attempt=body.is_first_attempt,
        )
    )
    outcome = result.outcome
    return AnswerResponse(
        correct=is_correct,
        correct_option=question.answer if question else "",
        explanation=question.explanation if question else "",
        counted=outcome.counted,
        already_completed=outcome.already_completed,
        completed=result.progress.completed_at is not None,
        progress=_progress_response(result.progress),
        streak=_streak_update(result.streak),
        trophies_awarded=_awarded(result.awarded),
        evaluation_pending=result.evaluation_pending,
    )


@router.post("/courses/{course_id}/reset", response_model=CourseProgressResponse)
async def reset_course(
    course_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Start a course over. Streak and trophies are kept."""
    progress = await CourseProgressTracker(db).reset_course(user.id, course_id)
    return _progress_response(ProgressSnapshot.from_model(progress))


@router.post("/courses/{course_id}/evaluate", response_model=EvaluationResponse)
async def retry_evaluation(
    course_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Re-run streak and trophy evaluation for a completed course."""
    result = await ProgressPipeline(db, redis=get_redis_or_none()).retry_evaluation(user.id, course_id)
    return EvaluationResponse(
        streak=_streak_update(result.streak),
        trophies_awarded=_awarded(result.awarded),
        evaluation_pending=result.evaluation_pending,
    )


@router.get("/users/me/progress", response_model=ProgressOverviewResponse)
async def get_my_progress(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await CourseProgressTracker(db).get_overview(user.id)


# ── Streak ──


@router.get("/users/me/streak", response_model=StreakResponse)
async def get_my_streak(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await streak_service.get_streak(db, user.id, today())


# ── Trophies ──


@router.get("/trophies", response_model=TrophyCatalogueResponse)
async def list_trophies(db: AsyncSession = Depends(get_session)):
    """Whole trophy catalogue in display order."""
    catalogue = await trophy_service.list_trophies(db)
    return TrophyCatalogueResponse(
        trophies=[TrophyResponse(slug=t.slug, name=t.name, description=t.description, icon=t.icon) for t in catalogue]
    )


@router.get("/users/me/trophies", response_model=TrophyShelfResponse)
async def get_my_trophies(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Earned trophies with dates, and the ones still locked."""
    return await trophy_service.get_user_trophies(db, user.id)
