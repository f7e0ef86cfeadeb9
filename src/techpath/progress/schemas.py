"""Pydantic request/response models for progress, streak and trophy endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


# --- Course progress ---


class AnswerRequest(BaseModel):
    question_index: int = Field(ge=0)
    selected_option: str = Field(min_length=1, max_length=8)
    is_first_attempt: bool = True


class CourseProgressResponse(BaseModel):
    course_id: str
    questions_answered: int
    total_questions: int
    first_attempt_correct: int
    total_attempts: int
    accuracy: float
    completed_at: datetime | None = None
    started_at: datetime
    last_accessed: datetime


class StreakUpdateResponse(BaseModel):
    current_streak: int
    max_streak: int
    activity_date: date
    changed: bool


class AwardedTrophyResponse(BaseModel):
    slug: str
    name: str
    earned_at: datetime


class AnswerResponse(BaseModel):
    correct: bool
    correct_option: str
    explanation: str
    counted: bool
    already_completed: bool
    completed: bool
    progress: CourseProgressResponse
    streak: StreakUpdateResponse | None = None
    trophies_awarded: list[AwardedTrophyResponse] = []
    evaluation_pending: bool = False


class EvaluationResponse(BaseModel):
    streak: StreakUpdateResponse | None = None
    trophies_awarded: list[AwardedTrophyResponse] = []
    evaluation_pending: bool = False


class CourseOverviewEntry(BaseModel):
    course_id: str
    role: str
    difficulty: str
    title: str
    questions_answered: int
    total_questions: int
    first_attempt_correct: int
    total_attempts: int
    accuracy: float
    completed_at: datetime | None = None
    started_at: datetime
    last_accessed: datetime


class ProgressOverviewResponse(BaseModel):
    courses: list[CourseOverviewEntry]
    courses_started: int
    courses_completed: int
    overall_accuracy: float


# --- Streak ---


class StreakResponse(BaseModel):
    current_streak: int
    max_streak: int
    last_activity_date: date | None = None
    is_active_today: bool
    effective_streak: int


# --- Trophies ---


class TrophyResponse(BaseModel):
    slug: str
    name: str
    description: str
    icon: str


class EarnedTrophyResponse(TrophyResponse):
    earned_at: datetime


class TrophyCatalogueResponse(BaseModel):
    trophies: list[TrophyResponse]


class TrophyShelfResponse(BaseModel):
    earned: list[EarnedTrophyResponse]
    locked: list[TrophyResponse]
    total_available: int
    total_earned: int
