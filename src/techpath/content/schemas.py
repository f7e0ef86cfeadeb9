"""Pydantic response models for the course catalogue."""

from __future__ import annotations

from pydantic import BaseModel


class CourseResponse(BaseModel):
    id: str
    role: str
    difficulty: str
    title: str
    description: str
    order_index: int
    total_questions: int


class CourseListResponse(BaseModel):
    courses: list[CourseResponse]
    roles: list[str]


class QuestionResponse(BaseModel):
    """A question as shown to the learner; the answer key is withheld."""

    index: int
    prompt: str
    options: dict[str, str]
    points: int


class CourseDetailResponse(CourseResponse):
    questions: list[QuestionResponse]
