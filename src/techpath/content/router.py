"""Course catalogue endpoints (public)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from techpath.content import question_bank
from techpath.content.schemas import (
    CourseDetailResponse,
    CourseListResponse,
    CourseResponse,
    QuestionResponse,
)
from techpath.database import get_session
from techpath.db.models import Course
from techpath.errors import NotFound

router = APIRouter(prefix="/api/v1", tags=["Courses"])


def _course_response(course: Course) -> CourseResponse:
    return CourseResponse(
        id=course.id,
        role=course.role,
        difficulty=course.difficulty,
        title=course.title,
        description=course.description,
        order_index=course.order_index,
        total_questions=course.total_questions,
    )


@router.get("/courses", response_model=CourseListResponse)
async def list_courses(
    role: str | None = Query(None, description="Only courses for this role"),
    db: AsyncSession = Depends(get_session),
):
    """List courses, grouped by role and ordered easy to hard."""
    stmt = select(Course).order_by(Course.role, Course.order_index)
    if role:
        stmt = stmt.where(Course.role == role)
    courses = (await db.execute(stmt)).scalars().all()

    roles = (await db.execute(select(Course.role).distinct().order_by(Course.role))).scalars().all()
    return CourseListResponse(
        courses=[_course_response(c) for c in courses],
        roles=list(roles),
    )


@router.get("/courses/{course_id}", response_model=CourseDetailResponse)
async def get_course(course_id: str, db: AsyncSession = Depends(get_session)):
    """Course detail with its questions (without answers)."""
    course = await db.get(Course, course_id)
    if course is None:
        raise NotFound(f"Course not found: {course_id}")

    questions = question_bank.get_questions(course_id)
    return CourseDetailResponse(
        **_course_response(course).model_dump(),
        questions=[
            QuestionResponse(index=q.index, prompt=q.prompt, options=q.options, points=q.points)
            for q in questions
        ],
    )
