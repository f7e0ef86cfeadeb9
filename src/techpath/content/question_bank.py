"""Question bank: the ordered questions of each course.

The engine never sees answer text; it only needs the question count of a
course and whether a chosen option is correct.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from techpath.content.catalogue import COURSE_CATALOGUE
from techpath.errors import NotFound


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    prompt: str
    options: dict[str, str]
    answer: str
    explanation: str
    points: int = 10


class CourseContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    role: str
    difficulty: str
    title: str
    description: str
    order_index: int
    questions: tuple[Question, ...]

    @property
    def total_questions(self) -> int:
        return len(self.questions)


@lru_cache
def _bank() -> dict[str, CourseContent]:
    bank: dict[str, CourseContent] = {}
    for entry in COURSE_CATALOGUE:
        questions = tuple(Question(index=i, **q) for i, q in enumerate(entry["questions"]))
        bank[entry["id"]] = CourseContent(**{**entry, "questions": questions})
    return bank


def list_courses() -> list[CourseContent]:
    """All courses, grouped by role then ordered easy to hard."""
    return sorted(_bank().values(), key=lambda c: (c.role, c.order_index))


def get_course_content(course_id: str) -> CourseContent:
    try:
        return _bank()[course_id]
    except KeyError:
        raise NotFound(f"Course not found: {course_id}") from None


def get_questions(course_id: str) -> tuple[Question, ...]:
    return get_course_content(course_id).questions


def get_question(course_id: str, index: int) -> Question:
    questions = get_questions(course_id)
    if index < 0 or index >= len(questions):
        raise NotFound(f"Question {index} not found in course {course_id}")
    return questions[index]


def total_questions(course_id: str) -> int:
    return get_course_content(course_id).total_questions


def check_answer(course_id: str, index: int, choice: str) -> bool:
    """Whether ``choice`` (an option key such as "b") is the correct answer."""
    return get_question(course_id, index).answer == choice.strip().lower()
