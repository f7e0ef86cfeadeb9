"""Progress pipeline events.

Every stage of the pipeline consumes and produces one of a closed set of
event variants. Each carries a ``kind`` literal so a ``ProgressEvent`` can be
discriminated after a JSON round trip (e.g. through Redis pub/sub).
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str


class AnswerSubmitted(_Event):
    """A learner submitted an answer to one question of a course."""

    kind: Literal["answer_submitted"] = "answer_submitted"
    course_id: str
    question_index: int = Field(ge=0)
    is_correct: bool
    is_first_attempt: bool


class CourseCompleted(_Event):
    """The last question of a course was answered."""

    kind: Literal["course_completed"] = "course_completed"
    course_id: str
    course_title: str
    accuracy: float
    completed_at: datetime


class StreakUpdated(_Event):
    """The streak evaluator processed an activity day."""

    kind: Literal["streak_updated"] = "streak_updated"
    current_streak: int
    max_streak: int
    activity_date: date
    changed: bool


class TrophyAwarded(_Event):
    """A trophy was granted for the first time."""

    kind: Literal["trophy_awarded"] = "trophy_awarded"
    trophy_slug: str
    trophy_name: str
    earned_at: datetime


ProgressEvent = Annotated[
    Union[AnswerSubmitted, CourseCompleted, StreakUpdated, TrophyAwarded],
    Field(discriminator="kind"),
]
