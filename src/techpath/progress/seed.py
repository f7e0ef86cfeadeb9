"""Catalogue seed data: courses from the question bank, plus the trophy set."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from techpath.content.question_bank import list_courses
from techpath.database import dialect_insert
from techpath.db.models import Course, Trophy
from techpath.progress.day_utils import utc_now

logger = logging.getLogger(__name__)

TROPHY_SEED_DATA: list[dict] = [
    # Course milestones
    {
        "slug": "first_steps",
        "name": "First Steps",
        "description": "Complete your first course",
        "icon": "\U0001f3af",
        "criteria_type": "courses_completed",
        "criteria_value": {"count": 1},
        "sort_order": 1,
    },
    {
        "slug": "course_collector",
        "name": "Course Collector",
        "description": "Complete 5 courses",
        "icon": "\U0001f4da",
        "criteria_type": "courses_completed",
        "criteria_value": {"count": 5},
        "sort_order": 2,
    },
    {
        "slug": "perfectionist",
        "name": "Perfectionist",
        "description": "Answer every question of a course right on the first try",
        "icon": "\U0001f48e",
        "criteria_type": "perfect_course",
        "criteria_value": {},
        "sort_order": 3,
    },
    # Role mastery
    {
        "slug": "role_halfway",
        "name": "Halfway There",
        "description": "Complete half of the courses for one role",
        "icon": "\U0001f6e4",
        "criteria_type": "role_completion",
        "criteria_value": {"percent": 50},
        "sort_order": 4,
    },
    {
        "slug": "role_master",
        "name": "Role Master",
        "description": "Complete every course for one role",
        "icon": "\U0001f451",
        "criteria_type": "role_completion",
        "criteria_value": {"percent": 100},
        "sort_order": 5,
    },
    {
        "slug": "explorer",
        "name": "Explorer",
        "description": "Complete courses in 3 different roles",
        "icon": "\U0001f9ed",
        "criteria_type": "roles_explored",
        "criteria_value": {"count": 3},
        "sort_order": 6,
    },
    # Streaks
    {
        "slug": "week_warrior",
        "name": "Week Warrior",
        "description": "Keep a 7-day learning streak",
        "icon": "\U0001f525",
        "criteria_type": "streak",
        "criteria_value": {"days": 7},
        "sort_order": 7,
    },
    {
        "slug": "monthly_master",
        "name": "Monthly Master",
        "description": "Keep a 30-day learning streak",
        "icon": "\U0001f4c5",
        "criteria_type": "streak",
        "criteria_value": {"days": 30},
        "sort_order": 8,
    },
    # Time of day
    {
        "slug": "early_bird",
        "name": "Early Bird",
        "description": "Complete a course before 9 AM",
        "icon": "\U0001f305",
        "criteria_type": "completed_before_hour",
        "criteria_value": {"hour": 9},
        "sort_order": 9,
    },
    {
        "slug": "night_owl",
        "name": "Night Owl",
        "description": "Complete a course after 10 PM",
        "icon": "\U0001f989",
        "criteria_type": "completed_from_hour",
        "criteria_value": {"hour": 22},
        "sort_order": 10,
    },
    # Social, evaluated after every other trophy
    {
        "slug": "top_of_the_class",
        "name": "Top of the Class",
        "description": "Hold more trophies than any of your friends",
        "icon": "\U0001f3c6",
        "criteria_type": "friends_top_trophies",
        "criteria_value": {},
        "sort_order": 100,
    },
]


async def seed_catalogue(db: AsyncSession) -> tuple[int, int]:
    """Upsert courses and trophies. Returns (courses, trophies) seeded."""
    insert = dialect_insert(db)
    now = utc_now()

    courses = list_courses()
    for content in courses:
        stmt = insert(Course).values(
            id=content.id,
            role=content.role,
            difficulty=content.difficulty,
            title=content.title,
            description=content.description,
            order_index=content.order_index,
            total_questions=content.total_questions,
            created_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={
                "role": stmt.excluded.role,
                "difficulty": stmt.excluded.difficulty,
                "title": stmt.excluded.title,
                "description": stmt.excluded.description,
                "order_index": stmt.excluded.order_index,
                "total_questions": stmt.excluded.total_questions,
            },
        )
        await db.execute(stmt)

    for trophy_data in TROPHY_SEED_DATA:
        stmt = insert(Trophy).values(**trophy_data, created_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=["slug"],
            set_={
                "name": stmt.excluded.name,
                "description": stmt.excluded.description,
                "icon": stmt.excluded.icon,
                "criteria_type": stmt.excluded.criteria_type,
                "criteria_value": stmt.excluded.criteria_value,
                "sort_order": stmt.excluded.sort_order,
            },
        )
        await db.execute(stmt)

    await db.commit()
    logger.info("Seeded %d courses and %d trophy definitions", len(courses), len(TROPHY_SEED_DATA))
    return len(courses), len(TROPHY_SEED_DATA)
