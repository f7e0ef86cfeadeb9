"""Friend codes and the friend graph.

Rules:
- Friend codes are 8-char A-Z0-9, server-generated with a cryptographic
  random source, assigned lazily on first use
- Codes are matched case-insensitively
- Adding a friend stores the edge in both directions; removing deletes both
- Friending yourself or an existing friend is rejected
- Suggestions are learners with progress in one of your roles
"""

from __future__ import annotations

import logging
import secrets
import string

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from techpath.db.models import Course, CourseProgress, Friendship, Streak, User, UserTrophy
from techpath.errors import InvalidState, NotFound, store_errors
from techpath.progress.day_utils import utc_now

logger = logging.getLogger(__name__)

FRIEND_CODE_CHARSET = string.ascii_uppercase + string.digits  # A-Z, 0-9
FRIEND_CODE_LENGTH = 8
RECENT_ACTIVITY_SIZE = 3
SUGGESTION_LIMIT = 5


def generate_friend_code() -> str:
    """Generate a cryptographically random 8-character friend code."""
    return "".join(secrets.choice(FRIEND_CODE_CHARSET) for _ in range(FRIEND_CODE_LENGTH))


def normalize_friend_code(code: str) -> str:
    return code.strip().upper()


async def generate_unique_friend_code(db: AsyncSession) -> str:
    """Generate a friend code that doesn't already exist in the database."""
    for _ in range(10):
        code = generate_friend_code()
        existing = await db.execute(select(User.id).where(User.friend_code == code))
        if existing.scalar_one_or_none() is None:
            return code
    raise RuntimeError("Failed to generate unique friend code after 10 attempts")


async def get_user(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound(f"User not found: {user_id}")
    return user


async def ensure_friend_code(db: AsyncSession, user_id: str) -> str:
    """Return the user's friend code, assigning one on first call."""
    with store_errors("ensure_friend_code"):
        user = await get_user(db, user_id)
        if user.friend_code:
            return user.friend_code

        user.friend_code = await generate_unique_friend_code(db)
        user.updated_at = utc_now()
        await db.commit()
    logger.info("Assigned friend code to %s", user_id)
    return user.friend_code


async def are_friends(db: AsyncSession, user_id: str, friend_id: str) -> bool:
    result = await db.execute(
        select(Friendship.id).where(Friendship.user_id == user_id, Friendship.friend_id == friend_id)
    )
    return result.scalar_one_or_none() is not None


async def add_friend_by_code(db: AsyncSession, user_id: str, friend_code: str) -> User:
    """Befriend the owner of ``friend_code``. Returns the friend."""
    code = normalize_friend_code(friend_code)
    with store_errors("add_friend"):
        result = await db.execute(select(User).where(User.friend_code == code))
        friend = result.scalar_one_or_none()
        if friend is None:
            raise NotFound("Invalid friend code")
        if friend.id == user_id:
            raise InvalidState("You cannot add yourself as a friend")
        if await are_friends(db, user_id, friend.id):
            raise InvalidState("You are already friends")

        now = utc_now()
        db.add_all(
            [
                Friendship(user_id=user_id, friend_id=friend.id, created_at=now),
                Friendship(user_id=friend.id, friend_id=user_id, created_at=now),
            ]
        )
        try:
            await db.commit()
        except IntegrityError:
            # A concurrent request stored the pair first
            await db.rollback()
            raise InvalidState("You are already friends") from None

    logger.info("Friendship created: %s <-> %s", user_id, friend.id)
    return friend


async def remove_friend(db: AsyncSession, user_id: str, friend_id: str) -> None:
    """Delete the friendship in both directions."""
    with store_errors("remove_friend"):
        if not await are_friends(db, user_id, friend_id):
            raise NotFound("Friend not found")
        await db.execute(
            delete(Friendship).where(
                ((Friendship.user_id == user_id) & (Friendship.friend_id == friend_id))
                | ((Friendship.user_id == friend_id) & (Friendship.friend_id == user_id))
            )
        )
        await db.commit()
    logger.info("Friendship removed: %s <-> %s", user_id, friend_id)


async def list_friend_ids(db: AsyncSession, user_id: str) -> list[str]:
    result = await db.execute(select(Friendship.friend_id).where(Friendship.user_id == user_id))
    return list(result.scalars())


async def list_friends(db: AsyncSession, user_id: str) -> list[dict]:
    """Friends with their progress stats, most trophies first."""
    with store_errors("list_friends"):
        friend_ids = await list_friend_ids(db, user_id)
        if not friend_ids:
            return []

        users = (await db.execute(select(User).where(User.id.in_(friend_ids)))).scalars().all()

        completed = await db.execute(
            select(CourseProgress.user_id, func.count(CourseProgress.id))
            .where(CourseProgress.user_id.in_(friend_ids), CourseProgress.completed_at.is_not(None))
            .group_by(CourseProgress.user_id)
        )
        completed_map = dict(completed.all())

        trophies = await db.execute(
            select(UserTrophy.user_id, func.count(UserTrophy.id))
            .where(UserTrophy.user_id.in_(friend_ids))
            .group_by(UserTrophy.user_id)
        )
        trophy_map = dict(trophies.all())

        streaks = await db.execute(select(Streak).where(Streak.user_id.in_(friend_ids)))
        streak_map = {s.user_id: s for s in streaks.scalars()}

        recent = await db.execute(
            select(CourseProgress.user_id, Course.title)
            .join(Course, Course.id == CourseProgress.course_id)
            .where(CourseProgress.user_id.in_(friend_ids), CourseProgress.completed_at.is_not(None))
            .order_by(CourseProgress.completed_at.desc(), Course.id)
        )
        recent_map: dict[str, list[str]] = {}
        for friend_id, title in recent.all():
            titles = recent_map.setdefault(friend_id, [])
            if len(titles) < RECENT_ACTIVITY_SIZE:
                titles.append(title)

    friends = []
    for u in users:
        streak = streak_map.get(u.id)
        friends.append(
            {
                "user_id": u.id,
                "full_name": u.full_name,
                "friend_code": u.friend_code,
                "courses_completed": completed_map.get(u.id, 0),
                "trophies": trophy_map.get(u.id, 0),
                "current_streak": streak.current_streak if streak else 0,
                "max_streak": streak.max_streak if streak else 0,
                "recent_activity": recent_map.get(u.id, []),
            }
        )
    friends.sort(key=lambda f: (-f["trophies"], -f["courses_completed"], f["user_id"]))
    return friends


async def suggest_friends(db: AsyncSession, user_id: str, limit: int = SUGGESTION_LIMIT) -> list[dict]:
    """Learners with progress in the same roles, most recently active first.

    Existing friends and the user are excluded. Nothing is suggested until
    the user has started a course.
    """
    with store_errors("suggest_friends"):
        my_roles = (
            select(Course.role)
            .join(CourseProgress, CourseProgress.course_id == Course.id)
            .where(CourseProgress.user_id == user_id)
        )
        excluded = [user_id, *await list_friend_ids(db, user_id)]
        result = await db.execute(
            select(User)
            .join(CourseProgress, CourseProgress.user_id == User.id)
            .join(Course, Course.id == CourseProgress.course_id)
            .where(Course.role.in_(my_roles), User.id.not_in(excluded))
            .group_by(User.id)
            .order_by(func.max(CourseProgress.last_accessed).desc(), User.id)
            .limit(limit)
        )
        users = result.scalars().all()

    return [{"user_id": u.id, "full_name": u.full_name, "friend_code": u.friend_code} for u in users]
