"""Leaderboards and community stats: read-only views over progress data.

Ranking uses competition order: equal scores share a rank and the next
distinct score skips ahead (1, 1, 3). Ties are listed by user id so the
order is deterministic.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from techpath.db.models import CourseProgress, Streak, User, UserTrophy
from techpath.errors import store_errors

LEADERBOARD_SIZE = 50
BOARDS = ("streaks", "trophies", "courses")


def rank_entries(rows: list[tuple[str, int]]) -> list[dict[str, Any]]:
    """Rank (user_id, score) rows, highest score first."""
    ordered = sorted(rows, key=lambda r: (-r[1], r[0]))
    ranked = []
    prev_score: int | None = None
    rank = 0
    for position, (user_id, score) in enumerate(ordered, start=1):
        if score != prev_score:
            rank = position
            prev_score = score
        ranked.append({"rank": rank, "user_id": user_id, "score": score})
    return ranked


async def _scores(db: AsyncSession, board: str) -> list[tuple[str, int]]:
    if board == "streaks":
        stmt = select(Streak.user_id, Streak.max_streak).where(Streak.max_streak > 0)
    elif board == "trophies":
        stmt = select(UserTrophy.user_id, func.count(UserTrophy.id)).group_by(UserTrophy.user_id)
    elif board == "courses":
        stmt = (
            select(CourseProgress.user_id, func.count(CourseProgress.id))
            .where(CourseProgress.completed_at.is_not(None))
            .group_by(CourseProgress.user_id)
        )
    else:
        raise ValueError(f"Unknown leaderboard: {board}")
    result = await db.execute(stmt)
    return [(user_id, int(score)) for user_id, score in result.all()]


async def get_leaderboard(
    db: AsyncSession,
    board: str,
    limit: int = LEADERBOARD_SIZE,
    current_user_id: str | None = None,
) -> dict:
    """Top ``limit`` entries of one board, enriched with display names."""
    with store_errors("get_leaderboard"):
        ranked = rank_entries(await _scores(db, board))
        top = ranked[:limit]

        user_ids = [e["user_id"] for e in top]
        names: dict[str, str | None] = {}
        if user_ids:
            result = await db.execute(select(User.id, User.full_name).where(User.id.in_(user_ids)))
            names = dict(result.all())

    for entry in top:
        entry["full_name"] = names.get(entry["user_id"])
        entry["is_current_user"] = entry["user_id"] == current_user_id

    my_entry = None
    if current_user_id is not None:
        my_entry = next((e for e in ranked if e["user_id"] == current_user_id), None)

    return {
        "board": board,
        "entries": top,
        "total": len(ranked),
        "my_rank": my_entry["rank"] if my_entry else None,
    }


async def get_community_stats(db: AsyncSession) -> dict:
    with store_errors("get_community_stats"):
        users = await db.scalar(select(func.count(User.id)))
        completed = await db.scalar(
            select(func.count(CourseProgress.id)).where(CourseProgress.completed_at.is_not(None))
        )
        trophies = await db.scalar(select(func.count(UserTrophy.id)))
        streak_days = await db.scalar(select(func.coalesce(func.sum(Streak.current_streak), 0)))
    return {
        "total_users": users or 0,
        "courses_completed": completed or 0,
        "trophies_earned": trophies or 0,
        "active_streak_days": int(streak_days or 0),
    }
