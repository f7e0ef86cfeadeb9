"""Trophy award service with duplicate prevention."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from techpath.db.models import Trophy, UserTrophy
from techpath.errors import NotFound, store_errors
from techpath.progress.day_utils import as_utc, utc_now
from techpath.progress.events import TrophyAwarded

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrophySpec:
    """Detached copy of a catalogue row; survives session rollbacks."""

    id: int
    slug: str
    name: str
    description: str
    icon: str
    criteria_type: str
    criteria_value: dict[str, Any] = field(default_factory=dict)
    sort_order: int = 0

    @classmethod
    def from_model(cls, trophy: Trophy) -> TrophySpec:
        return cls(
            id=trophy.id,
            slug=trophy.slug,
            name=trophy.name,
            description=trophy.description,
            icon=trophy.icon,
            criteria_type=trophy.criteria_type,
            criteria_value=dict(trophy.criteria_value or {}),
            sort_order=trophy.sort_order,
        )


async def list_trophies(db: AsyncSession) -> list[TrophySpec]:
    """Whole catalogue in evaluation order."""
    result = await db.execute(select(Trophy).order_by(Trophy.sort_order, Trophy.id))
    return [TrophySpec.from_model(t) for t in result.scalars()]


async def get_trophy_by_slug(db: AsyncSession, slug: str) -> Trophy | None:
    """Fetch a trophy definition by slug."""
    result = await db.execute(select(Trophy).where(Trophy.slug == slug))
    return result.scalar_one_or_none()


async def has_trophy(db: AsyncSession, user_id: str, trophy_id: int) -> bool:
    """Check if user already holds a specific trophy."""
    result = await db.execute(
        select(UserTrophy.id).where(
            UserTrophy.user_id == user_id,
            UserTrophy.trophy_id == trophy_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def held_trophy_ids(db: AsyncSession, user_id: str) -> set[int]:
    result = await db.execute(select(UserTrophy.trophy_id).where(UserTrophy.user_id == user_id))
    return set(result.scalars())


async def count_trophies(db: AsyncSession, user_ids: list[str]) -> dict[str, int]:
    """Trophy count per user; users without trophies map to 0."""
    counts = dict.fromkeys(user_ids, 0)
    if not user_ids:
        return counts
    result = await db.execute(
        select(UserTrophy.user_id, func.count(UserTrophy.id))
        .where(UserTrophy.user_id.in_(user_ids))
        .group_by(UserTrophy.user_id)
    )
    for user_id, count in result.all():
        counts[user_id] = count
    return counts


async def grant_trophy(db: AsyncSession, user_id: str, trophy: TrophySpec) -> TrophyAwarded | None:
    """Grant a trophy to a user.

    Returns the TrophyAwarded event, or None if the user already held it.
    Two evaluations racing on the same (user, trophy) both pass the check;
    the UNIQUE constraint lets exactly one insert through and the loser's
    IntegrityError is treated as "already held".
    """
    if await has_trophy(db, user_id, trophy.id):
        return None

    now = utc_now()
    db.add(UserTrophy(user_id=user_id, trophy_id=trophy.id, earned_at=now))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("Trophy %s already granted to %s by a concurrent evaluation", trophy.slug, user_id)
        return None

    logger.info("Trophy %s granted to %s", trophy.slug, user_id)
    return TrophyAwarded(
        user_id=user_id,
        trophy_slug=trophy.slug,
        trophy_name=trophy.name,
        earned_at=now,
    )


async def award_trophy(db: AsyncSession, user_id: str, trophy_slug: str) -> TrophyAwarded | None:
    """Grant a trophy by slug. NotFound if the slug is not in the catalogue."""
    with store_errors("award_trophy"):
        trophy = await get_trophy_by_slug(db, trophy_slug)
        if trophy is None:
            raise NotFound(f"Trophy not found: {trophy_slug}")
        return await grant_trophy(db, user_id, TrophySpec.from_model(trophy))


async def get_user_trophies(db: AsyncSession, user_id: str) -> dict:
    """Trophy shelf: earned trophies with dates, and the ones still locked."""
    with store_errors("get_user_trophies"):
        catalogue = await list_trophies(db)
        result = await db.execute(select(UserTrophy).where(UserTrophy.user_id == user_id))
        earned_at = {ut.trophy_id: as_utc(ut.earned_at) for ut in result.scalars()}

    earned = []
    locked = []
    for trophy in catalogue:
        entry = {
            "slug": trophy.slug,
            "name": trophy.name,
            "description": trophy.description,
            "icon": trophy.icon,
        }
        if trophy.id in earned_at:
            earned.append({**entry, "earned_at": earned_at[trophy.id]})
        else:
            locked.append(entry)
    return {
        "earned": earned,
        "locked": locked,
        "total_available": len(catalogue),
        "total_earned": len(earned),
    }
