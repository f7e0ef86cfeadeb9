"""Advice persistence. Gateway output is stored as returned."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from techpath.advice.client import AdviceClient
from techpath.db.models import BarriersAdviceResult, PathMatchResult
from techpath.errors import store_errors
from techpath.progress.day_utils import utc_now


def _match_score(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


async def analyze_and_store(
    db: AsyncSession,
    client: AdviceClient,
    user_id: str,
    experience: str,
    skills: str,
    target_role: str,
) -> PathMatchResult:
    analysis = await client.analyze_skills(experience, skills, target_role)
    row = PathMatchResult(
        user_id=user_id,
        experience=experience,
        skills=skills,
        target_role=target_role,
        transferable_skills=analysis.get("transferableSkills", []),
        skill_gaps=analysis.get("skillGaps", []),
        recommended_path=analysis.get("recommendedPath", ""),
        match_score=_match_score(analysis.get("matchScore")),
        encouragement=str(analysis.get("encouragement", "")),
        created_at=utc_now(),
    )
    with store_errors("store_path_match"):
        db.add(row)
        await db.commit()
    return row


async def barriers_and_store(
    db: AsyncSession,
    client: AdviceClient,
    user_id: str,
    background: str,
    background_category: str = "general",
    profile: dict[str, Any] | None = None,
) -> BarriersAdviceResult:
    advice = await client.breaking_barriers_advice(background)
    row = BarriersAdviceResult(
        user_id=user_id,
        background_category=background_category,
        experience=background,
        profile=profile or {},
        barriers=advice.get("barriers", []),
        strategies=advice.get("strategies", []),
        resources=advice.get("resources", []),
        encouragement=str(advice.get("encouragement", "")),
        created_at=utc_now(),
    )
    with store_errors("store_barriers_advice"):
        db.add(row)
        await db.commit()
    return row


async def list_path_matches(db: AsyncSession, user_id: str, limit: int = 10) -> list[PathMatchResult]:
    with store_errors("list_path_matches"):
        result = await db.execute(
            select(PathMatchResult)
            .where(PathMatchResult.user_id == user_id)
            .order_by(PathMatchResult.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars())


async def list_barriers_advice(db: AsyncSession, user_id: str, limit: int = 10) -> list[BarriersAdviceResult]:
    with store_errors("list_barriers_advice"):
        result = await db.execute(
            select(BarriersAdviceResult)
            .where(BarriersAdviceResult.user_id == user_id)
            .order_by(BarriersAdviceResult.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars())
