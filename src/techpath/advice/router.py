"""Career advice endpoints (path matching, breaking barriers)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from techpath.advice import service
from techpath.advice.client import AdviceClient
from techpath.advice.schemas import BarriersRequest, BarriersResponse, PathMatchRequest, PathMatchResponse
from techpath.auth.dependencies import get_current_user
from techpath.database import get_session
from techpath.db.models import BarriersAdviceResult, PathMatchResult, User
from techpath.progress.day_utils import as_utc

router = APIRouter(prefix="/api/v1/advice", tags=["Advice"])


def get_advice_client() -> AdviceClient:
    return AdviceClient()


def _path_match(row: PathMatchResult) -> PathMatchResponse:
    return PathMatchResponse(
        id=row.id,
        target_role=row.target_role,
        transferable_skills=row.transferable_skills,
        skill_gaps=row.skill_gaps,
        recommended_path=row.recommended_path,
        match_score=row.match_score,
        encouragement=row.encouragement,
        created_at=as_utc(row.created_at),
    )


def _barriers(row: BarriersAdviceResult) -> BarriersResponse:
    return BarriersResponse(
        id=row.id,
        background_category=row.background_category,
        barriers=row.barriers,
        strategies=row.strategies,
        resources=row.resources,
        encouragement=row.encouragement,
        created_at=as_utc(row.created_at),
    )


@router.post("/path-match", response_model=PathMatchResponse, status_code=status.HTTP_201_CREATED)
async def create_path_match(
    body: PathMatchRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    client: AdviceClient = Depends(get_advice_client),
):
    """Analyse how the learner's background maps onto a target role."""
    row = await service.analyze_and_store(db, client, user.id, body.experience, body.skills, body.target_role)
    return _path_match(row)


@router.get("/path-match", response_model=list[PathMatchResponse])
async def list_path_matches(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return [_path_match(r) for r in await service.list_path_matches(db, user.id)]


@router.post("/breaking-barriers", response_model=BarriersResponse, status_code=status.HTTP_201_CREATED)
async def create_barriers_advice(
    body: BarriersRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    client: AdviceClient = Depends(get_advice_client),
):
    row = await service.barriers_and_store(
        db, client, user.id, body.background, body.background_category, body.profile
    )
    return _barriers(row)


@router.get("/breaking-barriers", response_model=list[BarriersResponse])
async def list_barriers_advice(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return [_barriers(r) for r in await service.list_barriers_advice(db, user.id)]
