"""Friends and leaderboard endpoints."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from techpath.auth.dependencies import get_current_user
from techpath.database import get_session
from techpath.db.models import User
from techpath.social import friends_service, leaderboard_service
from techpath.social.schemas import (
    AddFriendRequest,
    CommunityStatsResponse,
    FriendCodeResponse,
    FriendListResponse,
    FriendResponse,
    FriendSuggestion,
    FriendSuggestionsResponse,
    LeaderboardResponse,
)

router = APIRouter(prefix="/api/v1", tags=["Social"])


# ── Friends ──


@router.get("/users/me/friend-code", response_model=FriendCodeResponse)
async def get_my_friend_code(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """The code other learners use to add you; assigned on first request."""
    code = await friends_service.ensure_friend_code(db, user.id)
    return FriendCodeResponse(friend_code=code)


@router.get("/friends", response_model=FriendListResponse)
async def list_friends(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    friends = await friends_service.list_friends(db, user.id)
    return FriendListResponse(friends=[FriendResponse(**f) for f in friends], total=len(friends))


@router.get("/friends/suggestions", response_model=FriendSuggestionsResponse)
async def suggest_friends(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Learners working on the same roles who are not friends yet."""
    suggestions = await friends_service.suggest_friends(db, user.id)
    return FriendSuggestionsResponse(suggestions=[FriendSuggestion(**s) for s in suggestions])


@router.post("/friends", response_model=FriendResponse, status_code=status.HTTP_201_CREATED)
async def add_friend(
    body: AddFriendRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Add a friend by their friend code (case-insensitive)."""
    friend = await friends_service.add_friend_by_code(db, user.id, body.friend_code)
    return FriendResponse(user_id=friend.id, full_name=friend.full_name, friend_code=friend.friend_code)


@router.delete("/friends/{friend_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_friend(
    friend_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await friends_service.remove_friend(db, user.id, friend_id)


# ── Leaderboards ──


@router.get("/leaderboards/{board}", response_model=LeaderboardResponse)
async def get_leaderboard(
    board: Literal["streaks", "trophies", "courses"],
    limit: int = Query(leaderboard_service.LEADERBOARD_SIZE, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await leaderboard_service.get_leaderboard(db, board, limit=limit, current_user_id=user.id)


@router.get("/community/stats", response_model=CommunityStatsResponse)
async def get_community_stats(db: AsyncSession = Depends(get_session)):
    return await leaderboard_service.get_community_stats(db)
