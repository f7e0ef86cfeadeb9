"""Pydantic request/response models for friends and leaderboards."""

from __future__ import annotations

from pydantic import BaseModel, Field


class FriendCodeResponse(BaseModel):
    friend_code: str


class AddFriendRequest(BaseModel):
    friend_code: str = Field(min_length=8, max_length=8)


class FriendResponse(BaseModel):
    user_id: str
    full_name: str | None = None
    friend_code: str | None = None
    courses_completed: int = 0
    trophies: int = 0
    current_streak: int = 0
    max_streak: int = 0
    recent_activity: list[str] = []


class FriendListResponse(BaseModel):
    friends: list[FriendResponse]
    total: int


class FriendSuggestion(BaseModel):
    user_id: str
    full_name: str | None = None
    friend_code: str | None = None


class FriendSuggestionsResponse(BaseModel):
    suggestions: list[FriendSuggestion]


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    full_name: str | None = None
    score: int
    is_current_user: bool = False


class LeaderboardResponse(BaseModel):
    board: str
    entries: list[LeaderboardEntry]
    total: int
    my_rank: int | None = None


class CommunityStatsResponse(BaseModel):
    total_users: int
    courses_completed: int
    trophies_earned: int
    active_streak_days: int
