"""Pydantic request/response models for the advice endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class PathMatchRequest(BaseModel):
    experience: str = Field(min_length=1, max_length=4000)
    skills: str = Field(min_length=1, max_length=4000)
    target_role: str = Field(min_length=1, max_length=128)


class PathMatchResponse(BaseModel):
    id: int
    target_role: str
    transferable_skills: Any
    skill_gaps: Any
    recommended_path: Any
    match_score: int
    encouragement: str
    created_at: datetime


class BarriersRequest(BaseModel):
    background: str = Field(min_length=1, max_length=4000)
    background_category: str = Field("general", max_length=64)
    profile: dict[str, Any] = {}


class BarriersResponse(BaseModel):
    id: int
    background_category: str
    barriers: Any
    strategies: Any
    resources: Any
    encouragement: str
    created_at: datetime
