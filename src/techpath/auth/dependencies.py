"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from techpath.auth.jwt import verify_token
from techpath.database import get_session
from techpath.db.models import User
from techpath.errors import store_errors
from techpath.progress.day_utils import utc_now

_bearer = HTTPBearer()


async def get_or_create_user(db: AsyncSession, user_id: str, email: str | None = None) -> User:
    """Load the user row, creating it on the first authenticated request."""
    with store_errors("get_or_create_user"):
        user = await db.get(User, user_id)
        if user is not None:
            return user

        now = utc_now()
        user = User(id=user_id, email=email, created_at=now, updated_at=now)
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            # Concurrent first request created it
            await db.rollback()
            user = await db.get(User, user_id)
            if user is None:
                raise
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """Verify the bearer token and return the User. Raises 401 on failure."""
    try:
        payload = verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    return await get_or_create_user(db, str(payload["sub"]), payload.get("email"))
