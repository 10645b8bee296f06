"""Request authentication boundary.

Sign-in is handled by an upstream session provider, which forwards the
authenticated user id in a trusted header (``AUTH.USER_HEADER``).
"""
from typing import Optional

from fastapi import HTTPException, Request
from pydantic import BaseModel

from core.settings import SETTINGS


class AuthenticatedUser(BaseModel):
    id: str


def _user_from_request(request: Request) -> Optional[AuthenticatedUser]:
    user_id = (request.headers.get(SETTINGS.AUTH.USER_HEADER) or "").strip()
    return AuthenticatedUser(id=user_id) if user_id else None


async def get_current_user(request: Request) -> AuthenticatedUser:
    user = _user_from_request(request)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


async def get_optional_user(request: Request) -> Optional[AuthenticatedUser]:
    return _user_from_request(request)
