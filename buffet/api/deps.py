"""
FastAPI dependencies — auth guards and database session.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from buffet.core.config import settings
from buffet.core.exceptions import AuthRedirect
from buffet.core.security import password_hasher, session_codec
from buffet.db.session import async_session_factory
from buffet.models.user import User
from buffet.repositories.users import UserRepository
from buffet.services.auth import AuthService, Forbidden, Unauthenticated


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(
        UserRepository(db),
        password_hasher,
        session_codec,
        login_path=settings.LOGIN_PATH,
    )


async def require_user(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Resolve the signed-in user or redirect to the login page."""
    result = await auth.require_user(request)
    if isinstance(result, Unauthenticated):
        raise AuthRedirect(settings.LOGIN_PATH)
    return result.user


async def require_manager(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Only allow managers; employees are sent back to the landing page."""
    result = await auth.require_manager(request)
    if isinstance(result, Unauthenticated):
        raise AuthRedirect(settings.LOGIN_PATH)
    if isinstance(result, Forbidden):
        raise AuthRedirect(settings.LANDING_PATH)
    return result.user
