"""
Authentication & authorization service.

Login, manager/employee registration, cookie session issue/teardown and
the per-request ``require_user`` / ``require_manager`` guards. Guards do
not raise: they return an ``AuthResult`` and the HTTP layer decides which
redirect each variant becomes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from fastapi import Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import IntegrityError

from buffet.core.exceptions import AuthorizationError
from buffet.core.security import PasswordHasher, SessionCodec
from buffet.models.user import Role, User
from buffet.repositories.users import UserRepository

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "userId"


# ── Authorization results ───────────────────────────────────────────
@dataclass(frozen=True)
class Authorized:
    user: User


@dataclass(frozen=True)
class Unauthenticated:
    pass


@dataclass(frozen=True)
class Forbidden:
    user: User


AuthResult = Union[Authorized, Unauthenticated, Forbidden]


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        codec: SessionCodec,
        *,
        login_path: str = "/login",
    ) -> None:
        self._users = users
        self._hasher = hasher
        self._codec = codec
        self._login_path = login_path

    # ── Credentials ──────────────────────────────────────────────────
    async def login(self, email: str, password: str) -> User | None:
        """Return the user for a correct email/password pair, else ``None``.

        An unknown email and a wrong password are indistinguishable to the
        caller.
        """
        user = await self._users.find_by_email(email)
        if user is None:
            return None
        if not self._hasher.verify(password, user.hashed_password):
            return None
        return user

    async def register_manager(self, email: str, password: str) -> User | None:
        if await self._users.find_by_email(email) is not None:
            return None
        user = await self._create(email, password, Role.MANAGER, manager_id=None)
        if user is not None:
            logger.info("Manager registered: %s", user.email)
        return user

    async def register_employee(
        self, manager_id: str, email: str, password: str
    ) -> User | None:
        manager = await self._users.find_by_id(manager_id)
        if manager is None or manager.role != Role.MANAGER.value:
            raise AuthorizationError("Only managers can create employees")

        if await self._users.find_by_email(email) is not None:
            return None
        user = await self._create(email, password, Role.EMPLOYEE, manager_id=manager.id)
        if user is not None:
            logger.info("Employee %s created by manager %s", user.email, manager.email)
        return user

    async def _create(
        self, email: str, password: str, role: Role, *, manager_id: str | None
    ) -> User | None:
        user = User(
            email=email,
            hashed_password=self._hasher.hash(password),
            role=role.value,
            manager_id=manager_id,
        )
        try:
            return await self._users.insert(user)
        except IntegrityError:
            if await self._users.find_by_email(email) is None:
                # Some other constraint failed
                raise
            # Lost a race against a concurrent registration for this email
            logger.warning("Duplicate registration rejected by store: %s", email)
            return None

    # ── Sessions ─────────────────────────────────────────────────────
    def create_session(self, user_id: str, redirect_to: str) -> RedirectResponse:
        response = RedirectResponse(url=redirect_to, status_code=status.HTTP_303_SEE_OTHER)
        self._codec.commit(response, {SESSION_USER_KEY: user_id})
        return response

    def current_session(self, request: Request) -> dict[str, str]:
        return self._codec.read(request.cookies.get(self._codec.cookie_name))

    def logout(self, _request: Request) -> RedirectResponse:
        response = RedirectResponse(
            url=self._login_path, status_code=status.HTTP_303_SEE_OTHER
        )
        self._codec.destroy(response)
        return response

    # ── Guards ───────────────────────────────────────────────────────
    async def require_user(self, request: Request) -> Authorized | Unauthenticated:
        user_id = self.current_session(request).get(SESSION_USER_KEY)
        if not user_id:
            return Unauthenticated()

        user = await self._users.find_by_id(user_id)
        if user is None:
            # Valid cookie for a deleted account
            return Unauthenticated()
        return Authorized(user)

    async def require_manager(self, request: Request) -> AuthResult:
        result = await self.require_user(request)
        if isinstance(result, Unauthenticated):
            return result
        if result.user.role != Role.MANAGER.value:
            return Forbidden(result.user)
        return result
