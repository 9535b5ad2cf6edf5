"""Tests for AuthService: credentials, registration and guards."""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from buffet.core.exceptions import AuthorizationError
from buffet.core.security import PasswordHasher, SessionCodec
from buffet.models.user import Role
from buffet.repositories.users import UserRepository
from buffet.services.auth import (Authorized, AuthService, Forbidden,
                                  Unauthenticated)

codec = SessionCodec(["service-secret"], cookie_name="buffet_session")


def _service(db: AsyncSession) -> AuthService:
    return AuthService(UserRepository(db), PasswordHasher(rounds=4), codec)


def _request(token: str | None = None) -> Request:
    headers = []
    if token is not None:
        headers.append((b"cookie", f"buffet_session={token}".encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


@pytest.mark.asyncio
async def test_login_returns_user_only_for_correct_password(db_session: AsyncSession):
    auth = _service(db_session)
    manager = await auth.register_manager("m@x.com", "password1")
    assert manager is not None

    assert (await auth.login("m@x.com", "password1")).id == manager.id
    wrong = await auth.login("m@x.com", "not-the-password")
    unknown = await auth.login("nobody@x.com", "password1")
    assert wrong is None and unknown is None


@pytest.mark.asyncio
async def test_email_is_case_sensitive_as_stored(db_session: AsyncSession):
    auth = _service(db_session)
    await auth.register_manager("Chef@x.com", "password1")
    assert await auth.login("chef@x.com", "password1") is None
    assert await auth.login("Chef@x.com", "password1") is not None


@pytest.mark.asyncio
async def test_register_manager_twice_creates_one_user(db_session: AsyncSession):
    auth = _service(db_session)
    first = await auth.register_manager("m@x.com", "password1")
    second = await auth.register_manager("m@x.com", "password9")

    assert first is not None
    assert second is None
    assert first.role == Role.MANAGER.value
    assert first.manager_id is None
    assert first.hashed_password != "password1"
    # The original password still works
    assert await auth.login("m@x.com", "password1") is not None


@pytest.mark.asyncio
async def test_register_employee_links_to_manager(db_session: AsyncSession):
    auth = _service(db_session)
    manager = await auth.register_manager("m@x.com", "password1")
    employee = await auth.register_employee(manager.id, "e@x.com", "password2")

    assert employee.role == Role.EMPLOYEE.value
    assert employee.manager_id == manager.id
    assert employee.tenant_id == manager.id
    assert await auth.register_employee(manager.id, "e@x.com", "password3") is None
    # Email uniqueness spans both roles
    assert await auth.register_employee(manager.id, "m@x.com", "password3") is None


@pytest.mark.asyncio
async def test_register_employee_requires_a_manager(db_session: AsyncSession):
    auth = _service(db_session)
    manager = await auth.register_manager("m@x.com", "password1")
    employee = await auth.register_employee(manager.id, "e@x.com", "password2")

    with pytest.raises(AuthorizationError):
        await auth.register_employee(employee.id, "e2@x.com", "password2")
    with pytest.raises(AuthorizationError):
        await auth.register_employee("no-such-id", "e3@x.com", "password2")


@pytest.mark.asyncio
async def test_require_user_without_cookie_is_unauthenticated(db_session: AsyncSession):
    auth = _service(db_session)
    assert isinstance(await auth.require_user(_request()), Unauthenticated)
    assert isinstance(await auth.require_user(_request("not-a-token")), Unauthenticated)
    assert auth.current_session(_request("not-a-token")) == {}


@pytest.mark.asyncio
async def test_guards_resolve_roles(db_session: AsyncSession):
    auth = _service(db_session)
    manager = await auth.register_manager("m@x.com", "password1")
    employee = await auth.register_employee(manager.id, "e@x.com", "password2")

    manager_req = _request(codec.issue({"userId": manager.id}))
    employee_req = _request(codec.issue({"userId": employee.id}))

    result = await auth.require_manager(manager_req)
    assert isinstance(result, Authorized) and result.user.id == manager.id

    result = await auth.require_user(employee_req)
    assert isinstance(result, Authorized) and result.user.id == employee.id

    result = await auth.require_manager(employee_req)
    assert isinstance(result, Forbidden) and result.user.id == employee.id


@pytest.mark.asyncio
async def test_session_of_deleted_user_is_unauthenticated(db_session: AsyncSession):
    auth = _service(db_session)
    manager = await auth.register_manager("m@x.com", "password1")
    employee = await auth.register_employee(manager.id, "e@x.com", "password2")
    request = _request(codec.issue({"userId": employee.id}))

    await UserRepository(db_session).delete(employee.id)

    assert isinstance(await auth.require_user(request), Unauthenticated)
    assert isinstance(await auth.require_manager(request), Unauthenticated)


@pytest.mark.asyncio
async def test_create_session_and_logout_set_cookie_headers(db_session: AsyncSession):
    auth = _service(db_session)

    response = auth.create_session("user-1", "/")
    assert response.status_code == 303
    assert response.headers["location"] == "/"
    cookie = response.headers["set-cookie"]
    assert cookie.startswith("buffet_session=")
    token = cookie.split(";")[0].split("=", 1)[1]
    assert codec.read(token) == {"userId": "user-1"}

    response = auth.logout(_request(token))
    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert "Max-Age=0" in response.headers["set-cookie"]


class _StaleReadRepository(UserRepository):
    """Email lookups miss a row committed by a concurrent registration."""

    stale = True

    async def find_by_email(self, email):
        if self.stale:
            return None
        return await super().find_by_email(email)

    async def insert(self, user):
        try:
            return await super().insert(user)
        except IntegrityError:
            self.stale = False
            raise


@pytest.mark.asyncio
async def test_concurrent_duplicate_registration_maps_to_none(db_session: AsyncSession):
    auth = _service(db_session)
    first = await auth.register_manager("m@x.com", "password1")
    first_id = first.id

    racing = AuthService(_StaleReadRepository(db_session), PasswordHasher(rounds=4), codec)
    assert await racing.register_manager("m@x.com", "password9") is None

    # The session was rolled back cleanly and keeps working
    winner = await auth.login("m@x.com", "password1")
    assert winner is not None and winner.id == first_id
    assert await auth.login("m@x.com", "password9") is None
    assert await auth.register_manager("n@x.com", "password2") is not None


class _BrokenInsertRepository(UserRepository):
    async def insert(self, user):
        raise IntegrityError(
            "INSERT INTO users", {}, Exception("FOREIGN KEY constraint failed")
        )


@pytest.mark.asyncio
async def test_non_duplicate_integrity_error_propagates(db_session: AsyncSession):
    auth = AuthService(_BrokenInsertRepository(db_session), PasswordHasher(rounds=4), codec)
    with pytest.raises(IntegrityError):
        await auth.register_manager("m@x.com", "password1")
