"""
Auth endpoints — login, manager self-registration, logout & profile.

Forms are posted as ``application/x-www-form-urlencoded``; success answers
with a 303 redirect that carries the session cookie.
"""

import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from buffet.api.deps import get_auth_service, require_user
from buffet.core.config import settings
from buffet.core.limiter import limiter
from buffet.models.user import User
from buffet.schemas.user import AnonymousPage, Credentials, RegisterForm, UserRead
from buffet.services.auth import AuthService, Authorized

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


def _first_error(exc: ValidationError) -> str:
    return exc.errors()[0]["msg"]


async def _anonymous_page(request: Request, auth: AuthService) -> Response | AnonymousPage:
    if isinstance(await auth.require_user(request), Authorized):
        return RedirectResponse(url=settings.LANDING_PATH, status_code=status.HTTP_303_SEE_OTHER)
    return AnonymousPage()


@router.get("/login", response_model=None)
async def login_page(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> Response | AnonymousPage:
    """Signed-in users skip the login form."""
    return await _anonymous_page(request, auth)


@router.post("/login")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    auth: AuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """Authenticate with email/password and start a session."""
    try:
        creds = Credentials(email=email, password=password)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid form data")

    user = await auth.login(creds.email, creds.password)
    if user is None:
        logger.info("Failed login attempt for %s", creds.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return auth.create_session(user.id, settings.LANDING_PATH)


@router.get("/register", response_model=None)
async def register_page(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> Response | AnonymousPage:
    return await _anonymous_page(request, auth)


@router.post("/register")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def register(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
    auth: AuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """Create a manager account and sign it in."""
    try:
        data = RegisterForm(email=email, password=password, confirm_password=confirm_password)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=_first_error(exc))

    user = await auth.register_manager(data.email, data.password)
    if user is None:
        raise HTTPException(status_code=400, detail="User already exists")

    return auth.create_session(user.id, settings.LANDING_PATH)


@router.post("/logout")
async def logout(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """Clear the session cookie and go back to the login page."""
    return auth.logout(request)


@router.get("/me", response_model=UserRead)
async def read_current_user(current_user: User = Depends(require_user)) -> User:
    """Return profile of the currently authenticated user."""
    return current_user
