"""
Password hashing (bcrypt) and signed session cookies (JWT).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext
from passlib.exc import UnknownHashError
from starlette.responses import Response

from buffet.core.config import settings

logger = logging.getLogger(__name__)

_ALGORITHM = "HS256"


# ── Passwords ───────────────────────────────────────────────────────
class PasswordHasher:
    """Salted one-way hashing with a fixed bcrypt work factor."""

    def __init__(self, rounds: int = 10) -> None:
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, plain: str) -> str:
        if not plain:
            raise ValueError("password_blank")
        return self._context.hash(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        if not plain or not hashed:
            return False
        try:
            return self._context.verify(plain, hashed)
        except (UnknownHashError, ValueError, TypeError):
            # Malformed or foreign hash. A missing bcrypt backend is not
            # caught here and propagates.
            return False


# ── Sessions ────────────────────────────────────────────────────────
class SessionCodec:
    """Stateless cookie sessions.

    The payload is a flat ``dict[str, str]`` signed as an HS256 JWT with an
    ``exp`` claim. The first secret signs; every secret is tried on read so
    the signing key can be rotated without logging everybody out.
    """

    def __init__(
        self,
        secrets: list[str],
        *,
        cookie_name: str = "buffet_session",
        max_age: timedelta = timedelta(days=30),
        secure: bool = False,
    ) -> None:
        if not secrets or not all(secrets):
            raise ValueError("session_secret_blank")
        self._secrets = list(secrets)
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.secure = secure

    def issue(self, payload: dict[str, str]) -> str:
        now = datetime.now(timezone.utc)
        return jwt.encode(
            {"data": dict(payload), "iat": now, "exp": now + self.max_age},
            self._secrets[0],
            algorithm=_ALGORITHM,
        )

    def read(self, value: str | None) -> dict[str, str]:
        """Return the verified payload, or ``{}`` for anything untrustworthy."""
        if not value:
            return {}
        for secret in self._secrets:
            try:
                claims = jwt.decode(value, secret, algorithms=[_ALGORITHM])
            except JWTError:
                continue
            data = claims.get("data")
            if not isinstance(data, dict):
                return {}
            if not all(isinstance(k, str) and isinstance(v, str) for k, v in data.items()):
                return {}
            return data
        return {}

    def commit(self, response: Response, payload: dict[str, str]) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=self.issue(payload),
            max_age=int(self.max_age.total_seconds()),
            path="/",
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )

    def destroy(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )


password_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)

session_codec = SessionCodec(
    settings.session_secrets,
    cookie_name=settings.SESSION_COOKIE_NAME,
    max_age=timedelta(days=settings.SESSION_MAX_AGE_DAYS),
    secure=settings.is_production,
)
