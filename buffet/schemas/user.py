"""Pydantic schemas for credentials and user profiles."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

_MIN_PASSWORD = 8
# bcrypt only looks at the first 72 bytes
_MAX_PASSWORD = 72


def _check_email(v: str) -> str:
    # Stored case-sensitively; only surrounding whitespace is dropped.
    v = v.strip()
    local, _, domain = v.partition("@")
    if not local or "." not in domain or " " in v:
        raise PydanticCustomError("email", "Invalid email address")
    return v


class Credentials(BaseModel):
    email: str
    password: str = Field(min_length=_MIN_PASSWORD, max_length=_MAX_PASSWORD)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v)


class RegisterForm(Credentials):
    confirm_password: str = Field(min_length=_MIN_PASSWORD, max_length=_MAX_PASSWORD)

    @model_validator(mode="after")
    def _passwords_match(self) -> "RegisterForm":
        if self.password != self.confirm_password:
            raise PydanticCustomError("password_mismatch", "Passwords don't match")
        return self


class EmployeeCreate(Credentials):
    pass


class UserRead(BaseModel):
    id: str
    email: str
    role: str
    manager_id: str | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class EmployeeRead(BaseModel):
    id: str
    email: str

    model_config = {"from_attributes": True}


class AnonymousPage(BaseModel):
    authenticated: bool = False


class MessageResponse(BaseModel):
    success: bool = True
    message: str
