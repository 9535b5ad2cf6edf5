"""
User model — credentials, role and manager linkage.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String

from buffet.db.base import Base


class Role(str, enum.Enum):
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id: str = Column(String(36), primary_key=True, default=_new_id)  # type: ignore[assignment]
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_password: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    role: str = Column(String(20), nullable=False)  # type: ignore[assignment]  # MANAGER | EMPLOYEE
    manager_id: str | None = Column(  # type: ignore[assignment]
        String(36),
        ForeignKey("users.id"),
        nullable=True,
        index=True,
    )  # set iff role == EMPLOYEE
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER.value

    @property
    def tenant_id(self) -> str:
        """Id of the manager whose items, pots and staff this user works with."""
        return self.id if self.is_manager else self.manager_id  # type: ignore[return-value]
