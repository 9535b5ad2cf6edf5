"""
User repository — the credential store behind authentication.

Every method is a single statement against ``users``. Email uniqueness is
enforced by the table's UNIQUE constraint, so a racing insert surfaces as
``IntegrityError`` rather than a silent duplicate.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from buffet.models.user import Role, User


class UserRepository:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find_by_email(self, email: str) -> User | None:
        result = await self._db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: str) -> User | None:
        result = await self._db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def insert(self, user: User) -> User:
        self._db.add(user)
        try:
            await self._db.commit()
        except IntegrityError:
            await self._db.rollback()
            raise
        await self._db.refresh(user)
        return user

    async def delete(self, user_id: str) -> None:
        user = await self.find_by_id(user_id)
        if user is None:
            return
        await self._db.delete(user)
        await self._db.commit()

    async def list_employees(self, manager_id: str) -> list[User]:
        result = await self._db.execute(
            select(User)
            .where(User.manager_id == manager_id, User.role == Role.EMPLOYEE.value)
            .order_by(User.created_at, User.email)
        )
        return list(result.scalars().all())
