"""
Employee account management — managers only.

A manager sees and deletes only the employees linked to them.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from buffet.api.deps import get_auth_service, get_db, require_manager
from buffet.models.user import Role, User
from buffet.repositories.users import UserRepository
from buffet.schemas.user import EmployeeCreate, EmployeeRead, MessageResponse
from buffet.services.auth import AuthService

router = APIRouter(prefix="/employees", tags=["employees"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[EmployeeRead])
async def list_employees(
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> list[User]:
    return await UserRepository(db).list_employees(manager.id)


@router.post("", response_model=EmployeeRead, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    auth: AuthService = Depends(get_auth_service),
    manager: User = Depends(require_manager),
) -> User:
    """Create an employee account linked to the calling manager."""
    user = await auth.register_employee(manager.id, body.email, body.password)
    if user is None:
        raise HTTPException(status_code=400, detail="User already exists")
    return user


@router.delete("/{employee_id}", response_model=MessageResponse)
async def delete_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> MessageResponse:
    """Delete one of the manager's employees; their sessions stop working."""
    users = UserRepository(db)
    employee = await users.find_by_id(employee_id)
    if (
        employee is None
        or employee.role != Role.EMPLOYEE.value
        or employee.manager_id != manager.id
    ):
        raise HTTPException(status_code=404, detail="Employee not found")

    await users.delete(employee.id)
    logger.info("Employee %s deleted by manager %s", employee.email, manager.email)
    return MessageResponse(message="Employee deleted")
