"""
Production / waste logging and the dashboard.

Open to any signed-in user. Everything is scoped to the caller's tenant:
a manager's own items and pots, or those of an employee's manager.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from buffet.api.deps import get_db, require_user
from buffet.models.inventory import Item, Log, LogType, Pot
from buffet.models.user import User
from buffet.schemas.inventory import (DashboardResponse, DashboardStats,
                                      ItemRead, ItemStats, LogCreate,
                                      LogFormOptions, LogRead, PotRead)
from buffet.schemas.user import UserRead

router = APIRouter(tags=["logs"])
logger = logging.getLogger(__name__)


@router.get("/logs/new", response_model=LogFormOptions)
async def log_form_options(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
) -> LogFormOptions:
    """Items and pots the caller may log against."""
    items = await db.execute(
        select(Item).where(Item.user_id == user.tenant_id).order_by(Item.name)
    )
    pots = await db.execute(
        select(Pot).where(Pot.user_id == user.tenant_id).order_by(Pot.name)
    )
    return LogFormOptions(
        items=[ItemRead.model_validate(i) for i in items.scalars().all()],
        pots=[PotRead.model_validate(p) for p in pots.scalars().all()],
    )


@router.post("/logs", response_model=LogRead, status_code=201)
async def create_log(
    body: LogCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
) -> Log:
    item = await db.execute(
        select(Item.id).where(Item.id == body.item_id, Item.user_id == user.tenant_id)
    )
    pot = await db.execute(
        select(Pot.id).where(Pot.id == body.pot_id, Pot.user_id == user.tenant_id)
    )
    if item.scalar_one_or_none() is None or pot.scalar_one_or_none() is None:
        raise HTTPException(status_code=400, detail="Invalid form data")

    log = Log(
        weight=body.weight,
        type=body.type.value,
        item_id=body.item_id,
        pot_id=body.pot_id,
        user_id=user.id,
    )
    db.add(log)
    await db.commit()
    await db.refresh(log)
    logger.info("%s log of %.2f recorded by %s", log.type, log.weight, user.email)
    return log


# ── Dashboard ───────────────────────────────────────────────────────
def _sum_of(log_type: LogType):
    return func.coalesce(
        func.sum(case((Log.type == log_type.value, Log.weight), else_=0.0)),
        0.0,
    )


async def compute_stats(db: AsyncSession, tenant_id: str | None) -> DashboardStats:
    """Production / waste totals and per-item sums for one tenant, in one query."""
    if tenant_id is None:
        return DashboardStats()

    result = await db.execute(
        select(
            Item.id,
            Item.name,
            _sum_of(LogType.PRODUCTION).label("production"),
            _sum_of(LogType.WASTE).label("waste"),
        )
        .outerjoin(Log, Log.item_id == Item.id)
        .where(Item.user_id == tenant_id)
        .group_by(Item.id, Item.name)
        .order_by(Item.name)
    )
    items = [
        ItemStats(id=row.id, name=row.name, production=row.production, waste=row.waste)
        for row in result.all()
    ]
    return DashboardStats(
        total_production=sum(i.production for i in items),
        total_waste=sum(i.waste for i in items),
        items=items,
    )


@router.get("/", response_model=DashboardResponse)
async def dashboard(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
) -> DashboardResponse:
    return DashboardResponse(
        user=UserRead.model_validate(user),
        stats=await compute_stats(db, user.tenant_id),
    )
