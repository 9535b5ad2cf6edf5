"""
Item & Pot CRUD endpoints.

All operations require the manager role and only touch rows owned by the
calling manager. Deleting an item or pot removes its logs as well.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from buffet.api.deps import get_db, require_manager
from buffet.models.inventory import Item, Log, Pot
from buffet.models.user import User
from buffet.schemas.inventory import (ItemCreate, ItemRead, ItemUpdate,
                                      PotCreate, PotRead, PotUpdate)
from buffet.schemas.user import MessageResponse

router = APIRouter(tags=["inventory"])
logger = logging.getLogger(__name__)

_M = TypeVar("_M", Item, Pot)


async def _get_owned(db: AsyncSession, model: type[_M], row_id: str, owner: User) -> _M:
    result = await db.execute(
        select(model).where(model.id == row_id, model.user_id == owner.id)
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise HTTPException(status_code=404, detail=f"{model.__name__} not found")
    return row


# ── Items ───────────────────────────────────────────────────────────
@router.get("/items", response_model=list[ItemRead])
async def list_items(
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> list[Item]:
    result = await db.execute(
        select(Item).where(Item.user_id == manager.id).order_by(Item.name)
    )
    return list(result.scalars().all())


@router.post("/items", response_model=ItemRead, status_code=201)
async def create_item(
    body: ItemCreate,
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> Item:
    item = Item(**body.model_dump(), user_id=manager.id)
    db.add(item)
    await db.commit()
    await db.refresh(item)
    logger.info("Item created: %s (%s)", item.name, item.id)
    return item


@router.put("/items/{item_id}", response_model=ItemRead)
async def update_item(
    item_id: str,
    body: ItemUpdate,
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> Item:
    item = await _get_owned(db, Item, item_id, manager)
    for field, value in body.model_dump().items():
        setattr(item, field, value)
    await db.commit()
    await db.refresh(item)
    return item


@router.delete("/items/{item_id}", response_model=MessageResponse)
async def delete_item(
    item_id: str,
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> MessageResponse:
    item = await _get_owned(db, Item, item_id, manager)
    await db.execute(sa_delete(Log).where(Log.item_id == item.id))
    await db.delete(item)
    await db.commit()
    logger.info("Item deleted: %s", item_id)
    return MessageResponse(message="Item deleted")


# ── Pots ────────────────────────────────────────────────────────────
@router.get("/pots", response_model=list[PotRead])
async def list_pots(
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> list[Pot]:
    result = await db.execute(
        select(Pot).where(Pot.user_id == manager.id).order_by(Pot.name)
    )
    return list(result.scalars().all())


@router.post("/pots", response_model=PotRead, status_code=201)
async def create_pot(
    body: PotCreate,
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> Pot:
    pot = Pot(**body.model_dump(), user_id=manager.id)
    db.add(pot)
    await db.commit()
    await db.refresh(pot)
    logger.info("Pot created: %s (%s)", pot.name, pot.id)
    return pot


@router.put("/pots/{pot_id}", response_model=PotRead)
async def update_pot(
    pot_id: str,
    body: PotUpdate,
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> Pot:
    pot = await _get_owned(db, Pot, pot_id, manager)
    for field, value in body.model_dump().items():
        setattr(pot, field, value)
    await db.commit()
    await db.refresh(pot)
    return pot


@router.delete("/pots/{pot_id}", response_model=MessageResponse)
async def delete_pot(
    pot_id: str,
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> MessageResponse:
    pot = await _get_owned(db, Pot, pot_id, manager)
    await db.execute(sa_delete(Log).where(Log.pot_id == pot.id))
    await db.delete(pot)
    await db.commit()
    logger.info("Pot deleted: %s", pot_id)
    return MessageResponse(message="Pot deleted")
