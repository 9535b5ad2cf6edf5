"""Pydantic schemas for Items, Pots, Logs and the dashboard."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from buffet.models.inventory import LogType
from buffet.schemas.user import UserRead


def _non_empty(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Name must not be empty")
    return v


# ── Item ────────────────────────────────────────────────────────────
class ItemCreate(BaseModel):
    name: str = Field(max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    cogs: float = Field(ge=0)

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _non_empty(v)


class ItemUpdate(ItemCreate):
    pass


class ItemRead(BaseModel):
    id: str
    name: str
    description: str | None
    cogs: float

    model_config = {"from_attributes": True}


# ── Pot ─────────────────────────────────────────────────────────────
class PotCreate(BaseModel):
    name: str = Field(max_length=200)
    capacity: float = Field(gt=0)
    weight: float
    img_url: str | None = Field(default=None, max_length=500)

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _non_empty(v)


class PotUpdate(PotCreate):
    pass


class PotRead(BaseModel):
    id: str
    name: str
    capacity: float
    weight: float
    img_url: str | None = None

    model_config = {"from_attributes": True}


# ── Log ─────────────────────────────────────────────────────────────
class LogCreate(BaseModel):
    weight: float = Field(gt=0)
    type: LogType
    item_id: str
    pot_id: str

    @field_validator("item_id", "pot_id")
    @classmethod
    def _uuid(cls, v: str) -> str:
        return str(uuid.UUID(v))


class LogRead(BaseModel):
    id: str
    weight: float
    type: str
    item_id: str
    pot_id: str
    user_id: str | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class LogFormOptions(BaseModel):
    items: list[ItemRead]
    pots: list[PotRead]


# ── Dashboard ───────────────────────────────────────────────────────
class ItemStats(BaseModel):
    id: str
    name: str
    production: float = 0.0
    waste: float = 0.0


class DashboardStats(BaseModel):
    total_production: float = 0.0
    total_waste: float = 0.0
    items: list[ItemStats] = []


class DashboardResponse(BaseModel):
    user: UserRead
    stats: DashboardStats
