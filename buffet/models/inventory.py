"""
Item, Pot & Log models — what the buffet serves, what it is served in,
and how much of it was produced or thrown away.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, String

from buffet.db.base import Base
from buffet.models.user import _new_id


class LogType(str, enum.Enum):
    PRODUCTION = "PRODUCTION"
    WASTE = "WASTE"


class Item(Base):
    __tablename__ = "items"

    id: str = Column(String(36), primary_key=True, default=_new_id)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    description: str | None = Column(String(1000), nullable=True)  # type: ignore[assignment]
    cogs: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    user_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )


class Pot(Base):
    __tablename__ = "pots"

    id: str = Column(String(36), primary_key=True, default=_new_id)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    capacity: float = Column(Float, nullable=False)  # type: ignore[assignment]
    weight: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    img_url: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    user_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )


class Log(Base):
    __tablename__ = "logs"
    __table_args__ = (Index("ix_logs_item_type", "item_id", "type"),)

    id: str = Column(String(36), primary_key=True, default=_new_id)  # type: ignore[assignment]
    weight: float = Column(Float, nullable=False)  # type: ignore[assignment]
    type: str = Column(String(20), nullable=False)  # type: ignore[assignment]  # PRODUCTION | WASTE
    item_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("items.id", ondelete="CASCADE"), nullable=False
    )
    pot_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("pots.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Kept when the recording employee is deleted
    user_id: str | None = Column(  # type: ignore[assignment]
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
