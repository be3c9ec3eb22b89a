"""SQLAlchemy schemas for persisted template dependencies."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Return UTC datetime for default timestamps."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Declarative base."""


class TemplateDependencyRecord(Base):
    """One ``predecessor → successor`` row scoped to a template."""

    __tablename__ = "template_dependencies"
    __table_args__ = (
        UniqueConstraint(
            "template_id",
            "predecessor_task_id",
            "successor_task_id",
            name="uq_template_dependency",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    template_id: Mapped[str] = mapped_column(String(64), index=True)
    predecessor_task_id: Mapped[str] = mapped_column(String(64))
    successor_task_id: Mapped[str] = mapped_column(String(64))
    dependency_type: Mapped[str] = mapped_column(String(2), default="FS")
    lag_days: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "template_id": self.template_id,
            "predecessor_task_id": self.predecessor_task_id,
            "successor_task_id": self.successor_task_id,
            "dependency_type": self.dependency_type,
            "lag_days": self.lag_days,
            "created_at": self.created_at,
        }
