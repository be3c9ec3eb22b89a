"""Template task and dependency models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

DependencyType = Literal["FS", "SS", "FF", "SF"]


class DependencyEdge(BaseModel):
    """Directed dependency: ``successor`` waits on ``predecessor``.

    ``dependency_type`` follows the usual project-management convention
    (Finish-to-Start, Start-to-Start, Finish-to-Finish, Start-to-Finish).
    ``lag_days`` may be negative to allow overlap.
    """

    model_config = ConfigDict(frozen=True)

    predecessor: str
    successor: str
    dependency_type: DependencyType = "FS"
    lag_days: int = 0

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> DependencyEdge:
        """Build from either short keys or persisted ``*_task_id`` columns."""
        return cls(
            predecessor=data.get("predecessor", data.get("predecessor_task_id")),
            successor=data.get("successor", data.get("successor_task_id")),
            dependency_type=data.get("dependency_type") or "FS",
            lag_days=int(data.get("lag_days") or 0),
        )


class TemplateTask(BaseModel):
    """Task of a renovation template."""

    id: str
    name: str = ""
    duration_days: int = Field(default=0, ge=0)
    estimated_cost: float | None = None
    is_optional: bool = False
    phase_id: str | None = None
    package_id: str | None = None
