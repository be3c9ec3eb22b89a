"""Forward-pass schedule calculation over template tasks."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Literal

from planner.dependency_graph import edge_endpoints, topological_order
from planner.models import TemplateTask

logger = logging.getLogger("rp.schedule")


@dataclass
class ScheduledTask:
    """Task with calculated dates."""

    id: str
    name: str
    start: date
    end: date
    duration: int
    phase_id: str | None = None
    package_id: str | None = None
    is_critical: bool = False


@dataclass
class GroupSpan:
    """Date span covered by a phase or package."""

    start: date
    end: date

    @property
    def duration(self) -> int:
        return (self.end - self.start).days


@dataclass
class ScheduleResult:
    """Complete schedule for one template."""

    start_date: date
    end_date: date
    tasks: list[ScheduledTask] = field(default_factory=list)
    critical_path: list[str] = field(default_factory=list)

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days

    def get(self, task_id: str) -> ScheduledTask | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None


def _terms(edge: Any) -> tuple[str, int]:
    return getattr(edge, "dependency_type", "FS"), int(getattr(edge, "lag_days", 0))


def _candidate_start(edge: Any, predecessor: ScheduledTask, duration: int) -> date:
    """Earliest start the edge allows for a successor of ``duration`` days."""
    dependency_type, lag = _terms(edge)
    if dependency_type == "SS":
        return predecessor.start + timedelta(days=lag)
    if dependency_type == "FF":
        return predecessor.end + timedelta(days=lag - duration)
    if dependency_type == "SF":
        return predecessor.start + timedelta(days=lag - duration)
    return predecessor.end + timedelta(days=lag)


def calculate_schedule(
    tasks: Sequence[TemplateTask],
    edges: Iterable[Any],
    start_date: date | None = None,
) -> ScheduleResult:
    """Calculate early start/finish dates for every task.

    Tasks are visited in dependency order and pushed back by each incoming
    edge according to its type and lag. No task starts before
    ``start_date``. Edges naming unknown tasks are ignored. Tasks that end
    on the project end date form the critical path.
    """
    start_date = start_date or date.today()
    scheduled: dict[str, ScheduledTask] = {
        task.id: ScheduledTask(
            id=task.id,
            name=task.name,
            start=start_date,
            end=start_date + timedelta(days=task.duration_days),
            duration=task.duration_days,
            phase_id=task.phase_id,
            package_id=task.package_id,
        )
        for task in tasks
    }

    incoming: dict[str, list[Any]] = {}
    known_edges: list[Any] = []
    for edge in edges:
        predecessor, successor = edge_endpoints(edge)
        if predecessor not in scheduled or successor not in scheduled:
            logger.debug("Ignoring edge to unknown task: %s → %s", predecessor, successor)
            continue
        incoming.setdefault(successor, []).append(edge)
        known_edges.append(edge)

    for task_id in topological_order(known_edges, nodes=scheduled):
        task = scheduled[task_id]
        earliest = start_date
        for edge in incoming.get(task_id, []):
            predecessor = scheduled[edge_endpoints(edge)[0]]
            candidate = _candidate_start(edge, predecessor, task.duration)
            if candidate > earliest:
                earliest = candidate
        task.start = earliest
        task.end = earliest + timedelta(days=task.duration)

    end_date = max((task.end for task in scheduled.values()), default=start_date)
    critical_path: list[str] = []
    for task in scheduled.values():
        if task.end >= end_date:
            task.is_critical = True
            critical_path.append(task.id)

    return ScheduleResult(
        start_date=start_date,
        end_date=end_date,
        tasks=list(scheduled.values()),
        critical_path=critical_path,
    )


def group_spans(
    schedule: ScheduleResult, key: Literal["phase_id", "package_id"] = "phase_id"
) -> dict[str, GroupSpan]:
    """Roll scheduled tasks up into per-phase or per-package spans."""
    spans: dict[str, GroupSpan] = {}
    for task in schedule.tasks:
        group_id = getattr(task, key)
        if group_id is None:
            continue
        span = spans.get(group_id)
        if span is None:
            spans[group_id] = GroupSpan(start=task.start, end=task.end)
            continue
        span.start = min(span.start, task.start)
        span.end = max(span.end, task.end)
    return spans


def calculate_total_cost(tasks: Iterable[TemplateTask]) -> float:
    """Sum estimated task costs; tasks without an estimate count as zero."""
    return sum(task.estimated_cost or 0.0 for task in tasks)
