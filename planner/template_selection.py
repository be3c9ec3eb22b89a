"""Helpers for choosing which optional template tasks to apply."""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from planner.dependency_graph import (
    edge_endpoints,
    get_all_dependents,
    get_direct_successors,
)
from planner.models import TemplateTask


@dataclass
class ExclusionImpact:
    """Tasks affected when one task is left out of a project."""

    task_id: str
    direct: set[str] = field(default_factory=set)
    cascade: set[str] = field(default_factory=set)


@dataclass
class SelectionMetrics:
    """Totals for the tasks that remain selected."""

    task_count: int = 0
    total_days: int = 0
    total_cost: float = 0.0


def optional_tasks(tasks: Iterable[TemplateTask]) -> list[TemplateTask]:
    return [task for task in tasks if task.is_optional]


def exclusion_impact(edges: Sequence[Any], task_id: str) -> ExclusionImpact:
    """Preview which tasks lose a prerequisite if ``task_id`` is excluded."""
    return ExclusionImpact(
        task_id=task_id,
        direct=get_direct_successors(edges, task_id),
        cascade=get_all_dependents(edges, task_id),
    )


def selection_metrics(
    tasks: Iterable[TemplateTask], excluded_ids: Collection[str] = ()
) -> SelectionMetrics:
    """Count and sum the tasks that are not excluded.

    ``total_days`` is the plain sum of durations, not the scheduled length.
    """
    metrics = SelectionMetrics()
    for task in tasks:
        if task.id in excluded_ids:
            continue
        metrics.task_count += 1
        metrics.total_days += task.duration_days
        metrics.total_cost += task.estimated_cost or 0.0
    return metrics


def prune_edges(edges: Iterable[Any], excluded_ids: Collection[str]) -> list[Any]:
    """Drop edges that touch an excluded task."""
    kept: list[Any] = []
    for edge in edges:
        predecessor, successor = edge_endpoints(edge)
        if predecessor in excluded_ids or successor in excluded_ids:
            continue
        kept.append(edge)
    return kept
