"""Typer command handlers."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import NoReturn

import typer

from core.orchestrator import Orchestrator, RuntimeBundle
from planner.dependency_graph import (
    detect_cycle,
    get_all_dependents,
    get_all_prerequisites,
    validate_new_edge,
)
from planner.schedule import calculate_schedule, calculate_total_cost
from planner.template_file import TemplateDocument, load_template
from planner.template_selection import exclusion_impact


def _runtime(root: Path | None = None) -> RuntimeBundle:
    bundle = Orchestrator(root=root).build()
    return bundle


def _load(path: Path) -> TemplateDocument:
    try:
        return load_template(path)
    except (OSError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _fail(message: str) -> NoReturn:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


def check(path: Path) -> None:
    """Report whether a template's dependencies contain a cycle."""
    document = _load(path)
    result = detect_cycle(document.edges)
    if result.has_cycle:
        _fail(f"Cycle: {' → '.join(result.cycle or [])}")
    typer.echo(f"OK: {len(document.edges)} dependencies, no cycles")


def validate(path: Path, predecessor: str, successor: str) -> None:
    """Check one proposed dependency against a template file."""
    document = _load(path)
    result = validate_new_edge(document.edges, predecessor, successor)
    if not result.valid:
        _fail(f"Rejected: {result.error}")
    typer.echo(f"Valid: {predecessor} → {successor}")


def dependents(path: Path, task_id: str) -> None:
    """List every task that transitively depends on a task."""
    document = _load(path)
    for node in sorted(get_all_dependents(document.edges, task_id)):
        typer.echo(node)


def prerequisites(path: Path, task_id: str) -> None:
    """List every task a task transitively depends on."""
    document = _load(path)
    for node in sorted(get_all_prerequisites(document.edges, task_id)):
        typer.echo(node)


def impact(path: Path, task_id: str) -> None:
    """Preview what excluding a task disables."""
    document = _load(path)
    result = exclusion_impact(document.edges, task_id)
    typer.echo(f"Excluding {task_id} affects {len(result.cascade)} task(s)")
    for node in sorted(result.cascade):
        marker = "direct" if node in result.direct else "indirect"
        typer.echo(f"- {node} ({marker})")


def schedule(path: Path, start: str | None = None) -> None:
    """Print the forward-pass schedule of a template file."""
    document = _load(path)
    start_date = None
    if start:
        try:
            start_date = date.fromisoformat(start)
        except ValueError:
            _fail(f"Error: invalid start date {start!r}")
    result = calculate_schedule(document.tasks, document.edges, start_date=start_date)
    for task in result.tasks:
        flag = "*" if task.is_critical else " "
        typer.echo(
            f"{flag} {task.id:<16} {task.start.isoformat()} → {task.end.isoformat()} "
            f"({task.duration}d) {task.name}"
        )
    typer.echo(f"Total: {result.total_days} days, ends {result.end_date.isoformat()}")
    typer.echo(f"Estimated cost: {calculate_total_cost(document.tasks):.2f}")


def deps_list(template_id: str) -> None:
    """List stored dependencies of a template."""
    bundle = _runtime()
    rows = bundle.repository.list_dependencies(template_id)
    typer.echo(json.dumps(_json_safe(rows), indent=2))


def deps_add(
    template_id: str,
    predecessor: str,
    successor: str,
    dependency_type: str | None = None,
    lag_days: int = 0,
) -> None:
    """Store a dependency after validating it."""
    bundle = _runtime()
    dependency_type = dependency_type or bundle.config.get("schedule", {}).get(
        "default_dependency_type", "FS"
    )
    try:
        row = bundle.repository.add_dependency(
            template_id,
            predecessor,
            successor,
            dependency_type=dependency_type,
            lag_days=lag_days,
        )
    except ValueError as exc:
        _fail(f"Rejected: {exc}")
    typer.echo(json.dumps(_json_safe(row), indent=2))


def deps_remove(template_id: str, dependency_id: int) -> None:
    """Delete a stored dependency."""
    bundle = _runtime()
    if not bundle.repository.remove_dependency(template_id, dependency_id):
        _fail(f"Dependency {dependency_id} not found on template {template_id}")
    typer.echo(f"Removed dependency {dependency_id}")


def config_show() -> None:
    """Show effective runtime config."""
    bundle = _runtime()
    typer.echo(json.dumps(_json_safe(bundle.config), indent=2))


def _json_safe(payload: object) -> object:
    """Convert datetimes to strings for JSON output."""
    if isinstance(payload, dict):
        return {k: _json_safe(v) for k, v in payload.items()}
    if isinstance(payload, list):
        return [_json_safe(v) for v in payload]
    if hasattr(payload, "isoformat"):
        return payload.isoformat()
    return payload
