"""Schedule calculation tests."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from planner.models import DependencyEdge, TemplateTask
from planner.schedule import calculate_schedule, calculate_total_cost, group_spans
from planner.template_file import load_template

FIXTURE = Path(__file__).parent / "fixtures" / "bathroom.yaml"
START = date(2025, 3, 3)


def task(task_id: str, days: int, **extra: object) -> TemplateTask:
    return TemplateTask(id=task_id, name=task_id.title(), duration_days=days, **extra)


def test_finish_to_start_chain() -> None:
    tasks = [task("a", 2), task("b", 3)]
    result = calculate_schedule(tasks, [("a", "b")], start_date=START)

    b = result.get("b")
    assert b is not None
    assert b.start == date(2025, 3, 5)
    assert b.end == date(2025, 3, 8)
    assert result.total_days == 5
    assert result.critical_path == ["b"]


def test_dependency_types_and_lag() -> None:
    tasks = [task("p", 4), task("ss", 2), task("ff", 2), task("sf", 1), task("lag", 1)]
    edges = [
        DependencyEdge(predecessor="p", successor="ss", dependency_type="SS", lag_days=1),
        DependencyEdge(predecessor="p", successor="ff", dependency_type="FF"),
        DependencyEdge(predecessor="p", successor="sf", dependency_type="SF", lag_days=3),
        DependencyEdge(predecessor="p", successor="lag", lag_days=-1),
    ]
    result = calculate_schedule(tasks, edges, start_date=START)

    assert result.get("ss").start == date(2025, 3, 4)
    assert result.get("ff").end == date(2025, 3, 7)
    assert result.get("sf").start == date(2025, 3, 5)
    assert result.get("lag").start == date(2025, 3, 6)


def test_no_task_starts_before_project_start() -> None:
    tasks = [task("p", 1), task("early", 5)]
    edges = [DependencyEdge(predecessor="p", successor="early", dependency_type="FF")]
    result = calculate_schedule(tasks, edges, start_date=START)
    assert result.get("early").start == START


def test_edges_to_unknown_tasks_are_ignored() -> None:
    result = calculate_schedule([task("a", 2)], [("ghost", "a")], start_date=START)
    assert result.get("a").start == START


def test_empty_template() -> None:
    result = calculate_schedule([], [], start_date=START)
    assert result.tasks == []
    assert result.end_date == START
    assert result.total_days == 0
    assert result.critical_path == []


def test_cyclic_input_still_schedules_every_task() -> None:
    tasks = [task("a", 1), task("b", 1)]
    result = calculate_schedule(tasks, [("a", "b"), ("b", "a")], start_date=START)
    assert {t.id for t in result.tasks} == {"a", "b"}


def test_template_file_schedule() -> None:
    document = load_template(FIXTURE)
    result = calculate_schedule(document.tasks, document.edges, start_date=START)

    assert result.get("electric").start == date(2025, 3, 4)
    assert result.get("heating").start == date(2025, 3, 8)
    assert result.get("tiling").start == date(2025, 3, 9)
    assert result.end_date == date(2025, 3, 14)
    assert result.total_days == 11
    assert result.critical_path == ["paint"]
    assert result.get("paint").is_critical is True
    assert result.get("demo").is_critical is False


def test_group_spans_by_phase() -> None:
    document = load_template(FIXTURE)
    result = calculate_schedule(document.tasks, document.edges, start_date=START)
    spans = group_spans(result, "phase_id")

    assert set(spans) == {"prep", "install", "finish"}
    assert spans["install"].start == date(2025, 3, 4)
    assert spans["install"].end == date(2025, 3, 9)
    assert spans["install"].duration == 5
    assert group_spans(result, "package_id") == {}


def test_total_cost() -> None:
    document = load_template(FIXTURE)
    assert calculate_total_cost(document.tasks) == 9100
    assert calculate_total_cost([task("a", 1)]) == 0
