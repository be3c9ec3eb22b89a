"""Load template tasks and dependencies from YAML or JSON files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from planner.models import DependencyEdge, TemplateTask


@dataclass
class TemplateDocument:
    """Tasks and dependency edges read from one template file."""

    tasks: list[TemplateTask] = field(default_factory=list)
    edges: list[DependencyEdge] = field(default_factory=list)


def load_template(path: Path) -> TemplateDocument:
    """Parse a template file. JSON files load through the YAML parser.

    Expected layout::

        tasks:
          - {id: demo, name: Demolition, duration_days: 3}
        dependencies:
          - {predecessor: demo, successor: tiling, lag_days: 1}
    """
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Template file must contain a mapping: {path}")

    tasks = [TemplateTask(**item) for item in data.get("tasks") or []]
    edges = [DependencyEdge.from_mapping(item) for item in data.get("dependencies") or []]
    return TemplateDocument(tasks=tasks, edges=edges)
