"""Task dependency graph: cycle detection, edge validation and reachability.

Every function takes the caller's edge list and returns a fresh result.
Nothing is cached between calls and input edges are never mutated.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger("rp.dependency_graph")


class DependencyError(ValueError):
    """Base class for rejected task dependencies."""


class SelfDependencyError(DependencyError):
    """Raised (or returned) when a task is made to depend on itself."""

    def __init__(self, task_id: str) -> None:
        super().__init__("A task cannot depend on itself.")
        self.task_id = task_id


class CircularDependencyError(DependencyError):
    """Raised (or returned) when a dependency would close a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        super().__init__(f"Would create circular dependency: {' → '.join(cycle)}")
        self.cycle = list(cycle)


class DuplicateDependencyError(DependencyError):
    """Raised by persistence when the same edge is stored twice."""

    def __init__(self, predecessor: str, successor: str) -> None:
        super().__init__(f"Dependency already exists: {predecessor} → {successor}")
        self.predecessor = predecessor
        self.successor = successor


def edge_endpoints(edge: Any) -> tuple[str, str]:
    """Return ``(predecessor, successor)`` for a model edge or a pair."""
    if isinstance(edge, (tuple, list)):
        predecessor, successor = edge
        return predecessor, successor
    return edge.predecessor, edge.successor


def _pairs(edges: Iterable[Any]) -> Iterator[tuple[str, str]]:
    for edge in edges:
        yield edge_endpoints(edge)


@dataclass
class DependencyGraph:
    """Adjacency list and in-degree count built from one edge list."""

    successors: dict[str, list[str]] = field(default_factory=dict)
    in_degree: dict[str, int] = field(default_factory=dict)

    @property
    def nodes(self) -> list[str]:
        """Nodes in first-seen order."""
        return list(self.successors)

    def __len__(self) -> int:
        return len(self.successors)


@dataclass
class CycleCheck:
    """Outcome of :func:`detect_cycle`."""

    has_cycle: bool
    cycle: list[str] | None = None


@dataclass
class ValidationResult:
    """Outcome of :func:`validate_new_edge`."""

    valid: bool
    error: DependencyError | None = None
    cycle: list[str] | None = None

    def raise_for_error(self) -> None:
        """Raise the carried error, if any."""
        if self.error is not None:
            raise self.error


def build_graph(edges: Iterable[Any]) -> DependencyGraph:
    """Build successor lists and in-degrees; duplicate edges count twice."""
    graph = DependencyGraph()
    for predecessor, successor in _pairs(edges):
        for node in (predecessor, successor):
            if node not in graph.successors:
                graph.successors[node] = []
                graph.in_degree[node] = 0
        graph.successors[predecessor].append(successor)
        graph.in_degree[successor] += 1
    return graph


def _kahn(graph: DependencyGraph) -> tuple[list[str], list[str]]:
    """Return ``(ordered, unresolved)`` nodes using Kahn's algorithm."""
    remaining = dict(graph.in_degree)
    queue = deque(node for node, degree in remaining.items() if degree == 0)
    ordered: list[str] = []

    while queue:
        node = queue.popleft()
        ordered.append(node)
        for neighbor in graph.successors.get(node, ()):
            remaining[neighbor] -= 1
            if remaining[neighbor] == 0:
                queue.append(neighbor)

    unresolved = [node for node, degree in remaining.items() if degree > 0]
    return ordered, unresolved


def _trace_cycle(successors: dict[str, list[str]], start: str) -> list[str] | None:
    """Depth-first walk from ``start`` until a node on the current path repeats."""
    visited = {start}
    path = [start]
    position = {start: 0}
    stack = [iter(successors.get(start, ()))]

    while stack:
        for neighbor in stack[-1]:
            if neighbor in position:
                return path[position[neighbor]:] + [neighbor]
            if neighbor not in visited:
                visited.add(neighbor)
                position[neighbor] = len(path)
                path.append(neighbor)
                stack.append(iter(successors.get(neighbor, ())))
                break
        else:
            stack.pop()
            del position[path.pop()]
    return None


def _node_on_cycle(graph: DependencyGraph, unresolved: list[str]) -> str:
    """Walk unresolved predecessors back from the first unresolved node.

    Unresolved nodes may only sit downstream of a cycle, but each one keeps
    at least one unresolved predecessor, so the backward walk must repeat a
    node, and the repeated node lies on a cycle.
    """
    pending = set(unresolved)
    predecessor_of: dict[str, str] = {}
    for node in unresolved:
        for neighbor in graph.successors[node]:
            if neighbor in pending:
                predecessor_of.setdefault(neighbor, node)

    node = unresolved[0]
    seen: set[str] = set()
    while node not in seen:
        seen.add(node)
        node = predecessor_of[node]
    return node


def detect_cycle(edges: Iterable[Any]) -> CycleCheck:
    """Check an edge list for a directed cycle and report one witness.

    The verdict does not depend on edge order. The witness path does, and
    only one cycle is ever reported. A self-loop ``(A, A)`` is reported as
    ``[A, A]``.
    """
    graph = build_graph(edges)
    ordered, unresolved = _kahn(graph)
    if len(ordered) == len(graph):
        return CycleCheck(has_cycle=False)

    start = _node_on_cycle(graph, unresolved)
    cycle = _trace_cycle(graph.successors, start)
    if cycle is None:
        logger.warning(
            "Cycle trace failed from %s; reporting %d unresolved nodes",
            start,
            len(unresolved),
        )
        cycle = unresolved
    logger.debug("Cycle detected: %s", cycle)
    return CycleCheck(has_cycle=True, cycle=cycle)


def validate_new_edge(
    edges: Iterable[Any], predecessor: str, successor: str
) -> ValidationResult:
    """Check whether ``predecessor → successor`` can be added to ``edges``.

    Self-dependencies are rejected before any graph work. Otherwise the
    proposed edge is appended to a copy of the existing pairs and the
    result is checked for cycles. The existing set is assumed acyclic and
    is not verified on its own.
    """
    if predecessor == successor:
        return ValidationResult(valid=False, error=SelfDependencyError(predecessor))

    proposed = list(_pairs(edges))
    proposed.append((predecessor, successor))
    check = detect_cycle(proposed)
    if check.has_cycle:
        cycle = check.cycle or []
        return ValidationResult(
            valid=False, error=CircularDependencyError(cycle), cycle=cycle
        )
    return ValidationResult(valid=True)


def topological_order(edges: Iterable[Any], nodes: Iterable[str] = ()) -> list[str]:
    """Order nodes so every predecessor comes before its successors.

    ``nodes`` adds tasks that have no edges. On cyclic input the nodes that
    cannot be ordered are appended in first-seen order.
    """
    graph = build_graph(edges)
    for node in nodes:
        if node not in graph.successors:
            graph.successors[node] = []
            graph.in_degree[node] = 0

    ordered, unresolved = _kahn(graph)
    if unresolved:
        logger.warning("Circular dependency among tasks: %s", ", ".join(unresolved))
        ordered.extend(unresolved)
    return ordered


def get_direct_predecessors(edges: Iterable[Any], node: str) -> set[str]:
    """Nodes with an edge into ``node``."""
    return {pred for pred, succ in _pairs(edges) if succ == node}


def get_direct_successors(edges: Iterable[Any], node: str) -> set[str]:
    """Nodes with an edge out of ``node``."""
    return {succ for pred, succ in _pairs(edges) if pred == node}


def _reachable(links: dict[str, list[str]], start: str) -> set[str]:
    found: set[str] = set()
    queue = deque([start])
    while queue:
        current = queue.popleft()
        for neighbor in links.get(current, ()):
            if neighbor not in found:
                found.add(neighbor)
                queue.append(neighbor)
    # Only reachable from itself through a cycle.
    found.discard(start)
    return found


def get_all_dependents(edges: Iterable[Any], node: str) -> set[str]:
    """Every task that transitively waits on ``node``."""
    return _reachable(build_graph(edges).successors, node)


def get_all_prerequisites(edges: Iterable[Any], node: str) -> set[str]:
    """Every task that must transitively finish before ``node`` starts."""
    predecessors: dict[str, list[str]] = {}
    for pred, succ in _pairs(edges):
        predecessors.setdefault(succ, []).append(pred)
    return _reachable(predecessors, node)
