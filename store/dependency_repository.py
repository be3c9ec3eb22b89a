"""Validated persistence of template task dependencies."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from planner.dependency_graph import DuplicateDependencyError, validate_new_edge
from planner.models import DependencyEdge, DependencyType
from store.schemas import TemplateDependencyRecord
from store.sql_store import SQLStore

logger = logging.getLogger("rp.repository")


class DependencyRepository:
    """Stores dependency rows per template, refusing edges that break the DAG."""

    def __init__(self, sql_store: SQLStore) -> None:
        self.sql_store = sql_store
        self.sql_store.create_all()

    def list_dependencies(self, template_id: str) -> list[dict[str, Any]]:
        """List dependency rows of one template in insertion order."""
        with self.sql_store.session() as sess:
            rows = (
                sess.query(TemplateDependencyRecord)
                .filter(TemplateDependencyRecord.template_id == template_id)
                .order_by(TemplateDependencyRecord.id)
                .all()
            )
            return [row.to_dict() for row in rows]

    def list_edges(self, template_id: str) -> list[DependencyEdge]:
        return [DependencyEdge.from_mapping(row) for row in self.list_dependencies(template_id)]

    def add_dependency(
        self,
        template_id: str,
        predecessor_task_id: str,
        successor_task_id: str,
        dependency_type: DependencyType = "FS",
        lag_days: int = 0,
    ) -> dict[str, Any]:
        """Validate against the stored edges and insert one dependency.

        Raises ``SelfDependencyError``, ``CircularDependencyError`` or
        ``DuplicateDependencyError``.
        """
        edge = DependencyEdge(
            predecessor=predecessor_task_id,
            successor=successor_task_id,
            dependency_type=dependency_type,
            lag_days=lag_days,
        )
        result = validate_new_edge(
            self.list_edges(template_id), edge.predecessor, edge.successor
        )
        if not result.valid:
            logger.warning(
                "Rejected dependency %s → %s on template %s: %s",
                edge.predecessor,
                edge.successor,
                template_id,
                result.error,
            )
            result.raise_for_error()

        record = TemplateDependencyRecord(
            template_id=template_id,
            predecessor_task_id=edge.predecessor,
            successor_task_id=edge.successor,
            dependency_type=edge.dependency_type,
            lag_days=edge.lag_days,
        )
        try:
            with self.sql_store.session() as sess:
                sess.add(record)
                sess.flush()
                payload = record.to_dict()
        except IntegrityError as exc:
            raise DuplicateDependencyError(edge.predecessor, edge.successor) from exc

        logger.info(
            "Added dependency %s → %s on template %s",
            edge.predecessor,
            edge.successor,
            template_id,
        )
        return payload

    def remove_dependency(self, template_id: str, dependency_id: int) -> bool:
        """Delete one dependency; returns False when nothing matched."""
        with self.sql_store.session() as sess:
            deleted = (
                sess.query(TemplateDependencyRecord)
                .filter(
                    TemplateDependencyRecord.template_id == template_id,
                    TemplateDependencyRecord.id == dependency_id,
                )
                .delete()
            )
        if deleted:
            logger.info("Removed dependency %s from template %s", dependency_id, template_id)
        return bool(deleted)

    def clear_template(self, template_id: str) -> int:
        """Delete every dependency of a template and return the count."""
        with self.sql_store.session() as sess:
            deleted = (
                sess.query(TemplateDependencyRecord)
                .filter(TemplateDependencyRecord.template_id == template_id)
                .delete()
            )
        logger.info("Cleared %d dependencies from template %s", deleted, template_id)
        return deleted
