"""Configuration loading tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from core.orchestrator import Orchestrator
from core.policy_runtime import (
    configure_logging,
    ensure_runtime_dirs,
    load_effective_config,
    load_yaml,
    merge_dicts,
)


@pytest.fixture
def rp_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("rp")
    level = logger.level
    handlers = list(logger.handlers)
    yield logger
    logger.setLevel(level)
    logger.handlers[:] = handlers


def test_load_yaml_missing_file_is_empty(tmp_path: Path) -> None:
    assert load_yaml(tmp_path / "missing.yaml") == {}


def test_load_yaml_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml(path)


def test_merge_dicts_is_recursive() -> None:
    merged = merge_dicts({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}


def test_effective_config_layers(tmp_path: Path) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "default.yaml").write_text(
        "logging:\n  level: INFO\nschedule:\n  default_dependency_type: SS\n",
        encoding="utf-8",
    )
    (config_dir / "local.yaml").write_text("logging:\n  level: DEBUG\n", encoding="utf-8")

    config = load_effective_config(tmp_path, environ={})
    assert config["logging"]["level"] == "DEBUG"
    assert config["schedule"]["default_dependency_type"] == "SS"
    assert config["paths"]["db_path"] == "workspace/rp.db"

    overridden = load_effective_config(
        tmp_path, environ={"RP_LOG_LEVEL": "ERROR", "RP_DB_PATH": "/tmp/x.db"}
    )
    assert overridden["logging"]["level"] == "ERROR"
    assert overridden["paths"]["db_path"] == "/tmp/x.db"


def test_ensure_runtime_dirs_resolves_relative_path(tmp_path: Path) -> None:
    paths = ensure_runtime_dirs(tmp_path, {"paths": {"db_path": "data/rp.db"}})
    assert paths["db_path"] == (tmp_path / "data" / "rp.db").resolve()
    assert paths["db_path"].parent.is_dir()


def test_configure_logging_rejects_unknown_level(rp_logger: logging.Logger) -> None:
    with pytest.raises(ValueError):
        configure_logging({"logging": {"level": "LOUD"}})


def test_configure_logging_sets_level(rp_logger: logging.Logger) -> None:
    configure_logging({"logging": {"level": "info"}})
    assert rp_logger.level == logging.INFO
    assert len(rp_logger.handlers) >= 1


def test_orchestrator_builds_repository(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, rp_logger: logging.Logger
) -> None:
    monkeypatch.setenv("RP_DB_PATH", str(tmp_path / "db" / "rp.db"))
    bundle = Orchestrator(root=tmp_path).build()

    assert bundle.sql_store.db_path == (tmp_path / "db" / "rp.db").resolve()
    bundle.repository.add_dependency("tpl", "a", "b")
    assert len(bundle.repository.list_edges("tpl")) == 1
