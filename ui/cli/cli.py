"""CLI entrypoint for the template dependency planner."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer

from ui.cli import commands

app = typer.Typer(help="Renovation template dependency planner")
deps_app = typer.Typer(help="Stored template dependency commands")
config_app = typer.Typer(help="Configuration commands")


def _template_file() -> Any:
    return typer.Argument(..., exists=True, dir_okay=False, help="Template YAML/JSON file")


@app.command("check")
def check_cmd(path: Path = _template_file()) -> None:
    """Detect circular dependencies in a template file."""
    commands.check(path=path)


@app.command("validate")
def validate_cmd(
    path: Path = _template_file(),
    predecessor: str = typer.Argument(..., help="Task that must finish first"),
    successor: str = typer.Argument(..., help="Task that waits on the predecessor"),
) -> None:
    """Check whether a new dependency may be added."""
    commands.validate(path=path, predecessor=predecessor, successor=successor)


@app.command("dependents")
def dependents_cmd(path: Path = _template_file(), task_id: str = typer.Argument(...)) -> None:
    """List tasks that transitively depend on a task."""
    commands.dependents(path=path, task_id=task_id)


@app.command("prerequisites")
def prerequisites_cmd(path: Path = _template_file(), task_id: str = typer.Argument(...)) -> None:
    """List tasks a task transitively depends on."""
    commands.prerequisites(path=path, task_id=task_id)


@app.command("impact")
def impact_cmd(path: Path = _template_file(), task_id: str = typer.Argument(...)) -> None:
    """Preview the tasks affected by excluding a task."""
    commands.impact(path=path, task_id=task_id)


@app.command("schedule")
def schedule_cmd(
    path: Path = _template_file(),
    start: str = typer.Option(None, "--start", help="Start date (YYYY-MM-DD), default today"),
) -> None:
    """Calculate start and end dates for every task."""
    commands.schedule(path=path, start=start)


@deps_app.command("list")
def deps_list_cmd(template_id: str) -> None:
    """List stored dependencies."""
    commands.deps_list(template_id=template_id)


@deps_app.command("add")
def deps_add_cmd(
    template_id: str,
    predecessor: str,
    successor: str,
    dependency_type: str = typer.Option(None, "--type", help="FS, SS, FF or SF"),
    lag_days: int = typer.Option(0, "--lag", help="Lag in days, may be negative"),
) -> None:
    """Validate and store a dependency."""
    commands.deps_add(
        template_id=template_id,
        predecessor=predecessor,
        successor=successor,
        dependency_type=dependency_type,
        lag_days=lag_days,
    )


@deps_app.command("remove")
def deps_remove_cmd(template_id: str, dependency_id: int) -> None:
    """Delete a stored dependency."""
    commands.deps_remove(template_id=template_id, dependency_id=dependency_id)


@config_app.command("show")
def config_show_cmd() -> None:
    """Show effective configuration."""
    commands.config_show()


app.add_typer(deps_app, name="deps")
app.add_typer(config_app, name="config")


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
