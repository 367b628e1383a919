"""CLI error and summary rendering helpers.

All output here goes to stderr; stdout belongs to the launched program.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import DevPromptError
from .models.datatypes import ConfigureResult


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, DevPromptError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_configure_summary(result: ConfigureResult) -> None:
    """Print the chosen script and changed variable names."""

    typer.echo(f"Configuration script: {result.script_path}", err=True)
    names = sorted(name for name, _ in result.diff.items())
    typer.echo(f"Changed variables ({len(names)}): {', '.join(names) or 'none'}", err=True)
