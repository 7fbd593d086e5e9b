"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics
and run summaries. Results and errors go to stdout; progress goes to stderr.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import SplitResult


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED)
    raise typer.Exit(code=1) from exc


def echo_split_summary(result: SplitResult) -> None:
    """Print the written chapter files in run order."""

    typer.echo(f"Title: {result.title}", err=True)
    for path in result.outputs:
        typer.echo(f"Wrote: {path}", err=True)
