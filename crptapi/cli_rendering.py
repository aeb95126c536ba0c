"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
API responses, and resolved configuration rows.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .config import CrptApiConfig
from .errors import CommandStageError
from .models.datatypes import ApiResponse


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, CommandStageError):
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


def echo_response(response: ApiResponse) -> None:
    """Print the HTTP status code and response body."""

    typer.echo(f"Response status code: {response.status_code}")
    typer.echo(f"Response body: {response.body}")


def echo_config(config: CrptApiConfig) -> None:
    """Print resolved configuration as aligned `key: value` rows."""

    rows = config.as_display_rows()
    width = max(len(key) for key, _ in rows)
    for key, value in rows:
        typer.echo(f"{key.ljust(width)}: {value}")
