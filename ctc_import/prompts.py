"""Interactive terminal prompts."""

from __future__ import annotations

from typing import Protocol

import typer

from .remarkable.auth import (
    CONNECT_URL,
    InvalidOneTimeCodeError,
    validate_one_time_code,
)
from .remarkable.models import Directory


def highlight(text: str) -> str:
    return typer.style(text, fg=typer.colors.GREEN, bold=True)


class Prompter(Protocol):
    def one_time_code(self) -> str: ...

    def should_reselect(self, current: Directory) -> bool: ...

    def choose_directory(self, directories: list[Directory]) -> Directory: ...


class TerminalPrompter:
    """Prompts on stdin/stdout through typer."""

    def one_time_code(self) -> str:
        """Ask for a one-time code until one of the right length is given."""
        typer.echo(f"Visit {CONNECT_URL} to generate a one-time code.")
        answer = typer.prompt("Enter one-time code")

        while True:
            try:
                return validate_one_time_code(answer)
            except InvalidOneTimeCodeError:
                answer = typer.prompt("Invalid code, try again")

    def should_reselect(self, current: Directory) -> bool:
        typer.echo(f"Current parent directory is set to {highlight(current.path)}.")
        return typer.confirm("Do you wish to switch parent directory?", default=False)

    def choose_directory(self, directories: list[Directory]) -> Directory:
        """Show a numbered list of directories and return the chosen one."""
        typer.echo("Select parent directory:")
        for number, directory in enumerate(directories, start=1):
            typer.echo(f"  {number:>3}  {directory.path}")

        while True:
            choice = typer.prompt("Directory number", type=int)
            if 1 <= choice <= len(directories):
                return directories[choice - 1]
            typer.echo(f"Pick a number between 1 and {len(directories)}.")
