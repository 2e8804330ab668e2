from __future__ import annotations

import logging
from pathlib import Path

import typer

from .config import default_config_path
from .importer import import_puzzle
from .prompts import TerminalPrompter
from .render import PlaywrightRenderer

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False)


@app.command()
def main(
    puzzle_url: str | None = typer.Argument(None, metavar="<puzzle-url>"),
    config: Path | None = typer.Option(None, help="Path to the config file."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
    )

    if not puzzle_url:
        typer.echo("Usage: ctc-import <puzzle-url>")
        raise typer.Exit(code=1)

    try:
        import_puzzle(
            puzzle_url,
            config_path=config.expanduser() if config else default_config_path(),
            renderer=PlaywrightRenderer(),
            prompter=TerminalPrompter(),
        )
    except (typer.Abort, typer.Exit):
        raise
    except Exception as e:
        logger.error("Import failed: %s", e)
        logger.debug("Traceback", exc_info=True)
        raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
