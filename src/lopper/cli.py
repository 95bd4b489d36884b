"""Command line interface for lopper."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich import print
from rich.console import Console
from rich.logging import RichHandler

from lopper import __version__
from lopper.workflow import run

app = typer.Typer(help="Interactively delete local git branches", add_completion=False)
console = Console()


def setup_logging(verbose: bool) -> None:
    """Send lopper's log records to stderr through rich."""
    logger = logging.getLogger("lopper")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_path=False, log_time_format="[%X]")
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)


def version_callback(value: bool) -> None:
    """Print the version and stop when --version is given."""
    if value:
        print(f"lopper {__version__}")
        raise typer.Exit()


@app.command()
def main(
    path: Annotated[
        Path,
        typer.Option(
            exists=True,
            file_okay=False,
            resolve_path=True,
            help="Directory to search for a git repository from",
        ),
    ] = Path("."),
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log every git call")] = False,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show the version and exit"),
    ] = None,
) -> None:
    """Select local branches and force delete them after confirmation.

    The checked-out branch is never offered for deletion.
    """
    setup_logging(verbose)
    exit_code = run(path, console=console)
    if exit_code:
        raise typer.Exit(code=exit_code)


if __name__ == "__main__":
    app()
