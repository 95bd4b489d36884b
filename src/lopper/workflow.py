"""Select-confirm-delete workflow."""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape

from lopper.git import CommandRunner, GitRunner, delete_branches, list_branches, locate_repository
from lopper.prompts import Cancelled, Prompter, QuestionaryPrompter, confirm_deletion, select_branches

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """How a run ended."""

    NOT_A_REPOSITORY = "not-a-repository"
    NOTHING_TO_DO = "nothing-to-do"
    NOTHING_SELECTED = "nothing-selected"
    CANCELLED = "cancelled"
    DECLINED = "declined"
    DELETED = "deleted"
    FAILED = "failed"

    @property
    def exit_code(self) -> int:
        return 1 if self is Outcome.FAILED else 0


def run_workflow(cwd: Path, runner: CommandRunner, prompter: Prompter, console: Console) -> Outcome:
    """Locate, list, select, confirm and delete.

    Raises:
        GitError: If listing or deleting branches fails
    """
    if not locate_repository(cwd):
        console.print("[blue]Not a Git repository. Please navigate to a directory with a .git folder.[/blue]")
        return Outcome.NOT_A_REPOSITORY

    branches = list_branches(runner)

    if not branches:
        console.print("[blue]No branches yet. Nothing to do.[/blue]")
        return Outcome.NOTHING_TO_DO
    if all(branch.is_current for branch in branches):
        console.print("[blue]Only one branch (current) exists. Nothing to do.[/blue]")
        return Outcome.NOTHING_TO_DO

    selected = select_branches(branches, prompter, console)
    if isinstance(selected, Cancelled):
        console.print("[blue]Exiting without deleting any branches.[/blue]")
        return Outcome.CANCELLED
    if not selected:
        return Outcome.NOTHING_SELECTED

    if not confirm_deletion(selected, prompter, console):
        console.print("[blue]No branches deleted.[/blue]")
        return Outcome.DECLINED

    delete_branches(selected, runner, console)
    return Outcome.DELETED


def run(
    cwd: Path,
    runner: Optional[CommandRunner] = None,
    prompter: Optional[Prompter] = None,
    console: Optional[Console] = None,
) -> int:
    """Run the workflow and return the process exit code."""
    console = console or Console()
    runner = runner or GitRunner(cwd)
    prompter = prompter or QuestionaryPrompter()

    try:
        outcome = run_workflow(cwd, runner, prompter, console)
    except Exception as err:
        logger.debug("Workflow failed", exc_info=err)
        console.print(f"[red]Error:[/red] {escape(str(err) or type(err).__name__)}", highlight=False)
        outcome = Outcome.FAILED

    logger.debug("Finished with outcome %s", outcome.value)
    return outcome.exit_code
