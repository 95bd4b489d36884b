"""Interactive branch selection and deletion confirmation."""

import logging
from typing import Callable, Protocol, Sequence, Union

import questionary
from rich.console import Console

from lopper.git import BranchRecord

logger = logging.getLogger(__name__)

CONFIRM_ANSWERS = ("yes", "no")


class Cancelled:
    """Marker returned when the user dismisses a prompt."""

    def __repr__(self) -> str:
        return "CANCELLED"


CANCELLED = Cancelled()

Validator = Callable[[str], Union[bool, str]]


class Prompter(Protocol):
    """The two prompt shapes the workflow needs."""

    def checkbox(self, message: str, choices: Sequence[tuple[str, str]]) -> Union[list[str], Cancelled]: ...

    def text(self, message: str, validate: Validator) -> Union[str, Cancelled]: ...


class QuestionaryPrompter:
    """Prompter backed by questionary."""

    def checkbox(self, message: str, choices: Sequence[tuple[str, str]]) -> Union[list[str], Cancelled]:
        """Ask for zero or more of `choices`, given as (title, value) pairs."""
        answer = questionary.checkbox(
            message,
            choices=[questionary.Choice(title=title, value=value) for title, value in choices],
        ).ask()
        # questionary swallows Ctrl-C and hands back None
        return CANCELLED if answer is None else answer

    def text(self, message: str, validate: Validator) -> Union[str, Cancelled]:
        answer = questionary.text(message, validate=validate).ask()
        return CANCELLED if answer is None else answer


def validate_confirmation(answer: str) -> Union[bool, str]:
    """Accept exactly "yes" or "no"."""
    if answer in CONFIRM_ANSWERS:
        return True
    return "Please answer 'yes' or 'no'"


def select_branches(
    listing: Sequence[BranchRecord],
    prompter: Prompter,
    console: Console,
) -> Union[list[str], Cancelled]:
    """Let the user pick which non-current branches to delete.

    Branches are offered in name order. The current branch is printed above
    the prompt and is never one of the choices.

    Returns:
        The chosen branch names in the order they were listed, or CANCELLED
        if the prompt was dismissed.
    """
    ordered = sorted(listing, key=lambda branch: branch.name)
    current = next((branch for branch in ordered if branch.is_current), None)
    others = [branch for branch in ordered if not branch.is_current]

    if current is not None:
        console.print(f"[yellow]Current branch: {current.name} ({current.last_commit_relative})[/yellow]")

    choices = [(f"{branch.name} ({branch.last_commit_relative})", branch.name) for branch in others]
    answer = prompter.checkbox("Select (space) which branches to delete:", choices)
    if isinstance(answer, Cancelled):
        logger.debug("Branch selection cancelled")
        return CANCELLED

    chosen = set(answer)
    selected = [branch.name for branch in others if branch.name in chosen]
    logger.debug("Selected %d of %d branches", len(selected), len(others))
    return selected


def confirm_deletion(names: Sequence[str], prompter: Prompter, console: Console) -> bool:
    """Show the selected branches and ask for a typed yes/no."""
    if not names:
        return False

    console.print("[bold red underline]You have selected these branches to delete:[/bold red underline]")
    for index, name in enumerate(names, start=1):
        console.print(f" {index}. {name}", highlight=False)

    answer = prompter.text(
        f"Delete these {len(names)} branches? Type yes or no",
        validate=validate_confirmation,
    )
    if isinstance(answer, Cancelled):
        logger.debug("Confirmation cancelled")
        return False
    return answer == "yes"
