"""Test configuration and fixtures."""

import io
from pathlib import Path
from typing import Generator, Optional, Sequence, Union

import pytest
from git import Actor, Repo
from rich.console import Console

from lopper.git import CommandResult
from lopper.prompts import CANCELLED, Cancelled, Validator

THREE_BRANCHES = (
    "*:::main:::2 hours ago:::2024-01-01 00:00:00 +0000\n"
    " :::feature-b:::5 weeks ago:::2023-11-20 10:00:00 +0000\n"
    " :::feature-a:::3 days ago:::2023-12-29 00:00:00 +0000\n"
)


class FakeRunner:
    """Records git calls and answers them from canned data."""

    def __init__(
        self,
        listing: str = THREE_BRANCHES,
        list_result: Optional[CommandResult] = None,
        failing: Sequence[str] = (),
    ) -> None:
        self.listing = listing
        self.list_result = list_result
        self.failing = set(failing)
        self.calls: list[list[str]] = []

    def run(self, args: Sequence[str]) -> CommandResult:
        args = list(args)
        self.calls.append(args)
        if args[0] == "branch" and args[1].startswith("--format="):
            return self.list_result or CommandResult(tuple(args), 0, self.listing)
        if args[:2] == ["branch", "-D"] and args[2] in self.failing:
            return CommandResult(tuple(args), 1, "", f"error: branch '{args[2]}' not found.\n")
        return CommandResult(tuple(args), 0, f"Deleted branch {args[-1]}.\n")

    @property
    def deleted(self) -> list[str]:
        return [call[2] for call in self.calls if call[:2] == ["branch", "-D"]]


class FakePrompter:
    """Scripted prompt answers.

    Text answers are fed through the validator one at a time; rejected ones
    are remembered and the next answer is tried, the way a real prompt
    re-asks. Running out of answers counts as cancelling.
    """

    def __init__(
        self,
        selection: Union[list[str], Cancelled] = CANCELLED,
        answers: Sequence[str] = (),
    ) -> None:
        self.selection = selection
        self.answers = list(answers)
        self.choices: Optional[list[tuple[str, str]]] = None
        self.rejected: list[str] = []
        self.text_prompts: list[str] = []

    def checkbox(self, message: str, choices: Sequence[tuple[str, str]]) -> Union[list[str], Cancelled]:
        self.choices = list(choices)
        return self.selection

    def text(self, message: str, validate: Validator) -> Union[str, Cancelled]:
        self.text_prompts.append(message)
        while self.answers:
            answer = self.answers.pop(0)
            if validate(answer) is True:
                return answer
            self.rejected.append(answer)
        return CANCELLED


@pytest.fixture
def fake_runner() -> type[FakeRunner]:
    return FakeRunner


@pytest.fixture
def fake_prompter() -> type[FakePrompter]:
    return FakePrompter


@pytest.fixture
def console() -> Console:
    """Console writing plain text to a buffer."""
    return Console(file=io.StringIO(), width=200, color_system=None)


@pytest.fixture
def fake_repo(tmp_path: Path) -> Path:
    """Directory that looks like a repository root without running git."""
    (tmp_path / ".git").mkdir()
    return tmp_path


@pytest.fixture
def test_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a repository with main (checked out), feature-a, feature-b and an unmerged branch."""
    local_path = tmp_path / "local"
    local_path.mkdir()
    repo = Repo.init(local_path)

    author = Actor("Test User", "test@example.com")
    repo.config_writer().set_value("user", "name", author.name).release()
    repo.config_writer().set_value("user", "email", author.email).release()

    readme = local_path / "README.md"
    readme.write_text("# Test Repository")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit", author=author)

    # Ensure we're on main whatever init.defaultBranch says
    if "main" not in repo.heads:
        repo.create_head("main")
    main_branch = repo.heads.main
    main_branch.checkout()
    for head in list(repo.heads):
        if head.name != "main":
            repo.delete_head(head, force=True)

    repo.create_head("feature-a")
    repo.create_head("feature-b")

    # A branch with a commit main doesn't have, so only -D removes it
    unmerged = repo.create_head("feature/unmerged")
    unmerged.checkout()
    extra = local_path / "unmerged.txt"
    extra.write_text("Unmerged content")
    repo.index.add(["unmerged.txt"])
    repo.index.commit("Add unmerged work", author=author)
    main_branch.checkout()

    yield local_path
