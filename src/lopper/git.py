"""Git repository operations."""

import logging
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence, Tuple

from git import Git, GitCommandNotFound
from rich.console import Console

logger = logging.getLogger(__name__)

FIELD_DELIMITER = ":::"
CURRENT_MARKER = "*"
UNKNOWN_RELATIVE = "Unknown"
BRANCH_REF_PREFIX = "refs/heads/"
DETACHED_NAME_PREFIXES = ("(HEAD detached ", "(no branch")

BRANCH_FORMAT = FIELD_DELIMITER.join(
    [
        f"%(if)%(HEAD)%(then){CURRENT_MARKER}%(else) %(end)",
        "%(refname:short)",
        "%(committerdate:relative)",
        "%(committerdate:iso8601)",
        "%(refname)",
    ]
)


class GitError(Exception):
    """Git operation error."""


class ListError(GitError):
    """Branch enumeration failed."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to get git branches: {message}")


class DeletionError(GitError):
    """One or more branches could not be deleted."""

    def __init__(self, failures: Sequence[Tuple[str, str]]) -> None:
        """Initialize error.

        Args:
            failures: (branch name, reason) pairs, in the order they were attempted
        """
        self.failures = list(failures)
        details = "; ".join(f"{name} ({reason})" for name, reason in self.failures)
        super().__init__(f"Failed to delete {len(self.failures)} branch(es): {details}")


@dataclass(frozen=True)
class BranchRecord:
    """A local branch as reported by `git branch`."""

    name: str
    last_commit_relative: str = UNKNOWN_RELATIVE
    last_commit: str = ""
    is_current: bool = False


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a single git invocation."""

    args: Tuple[str, ...]
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandRunner(Protocol):
    """Anything that can run a git subcommand."""

    def run(self, args: Sequence[str]) -> CommandResult: ...


class GitRunner:
    """Runs git subcommands in a working directory."""

    def __init__(self, working_dir: Path) -> None:
        self.working_dir = Path(working_dir)
        self.git = Git(str(self.working_dir))

    def run(self, args: Sequence[str]) -> CommandResult:
        """Run `git <args>` and capture its exit code and output.

        Raises:
            GitError: If the git binary or the working directory cannot be found
        """
        # GitPython falls back to the process cwd for a missing working_dir
        if not self.working_dir.is_dir():
            raise GitError(f"Not a directory: {self.working_dir}")
        command = ["git", *args]
        logger.debug("Running %s", shlex.join(command))
        try:
            status, stdout, stderr = self.git.execute(
                command,
                with_extended_output=True,
                with_exceptions=False,
                strip_newline_in_stdout=False,
            )
        except GitCommandNotFound as err:
            raise GitError(f"git executable not found: {err}") from err
        logger.debug("git exited with %s", status)
        return CommandResult(tuple(args), status, stdout, stderr)


def locate_repository(cwd: Path) -> bool:
    """Check whether `cwd` or one of its parents holds a `.git` entry."""
    if not cwd.is_dir():
        return False
    directory = cwd.resolve()
    for candidate in (directory, *directory.parents):
        if (candidate / ".git").exists():
            logger.debug("Found repository root at %s", candidate)
            return True
    return False


def _parse_line(line: str) -> Optional[BranchRecord]:
    if FIELD_DELIMITER not in line:
        raise ListError(f"unexpected output line {line!r}")

    fields = line.split(FIELD_DELIMITER)
    prefix = fields[0]
    # The marker may be its own field or glued to the front of the name
    if prefix.strip(f"{CURRENT_MARKER} ") == "" and len(fields) > 1:
        name, rest = fields[1].strip(), fields[2:]
    else:
        name, rest = prefix.lstrip(f"{CURRENT_MARKER} ").strip(), fields[1:]

    if not name:
        return None
    # Only refs/heads entries are branches; detached HEAD is listed as "HEAD"
    refname = rest[2].strip() if len(rest) > 2 else ""
    if refname:
        if not refname.startswith(BRANCH_REF_PREFIX):
            return None
    elif name.startswith(DETACHED_NAME_PREFIXES):
        return None

    last_commit_relative = rest[0].strip() if rest and rest[0].strip() else UNKNOWN_RELATIVE
    last_commit = rest[1].strip() if len(rest) > 1 else ""
    return BranchRecord(
        name=name,
        last_commit_relative=last_commit_relative,
        last_commit=last_commit,
        is_current=prefix.lstrip().startswith(CURRENT_MARKER),
    )


def parse_branch_listing(output: str) -> list[BranchRecord]:
    """Parse `git branch --format` output produced with BRANCH_FORMAT.

    Raises:
        ListError: If a line does not contain the field delimiter
    """
    branches = []
    for line in output.splitlines():
        if not line.strip():
            continue
        record = _parse_line(line)
        if record is not None:
            branches.append(record)
    return branches


def list_branches(runner: CommandRunner) -> list[BranchRecord]:
    """List local branches with their last commit times.

    Raises:
        ListError: If git fails or its output can't be parsed
    """
    try:
        result = runner.run(["branch", f"--format={BRANCH_FORMAT}"])
    except ListError:
        raise
    except GitError as err:
        raise ListError(str(err)) from err

    if not result.ok:
        raise ListError(result.stderr.strip() or f"git exited with code {result.exit_code}")

    branches = parse_branch_listing(result.stdout)
    logger.debug("Found %d local branches", len(branches))
    return branches


def delete_branches(names: Sequence[str], runner: CommandRunner, console: Console) -> None:
    """Force delete each branch, continuing past failures.

    Raises:
        DeletionError: After every branch was attempted, if any deletion failed
    """
    if not names:
        return

    failures: list[Tuple[str, str]] = []
    for name in names:
        try:
            result = runner.run(["branch", "-D", name])
        except GitError as err:
            failures.append((name, str(err)))
            continue

        if result.ok:
            console.print(f"[green]Deleted branch[/green] {name}")
        else:
            reason = result.stderr.strip() or f"git exited with code {result.exit_code}"
            logger.debug("Could not delete %s: %s", name, reason)
            failures.append((name, reason))

    if failures:
        raise DeletionError(failures)

    console.print("[green]All selected branches deleted.[/green]")
