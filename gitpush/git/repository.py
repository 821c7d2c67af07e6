"""Git repository operations for gitpush.

:class:`GitRepository` is bound to one explicit working-tree root and runs
every command there, independent of the process working directory. Its
methods raise :class:`~gitpush.errors.GitError` on failure; the
:class:`~gitpush.git.operator.GitOperator` turns those into results.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from gitpush.errors import GitError, NotARepositoryError
from gitpush.git.utils import (
    LOG_FIELD_SEP,
    format_diff_stat,
    parse_commit_line,
    parse_commit_output,
    parse_git_status,
    run_git_command,
)

__all__ = [
    "GitRepository",
    "GitStatus",
    "GitCommit",
    "GitCommitSummary",
    "GitDiff",
    "GitBranch",
]


@dataclass
class GitStatus:
    """Represents the current git repository status."""

    is_clean: bool
    current_branch: Optional[str] = None
    tracking: Optional[str] = None
    modified: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    renamed: list[str] = field(default_factory=list)
    staged: list[str] = field(default_factory=list)
    untracked: list[str] = field(default_factory=list)
    conflicted: list[str] = field(default_factory=list)
    ahead: int = 0
    behind: int = 0

    @property
    def has_unstaged_changes(self) -> bool:
        """True if there are untracked or modified paths that staging would pick up."""
        return bool(self.untracked or self.modified)

    def change_counts(self) -> dict[str, int]:
        """Get the number of paths in each change category."""
        return {
            "modified": len(self.modified),
            "created": len(self.created),
            "deleted": len(self.deleted),
            "staged": len(self.staged),
            "untracked": len(self.untracked),
            "conflicted": len(self.conflicted),
        }

    def summary(self) -> str:
        """Get a summary string of the status."""
        parts = [f"On branch {self.current_branch or '(detached)'}"]

        if self.tracking and (self.ahead > 0 or self.behind > 0):
            tracking = []
            if self.ahead > 0:
                tracking.append(f"ahead {self.ahead}")
            if self.behind > 0:
                tracking.append(f"behind {self.behind}")
            parts.append(f"Your branch is {' and '.join(tracking)} of '{self.tracking}'")

        if self.is_clean:
            parts.append("Nothing to commit, working tree clean")
        else:
            if self.staged:
                parts.append(f"Staged: {len(self.staged)} file(s)")
            if self.modified:
                parts.append(f"Modified: {len(self.modified)} file(s)")
            if self.deleted:
                parts.append(f"Deleted: {len(self.deleted)} file(s)")
            if self.untracked:
                parts.append(f"Untracked: {len(self.untracked)} file(s)")
            if self.conflicted:
                parts.append(f"Conflicts: {len(self.conflicted)} file(s)")

        return "\n".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class GitCommit:
    """Represents a git commit."""

    hash: str
    short_hash: str
    author: str
    email: str
    date: str
    message: str

    def to_dict(self) -> dict[str, str]:
        """Get the log entry shape returned to callers."""
        return {
            "hash": self.hash,
            "date": self.date,
            "message": self.message,
            "author": self.author,
        }


@dataclass
class GitCommitSummary:
    """Outcome of a successful `git commit`."""

    commit: Optional[str]
    branch: Optional[str]
    changes: int = 0
    insertions: int = 0
    deletions: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "commit": self.commit,
            "branch": self.branch,
            "summary": {
                "changes": self.changes,
                "insertions": self.insertions,
                "deletions": self.deletions,
            },
        }


@dataclass
class GitDiff:
    """Represents diff statistics (no patch content)."""

    files: list[str] = field(default_factory=list)
    insertions: int = 0
    deletions: int = 0
    stat: str = ""

    def summary(self) -> str:
        """Get a summary string."""
        if not self.files:
            return "No changes"
        return f"{len(self.files)} file(s) changed, {self.insertions} insertions(+), {self.deletions} deletions(-)"

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": list(self.files),
            "insertions": self.insertions,
            "deletions": self.deletions,
            "stat": self.stat,
            "summary": self.summary(),
        }


@dataclass
class GitBranch:
    """Represents a git branch."""

    name: str
    is_current: bool = False
    is_remote: bool = False
    commit_hash: Optional[str] = None


class GitRepository:
    """Represents a Git repository with async operations."""

    def __init__(
        self,
        path: Path | str,
        executable: str = "git",
        timeout: Optional[float] = None,
    ):
        """Initialize a GitRepository.

        Args:
            path: Path to the repository root.
            executable: Git binary to invoke.
            timeout: Per-command timeout in seconds, None for no limit.

        Raises:
            NotARepositoryError: If path has no .git entry.
        """
        self.path = Path(path).resolve()
        self.executable = executable
        self.timeout = timeout

        if not (self.path / ".git").exists():
            raise NotARepositoryError(str(self.path))

    @classmethod
    async def init(cls, path: Path | str, **kwargs) -> "GitRepository":
        """Run `git init` in path and return the new repository."""
        target = Path(path).resolve()
        await run_git_command(
            ["init"],
            cwd=target,
            timeout=kwargs.get("timeout"),
            executable=kwargs.get("executable", "git"),
        )
        return cls(target, **kwargs)

    async def _run(self, args: list[str]) -> str:
        """Run a git command in this repository and return stripped stdout."""
        result = await run_git_command(
            args,
            cwd=self.path,
            timeout=self.timeout,
            executable=self.executable,
        )
        return result.stdout.strip()

    async def get_toplevel(self) -> Path:
        """Ask git for the top-level directory of the working tree."""
        return Path(await self._run(["rev-parse", "--show-toplevel"]))

    async def get_status(self) -> GitStatus:
        """Get the current repository status with a single status call."""
        output = await run_git_command(
            ["status", "--porcelain=v1", "--branch", "-z"],
            cwd=self.path,
            timeout=self.timeout,
            executable=self.executable,
        )
        parsed = parse_git_status(output.stdout)

        is_clean = not any([
            parsed["staged"],
            parsed["modified"],
            parsed["created"],
            parsed["deleted"],
            parsed["untracked"],
            parsed["conflicted"],
        ])

        return GitStatus(is_clean=is_clean, **parsed)

    async def add(self, files: list[str]) -> str:
        """Stage files for commit.

        Args:
            files: List of files to add (use ['.'] for all).

        Returns:
            Status message.
        """
        await self._run(["add", "--"] + files)
        return f"Staged {len(files)} path(s)"

    async def commit(
        self,
        message: str,
        no_verify: bool = False,
        allow_empty: bool = False,
    ) -> GitCommitSummary:
        """Create a commit from the staged changes.

        Args:
            message: Commit message.
            no_verify: Skip pre-commit and commit-msg hooks.
            allow_empty: Permit a commit that records no changes.

        Returns:
            Summary of the created commit.
        """
        args = ["commit", "-m", message]
        if no_verify:
            args.append("--no-verify")
        if allow_empty:
            args.append("--allow-empty")

        output = await self._run(args)
        parsed = parse_commit_output(output)

        return GitCommitSummary(
            commit=parsed["commit"],
            branch=parsed["branch"],
            **parsed["summary"],
        )

    async def push(
        self,
        remote: str,
        branch: str,
        force: bool = False,
        set_upstream: bool = False,
    ) -> str:
        """Push a branch to a remote.

        Returns:
            Git's progress output (git writes push reports to stderr).
        """
        args = ["push"]
        if set_upstream:
            args.append("--set-upstream")
        if force:
            args.append("--force")
        args.extend([remote, branch])

        result = await run_git_command(
            args,
            cwd=self.path,
            timeout=self.timeout,
            executable=self.executable,
        )
        return (result.stderr or result.stdout).strip()

    async def get_log(self, limit: int = 10) -> list[GitCommit]:
        """Get commit history, most recent first."""
        fmt = LOG_FIELD_SEP.join(["%H", "%an", "%ae", "%aI", "%s"])
        try:
            output = await self._run(["log", f"--format={fmt}", f"-n{limit}"])
        except GitError as e:
            # A freshly initialized repository has no HEAD yet
            if "does not have any commits" in str(e):
                return []
            raise

        commits = []
        for line in output.split("\n"):
            if line:
                parsed = parse_commit_line(line)
                if parsed:
                    commits.append(GitCommit(**parsed))

        return commits

    async def get_diff(self, staged: bool = False) -> GitDiff:
        """Get diff statistics for the working tree (or the index if staged)."""
        args = ["diff", "--stat"]
        if staged:
            args.insert(1, "--cached")

        output = await self._run(args)
        stats = format_diff_stat(output)

        return GitDiff(
            files=stats["files"],
            insertions=stats["insertions"],
            deletions=stats["deletions"],
            stat=output,
        )

    async def get_branches(self) -> list[GitBranch]:
        """Get list of local and remote branches."""
        output = await self._run(["branch", "-a", "-v", "--no-abbrev"])

        branches = []
        for line in output.split("\n"):
            if not line.strip():
                continue

            is_current = line.startswith("*")
            line = line.lstrip("* ").strip()

            # "name hash subject" or "remotes/origin/HEAD -> origin/main"
            parts = line.split()
            if not parts or parts[0] == "(HEAD":
                continue

            name = parts[0]
            commit_hash = None
            if len(parts) > 1 and not parts[1].startswith("->"):
                commit_hash = parts[1]

            branches.append(GitBranch(
                name=name,
                is_current=is_current,
                is_remote=name.startswith("remotes/"),
                commit_hash=commit_hash,
            ))

        return branches

    async def create_branch(self, name: str) -> str:
        """Create a new branch and switch to it."""
        await self._run(["checkout", "-b", name])
        return f"Created branch '{name}'"

    async def checkout(self, target: str) -> str:
        """Switch to an existing branch."""
        await self._run(["checkout", target])
        return f"Switched to branch '{target}'"

    async def reset_hard(self) -> None:
        """Discard all working tree and index changes."""
        await self._run(["reset", "--hard"])

    async def restore(self, files: list[str]) -> None:
        """Discard working tree changes to specific files."""
        await self._run(["checkout", "--"] + files)

    async def unstage(self, files: Optional[list[str]] = None) -> None:
        """Remove paths (or everything) from the index, keeping the working tree."""
        args = ["reset"]
        if files:
            args.extend(["HEAD", "--"] + files)
        await self._run(args)

    async def raw(self, args: list[str]) -> str:
        """Run an arbitrary git command in this repository."""
        return await self._run(args)
