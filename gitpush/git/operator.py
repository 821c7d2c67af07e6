"""Repository gateway for gitpush.

The :class:`GitOperator` is the boundary between command handling and the
git toolchain. Every public operation returns a :class:`GitResult` and
never raises: failures are logged with their context and converted into
``success=False`` results.

Operations accept an explicit ``root``. When it is omitted the root is
discovered from the operator's working directory on each call, so nothing
resolved in one request leaks into the next.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from gitpush.errors import NotARepositoryError
from gitpush.git.repository import GitRepository
from gitpush.git.utils import find_git_root
from gitpush.utils.logging import get_logger

# Sentinels that mean "stage everything"
STAGE_ALL = (".", "all")

PathSpec = Union[str, Sequence[str]]


@dataclass
class GitResult:
    """Result of a gateway operation.

    Attributes:
        success: Whether the operation completed.
        action: Name of the gateway operation.
        message: Human-readable outcome.
        data: Operation-specific payload.
        error: Error message, set only when success is False.
        root: Repository root the operation ran against.
        is_repository: Repository check outcome (repository operations only).
        pushed: Whether anything was pushed (push operations only).
        warning: Non-fatal problem, e.g. a push failure after a commit.
    """

    success: bool
    action: str
    message: Optional[str] = None
    data: Any = None
    error: Optional[str] = None
    root: Optional[Path] = None
    is_repository: Optional[bool] = None
    pushed: Optional[bool] = None
    warning: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary, omitting unset fields."""
        result: dict[str, Any] = {"success": self.success, "action": self.action}
        for key in ("message", "data", "error", "is_repository", "pushed", "warning"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.root is not None:
            result["root"] = str(self.root)
        return result


def _normalize_paths(files: PathSpec) -> list[str]:
    if isinstance(files, str):
        return ["."] if files in STAGE_ALL else [files]
    paths = [f for f in files if f]
    return paths or ["."]


class GitOperator:
    """Async gateway over repository queries and mutations."""

    def __init__(
        self,
        working_directory: Path | str | None = None,
        logger: Optional[logging.Logger] = None,
        remote: str = "origin",
        executable: str = "git",
        timeout: Optional[float] = None,
    ):
        """Initialize the operator.

        Args:
            working_directory: Directory repository discovery starts from.
                Defaults to the process working directory at call time.
            logger: Logger for diagnostics.
            remote: Remote used by push when none is given.
            executable: Git binary to invoke.
            timeout: Per-command timeout in seconds, None for no limit.
        """
        self.working_directory = Path(working_directory) if working_directory else None
        self.logger = logger or get_logger("git.operator")
        self.remote = remote
        self.executable = executable
        self.timeout = timeout

    @property
    def start_dir(self) -> Path:
        return (self.working_directory or Path.cwd()).resolve()

    def find_root(self, start_dir: Path | str | None = None) -> Optional[Path]:
        """Find the nearest ancestor of start_dir (inclusive) holding a .git entry."""
        return find_git_root(start_dir if start_dir is not None else self.start_dir)

    def _open(self, root: Path | str | None) -> GitRepository:
        if root is None:
            root = self.find_root()
            if root is None:
                raise NotARepositoryError(str(self.start_dir))
        return GitRepository(root, executable=self.executable, timeout=self.timeout)

    def _failure(self, action: str, error: Exception, **context: Any) -> GitResult:
        details = ", ".join(f"{k}={v!r}" for k, v in context.items())
        self.logger.error(f"git {action} failed: {error}" + (f" ({details})" if details else ""))
        return GitResult(success=False, action=action, error=str(error) or type(error).__name__)

    # ------------------------------------------------------------------
    # Repository lifecycle
    # ------------------------------------------------------------------

    async def check_repository(self) -> GitResult:
        """Check that a usable repository exists.

        Both the .git marker and a live status query must succeed.
        """
        root = self.find_root()
        if root is None:
            return GitResult(
                success=False,
                action="check_repository",
                is_repository=False,
                error=f"Not a git repository: {self.start_dir}",
            )

        try:
            await self._open(root).get_status()
        except Exception as e:
            self.logger.warning(f"Found .git at {root} but status failed: {e}")
            return GitResult(
                success=False,
                action="check_repository",
                is_repository=False,
                error=str(e),
            )

        return GitResult(
            success=True,
            action="check_repository",
            is_repository=True,
            root=root,
        )

    async def initialize_repository(self) -> GitResult:
        """Run `git init` unless a repository already exists."""
        check = await self.check_repository()
        if check.is_repository:
            return GitResult(
                success=True,
                action="initialize_repository",
                message="Repository already exists",
                is_repository=True,
                root=check.root,
            )

        try:
            self.logger.info(f"Initializing git repository in {self.start_dir}")
            repo = await GitRepository.init(
                self.start_dir,
                executable=self.executable,
                timeout=self.timeout,
            )
        except Exception as e:
            return self._failure("initialize_repository", e, path=str(self.start_dir))

        return GitResult(
            success=True,
            action="initialize_repository",
            message=f"Initialized empty Git repository in {repo.path}",
            is_repository=True,
            root=repo.path,
        )

    async def ensure_repository(self) -> GitResult:
        """Return the existing repository, initializing one if needed."""
        check = await self.check_repository()
        if check.is_repository:
            return check
        return await self.initialize_repository()

    async def get_repo_root(self, root: Path | str | None = None) -> GitResult:
        """Ask git for the top-level directory of the working tree."""
        try:
            toplevel = await self._open(root).get_toplevel()
        except Exception as e:
            return self._failure("get_repo_root", e)
        return GitResult(success=True, action="get_repo_root", root=toplevel, data=str(toplevel))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_status(self, root: Path | str | None = None) -> GitResult:
        """Read the repository status; data is a GitStatus."""
        try:
            self.logger.debug("Reading git status")
            status = await self._open(root).get_status()
        except Exception as e:
            return self._failure("get_status", e)
        return GitResult(success=True, action="get_status", data=status)

    async def get_log(self, limit: int = 10, root: Path | str | None = None) -> GitResult:
        """Get the most recent commits; data is a list of log entry dicts."""
        try:
            commits = await self._open(root).get_log(limit=limit)
        except Exception as e:
            return self._failure("get_log", e, limit=limit)
        return GitResult(
            success=True,
            action="get_log",
            data=[commit.to_dict() for commit in commits],
        )

    async def get_diff(self, root: Path | str | None = None) -> GitResult:
        """Get diff statistics; data is a GitDiff."""
        try:
            diff = await self._open(root).get_diff()
        except Exception as e:
            return self._failure("get_diff", e)
        return GitResult(success=True, action="get_diff", data=diff, message=diff.summary())

    async def get_branches(self, root: Path | str | None = None) -> GitResult:
        """List branches; data has current, local and remote names."""
        try:
            branches = await self._open(root).get_branches()
        except Exception as e:
            return self._failure("get_branches", e)

        current = next((b.name for b in branches if b.is_current), None)
        return GitResult(
            success=True,
            action="get_branches",
            data={
                "current": current,
                "local": [b.name for b in branches if not b.is_remote],
                "remote": [b.name for b in branches if b.is_remote],
            },
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_files(self, files: PathSpec = ".", root: Path | str | None = None) -> GitResult:
        """Stage everything ('.' or 'all'), one path, or a list of paths."""
        paths = _normalize_paths(files)
        try:
            self.logger.info(f"Staging {', '.join(paths)}")
            message = await self._open(root).add(paths)
        except Exception as e:
            return self._failure("add_files", e, files=paths)
        return GitResult(success=True, action="add_files", message=message, data={"files": paths})

    async def commit(
        self,
        message: str,
        no_verify: bool = False,
        allow_empty: bool = False,
        auto_stage: bool = True,
        root: Path | str | None = None,
    ) -> GitResult:
        """Commit staged changes.

        With ``auto_stage`` set and nothing staged, everything is staged first.
        Otherwise only the index is committed, and an empty index fails.
        """
        try:
            repo = self._open(root)
            if auto_stage and not allow_empty:
                status = await repo.get_status()
                if not status.staged:
                    self.logger.warning("Nothing staged, staging all changes before commit")
                    await repo.add(["."])

            self.logger.info(f"Committing: {message}")
            summary = await repo.commit(message, no_verify=no_verify, allow_empty=allow_empty)
        except Exception as e:
            return self._failure("commit", e, message=message)

        return GitResult(
            success=True,
            action="commit",
            message=f"Committed {summary.commit}: {message}",
            data=summary.to_dict(),
        )

    async def add_all_and_commit(
        self,
        message: str,
        no_verify: bool = False,
        root: Path | str | None = None,
    ) -> GitResult:
        """Stage everything, then commit. Staged paths stay staged if the commit fails."""
        added = await self.add_files(".", root=root)
        if not added.success:
            return added
        return await self.commit(message, no_verify=no_verify, root=root)

    async def add_files_and_commit(
        self,
        files: PathSpec,
        message: str,
        no_verify: bool = False,
        root: Path | str | None = None,
    ) -> GitResult:
        """Stage the given paths, then commit."""
        added = await self.add_files(files, root=root)
        if not added.success:
            return added
        return await self.commit(message, no_verify=no_verify, root=root)

    async def push(
        self,
        remote: Optional[str] = None,
        branch: Optional[str] = None,
        force: bool = False,
        root: Path | str | None = None,
    ) -> GitResult:
        """Push a branch, resolving the current branch when none is given.

        The result always carries ``pushed`` so callers can tell an error
        from a push that simply did not happen.
        """
        remote = remote or self.remote
        try:
            repo = self._open(root)
            status = await repo.get_status()
            branch = branch or status.current_branch
            if not branch:
                return GitResult(
                    success=False,
                    action="push",
                    error="Cannot push from a detached HEAD without a branch name",
                    pushed=False,
                )

            self.logger.info(f"Pushing {branch} to {remote}")
            output = await repo.push(
                remote,
                branch,
                force=force,
                set_upstream=status.tracking is None,
            )
        except Exception as e:
            result = self._failure("push", e, remote=remote, branch=branch)
            result.pushed = False
            return result

        return GitResult(
            success=True,
            action="push",
            message=f"Pushed {branch} to {remote}",
            data={"remote": remote, "branch": branch, "output": output},
            pushed=True,
        )

    async def commit_and_push(
        self,
        message: str,
        remote: Optional[str] = None,
        branch: Optional[str] = None,
        no_verify: bool = False,
        auto_stage: bool = True,
        root: Path | str | None = None,
    ) -> GitResult:
        """Commit, then push.

        A push failure after a successful commit is reported as a warning:
        the commit already exists locally.
        """
        committed = await self.commit(message, no_verify=no_verify, auto_stage=auto_stage, root=root)
        if not committed.success:
            return committed

        pushed = await self.push(remote=remote, branch=branch, root=root)
        if not pushed.success:
            self.logger.warning(f"Commit succeeded but push failed: {pushed.error}")
            return GitResult(
                success=True,
                action="commit_and_push",
                message=committed.message,
                data={**committed.data, "push_error": pushed.error},
                pushed=False,
                warning="Commit succeeded but push failed, push manually",
            )

        return GitResult(
            success=True,
            action="commit_and_push",
            message=f"{committed.message} (pushed)",
            data={**committed.data, "push": pushed.data},
            pushed=True,
        )

    async def create_branch(self, name: str, root: Path | str | None = None) -> GitResult:
        """Create a branch and switch to it."""
        try:
            self.logger.info(f"Creating branch {name}")
            message = await self._open(root).create_branch(name)
        except Exception as e:
            return self._failure("create_branch", e, branch=name)
        return GitResult(success=True, action="create_branch", message=message, data={"branch": name})

    async def checkout_branch(self, name: str, root: Path | str | None = None) -> GitResult:
        """Switch to an existing branch."""
        try:
            self.logger.info(f"Checking out branch {name}")
            message = await self._open(root).checkout(name)
        except Exception as e:
            return self._failure("checkout_branch", e, branch=name)
        return GitResult(success=True, action="checkout_branch", message=message, data={"branch": name})

    async def reset_working_directory(
        self,
        files: PathSpec = ".",
        root: Path | str | None = None,
    ) -> GitResult:
        """Discard working tree changes: everything (hard reset) or the given paths."""
        paths = _normalize_paths(files)
        try:
            repo = self._open(root)
            if paths == ["."]:
                self.logger.warning("Discarding all working tree changes")
                await repo.reset_hard()
            else:
                await repo.restore(paths)
        except Exception as e:
            return self._failure("reset_working_directory", e, files=paths)
        return GitResult(success=True, action="reset_working_directory", message="Changes discarded")

    async def unstage_files(
        self,
        files: PathSpec = ".",
        root: Path | str | None = None,
    ) -> GitResult:
        """Remove paths (or everything) from the index."""
        paths = _normalize_paths(files)
        try:
            await self._open(root).unstage(None if paths == ["."] else paths)
        except Exception as e:
            return self._failure("unstage_files", e, files=paths)
        return GitResult(success=True, action="unstage_files", message="Changes unstaged")

    async def execute_custom_command(
        self,
        command: str,
        args: Optional[Sequence[str]] = None,
        root: Path | str | None = None,
    ) -> GitResult:
        """Pass an arbitrary git subcommand through to the toolchain."""
        argv = [command] + list(args or [])
        try:
            self.logger.info(f"Running custom command: git {' '.join(argv)}")
            output = await self._open(root).raw(argv)
        except Exception as e:
            return self._failure("execute_custom_command", e, command=argv)
        return GitResult(success=True, action="execute_custom_command", data=output)
