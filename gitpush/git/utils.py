"""Git utility functions for gitpush."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from gitpush.errors import GitError

logger = logging.getLogger(__name__)

# Field separator for custom log formats, chosen so it never shows up in messages
LOG_FIELD_SEP = "\x1f"

COMMIT_HEADER_PATTERN = re.compile(
    r"^\[(?P<branch>.+?)(?: \(root-commit\))? (?P<hash>[0-9a-f]{4,40})\]"
)
BRANCH_HEADER_PATTERN = re.compile(
    r"^## (?:No commits yet on |Initial commit on )?(?P<branch>.+?)"
    r"(?:\.\.\.(?P<tracking>\S+))?(?: \[(?P<counts>[^\]]+)\])?$"
)


@dataclass
class GitCommandResult:
    """Output of a finished git process."""

    args: list[str]
    returncode: int
    stdout: str
    stderr: str


def find_git_root(start_path: Path | str) -> Optional[Path]:
    """Find the root of a git repository.

    Walks up the directory tree from start_path looking for a .git entry.
    The walk is bounded by the filesystem root.

    Args:
        start_path: Path to start searching from.

    Returns:
        Path to the repository root, or None if not in a git repository.
    """
    path = Path(start_path).resolve()

    for parent in [path] + list(path.parents):
        if (parent / ".git").exists():
            return parent

    return None


async def run_git_command(
    args: list[str],
    cwd: Path | str | None = None,
    timeout: Optional[float] = None,
    check: bool = True,
    executable: str = "git",
) -> GitCommandResult:
    """Run a git command and return the result.

    Args:
        args: Git command arguments (without 'git' prefix).
        cwd: Working directory for the command.
        timeout: Command timeout in seconds. None waits indefinitely.
        check: If True, raise GitError on non-zero exit.
        executable: Name or path of the git binary.

    Returns:
        GitCommandResult with stdout/stderr.

    Raises:
        GitError: If the binary is missing, the command times out, or
            check=True and the command fails.
    """
    cmd = [executable] + args

    logger.debug(f"Running git command: {' '.join(cmd)}")

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd) if cwd else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        raise GitError(f"Git executable not found: {executable}")

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise GitError(f"Git command timed out after {timeout}s: {' '.join(cmd)}")

    result = GitCommandResult(
        args=args,
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )

    if check and result.returncode != 0:
        error_msg = (
            result.stderr.strip()
            or result.stdout.strip()
            or f"Git command failed with exit code {result.returncode}"
        )
        raise GitError(error_msg, result.returncode, result.stderr)

    return result


def _parse_branch_header(line: str) -> dict:
    """Parse the '## branch...upstream [ahead N, behind M]' status header."""
    info = {"current_branch": None, "tracking": None, "ahead": 0, "behind": 0}

    if line.startswith("## HEAD (no branch)"):
        return info

    match = BRANCH_HEADER_PATTERN.match(line)
    if not match:
        return info

    info["current_branch"] = match.group("branch")
    info["tracking"] = match.group("tracking")

    counts = match.group("counts") or ""
    for part in counts.split(","):
        part = part.strip()
        if part.startswith("ahead "):
            info["ahead"] = int(part.split()[1])
        elif part.startswith("behind "):
            info["behind"] = int(part.split()[1])

    return info


def parse_git_status(porcelain_output: str) -> dict:
    """Parse `git status --porcelain=v1 --branch -z` output.

    Entries are NUL-terminated and paths are printed verbatim, so names with
    spaces or non-ASCII characters need no unquoting. A rename or copy entry
    is followed by a second entry holding the source path.

    Args:
        porcelain_output: Output from the status command.

    Returns:
        Dictionary with categorized file lists and branch information.
    """
    staged = []
    modified = []
    created = []
    deleted = []
    renamed = []
    untracked = []
    conflicted = []
    branch_info = {"current_branch": None, "tracking": None, "ahead": 0, "behind": 0}

    entries = iter(porcelain_output.split("\0"))
    for entry in entries:
        if not entry:
            continue

        if entry.startswith("## "):
            branch_info = _parse_branch_header(entry)
            continue

        # Porcelain format: XY filename
        # X = index status, Y = working tree status
        if len(entry) < 4:
            continue

        x, y = entry[0], entry[1]
        filename = entry[3:]

        if x in "RC":
            next(entries, None)

        if x == "?" and y == "?":
            untracked.append(filename)
            continue

        if x == "U" or y == "U" or (x == "A" and y == "A") or (x == "D" and y == "D"):
            conflicted.append(filename)
            continue

        if x in "MADRC":
            staged.append(filename)
        if x == "A":
            created.append(filename)
        if x == "R":
            renamed.append(filename)
        if "M" in (x, y):
            modified.append(filename)
        if "D" in (x, y):
            deleted.append(filename)

    return {
        "staged": staged,
        "modified": modified,
        "created": created,
        "deleted": deleted,
        "renamed": renamed,
        "untracked": untracked,
        "conflicted": conflicted,
        **branch_info,
    }


def parse_commit_line(line: str, sep: str = LOG_FIELD_SEP) -> dict:
    """Parse a formatted git log line.

    Expects the fields hash, author, email, date and subject in that order.

    Args:
        line: Line from git log with custom format.
        sep: Separator used in format string.

    Returns:
        Dictionary with commit information, empty if the line is malformed.
    """
    parts = line.strip().split(sep, 4)
    if len(parts) >= 5:
        return {
            "hash": parts[0],
            "short_hash": parts[0][:7],
            "author": parts[1],
            "email": parts[2],
            "date": parts[3],
            "message": parts[4],
        }
    return {}


def format_diff_stat(diff_output: str) -> dict:
    """Extract statistics from diff --stat output.

    Args:
        diff_output: Output from git diff --stat.

    Returns:
        Dictionary with diff statistics.
    """
    insertions = 0
    deletions = 0
    changes = 0
    files_changed = []

    for line in diff_output.strip().split("\n"):
        # Lines like: "file.py | 10 ++---"
        if "|" in line and "changed" not in line:
            filename = line.split("|")[0].strip()
            if filename:
                files_changed.append(filename)

        # Summary line: "2 files changed, 10 insertions(+), 5 deletions(-)"
        if "changed" in line:
            for part in line.split(","):
                part = part.strip()
                try:
                    count = int(part.split()[0])
                except (ValueError, IndexError):
                    continue
                if "changed" in part:
                    changes = count
                elif "insertion" in part:
                    insertions = count
                elif "deletion" in part:
                    deletions = count

    return {
        "files": files_changed,
        "changes": changes or len(files_changed),
        "insertions": insertions,
        "deletions": deletions,
    }


def parse_commit_output(output: str) -> dict:
    """Parse the output of `git commit`.

    Args:
        output: Stdout of a successful commit, e.g.
            "[main abc1234] msg\\n 1 file changed, 2 insertions(+)".

    Returns:
        Dictionary with the branch, abbreviated hash and change summary.
    """
    branch = None
    commit_hash = None

    lines = output.strip().split("\n")
    if lines:
        match = COMMIT_HEADER_PATTERN.match(lines[0].strip())
        if match:
            branch = match.group("branch")
            commit_hash = match.group("hash")

    stats = format_diff_stat(output)

    return {
        "branch": branch,
        "commit": commit_hash,
        "summary": {
            "changes": stats["changes"],
            "insertions": stats["insertions"],
            "deletions": stats["deletions"],
        },
    }
