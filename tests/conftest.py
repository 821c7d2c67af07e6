"""Pytest configuration and fixtures for gitpush tests."""

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest

from gitpush.config import Settings, reset_settings
from gitpush.git import GitOperator, GitResult, GitStatus


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Remove GITPUSH_* environment variables for the duration of a test."""
    original = {key: value for key, value in os.environ.items() if key.startswith("GITPUSH_")}
    for key in original:
        del os.environ[key]

    reset_settings()

    yield

    for key in [k for k in os.environ if k.startswith("GITPUSH_")]:
        del os.environ[key]
    os.environ.update(original)

    reset_settings()


@pytest.fixture
def test_settings(clean_env: None) -> Settings:
    """Settings built from model defaults only."""
    return Settings()


def git(cwd: Path, *args: str) -> str:
    """Run git synchronously in cwd and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


@pytest.fixture
def run_git():
    """Synchronous git runner for arranging repository state."""
    return git


@pytest.fixture
def git_repo(temp_dir: Path) -> Path:
    """Create an empty repository on branch main with a local identity."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    repo = temp_dir / "repo"
    repo.mkdir()
    git(repo, "init")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    git(repo, "config", "user.name", "Test User")
    git(repo, "config", "user.email", "test@example.com")
    git(repo, "config", "commit.gpgsign", "false")
    return repo


@pytest.fixture
def committed_repo(git_repo: Path) -> Path:
    """A repository with one commit containing README.md."""
    (git_repo / "README.md").write_text("# Test\n", encoding="utf-8")
    git(git_repo, "add", "README.md")
    git(git_repo, "commit", "-m", "Initial commit")
    return git_repo


def _make_status(**kwargs) -> GitStatus:
    """Build a GitStatus, deriving is_clean from the lists unless given."""
    kwargs.setdefault("current_branch", "main")
    if "is_clean" not in kwargs:
        kwargs["is_clean"] = not any(
            kwargs.get(name)
            for name in ("modified", "created", "deleted", "staged", "untracked", "conflicted")
        )
    return GitStatus(**kwargs)


@pytest.fixture
def status_factory():
    """Factory for GitStatus values."""
    return _make_status


@pytest.fixture
def mock_operator(temp_dir: Path) -> MagicMock:
    """A gateway double whose repository check succeeds."""
    operator = MagicMock(spec=GitOperator)
    operator.ensure_repository = AsyncMock(return_value=GitResult(
        success=True,
        action="check_repository",
        is_repository=True,
        root=temp_dir,
    ))
    operator.get_status = AsyncMock(return_value=GitResult(
        success=True,
        action="get_status",
        data=_make_status(),
    ))
    operator.add_files = AsyncMock(return_value=GitResult(
        success=True,
        action="add_files",
        message="Staged 1 path(s)",
        data={"files": ["."]},
    ))
    operator.commit = AsyncMock(return_value=GitResult(
        success=True,
        action="commit",
        message="Committed abc1234: feat: test",
        data={
            "branch": "main",
            "commit": "abc1234",
            "summary": {"changes": 1, "insertions": 1, "deletions": 0},
        },
    ))
    operator.commit_and_push = AsyncMock()
    operator.get_log = AsyncMock(return_value=GitResult(success=True, action="get_log", data=[]))
    operator.get_diff = AsyncMock()
    operator.get_branches = AsyncMock()
    operator.create_branch = AsyncMock()
    operator.checkout_branch = AsyncMock()
    return operator
