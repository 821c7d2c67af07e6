"""Tests for Git utility functions."""

import shutil

import pytest

from gitpush.errors import GitError, NotARepositoryError
from gitpush.git.utils import (
    LOG_FIELD_SEP,
    find_git_root,
    format_diff_stat,
    parse_commit_line,
    parse_commit_output,
    parse_git_status,
    run_git_command,
)

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


class TestGitError:
    """Tests for GitError exception."""

    def test_git_error_message(self):
        error = GitError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.code == "GIT_ERROR"

    def test_git_error_with_returncode(self):
        """Test GitError with return code and stderr."""
        error = GitError("Failed", returncode=128, stderr="fatal error")

        assert error.returncode == 128
        assert error.stderr == "fatal error"
        assert error.details == {"returncode": 128, "stderr": "fatal error"}

    def test_not_a_repository(self):
        error = NotARepositoryError("/tmp/x")

        assert isinstance(error, GitError)
        assert error.code == "NOT_A_REPOSITORY"
        assert error.details["path"] == "/tmp/x"


class TestFindGitRoot:
    """Tests for find_git_root function."""

    def test_find_git_root_from_subdirectory(self, tmp_path):
        (tmp_path / ".git").mkdir()
        subdir = tmp_path / "src" / "lib"
        subdir.mkdir(parents=True)

        assert find_git_root(subdir) == tmp_path.resolve()

    def test_find_git_root_from_root(self, tmp_path):
        (tmp_path / ".git").mkdir()
        assert find_git_root(tmp_path) == tmp_path.resolve()

    def test_find_git_root_with_file(self, tmp_path):
        """A .git file (worktree or submodule) also marks a root."""
        (tmp_path / ".git").write_text("gitdir: /path/to/actual/git")
        assert find_git_root(tmp_path) == tmp_path.resolve()

    def test_nearest_root_wins(self, tmp_path):
        (tmp_path / ".git").mkdir()
        nested = tmp_path / "vendor" / "lib"
        nested.mkdir(parents=True)
        (nested / ".git").mkdir()

        assert find_git_root(nested) == nested.resolve()

    def test_not_found_is_never_the_start_dir(self, tmp_path):
        isolated = tmp_path / "isolated"
        isolated.mkdir()

        # tmp_path may itself live inside a checkout
        result = find_git_root(isolated)
        assert result is None or result != isolated.resolve()


class TestParseGitStatus:
    """Tests for porcelain status parsing."""

    def test_empty_output(self):
        parsed = parse_git_status("")

        assert parsed["staged"] == []
        assert parsed["untracked"] == []
        assert parsed["current_branch"] is None

    def test_branch_with_tracking(self):
        parsed = parse_git_status("## main...origin/main [ahead 2, behind 1]\0")

        assert parsed["current_branch"] == "main"
        assert parsed["tracking"] == "origin/main"
        assert parsed["ahead"] == 2
        assert parsed["behind"] == 1

    def test_branch_without_tracking(self):
        parsed = parse_git_status("## feature/login\0")

        assert parsed["current_branch"] == "feature/login"
        assert parsed["tracking"] is None
        assert parsed["ahead"] == 0

    def test_unborn_branch(self):
        parsed = parse_git_status("## No commits yet on main\0?? README.md\0")

        assert parsed["current_branch"] == "main"
        assert parsed["untracked"] == ["README.md"]

    def test_detached_head(self):
        parsed = parse_git_status("## HEAD (no branch)\0")
        assert parsed["current_branch"] is None

    def test_file_categories(self):
        output = "\0".join([
            "## main",
            "A  new.py",
            " M changed.py",
            "MM both.py",
            " D gone.py",
            "R  renamed.py",
            "old.py",
            "UU conflict.py",
            "?? scratch.txt",
        ]) + "\0"
        parsed = parse_git_status(output)

        assert parsed["staged"] == ["new.py", "both.py", "renamed.py"]
        assert parsed["created"] == ["new.py"]
        assert parsed["modified"] == ["changed.py", "both.py"]
        assert parsed["deleted"] == ["gone.py"]
        assert parsed["renamed"] == ["renamed.py"]
        assert parsed["conflicted"] == ["conflict.py"]
        assert parsed["untracked"] == ["scratch.txt"]

    def test_rename_source_is_not_an_entry(self):
        parsed = parse_git_status("## main\0R  docs/new name.md\0?? looks like entry\0 M kept.py\0")

        assert parsed["staged"] == ["docs/new name.md"]
        assert parsed["untracked"] == []
        assert parsed["modified"] == ["kept.py"]

    def test_paths_are_verbatim(self):
        parsed = parse_git_status("## main\0A  新功能.txt\0?? with space.txt\0")

        assert parsed["staged"] == ["新功能.txt"]
        assert parsed["created"] == ["新功能.txt"]
        assert parsed["untracked"] == ["with space.txt"]


class TestParseCommitLine:
    """Tests for parse_commit_line function."""

    def test_parse_commit_line(self):
        line = LOG_FIELD_SEP.join([
            "a" * 40,
            "John Doe",
            "john@example.com",
            "2024-01-15T10:30:00+00:00",
            "Initial commit",
        ])
        result = parse_commit_line(line)

        assert result["hash"] == "a" * 40
        assert result["short_hash"] == "aaaaaaa"
        assert result["author"] == "John Doe"
        assert result["email"] == "john@example.com"
        assert result["date"] == "2024-01-15T10:30:00+00:00"
        assert result["message"] == "Initial commit"

    def test_message_with_pipes(self):
        line = LOG_FIELD_SEP.join(["abc", "A", "a@b.c", "2024-01-15", "feat: a | b"])
        assert parse_commit_line(line)["message"] == "feat: a | b"

    def test_malformed_line(self):
        assert parse_commit_line("not a log line") == {}


class TestFormatDiffStat:
    """Tests for format_diff_stat function."""

    def test_diff_stat(self):
        output = (
            " a.py | 2 +-\n"
            " b.py | 3 ++-\n"
            " 2 files changed, 3 insertions(+), 2 deletions(-)\n"
        )
        stats = format_diff_stat(output)

        assert stats["files"] == ["a.py", "b.py"]
        assert stats["changes"] == 2
        assert stats["insertions"] == 3
        assert stats["deletions"] == 2

    def test_insertions_only(self):
        stats = format_diff_stat(" a.py | 4 ++++\n 1 file changed, 4 insertions(+)\n")

        assert stats["insertions"] == 4
        assert stats["deletions"] == 0

    def test_empty(self):
        stats = format_diff_stat("")

        assert stats["files"] == []
        assert stats["changes"] == 0


class TestParseCommitOutput:
    """Tests for parse_commit_output function."""

    def test_root_commit(self):
        output = (
            "[main (root-commit) abc1234] Initial commit\n"
            " 1 file changed, 1 insertion(+)\n"
            " create mode 100644 README.md\n"
        )
        parsed = parse_commit_output(output)

        assert parsed["branch"] == "main"
        assert parsed["commit"] == "abc1234"
        assert parsed["summary"] == {"changes": 1, "insertions": 1, "deletions": 0}

    def test_branch_with_slash(self):
        output = "[feature/x 1a2b3c4] fix: typo\n 1 file changed, 1 insertion(+), 1 deletion(-)\n"
        parsed = parse_commit_output(output)

        assert parsed["branch"] == "feature/x"
        assert parsed["commit"] == "1a2b3c4"
        assert parsed["summary"]["deletions"] == 1

    def test_unrecognized_output(self):
        parsed = parse_commit_output("something else")

        assert parsed["branch"] is None
        assert parsed["commit"] is None


class TestRunGitCommand:
    """Tests for run_git_command function."""

    @pytest.mark.asyncio
    async def test_missing_executable(self, tmp_path):
        with pytest.raises(GitError, match="not found"):
            await run_git_command(["status"], cwd=tmp_path, executable="gitpush-no-such-git")

    @requires_git
    @pytest.mark.asyncio
    async def test_version(self, tmp_path):
        result = await run_git_command(["--version"], cwd=tmp_path)

        assert result.returncode == 0
        assert "git version" in result.stdout

    @requires_git
    @pytest.mark.asyncio
    async def test_failure_raises(self, tmp_path):
        with pytest.raises(GitError) as exc_info:
            await run_git_command(["not-a-git-subcommand"], cwd=tmp_path)

        assert exc_info.value.returncode != 0

    @requires_git
    @pytest.mark.asyncio
    async def test_failure_without_check(self, tmp_path):
        result = await run_git_command(["not-a-git-subcommand"], cwd=tmp_path, check=False)

        assert result.returncode != 0
        assert result.stderr
