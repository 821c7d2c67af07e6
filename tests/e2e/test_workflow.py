"""End-to-end workflows through the dispatcher against real repositories."""

import shutil
from datetime import datetime
from pathlib import Path

import pytest

from gitpush.dispatcher import CommandDispatcher, create_dispatcher
from gitpush.git import GitOperator
from gitpush.interpreter import IntentInterpreter
from gitpush.tools import ToolRegistry, register_git_tools

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _dispatcher(root: Path, settings) -> CommandDispatcher:
    return CommandDispatcher(
        interpreter=IntentInterpreter(clock=lambda: datetime(2024, 1, 15, 10, 30, 0)),
        operator=GitOperator(root),
        settings=settings,
    )


class TestCommitWorkflow:
    """Stage, commit and inspect history in one repository."""

    @pytest.mark.asyncio
    async def test_stage_commit_clean(self, committed_repo, test_settings):
        dispatcher = _dispatcher(committed_repo, test_settings)
        (committed_repo / "login.py").write_text("def login():\n    return True\n", encoding="utf-8")

        status = await dispatcher.process({"text": "查看状态"})
        assert status.success is True
        assert status.details["files"]["untracked"] == ["login.py"]

        added = await dispatcher.process({"text": "添加 login.py"})
        assert added.success is True

        status = await dispatcher.process({"text": "status"})
        assert status.details["files"]["staged"] == ["login.py"]
        assert status.details["files"]["untracked"] == []

        committed = await dispatcher.process({"text": "提交修复登录bug"})
        assert committed.success is True
        assert committed.message == "fix: 修复登录bug"
        assert committed.pushed is False
        assert committed.details["branch"] == "main"

        status = await dispatcher.process({"text": "查看状态"})
        assert status.details["is_clean"] is True

        log = await dispatcher.process({"text": "提交历史", "context": {"limit": 1}})
        assert log.details["count"] == 1
        assert log.details["commits"][0]["message"] == "fix: 修复登录bug"

    @pytest.mark.asyncio
    async def test_nothing_to_commit(self, committed_repo, test_settings):
        dispatcher = _dispatcher(committed_repo, test_settings)

        result = await dispatcher.process({"text": "commit nothing here"})

        assert result.success is False
        assert result.code == "PRECONDITION_FAILED"
        log = await dispatcher.process({"command": "log"})
        assert log.details["count"] == 1

    @pytest.mark.asyncio
    async def test_auto_push_without_remote(self, committed_repo, test_settings):
        dispatcher = _dispatcher(committed_repo, test_settings)
        (committed_repo / "README.md").write_text("# Updated\n", encoding="utf-8")

        result = await dispatcher.process({"text": "提交更新文档", "context": {"autoPush": True}})

        assert result.success is True
        assert result.pushed is False
        assert result.warning

    @pytest.mark.asyncio
    async def test_auto_stage_disabled_commits_only_staged(self, committed_repo, test_settings, run_git):
        dispatcher = _dispatcher(committed_repo, test_settings)
        (committed_repo / "a.txt").write_text("a", encoding="utf-8")
        (committed_repo / "b.txt").write_text("b", encoding="utf-8")
        run_git(committed_repo, "add", "a.txt")

        result = await dispatcher.process({"text": "commit add a", "context": {"autoStage": False}})

        assert result.success is True
        status = await dispatcher.process({"text": "status"})
        assert status.details["files"]["untracked"] == ["b.txt"]

    @pytest.mark.asyncio
    async def test_auto_stage_disabled_with_nothing_staged(self, committed_repo, test_settings):
        dispatcher = _dispatcher(committed_repo, test_settings)
        (committed_repo / "README.md").write_text("# Updated\n", encoding="utf-8")
        (committed_repo / "b.txt").write_text("b", encoding="utf-8")

        result = await dispatcher.process({"text": "commit update", "context": {"autoStage": False}})

        assert result.success is False
        assert result.code == "GIT_ERROR"
        status = await dispatcher.process({"text": "status"})
        assert status.details["files"]["untracked"] == ["b.txt"]
        assert status.details["files"]["modified"] == ["README.md"]
        log = await dispatcher.process({"command": "log"})
        assert log.details["count"] == 1

    @pytest.mark.asyncio
    async def test_chinese_and_spaced_file_names(self, committed_repo, test_settings):
        dispatcher = _dispatcher(committed_repo, test_settings)
        (committed_repo / "新功能.txt").write_text("新\n", encoding="utf-8")
        (committed_repo / "my notes.txt").write_text("n\n", encoding="utf-8")

        added = await dispatcher.process({"text": "添加 新功能.txt"})
        assert added.success is True
        status = await dispatcher.process({"text": "查看状态"})
        assert status.details["files"]["staged"] == ["新功能.txt"]
        assert status.details["files"]["untracked"] == ["my notes.txt"]

        added = await dispatcher.process({"text": "添加 my notes.txt"})
        assert added.success is True
        status = await dispatcher.process({"text": "查看状态"})
        assert sorted(status.details["files"]["staged"]) == ["my notes.txt", "新功能.txt"]


class TestRepositoryBootstrap:
    """A directory without a repository gets one on first use."""

    @pytest.mark.asyncio
    async def test_initializes_and_reports_clean(self, temp_dir, test_settings, monkeypatch):
        target = temp_dir / "fresh"
        target.mkdir()
        dispatcher = _dispatcher(target, test_settings)
        monkeypatch.setattr(dispatcher.operator, "find_root", lambda start_dir=None: None)

        # The first request runs git init; later ones find the new .git entry
        first = await dispatcher.process({"text": "status"})
        monkeypatch.undo()
        second = await dispatcher.process({"text": "status"})

        assert (target / ".git").exists()
        assert first.success is True
        assert second.success is True
        assert second.details["is_clean"] is True


class TestBranchWorkflow:
    """Branch creation and switching through phrases."""

    @pytest.mark.asyncio
    async def test_create_then_switch_back(self, committed_repo, test_settings):
        dispatcher = _dispatcher(committed_repo, test_settings)

        created = await dispatcher.process({"text": "创建分支 feature-x"})
        assert created.success is True

        listed = await dispatcher.process({"text": "branches"})
        assert listed.details["current"] == "feature-x"

        switched = await dispatcher.process({"text": "切换分支 main"})
        assert switched.success is True
        assert switched.details == {"action": "checkout", "branch": "main"}

        listed = await dispatcher.process({"text": "branches"})
        assert listed.details["current"] == "main"
        assert sorted(listed.details["local"]) == ["feature-x", "main"]


class TestToolWorkflow:
    """Tool calls routed through the registry to a real repository."""

    @pytest.mark.asyncio
    async def test_tool_commit(self, committed_repo, test_settings):
        registry = ToolRegistry()
        register_git_tools(registry, create_dispatcher(test_settings, working_directory=committed_repo))
        (committed_repo / "notes.md").write_text("notes\n", encoding="utf-8")

        result = await registry.call("git_execute_action", {
            "action": "commit",
            "message": "add notes",
            "commitType": "docs",
        })

        assert result["success"] is True
        assert result["message"] == "docs: add notes"
        assert "error" not in result

        diff = await registry.call("git_natural_language", {"text": "diff"})
        assert diff["success"] is True
        assert diff["details"]["files"] == []
