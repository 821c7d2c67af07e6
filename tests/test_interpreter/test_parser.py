"""Tests for the natural-language intent interpreter."""

import dataclasses
import re
from datetime import datetime

import pytest

from gitpush.interpreter import (
    CommandKind,
    CommandPattern,
    CommitType,
    IntentInterpreter,
    ParsedCommand,
)

FIXED_TIME = datetime(2024, 1, 15, 10, 30, 0)


@pytest.fixture
def interpreter() -> IntentInterpreter:
    return IntentInterpreter(clock=lambda: FIXED_TIME)


class TestInterpretCommit:
    """Tests for commit phrases."""

    def test_chinese_commit_without_space(self, interpreter):
        """A Chinese verb directly followed by its payload is a commit."""
        parsed = interpreter.interpret("提交添加了新功能")

        assert parsed.kind == CommandKind.COMMIT
        assert parsed.message == "添加了新功能"
        assert parsed.commit_type == CommitType.FEAT
        assert parsed.confidence == 0.85

    def test_english_commit(self, interpreter):
        parsed = interpreter.interpret("commit fix login bug")

        assert parsed.kind == CommandKind.COMMIT
        assert parsed.message == "fix login bug"
        assert parsed.commit_type == CommitType.FIX
        assert parsed.confidence == 0.95

    def test_case_insensitive_keeps_original_casing(self, interpreter):
        parsed = interpreter.interpret("COMMIT Fix Login Bug")

        assert parsed.kind == CommandKind.COMMIT
        assert parsed.message == "Fix Login Bug"
        assert parsed.commit_type == CommitType.FIX

    def test_ba_construction(self, interpreter):
        parsed = interpreter.interpret("把修复提交")

        assert parsed.kind == CommandKind.COMMIT
        assert parsed.message == "修复"
        assert parsed.commit_type == CommitType.FIX

    def test_push_phrase_is_commit(self, interpreter):
        parsed = interpreter.interpret("push new feature")

        assert parsed.kind == CommandKind.COMMIT
        assert parsed.message == "new feature"
        assert parsed.commit_type == CommitType.FEAT

    def test_chinese_push_phrase(self, interpreter):
        parsed = interpreter.interpret("推送新功能")

        assert parsed.kind == CommandKind.COMMIT
        assert parsed.message == "新功能"

    def test_surrounding_whitespace_is_trimmed(self, interpreter):
        parsed = interpreter.interpret("   commit fix login bug   ")

        assert parsed.message == "fix login bug"
        assert parsed.original_text == "commit fix login bug"


class TestInterpretQueries:
    """Tests for idioms without a payload."""

    def test_chinese_status_idiom(self, interpreter):
        parsed = interpreter.interpret("查看状态")

        assert parsed.kind == CommandKind.STATUS
        assert parsed.message == ""
        assert parsed.commit_type is None
        assert parsed.confidence == 0.7

    @pytest.mark.parametrize("text", ["git status", "有什么变化", "what changed"])
    def test_status_idioms(self, interpreter, text):
        assert interpreter.interpret(text).kind == CommandKind.STATUS

    @pytest.mark.parametrize(
        "text",
        ["提交历史", "查看提交记录", "show log", "history", "show commit history", "commit log"],
    )
    def test_log_idioms(self, interpreter, text):
        """History phrases that mention 提交 or commit are still log queries."""
        parsed = interpreter.interpret(text)

        assert parsed.kind == CommandKind.LOG
        assert parsed.message == ""

    @pytest.mark.parametrize("text", ["查看改动", "diff", "比较变化"])
    def test_diff_idioms(self, interpreter, text):
        assert interpreter.interpret(text).kind == CommandKind.DIFF

    def test_log_confidence(self, interpreter):
        assert interpreter.interpret("show log").confidence == 0.75


class TestInterpretAddAndBranch:
    """Tests for add and branch phrases."""

    def test_add_path(self, interpreter):
        parsed = interpreter.interpret("add src/app.py")

        assert parsed.kind == CommandKind.ADD
        assert parsed.message == "src/app.py"
        assert parsed.commit_type is None
        assert parsed.confidence == 0.9

    def test_chinese_add(self, interpreter):
        parsed = interpreter.interpret("添加 README.md")

        assert parsed.kind == CommandKind.ADD
        assert parsed.message == "README.md"

    def test_create_branch_captures_name(self, interpreter):
        parsed = interpreter.interpret("创建分支 feature-x")

        assert parsed.kind == CommandKind.BRANCH
        assert parsed.message == "feature-x"
        assert parsed.confidence == 0.9

    def test_english_branch_name(self, interpreter):
        parsed = interpreter.interpret("checkout branch develop")

        assert parsed.kind == CommandKind.BRANCH
        assert parsed.message == "develop"

    def test_list_branches(self, interpreter):
        parsed = interpreter.interpret("branches")

        assert parsed.kind == CommandKind.BRANCH
        assert parsed.message == ""


class TestPrecedence:
    """Kind precedence: commit > add > status > log > diff > branch."""

    @pytest.mark.parametrize(
        "text, kind",
        [
            ("commit status changes", CommandKind.COMMIT),
            ("add log file", CommandKind.ADD),
            ("status of branch", CommandKind.STATUS),
            ("show log diff", CommandKind.LOG),
            ("diff branch", CommandKind.DIFF),
            ("log of branch", CommandKind.LOG),
        ],
    )
    def test_first_kind_wins(self, interpreter, text, kind):
        assert interpreter.interpret(text).kind == kind

    def test_commit_payload_keeps_later_keywords(self, interpreter):
        parsed = interpreter.interpret("commit status changes")
        assert parsed.message == "status changes"

    def test_history_words_inside_a_message_still_commit(self, interpreter):
        parsed = interpreter.interpret("commit historical import logic")

        assert parsed.kind == CommandKind.COMMIT
        assert parsed.message == "historical import logic"

    def test_custom_pattern_table(self):
        patterns = (CommandPattern(CommandKind.LOG, re.compile("历史"), takes_text=False),)
        interpreter = IntentInterpreter(patterns=patterns)

        assert interpreter.interpret("提交历史").kind == CommandKind.LOG
        assert interpreter.interpret("commit fix").kind == CommandKind.COMMIT


class TestFallback:
    """Tests for text that no pattern recognizes."""

    def test_unrecognized_text(self, interpreter):
        parsed = interpreter.interpret("随便说点什么")

        assert parsed.kind == CommandKind.STATUS
        assert parsed.message == ""
        assert parsed.confidence == 0.3

    def test_empty_text(self, interpreter):
        parsed = interpreter.interpret("   ")

        assert parsed.kind == CommandKind.STATUS
        assert parsed.confidence == 0.3
        assert parsed.original_text == ""

    def test_bare_commit_keyword(self, interpreter):
        parsed = interpreter.interpret("commit")

        assert parsed.kind == CommandKind.COMMIT
        assert parsed.confidence == 0.7
        assert parsed.message == "Auto commit at 2024-01-15 10:30:00"
        assert parsed.commit_type == CommitType.FEAT

    @pytest.mark.parametrize("text", ["有变化吗", "please check it"])
    def test_status_keywords(self, interpreter, text):
        parsed = interpreter.interpret(text)

        assert parsed.kind == CommandKind.STATUS
        assert parsed.confidence == 0.6

    @pytest.mark.parametrize(
        "text",
        ["", "x", "commit " + "a" * 200, "查看状态", "随便说点什么", "diff", "add ."],
    )
    def test_confidence_in_unit_interval(self, interpreter, text):
        assert 0.0 <= interpreter.interpret(text).confidence <= 1.0


class TestDetectCommitType:
    """Tests for commit type detection."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("修复登录问题", CommitType.FIX),
            ("更新文档", CommitType.DOCS),
            ("update readme", CommitType.DOCS),
            ("调整样式", CommitType.STYLE),
            ("重构代码", CommitType.REFACTOR),
            ("优化性能", CommitType.PERF),
            ("添加测试", CommitType.TEST),
            ("杂项清理", CommitType.CHORE),
            ("新功能上线", CommitType.FEAT),
            ("random words", CommitType.FEAT),
        ],
    )
    def test_detect(self, interpreter, text, expected):
        assert interpreter.detect_commit_type(text) == expected

    def test_feat_scanned_before_fix(self, interpreter):
        assert interpreter.detect_commit_type("new feature and bug") == CommitType.FEAT


class TestFormatCommitMessage:
    """Tests for commit message formatting."""

    def test_conventional(self, interpreter):
        parsed = ParsedCommand(
            kind=CommandKind.COMMIT,
            message="添加用户登录功能",
            commit_type=CommitType.FEAT,
        )
        assert interpreter.format_commit_message(parsed, True) == "feat: 添加用户登录功能"

    def test_plain(self, interpreter):
        parsed = ParsedCommand(kind=CommandKind.COMMIT, message="普通提交消息")
        assert interpreter.format_commit_message(parsed, False) == "普通提交消息"

    def test_missing_type_defaults_to_feat(self, interpreter):
        parsed = ParsedCommand(kind=CommandKind.COMMIT, message="something")
        assert interpreter.format_commit_message(parsed) == "feat: something"

    def test_empty_message_uses_default(self, interpreter):
        parsed = ParsedCommand(kind=CommandKind.COMMIT, commit_type=CommitType.FIX)

        assert interpreter.format_commit_message(parsed) == "fix: Auto commit at 2024-01-15 10:30:00"
        assert interpreter.format_commit_message(parsed, False) == "Auto commit at 2024-01-15 10:30:00"

    @pytest.mark.parametrize("message", ["fix: typo", "fix(auth): handle expiry", "feat!: drop v1"])
    def test_existing_prefix_not_doubled(self, interpreter, message):
        parsed = ParsedCommand(kind=CommandKind.COMMIT, message=message, commit_type=CommitType.FEAT)
        assert interpreter.format_commit_message(parsed) == message


class TestAnalyzeIntent:
    """Tests for coarse intent analysis."""

    def test_action_and_target(self, interpreter):
        analysis = interpreter.analyze_intent("提交所有更改")

        assert analysis.action == "commit"
        assert analysis.target == "all"
        assert analysis.modifiers == ()
        assert analysis.confidence == 1.0

    def test_modifiers(self, interpreter):
        analysis = interpreter.analyze_intent("强制自动提交")

        assert analysis.action == "commit"
        assert analysis.target is None
        assert analysis.modifiers == ("auto", "force")
        assert analysis.confidence == 0.8

    def test_nothing_recognized(self, interpreter):
        analysis = interpreter.analyze_intent("hello")

        assert analysis.action is None
        assert analysis.target is None
        assert analysis.confidence == 0.5


class TestParsedCommand:
    """Tests for the ParsedCommand value."""

    def test_is_immutable(self):
        parsed = ParsedCommand(kind=CommandKind.STATUS)
        with pytest.raises(dataclasses.FrozenInstanceError):
            parsed.message = "changed"

    def test_to_dict(self, interpreter):
        data = interpreter.interpret("commit fix login bug").to_dict()

        assert data["command"] == "commit"
        assert data["message"] == "fix login bug"
        assert data["commit_type"] == "fix"
        assert data["original_text"] == "commit fix login bug"
