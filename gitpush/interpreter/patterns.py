"""Pattern tables for natural-language git commands.

Commands are recognized in Chinese and English. The order of
COMMAND_PATTERNS is significant: the first matching entry wins, and kinds
are listed by precedence (commit, add, status, log, diff, branch).
"""

import re
from dataclasses import dataclass
from enum import Enum


class CommandKind(str, Enum):
    """Operations a phrase can be mapped to."""

    COMMIT = "commit"
    ADD = "add"
    STATUS = "status"
    LOG = "log"
    DIFF = "diff"
    BRANCH = "branch"


class CommitType(str, Enum):
    """Conventional commit types."""

    FEAT = "feat"
    FIX = "fix"
    DOCS = "docs"
    STYLE = "style"
    REFACTOR = "refactor"
    PERF = "perf"
    TEST = "test"
    CHORE = "chore"


@dataclass(frozen=True)
class CommandPattern:
    """One entry of the pattern table.

    Attributes:
        kind: Command the pattern maps to.
        regex: Compiled pattern, searched case-insensitively.
        takes_text: True if the pattern carries a free-text payload in its
            first group; False for fixed idioms that have no payload.
    """

    kind: CommandKind
    regex: re.Pattern
    takes_text: bool = False


def _text(kind: CommandKind, pattern: str) -> CommandPattern:
    return CommandPattern(kind, re.compile(pattern, re.IGNORECASE), takes_text=True)


def _idiom(kind: CommandKind, pattern: str) -> CommandPattern:
    return CommandPattern(kind, re.compile(pattern, re.IGNORECASE), takes_text=False)


COMMAND_PATTERNS: tuple[CommandPattern, ...] = (
    # commit
    _text(CommandKind.COMMIT, r"^提交代码\s*(.*)$"),
    _text(CommandKind.COMMIT, r"^提交(?!历史|记录|日志)\s*(.+)$"),
    _text(CommandKind.COMMIT, r"(?:提交|\bcommit\b)\s+(?!history\b|logs?\b)(.+)$"),
    _text(CommandKind.COMMIT, r"把(.+?)提交"),
    _text(CommandKind.COMMIT, r"\b(?:push|publish)\s+(.+)$"),
    _text(CommandKind.COMMIT, r"(?:推送|发布)\s*(.+)$"),
    # add
    _text(CommandKind.ADD, r"^添加\s*(.+)$"),
    _text(CommandKind.ADD, r"(?:添加|\badd\b)\s+(.+)$"),
    _text(CommandKind.ADD, r"把(.+?)加到暂存区"),
    _text(CommandKind.ADD, r"暂存\s*(.+)$"),
    _text(CommandKind.ADD, r"\bstage\s+(.+)$"),
    # status
    _idiom(CommandKind.STATUS, r"状态|\bstatus\b"),
    _idiom(CommandKind.STATUS, r"查看修改"),
    _idiom(CommandKind.STATUS, r"有什么变化"),
    _idiom(CommandKind.STATUS, r"检查状态"),
    _idiom(CommandKind.STATUS, r"\bwhat(?:'s| has)? changed\b"),
    # log
    _idiom(CommandKind.LOG, r"日志|\blog\b"),
    _idiom(CommandKind.LOG, r"提交历史"),
    _idiom(CommandKind.LOG, r"查看提交记录"),
    _idiom(CommandKind.LOG, r"历史记录"),
    _idiom(CommandKind.LOG, r"\bhistory\b"),
    # diff
    _idiom(CommandKind.DIFF, r"差异|\bdiff\b"),
    _idiom(CommandKind.DIFF, r"查看改动"),
    _idiom(CommandKind.DIFF, r"比较变化"),
    _idiom(CommandKind.DIFF, r"改动详情"),
    # branch
    _text(CommandKind.BRANCH, r"(?:新建|创建|切换到?)分支\s*([^\s，,]+)"),
    _text(CommandKind.BRANCH, r"\b(?:create|checkout|switch to)\s+branch\s+(\S+)"),
    _idiom(CommandKind.BRANCH, r"分支|\bbranch(?:es)?\b"),
)

# Verbs removed from the text when a payload has to be recovered without a capture group
COMMAND_VERBS = re.compile(r"提交|\bcommit\b|添加|\badd\b|推送|\bpush\b|发布|\bpublish\b", re.IGNORECASE)

# Keywords for commit type detection, scanned in this order
COMMIT_TYPE_KEYWORDS: dict[CommitType, tuple[str, ...]] = {
    CommitType.FEAT: ("新功能", "feature", "功能", "feat"),
    CommitType.FIX: ("修复", "bug", "fix"),
    CommitType.DOCS: ("文档", "document", "说明", "docs", "readme"),
    CommitType.STYLE: ("格式", "样式", "style"),
    CommitType.REFACTOR: ("重构", "refactor"),
    CommitType.PERF: ("性能", "优化", "performance", "perf"),
    CommitType.TEST: ("测试", "test"),
    CommitType.CHORE: ("杂项", "维护", "chore"),
}

# Fallback keyword sets used when no pattern matched
COMMIT_KEYWORDS = ("提交", "commit", "推送", "push", "发布", "publish")
STATUS_KEYWORDS = ("状态", "status", "变化", "修改", "检查", "change", "check")

# Confidence tuning
BASE_CONFIDENCE = 0.8
LONG_MATCH_BONUS = 0.1
LONG_MATCH_LENGTH = 10
KIND_CONFIDENCE_ADJUSTMENTS: dict[CommandKind, float] = {
    CommandKind.COMMIT: 0.05,
    CommandKind.STATUS: -0.1,
    CommandKind.LOG: -0.05,
}
FALLBACK_COMMIT_CONFIDENCE = 0.7
FALLBACK_STATUS_CONFIDENCE = 0.6
DEFAULT_CONFIDENCE = 0.3

# Already-prefixed conventional messages, e.g. "fix(auth): ..."
CONVENTIONAL_PREFIX = re.compile(
    r"^(?:" + "|".join(t.value for t in CommitType) + r")(?:\([^)]*\))?!?:\s",
    re.IGNORECASE,
)

# Keywords for coarse intent analysis
INTENT_ACTIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("commit", ("提交", "commit")),
    ("add", ("添加", "add")),
    ("view", ("查看", "check", "show", "view")),
)
INTENT_TARGETS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("all", ("所有", "全部", "all")),
    ("files", ("文件", "files", "file")),
)
INTENT_MODIFIERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("auto", ("自动", "auto")),
    ("force", ("强制", "force")),
)
