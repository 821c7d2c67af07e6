"""Natural-language intent interpreter.

Maps short phrases such as "提交修复登录bug" or "commit fix login bug" to a
structured :class:`ParsedCommand`. Interpretation is total: every input
yields a command, falling back to a low-confidence status query.

Examples:
    >>> interpreter = IntentInterpreter()
    >>> interpreter.interpret("commit fix login bug").kind
    <CommandKind.COMMIT: 'commit'>
    >>> interpreter.interpret("查看状态").message
    ''
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from gitpush.interpreter.patterns import (
    BASE_CONFIDENCE,
    COMMAND_PATTERNS,
    COMMAND_VERBS,
    COMMIT_KEYWORDS,
    COMMIT_TYPE_KEYWORDS,
    CONVENTIONAL_PREFIX,
    DEFAULT_CONFIDENCE,
    FALLBACK_COMMIT_CONFIDENCE,
    FALLBACK_STATUS_CONFIDENCE,
    INTENT_ACTIONS,
    INTENT_MODIFIERS,
    INTENT_TARGETS,
    KIND_CONFIDENCE_ADJUSTMENTS,
    LONG_MATCH_BONUS,
    LONG_MATCH_LENGTH,
    STATUS_KEYWORDS,
    CommandKind,
    CommandPattern,
    CommitType,
)
from gitpush.utils.logging import get_logger


@dataclass(frozen=True)
class ParsedCommand:
    """A phrase interpreted as a git command."""

    kind: CommandKind
    message: str = ""
    commit_type: Optional[CommitType] = None
    confidence: float = 1.0
    original_text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": self.kind.value,
            "message": self.message,
            "commit_type": self.commit_type.value if self.commit_type else None,
            "confidence": self.confidence,
            "original_text": self.original_text,
        }


@dataclass(frozen=True)
class IntentAnalysis:
    """Coarse intent breakdown used for diagnostics."""

    action: Optional[str] = None
    target: Optional[str] = None
    modifiers: tuple[str, ...] = field(default_factory=tuple)
    confidence: float = 0.5

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "target": self.target,
            "modifiers": list(self.modifiers),
            "confidence": self.confidence,
        }


def _first_keyword(text: str, table: tuple[tuple[str, tuple[str, ...]], ...]) -> Optional[str]:
    for name, keywords in table:
        if any(keyword in text for keyword in keywords):
            return name
    return None


class IntentInterpreter:
    """Interprets natural-language text as git commands using ordered patterns."""

    def __init__(
        self,
        patterns: tuple[CommandPattern, ...] = COMMAND_PATTERNS,
        clock: Callable[[], datetime] = datetime.now,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the interpreter.

        Args:
            patterns: Ordered pattern table; the first match wins.
            clock: Time source for generated commit messages.
            logger: Logger for diagnostics.
        """
        self.patterns = patterns
        self.clock = clock
        self.logger = logger or get_logger("interpreter")

    def interpret(self, text: str) -> ParsedCommand:
        """Interpret text as a command.

        Args:
            text: Free-form user input.

        Returns:
            The first matching command, or a fallback guess. Never raises.
        """
        text = (text or "").strip()

        for pattern in self.patterns:
            match = pattern.regex.search(text)
            if not match:
                continue

            message = self.extract_message(match, text) if pattern.takes_text else ""
            commit_type = (
                self.detect_commit_type(text) if pattern.kind == CommandKind.COMMIT else None
            )
            parsed = ParsedCommand(
                kind=pattern.kind,
                message=message,
                commit_type=commit_type,
                confidence=self.calculate_confidence(pattern.kind, match),
                original_text=text,
            )
            self.logger.debug(f"Matched {pattern.regex.pattern!r} -> {parsed.kind.value}")
            return parsed

        return self.fallback(text)

    def extract_message(self, match: re.Match, text: str) -> str:
        """Get the payload of a free-text match.

        Uses the first non-empty capture group, then the text with command
        verbs removed, then a generated message.
        """
        for group in match.groups():
            if group and group.strip():
                return group.strip()
        return self.extract_meaningful_content(text)

    def extract_meaningful_content(self, text: str) -> str:
        """Strip command verbs from text, generating a message if nothing remains."""
        cleaned = COMMAND_VERBS.sub("", text)
        cleaned = re.sub(r"\s+", " ", cleaned).strip()
        return cleaned or self.generate_default_message()

    def detect_commit_type(self, text: str) -> CommitType:
        """Get the first commit type whose keywords appear in text (default feat)."""
        lower_text = text.lower()
        for commit_type, keywords in COMMIT_TYPE_KEYWORDS.items():
            if any(keyword in lower_text for keyword in keywords):
                return commit_type
        return CommitType.FEAT

    def calculate_confidence(self, kind: CommandKind, match: re.Match) -> float:
        """Score a pattern match; always within [0, 1]."""
        confidence = BASE_CONFIDENCE

        if len(match.group(0)) > LONG_MATCH_LENGTH:
            confidence += LONG_MATCH_BONUS

        confidence += KIND_CONFIDENCE_ADJUSTMENTS.get(kind, 0.0)

        return round(min(1.0, max(0.0, confidence)), 4)

    def fallback(self, text: str) -> ParsedCommand:
        """Guess a command for text no pattern recognized."""
        lower_text = text.lower()

        if any(keyword in lower_text for keyword in COMMIT_KEYWORDS):
            return ParsedCommand(
                kind=CommandKind.COMMIT,
                message=self.extract_meaningful_content(text),
                commit_type=self.detect_commit_type(text),
                confidence=FALLBACK_COMMIT_CONFIDENCE,
                original_text=text,
            )

        if any(keyword in lower_text for keyword in STATUS_KEYWORDS):
            return ParsedCommand(
                kind=CommandKind.STATUS,
                confidence=FALLBACK_STATUS_CONFIDENCE,
                original_text=text,
            )

        self.logger.debug(f"No command recognized in {text!r}, defaulting to status")
        return ParsedCommand(
            kind=CommandKind.STATUS,
            confidence=DEFAULT_CONFIDENCE,
            original_text=text,
        )

    def generate_default_message(self) -> str:
        """Get a timestamped message for commits without one."""
        return f"Auto commit at {self.clock().strftime('%Y-%m-%d %H:%M:%S')}"

    def format_commit_message(self, parsed: ParsedCommand, use_conventional: bool = True) -> str:
        """Build the final commit message.

        Args:
            parsed: The interpreted command.
            use_conventional: Prefix the message with its commit type.

        Returns:
            "type: message" in conventional mode, otherwise the bare message.
        """
        message = parsed.message or self.generate_default_message()
        if not use_conventional or CONVENTIONAL_PREFIX.match(message):
            return message

        commit_type = parsed.commit_type or CommitType.FEAT
        return f"{commit_type.value}: {message}"

    def analyze_intent(self, text: str) -> IntentAnalysis:
        """Break text into a coarse action/target/modifiers tuple."""
        lower_text = (text or "").lower()

        action = _first_keyword(lower_text, INTENT_ACTIONS)
        target = _first_keyword(lower_text, INTENT_TARGETS)
        modifiers = tuple(
            name for name, keywords in INTENT_MODIFIERS
            if any(keyword in lower_text for keyword in keywords)
        )

        confidence = 0.5 + (0.3 if action else 0.0) + (0.2 if target else 0.0)

        return IntentAnalysis(
            action=action,
            target=target,
            modifiers=modifiers,
            confidence=round(confidence, 4),
        )

