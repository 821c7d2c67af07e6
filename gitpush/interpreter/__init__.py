"""Natural-language interpretation of git commands."""

from .parser import IntentAnalysis, IntentInterpreter, ParsedCommand
from .patterns import COMMAND_PATTERNS, CommandKind, CommandPattern, CommitType

__all__ = [
    "IntentInterpreter",
    "ParsedCommand",
    "IntentAnalysis",
    "CommandKind",
    "CommitType",
    "CommandPattern",
    "COMMAND_PATTERNS",
]
