"""Centralized exception hierarchy for gitpush.

Errors raised inside the git layer and the command handlers all derive
from :class:`GitPushError`, so the dispatcher can turn any of them into a
result envelope with a message, a code and structured details.
"""

from __future__ import annotations

from typing import Any, Optional


class GitPushError(Exception):
    """Base exception for all gitpush errors.

    Attributes:
        message: Human-readable error message.
        code: Optional error code for programmatic handling.
        details: Optional dictionary with additional error context.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(GitPushError):
    """Raised when there's a configuration problem."""
    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, field: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid configuration for '{field}': {reason}",
            code="INVALID_CONFIG",
            details={"field": field, "value": str(value)[:100], "reason": reason},
        )


# =============================================================================
# Git Errors
# =============================================================================

class GitError(GitPushError):
    """Raised when a git command fails."""

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        details = {}
        if returncode is not None:
            details["returncode"] = returncode
        if stderr:
            details["stderr"] = stderr[:500]
        super().__init__(message, "GIT_ERROR", details)
        self.returncode = returncode
        self.stderr = stderr


class NotARepositoryError(GitError):
    """Raised when path is not a git repository."""

    def __init__(self, path: str):
        super().__init__(
            message=f"Not a git repository: {path}",
        )
        self.details["path"] = path
        self.code = "NOT_A_REPOSITORY"


# =============================================================================
# Command Errors
# =============================================================================

class CommandError(GitPushError):
    """Base exception for errors raised while dispatching a command.

    Attributes:
        suggestion: Optional hint telling the caller how to recover.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ):
        super().__init__(message, code, details)
        self.suggestion = suggestion


class CommandValidationError(CommandError):
    """Raised when a request is missing a required field or has a bad value."""

    def __init__(self, field: str, reason: str):
        super().__init__(
            message=reason,
            code="VALIDATION_ERROR",
            details={"field": field},
        )
        self.field = field


class UnsupportedCommandError(CommandError):
    """Raised when a command kind has no handler."""

    def __init__(self, command: str):
        super().__init__(
            message=f"unsupported command: {command}",
            code="UNSUPPORTED_COMMAND",
            details={"command": command},
            suggestion="Run 'gitpush capabilities' to list supported operations",
        )


class PreconditionError(CommandError):
    """Raised when the repository is not in a state that allows the command.

    Nothing has been mutated when this is raised, so the request can be
    retried once the precondition holds.
    """

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="PRECONDITION_FAILED",
            details=details,
            suggestion=suggestion,
        )
