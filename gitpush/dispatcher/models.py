"""Request and result models for the command dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from gitpush.errors import CommandError


class CommandContext(BaseModel):
    """Per-request options. Keys are accepted in snake_case or camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    auto_stage: bool = True
    auto_push: bool = False
    conventional_commits: bool = True
    limit: int = Field(default=10, ge=1)
    action: Literal["create", "checkout", "list"] = "list"
    no_verify: bool = False
    remote: Optional[str] = None


class CommandRequest(BaseModel):
    """A request to the dispatcher: free text or an explicit command."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: Optional[str] = None
    command: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("command", "commandKind", "action"),
    )
    message: Optional[str] = None
    commit_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("commit_type", "commitType"),
    )
    context: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def require_text_or_command(self) -> "CommandRequest":
        if self.text is not None:
            self.text = self.text.strip() or None
        if self.command is not None:
            self.command = self.command.strip().lower() or None
        if not self.text and not self.command:
            raise ValueError("request needs either 'text' or 'command'")
        return self


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class OperationResult:
    """Uniform result envelope returned by the dispatcher.

    ``error`` is set if and only if ``success`` is False. ``action`` and
    ``timestamp`` are always present.
    """

    success: bool
    action: str
    message: Optional[str] = None
    details: Any = None
    error: Optional[str] = None
    pushed: Optional[bool] = None
    warning: Optional[str] = None
    suggestion: Optional[str] = None
    code: Optional[str] = None
    timestamp: str = field(default_factory=_utc_timestamp)

    @classmethod
    def failure(
        cls,
        action: str,
        error: str,
        details: Any = None,
        suggestion: Optional[str] = None,
        code: Optional[str] = None,
    ) -> "OperationResult":
        """Build a failed result."""
        return cls(
            success=False,
            action=action,
            error=error or "unknown error",
            details=details,
            suggestion=suggestion,
            code=code,
        )

    @classmethod
    def from_error(cls, action: str, error: CommandError) -> "OperationResult":
        """Build a failed result from a command error."""
        return cls.failure(
            action,
            error.message,
            details=error.details or None,
            suggestion=error.suggestion,
            code=error.code,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary, omitting unset optional fields."""
        result: dict[str, Any] = {"success": self.success, "action": self.action}
        for key in ("message", "details", "error", "pushed", "warning", "suggestion", "code"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        result["timestamp"] = self.timestamp
        return result
