"""Command dispatcher.

The dispatcher is the single entry point behind the CLI and the tool
adapters. It validates a request, makes sure a repository exists, turns the
request into a :class:`~gitpush.interpreter.ParsedCommand`, routes it to a
handler and wraps the outcome in an :class:`OperationResult`.

Handlers raise :class:`~gitpush.errors.CommandError` subclasses for
validation and precondition failures; :meth:`CommandDispatcher.process`
converts those, and any unexpected exception, into failed results.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from gitpush import __version__
from gitpush.config import Settings, get_settings
from gitpush.dispatcher.models import CommandContext, CommandRequest, OperationResult
from gitpush.errors import (
    CommandError,
    CommandValidationError,
    PreconditionError,
    UnsupportedCommandError,
)
from gitpush.git import GitOperator, GitResult
from gitpush.interpreter import CommandKind, CommitType, IntentInterpreter, ParsedCommand
from gitpush.utils.logging import get_logger

SUPPORTED_ACTIONS = tuple(kind.value for kind in CommandKind)
BRANCH_ACTIONS = ("list", "create", "checkout")

# Payloads of an add command that mean "stage everything"
STAGE_ALL_WORDS = frozenset({
    ".", "all", "all files", "all changes", "everything",
    "所有", "全部", "所有文件", "全部文件", "所有更改", "所有修改",
})

# Keywords used to pick a branch sub-action from free text
BRANCH_ACTION_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("create", ("新建", "创建", "create", "new branch")),
    ("checkout", ("切换", "checkout", "switch")),
)

RequestLike = Union[CommandRequest, Mapping[str, Any], str]
Handler = Callable[[ParsedCommand, CommandContext, Path], Awaitable[OperationResult]]


def _validation_error(error: ValidationError, prefix: Optional[str] = None) -> CommandValidationError:
    first = error.errors()[0]
    loc = [str(part) for part in first.get("loc", ())]
    if prefix:
        loc.insert(0, prefix)
    field = ".".join(loc) or "request"
    reason = first.get("msg", "invalid request")
    return CommandValidationError(field, f"invalid value for '{field}': {reason}")


def infer_branch_action(text: str) -> Optional[str]:
    """Guess create/checkout from a branch phrase, None if it only asks to list."""
    lower_text = text.lower()
    for action, keywords in BRANCH_ACTION_KEYWORDS:
        if any(keyword in lower_text for keyword in keywords):
            return action
    return None


class CommandDispatcher:
    """Routes requests to git operations and normalizes their results."""

    def __init__(
        self,
        interpreter: Optional[IntentInterpreter] = None,
        operator: Optional[GitOperator] = None,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the dispatcher.

        Args:
            interpreter: Natural-language interpreter.
            operator: Repository gateway.
            settings: Settings supplying the context defaults.
            logger: Logger for diagnostics.
        """
        self.settings = settings or get_settings()
        self.logger = logger or get_logger("dispatcher")
        self.interpreter = interpreter or IntentInterpreter()
        self.operator = operator or GitOperator(
            remote=self.settings.git.remote,
            executable=self.settings.git.executable,
            timeout=self.settings.git.timeout,
        )
        self._handlers: dict[CommandKind, Handler] = {
            CommandKind.COMMIT: self.handle_commit,
            CommandKind.ADD: self.handle_add,
            CommandKind.STATUS: self.handle_status,
            CommandKind.LOG: self.handle_log,
            CommandKind.DIFF: self.handle_diff,
            CommandKind.BRANCH: self.handle_branch,
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def process(self, request: RequestLike) -> OperationResult:
        """Process one request. Never raises.

        Args:
            request: A CommandRequest, a mapping with ``text`` or ``command``
                (aliases ``commandKind``, ``action``) and optional
                ``message``, ``commit_type`` and ``context``, or plain text.

        Returns:
            The result envelope.
        """
        action = "process"
        try:
            parsed_request = self.parse_request(request)
            action = parsed_request.command or action
            context, explicit_action = self.build_context(parsed_request.context)

            repo = await self.operator.ensure_repository()
            if not repo.success:
                self.logger.error(f"Repository unavailable: {repo.error}")
                return OperationResult.failure(
                    action,
                    "cannot initialize or access repository",
                    details=repo.error,
                    suggestion="Run gitpush inside a git working tree you can write to",
                    code="PRECONDITION_FAILED",
                )

            parsed = self.route(parsed_request)
            action = parsed.kind.value
            if parsed.kind == CommandKind.BRANCH and parsed_request.text and not explicit_action:
                inferred = infer_branch_action(parsed_request.text)
                if inferred and parsed.message:
                    context = context.model_copy(update={"action": inferred})

            return await self.dispatch(parsed, context, repo.root)

        except CommandError as e:
            self.logger.warning(f"{action}: {e.message}")
            return OperationResult.from_error(action, e)
        except Exception as e:
            self.logger.exception(f"Unexpected error while processing {action}")
            return OperationResult.failure(action, str(e) or type(e).__name__, code="INTERNAL_ERROR")

    async def process_text(
        self,
        text: str,
        context: Optional[Mapping[str, Any]] = None,
    ) -> OperationResult:
        """Interpret and run a natural-language phrase."""
        return await self.process({"text": text, "context": dict(context or {})})

    async def execute_action(
        self,
        action: str,
        message: Optional[str] = None,
        commit_type: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> OperationResult:
        """Run an explicit command without interpretation."""
        return await self.process({
            "command": action,
            "message": message,
            "commit_type": commit_type,
            "context": dict(context or {}),
        })

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    def parse_request(self, request: RequestLike) -> CommandRequest:
        """Validate a request.

        Raises:
            CommandValidationError: If the request is malformed.
            UnsupportedCommandError: If an explicit command has no handler.
        """
        if isinstance(request, CommandRequest):
            parsed = request
        else:
            if isinstance(request, str):
                request = {"text": request}
            if not isinstance(request, Mapping):
                raise CommandValidationError("request", "request must be a mapping or text")
            try:
                parsed = CommandRequest.model_validate(dict(request))
            except ValidationError as e:
                raise _validation_error(e) from e

        if parsed.command and parsed.command not in SUPPORTED_ACTIONS:
            raise UnsupportedCommandError(parsed.command)

        if parsed.commit_type:
            try:
                CommitType(parsed.commit_type.lower())
            except ValueError:
                raise CommandValidationError(
                    "commit_type",
                    f"unknown commit type: {parsed.commit_type}",
                ) from None

        return parsed

    def build_context(self, raw: Mapping[str, Any]) -> tuple[CommandContext, bool]:
        """Merge caller context over the configured defaults.

        Returns:
            The merged context and whether the caller set ``action``.
        """
        try:
            supplied = CommandContext.model_validate(dict(raw or {}))
            merged = {
                **self.settings.command_defaults(),
                **supplied.model_dump(exclude_unset=True),
            }
            context = CommandContext.model_validate(merged)
        except ValidationError as e:
            raise _validation_error(e, prefix="context") from e
        return context, "action" in supplied.model_fields_set

    def route(self, request: CommandRequest) -> ParsedCommand:
        """Turn a request into a command, interpreting text if no command was given."""
        if request.command:
            return ParsedCommand(
                kind=CommandKind(request.command),
                message=(request.message or "").strip(),
                commit_type=CommitType(request.commit_type.lower()) if request.commit_type else None,
                confidence=1.0,
            )

        parsed = self.interpreter.interpret(request.text or "")
        self.logger.info(
            f"Interpreted {parsed.original_text!r} as {parsed.kind.value} "
            f"(confidence {parsed.confidence})"
        )
        return parsed

    async def dispatch(
        self,
        parsed: ParsedCommand,
        context: CommandContext,
        root: Path,
    ) -> OperationResult:
        """Run the handler registered for the command's kind."""
        handler = self._handlers.get(parsed.kind)
        if handler is None:
            raise UnsupportedCommandError(getattr(parsed.kind, "value", str(parsed.kind)))
        return await handler(parsed, context, root)

    def _gateway_failure(self, action: str, result: GitResult) -> OperationResult:
        return OperationResult.failure(
            action,
            result.error or f"git {result.action} failed",
            details=result.data,
            code="GIT_ERROR",
        )

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def handle_commit(
        self,
        parsed: ParsedCommand,
        context: CommandContext,
        root: Path,
    ) -> OperationResult:
        """Stage (optionally), commit and push (optionally)."""
        status_result = await self.operator.get_status(root=root)
        if not status_result.success:
            return self._gateway_failure("commit", status_result)

        status = status_result.data
        if status.is_clean:
            raise PreconditionError(
                "nothing to commit",
                suggestion="Modify some files before committing",
            )

        if context.auto_stage and status.has_unstaged_changes:
            added = await self.operator.add_files(".", root=root)
            if not added.success:
                return self._gateway_failure("commit", added)

        message = self.interpreter.format_commit_message(
            parsed,
            use_conventional=context.conventional_commits,
        )

        if context.auto_push:
            committed = await self.operator.commit_and_push(
                message,
                remote=context.remote,
                no_verify=context.no_verify,
                auto_stage=context.auto_stage,
                root=root,
            )
        else:
            committed = await self.operator.commit(
                message,
                no_verify=context.no_verify,
                auto_stage=context.auto_stage,
                root=root,
            )
        if not committed.success:
            return self._gateway_failure("commit", committed)

        details = dict(committed.data or {})
        details["changes"] = {
            "files_changed": len(status.modified) + len(status.created) + len(status.deleted),
            "files_staged": len(status.staged),
        }
        return OperationResult(
            success=True,
            action="commit",
            message=message,
            details=details,
            pushed=bool(committed.pushed),
            warning=committed.warning,
        )

    async def handle_add(
        self,
        parsed: ParsedCommand,
        context: CommandContext,
        root: Path,
    ) -> OperationResult:
        """Stage the named path, or everything."""
        target = parsed.message.strip()
        files: Union[str, list[str]] = "." if not target or target.lower() in STAGE_ALL_WORDS else [target]

        added = await self.operator.add_files(files, root=root)
        if not added.success:
            return self._gateway_failure("add", added)

        staged = added.data["files"]
        return OperationResult(
            success=True,
            action="add",
            message=added.message or f"Staged {', '.join(staged)}",
            details={"files": staged},
        )

    async def handle_status(
        self,
        parsed: ParsedCommand,
        context: CommandContext,
        root: Path,
    ) -> OperationResult:
        status_result = await self.operator.get_status(root=root)
        if not status_result.success:
            return self._gateway_failure("status", status_result)

        status = status_result.data
        return OperationResult(
            success=True,
            action="status",
            message=(
                "Working tree clean, nothing to commit"
                if status.is_clean
                else "Changes waiting to be committed"
            ),
            details={
                "is_clean": status.is_clean,
                "current_branch": status.current_branch,
                "tracking": status.tracking,
                "ahead": status.ahead,
                "behind": status.behind,
                "changes": status.change_counts(),
                "files": {
                    "modified": list(status.modified),
                    "created": list(status.created),
                    "deleted": list(status.deleted),
                    "renamed": list(status.renamed),
                    "staged": list(status.staged),
                    "untracked": list(status.untracked),
                    "conflicted": list(status.conflicted),
                },
            },
        )

    async def handle_log(
        self,
        parsed: ParsedCommand,
        context: CommandContext,
        root: Path,
    ) -> OperationResult:
        log_result = await self.operator.get_log(limit=context.limit, root=root)
        if not log_result.success:
            return self._gateway_failure("log", log_result)

        commits = log_result.data
        return OperationResult(
            success=True,
            action="log",
            message=f"{len(commits)} commit(s)",
            details={"commits": commits, "count": len(commits)},
        )

    async def handle_diff(
        self,
        parsed: ParsedCommand,
        context: CommandContext,
        root: Path,
    ) -> OperationResult:
        diff_result = await self.operator.get_diff(root=root)
        if not diff_result.success:
            return self._gateway_failure("diff", diff_result)

        diff = diff_result.data
        return OperationResult(
            success=True,
            action="diff",
            message=diff.summary(),
            details=diff.to_dict(),
        )

    async def handle_branch(
        self,
        parsed: ParsedCommand,
        context: CommandContext,
        root: Path,
    ) -> OperationResult:
        """List branches, or create/check out the branch named in the message."""
        name = parsed.message.strip()

        if context.action in ("create", "checkout"):
            if not name:
                raise CommandValidationError(
                    "message",
                    f"a branch name is required to {context.action} a branch",
                )
            if context.action == "create":
                result = await self.operator.create_branch(name, root=root)
            else:
                result = await self.operator.checkout_branch(name, root=root)
            if not result.success:
                return self._gateway_failure("branch", result)
            return OperationResult(
                success=True,
                action="branch",
                message=result.message or f"{context.action}: {name}",
                details={"action": context.action, "branch": name},
            )

        branches = await self.operator.get_branches(root=root)
        if not branches.success:
            return self._gateway_failure("branch", branches)
        return OperationResult(
            success=True,
            action="branch",
            message=f"On branch {branches.data['current'] or '(detached)'}",
            details={"action": "list", **branches.data},
        )

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    @staticmethod
    def get_capabilities() -> dict[str, Any]:
        """Describe the supported operations and options."""
        defaults = CommandContext()
        return {
            "success": True,
            "version": __version__,
            "capabilities": {
                "natural_language": True,
                "languages": ["zh", "en"],
                "operations": list(SUPPORTED_ACTIONS),
                "branch_actions": list(BRANCH_ACTIONS),
                "commit_types": [t.value for t in CommitType],
                "features": [
                    "conventional_commits",
                    "auto_stage",
                    "auto_push",
                    "intent_parsing",
                ],
                "context_options": {
                    "auto_stage": defaults.auto_stage,
                    "auto_push": defaults.auto_push,
                    "conventional_commits": defaults.conventional_commits,
                    "limit": defaults.limit,
                    "action": defaults.action,
                    "no_verify": defaults.no_verify,
                },
            },
        }


def create_dispatcher(
    settings: Optional[Settings] = None,
    working_directory: Path | str | None = None,
    logger: Optional[logging.Logger] = None,
) -> CommandDispatcher:
    """Build a dispatcher wired to a gateway for the given directory."""
    settings = settings or get_settings()
    operator = GitOperator(
        working_directory=working_directory,
        remote=settings.git.remote,
        executable=settings.git.executable,
        timeout=settings.git.timeout,
    )
    return CommandDispatcher(operator=operator, settings=settings, logger=logger)
