"""Git tools bound to a command dispatcher.

Each tool translates its arguments into a dispatcher request and returns
the dispatcher's result envelope.
"""

from __future__ import annotations

import logging
from typing import Any

from gitpush.dispatcher import CommandDispatcher, OperationResult
from gitpush.tools.definitions import (
    GIT_CAPABILITIES_TOOL,
    GIT_EXECUTE_ACTION_TOOL,
    GIT_NATURAL_LANGUAGE_TOOL,
)
from gitpush.tools.registry import Tool, ToolRegistry

logger = logging.getLogger(__name__)


def create_natural_language_tool(dispatcher: CommandDispatcher) -> Tool:
    """Create the tool that runs natural-language git commands."""

    async def handler(args: dict[str, Any]) -> OperationResult:
        return await dispatcher.process({
            "text": args.get("text"),
            "context": args.get("context") or {},
        })

    return Tool(
        definition=GIT_NATURAL_LANGUAGE_TOOL,
        handler=handler,
        category="git",
    )


def create_execute_action_tool(dispatcher: CommandDispatcher) -> Tool:
    """Create the tool that runs an explicit git operation."""

    async def handler(args: dict[str, Any]) -> OperationResult:
        return await dispatcher.process({
            "command": args.get("action"),
            "message": args.get("message"),
            "commit_type": args.get("commitType") or args.get("commit_type"),
            "context": args.get("context") or {},
        })

    return Tool(
        definition=GIT_EXECUTE_ACTION_TOOL,
        handler=handler,
        category="git",
    )


def create_capabilities_tool(dispatcher: CommandDispatcher) -> Tool:
    """Create the tool that describes supported operations."""

    def handler(args: dict[str, Any]) -> OperationResult:
        capabilities = dispatcher.get_capabilities()
        return OperationResult(
            success=True,
            action="capabilities",
            message=f"gitpush {capabilities['version']}",
            details=capabilities["capabilities"],
        )

    return Tool(
        definition=GIT_CAPABILITIES_TOOL,
        handler=handler,
        category="git",
        timeout=5.0,
    )


def get_git_tools(dispatcher: CommandDispatcher) -> list[Tool]:
    """Get all git tools as a list."""
    return [
        create_natural_language_tool(dispatcher),
        create_execute_action_tool(dispatcher),
        create_capabilities_tool(dispatcher),
    ]


def register_git_tools(registry: ToolRegistry, dispatcher: CommandDispatcher) -> None:
    """Register all git tools with a registry."""
    for tool in get_git_tools(dispatcher):
        registry.register(tool)
    logger.debug(f"Registered {len(registry)} git tools")
