"""Tool registry for managing and calling tools.

The registry holds tools together with their handlers so an adapter can
list their definitions and route calls by name. :meth:`ToolRegistry.call`
always returns a result envelope as a dict, never an exception.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Coroutine, Optional, Union

from gitpush.dispatcher import OperationResult
from gitpush.tools.definitions import ToolDefinition, ToolParameter

logger = logging.getLogger(__name__)

# Handlers can be sync or async, taking a dict of arguments and returning any result
ToolHandler = Union[
    Callable[[dict[str, Any]], Any],
    Callable[[dict[str, Any]], Coroutine[Any, Any, Any]],
]


@dataclass
class Tool:
    """A registered tool with its definition and handler.

    Attributes:
        definition: The tool's schema definition.
        handler: The function that executes the tool.
        description: Human-readable description.
        category: Tool category for organization.
        timeout: Maximum execution time in seconds (None = no timeout).
        enabled: Whether the tool is currently available.
    """

    definition: ToolDefinition
    handler: ToolHandler
    description: str = ""
    category: str = "general"
    timeout: Optional[float] = None
    enabled: bool = True

    @property
    def name(self) -> str:
        """Get the tool name from its definition."""
        return self.definition.name

    def __post_init__(self) -> None:
        if not self.description:
            self.description = self.definition.description


def _to_envelope(name: str, value: Any) -> dict[str, Any]:
    if isinstance(value, OperationResult):
        return value.to_dict()
    if isinstance(value, dict):
        return value
    return OperationResult(success=True, action=name, details=value).to_dict()


@dataclass
class ToolRegistry:
    """Registry for managing available tools.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register(Tool(
        ...     definition=ToolDefinition(name="greet", description="Say hello"),
        ...     handler=lambda args: f"Hello, {args.get('name', 'World')}!",
        ... ))
        >>> definitions = registry.get_definitions()
    """

    _tools: dict[str, Tool] = field(default_factory=dict)

    def register(self, tool: Tool) -> None:
        """Register a tool in the registry.

        Raises:
            ValueError: If a tool with the same name is already registered.
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name} (category: {tool.category})")

    def unregister(self, name: str) -> bool:
        """Remove a tool from the registry.

        Returns:
            True if the tool was removed, False if it wasn't registered.
        """
        if self._tools.pop(name, None) is None:
            return False
        logger.debug(f"Unregistered tool: {name}")
        return True

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def enable(self, name: str) -> bool:
        tool = self._tools.get(name)
        if tool:
            tool.enabled = True
            return True
        return False

    def disable(self, name: str) -> bool:
        tool = self._tools.get(name)
        if tool:
            tool.enabled = False
            return True
        return False

    def list_tools(self, enabled_only: bool = True) -> list[str]:
        """List registered tool names."""
        if enabled_only:
            return [name for name, tool in self._tools.items() if tool.enabled]
        return list(self._tools.keys())

    def get_definitions(self, enabled_only: bool = True) -> list[ToolDefinition]:
        """Get tool definitions for host registration."""
        return [
            tool.definition
            for tool in self._tools.values()
            if tool.enabled or not enabled_only
        ]

    async def call(self, name: str, arguments: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Call a tool by name.

        Args:
            name: The tool name.
            arguments: Tool arguments.

        Returns:
            The result envelope as a dict. Unknown or disabled tools, handler
            errors and timeouts are reported as failed results.
        """
        tool = self._tools.get(name)
        if tool is None or not tool.enabled:
            return OperationResult.failure(
                name,
                f"Tool not found: {name}",
                code="TOOL_NOT_FOUND",
            ).to_dict()

        arguments = dict(arguments or {})
        try:
            if inspect.iscoroutinefunction(tool.handler):
                coro = tool.handler(arguments)
            else:
                # Run sync handler in thread pool
                loop = asyncio.get_running_loop()
                coro = loop.run_in_executor(None, tool.handler, arguments)

            if tool.timeout is not None:
                value = await asyncio.wait_for(coro, timeout=tool.timeout)
            else:
                value = await coro
        except asyncio.TimeoutError:
            logger.error(f"Tool '{name}' timed out after {tool.timeout} seconds")
            return OperationResult.failure(
                name,
                f"Tool '{name}' execution timed out after {tool.timeout} seconds",
                code="TOOL_TIMEOUT",
            ).to_dict()
        except Exception as e:
            logger.exception(f"Tool '{name}' failed")
            return OperationResult.failure(
                name,
                str(e) or type(e).__name__,
                code="TOOL_ERROR",
            ).to_dict()

        return _to_envelope(name, value)

    def clear(self) -> None:
        """Remove all registered tools."""
        self._tools.clear()

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools


def create_tool(
    name: str,
    description: str,
    parameters: list[ToolParameter],
    handler: ToolHandler,
    category: str = "general",
    timeout: Optional[float] = None,
) -> Tool:
    """Create a Tool together with its ToolDefinition."""
    definition = ToolDefinition(
        name=name,
        description=description,
        parameters=parameters,
    )
    return Tool(
        definition=definition,
        handler=handler,
        category=category,
        timeout=timeout,
    )
