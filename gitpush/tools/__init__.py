"""Tool definitions and registry for tool-calling hosts."""

from gitpush.tools.definitions import (
    GIT_CAPABILITIES_TOOL,
    GIT_EXECUTE_ACTION_TOOL,
    GIT_NATURAL_LANGUAGE_TOOL,
    GIT_TOOLS,
    ToolDefinition,
    ToolParameter,
    tools_to_anthropic,
    tools_to_mcp,
)
from gitpush.tools.git import get_git_tools, register_git_tools
from gitpush.tools.registry import Tool, ToolHandler, ToolRegistry, create_tool

__all__ = [
    "ToolDefinition",
    "ToolParameter",
    "tools_to_mcp",
    "tools_to_anthropic",
    "GIT_NATURAL_LANGUAGE_TOOL",
    "GIT_EXECUTE_ACTION_TOOL",
    "GIT_CAPABILITIES_TOOL",
    "GIT_TOOLS",
    "Tool",
    "ToolHandler",
    "ToolRegistry",
    "create_tool",
    "get_git_tools",
    "register_git_tools",
]
