"""Tool definitions with host-specific translations."""

from dataclasses import dataclass, field
from typing import Any, Optional

from gitpush.dispatcher import SUPPORTED_ACTIONS
from gitpush.interpreter import CommitType


@dataclass
class ToolParameter:
    """A parameter for a tool."""

    name: str
    type: str  # 'string', 'integer', 'number', 'boolean', 'array', 'object'
    description: str
    required: bool = True
    enum: Optional[list[str]] = None
    items: Optional[dict[str, Any]] = None  # For array types
    properties: Optional[dict[str, Any]] = None  # For object types

    def to_json_schema(self) -> dict[str, Any]:
        """Convert to JSON Schema format."""
        schema: dict[str, Any] = {
            "type": self.type,
            "description": self.description,
        }
        if self.enum:
            schema["enum"] = self.enum
        if self.items:
            schema["items"] = self.items
        if self.properties:
            schema["properties"] = self.properties
        return schema


@dataclass
class ToolDefinition:
    """Definition of a tool a tool-calling host can register."""

    name: str
    description: str
    parameters: list[ToolParameter] = field(default_factory=list)

    def input_schema(self) -> dict[str, Any]:
        """Build the JSON schema of the tool arguments."""
        properties = {}
        required = []

        for param in self.parameters:
            properties[param.name] = param.to_json_schema()
            if param.required:
                required.append(param.name)

        schema: dict[str, Any] = {
            "type": "object",
            "properties": properties,
        }
        if required:
            schema["required"] = required

        return schema

    def to_mcp(self) -> dict[str, Any]:
        """Convert to the Model Context Protocol tool listing format.

        MCP format:
        {
            "name": "tool_name",
            "description": "tool description",
            "inputSchema": {"type": "object", "properties": {...}, "required": [...]}
        }
        """
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }

    def to_anthropic(self) -> dict[str, Any]:
        """Convert to Anthropic tool format.

        Anthropic format:
        {
            "name": "tool_name",
            "description": "tool description",
            "input_schema": {"type": "object", "properties": {...}, "required": [...]}
        }
        """
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema(),
        }


def tools_to_mcp(tools: list[ToolDefinition]) -> list[dict[str, Any]]:
    """Convert a list of tools to MCP format."""
    return [tool.to_mcp() for tool in tools]


def tools_to_anthropic(tools: list[ToolDefinition]) -> list[dict[str, Any]]:
    """Convert a list of tools to Anthropic format."""
    return [tool.to_anthropic() for tool in tools]


CONTEXT_PROPERTIES: dict[str, Any] = {
    "autoStage": {
        "type": "boolean",
        "description": "Stage untracked and modified files before committing (default: true)",
    },
    "autoPush": {
        "type": "boolean",
        "description": "Push after a successful commit (default: false)",
    },
    "conventionalCommits": {
        "type": "boolean",
        "description": "Prefix commit messages with their type, e.g. 'fix: ...' (default: true)",
    },
    "limit": {
        "type": "integer",
        "description": "Number of commits returned by log (default: 10)",
    },
    "action": {
        "type": "string",
        "enum": ["list", "create", "checkout"],
        "description": "Branch sub-operation (default: list)",
    },
    "noVerify": {
        "type": "boolean",
        "description": "Skip commit hooks (default: false)",
    },
    "remote": {
        "type": "string",
        "description": "Remote to push to (default: origin)",
    },
}

GIT_NATURAL_LANGUAGE_TOOL = ToolDefinition(
    name="git_natural_language",
    description=(
        "Run a git operation described in natural language (Chinese or English), "
        "e.g. '提交修复登录bug', 'commit fix login bug', '查看状态', 'show log'"
    ),
    parameters=[
        ToolParameter(
            name="text",
            type="string",
            description="The command in natural language",
        ),
        ToolParameter(
            name="context",
            type="object",
            description="Options for the operation",
            required=False,
            properties=CONTEXT_PROPERTIES,
        ),
    ],
)

GIT_EXECUTE_ACTION_TOOL = ToolDefinition(
    name="git_execute_action",
    description="Run a specific git operation without natural-language interpretation",
    parameters=[
        ToolParameter(
            name="action",
            type="string",
            description="Operation to run",
            enum=list(SUPPORTED_ACTIONS),
        ),
        ToolParameter(
            name="message",
            type="string",
            description="Commit message, paths to stage, or branch name",
            required=False,
        ),
        ToolParameter(
            name="commitType",
            type="string",
            description="Conventional commit type for commit",
            required=False,
            enum=[t.value for t in CommitType],
        ),
        ToolParameter(
            name="context",
            type="object",
            description="Options for the operation",
            required=False,
            properties=CONTEXT_PROPERTIES,
        ),
    ],
)

GIT_CAPABILITIES_TOOL = ToolDefinition(
    name="git_capabilities",
    description="Describe the supported git operations and options",
)

GIT_TOOLS = [
    GIT_NATURAL_LANGUAGE_TOOL,
    GIT_EXECUTE_ACTION_TOOL,
    GIT_CAPABILITIES_TOOL,
]
