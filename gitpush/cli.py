"""CLI entry point for gitpush."""

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import typer
from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from gitpush import __version__
from gitpush.config import (
    CONFIG_FILE,
    Settings,
    create_default_config,
    get_settings,
    load_settings,
)
from gitpush.dispatcher import CommandDispatcher, OperationResult, create_dispatcher
from gitpush.errors import ConfigurationError
from gitpush.tools import ToolRegistry, register_git_tools
from gitpush.utils.logging import setup_logging

app = typer.Typer(
    name="gitpush",
    help="Run git operations from natural-language phrases (Chinese or English)",
    add_completion=True,
    no_args_is_help=False,
)

console = Console()

EXIT_WORDS = ("quit", "exit", "q", "退出")
HELP_WORDS = ("help", "?", "帮助")

EXAMPLES = [
    ("提交修复登录bug", "commit with message 'fix: 修复登录bug'"),
    ("commit add user search", "commit with message 'feat: add user search'"),
    ("添加 src/app.py", "stage one file"),
    ("查看状态 / status", "show the working tree status"),
    ("提交历史 / log", "show recent commits"),
    ("查看改动 / diff", "show diff statistics"),
    ("创建分支 feature-x", "create and switch to a branch"),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]gitpush[/bold] version {__version__}")
        raise typer.Exit()


def _settings(ctx: typer.Context) -> Settings:
    return (ctx.obj or {}).get("settings") or get_settings()


def _dispatcher(ctx: typer.Context) -> CommandDispatcher:
    obj = ctx.obj or {}
    return create_dispatcher(settings=_settings(ctx), working_directory=obj.get("cwd"))


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    cwd: Optional[Path] = typer.Option(
        None,
        "--cwd",
        "-C",
        help="Run as if started in this directory",
    ),
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """gitpush - natural-language git assistant.

    Without a subcommand, starts an interactive prompt.
    """
    try:
        settings = load_settings(config_path=config, force_reload=True) if config else get_settings()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(2)

    setup_logging(
        level=settings.logging.level,
        log_file=settings.logging.resolved_file,
        verbose=verbose,
    )
    ctx.obj = {"settings": settings, "cwd": cwd, "verbose": verbose}

    # If a subcommand is being invoked, don't enter interactive mode
    if ctx.invoked_subcommand is not None:
        return

    asyncio.run(start_interactive(_dispatcher(ctx)))


# ----------------------------------------------------------------------
# Result rendering
# ----------------------------------------------------------------------


def _details_table(result: OperationResult) -> Optional[Table]:
    details = result.details
    if not isinstance(details, dict):
        return None

    if result.action == "log" and details.get("commits"):
        table = Table(show_header=True, box=None)
        table.add_column("Commit", style="cyan", no_wrap=True)
        table.add_column("Date", style="yellow")
        table.add_column("Author", style="green")
        table.add_column("Message")
        for commit in details["commits"]:
            table.add_row(commit["hash"][:8], commit["date"], escape(commit["author"]), escape(commit["message"]))
        return table

    if result.action == "status" and not details.get("is_clean"):
        table = Table(show_header=True, box=None)
        table.add_column("Change", style="bold")
        table.add_column("Paths")
        for category, paths in details.get("files", {}).items():
            if paths:
                table.add_row(category, escape("\n".join(paths)))
        return table

    if result.action == "diff" and details.get("files"):
        table = Table(show_header=True, box=None)
        table.add_column("Changed files")
        for path in details["files"]:
            table.add_row(escape(path))
        return table

    if result.action == "commit" and "changes" in details:
        table = Table(show_header=False, box=None)
        table.add_column("Key", style="dim")
        table.add_column("Value")
        if details.get("commit"):
            table.add_row("commit", str(details["commit"]))
        if details.get("branch"):
            table.add_row("branch", str(details["branch"]))
        for key, value in details["changes"].items():
            table.add_row(key, str(value))
        return table

    if result.action == "branch" and details.get("action") == "list":
        table = Table(show_header=False, box=None)
        table.add_column("Branch")
        for name in details.get("local", []):
            marker = "* " if name == details.get("current") else "  "
            table.add_row(f"{marker}{name}")
        for name in details.get("remote", []):
            table.add_row(f"  [dim]{name}[/dim]")
        return table

    return None


def display_result(result: OperationResult) -> None:
    """Render a result envelope as a panel."""
    lines = []
    if result.success:
        if result.message:
            lines.append(escape(result.message))
        if result.pushed:
            lines.append("[green]Pushed to remote[/green]")
    else:
        lines.append(f"[red]{escape(result.error or '')}[/red]")
        if result.details and not isinstance(result.details, dict):
            lines.append(f"[dim]{escape(str(result.details))}[/dim]")
    if result.warning:
        lines.append(f"[yellow]{escape(result.warning)}[/yellow]")
    if result.suggestion:
        lines.append(f"[dim]Hint: {escape(result.suggestion)}[/dim]")

    icon = "✓" if result.success else "✗"
    console.print(
        Panel(
            "\n".join(lines) or "[dim]done[/dim]",
            title=f"{icon} {result.action}",
            border_style="green" if result.success else "red",
        )
    )

    table = _details_table(result)
    if table is not None and table.row_count:
        console.print(table)


def _emit(result: OperationResult, json_output: bool) -> None:
    if json_output:
        typer.echo(_to_json(result.to_dict()))
    else:
        display_result(result)
    if not result.success:
        raise typer.Exit(1)


# ----------------------------------------------------------------------
# Interactive mode
# ----------------------------------------------------------------------


def show_help() -> None:
    """Print example phrases."""
    table = Table(title="Examples")
    table.add_column("Say", style="cyan")
    table.add_column("To")
    for phrase, meaning in EXAMPLES:
        table.add_row(phrase, meaning)
    console.print(table)
    console.print("[dim]Type 'quit' or press Ctrl+D to leave.[/dim]")


async def start_interactive(
    dispatcher: CommandDispatcher,
    session: Optional[PromptSession] = None,
) -> None:
    """Read phrases until the user quits, running each one."""
    session = session or PromptSession(
        history=InMemoryHistory(),
        auto_suggest=AutoSuggestFromHistory(),
    )

    console.print(
        Panel(
            "Describe a git operation in plain words, e.g. [cyan]提交修复登录bug[/cyan] "
            "or [cyan]commit fix login bug[/cyan].\n"
            "Type [bold]help[/bold] for examples, [bold]quit[/bold] to leave.",
            title=f"gitpush {__version__}",
            border_style="blue",
        )
    )

    while True:
        try:
            text = await session.prompt_async("gitpush> ")
        except (EOFError, KeyboardInterrupt):
            break

        text = text.strip()
        if not text:
            continue
        if text.lower() in EXIT_WORDS:
            break
        if text.lower() in HELP_WORDS:
            show_help()
            continue

        result = await dispatcher.process({"text": text})
        display_result(result)

    console.print("[dim]Bye![/dim]")


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------


@app.command()
def run(
    ctx: typer.Context,
    text: list[str] = typer.Argument(..., help="The command in natural language"),
    push: bool = typer.Option(False, "--push", "-p", help="Push after committing"),
    no_stage: bool = typer.Option(False, "--no-stage", help="Do not stage changes before committing"),
    plain: bool = typer.Option(False, "--plain", help="Do not prefix commit messages with their type"),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """Interpret a phrase and run it."""
    context: dict[str, Any] = {}
    if push:
        context["auto_push"] = True
    if no_stage:
        context["auto_stage"] = False
    if plain:
        context["conventional_commits"] = False

    dispatcher = _dispatcher(ctx)
    result = asyncio.run(dispatcher.process({"text": " ".join(text), "context": context}))
    _emit(result, json_output)


@app.command("do")
def do_action(
    ctx: typer.Context,
    action: str = typer.Argument(..., help="Operation: commit, add, status, log, diff or branch"),
    message: Optional[str] = typer.Option(
        None,
        "--message",
        "-m",
        help="Commit message, paths to stage, or branch name",
    ),
    commit_type: Optional[str] = typer.Option(None, "--type", "-t", help="Conventional commit type"),
    branch_action: Optional[str] = typer.Option(
        None,
        "--branch-action",
        "-b",
        help="Branch sub-operation: list, create or checkout",
    ),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Number of commits for log"),
    push: bool = typer.Option(False, "--push", "-p", help="Push after committing"),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """Run an operation directly, without interpretation."""
    context: dict[str, Any] = {}
    if branch_action:
        context["action"] = branch_action
    if limit is not None:
        context["limit"] = limit
    if push:
        context["auto_push"] = True

    dispatcher = _dispatcher(ctx)
    result = asyncio.run(dispatcher.execute_action(
        action,
        message=message,
        commit_type=commit_type,
        context=context,
    ))
    _emit(result, json_output)


@app.command()
def capabilities(
    json_output: bool = typer.Option(False, "--json", help="Print as JSON"),
) -> None:
    """Show supported operations and options."""
    caps = CommandDispatcher.get_capabilities()
    if json_output:
        typer.echo(_to_json(caps))
        return

    info = caps["capabilities"]
    table = Table(title=f"gitpush {caps['version']}")
    table.add_column("Item", style="bold")
    table.add_column("Values")
    table.add_row("Operations", ", ".join(info["operations"]))
    table.add_row("Branch actions", ", ".join(info["branch_actions"]))
    table.add_row("Commit types", ", ".join(info["commit_types"]))
    table.add_row("Features", ", ".join(info["features"]))
    table.add_row("Languages", ", ".join(info["languages"]))
    console.print(table)


@app.command()
def tools(
    ctx: typer.Context,
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format: table, mcp or anthropic",
    ),
) -> None:
    """List the tool definitions offered to tool-calling hosts."""
    registry = ToolRegistry()
    register_git_tools(registry, _dispatcher(ctx))
    definitions = registry.get_definitions()

    if format == "mcp":
        typer.echo(_to_json([d.to_mcp() for d in definitions]))
    elif format == "anthropic":
        typer.echo(_to_json([d.to_anthropic() for d in definitions]))
    elif format == "table":
        table = Table(title="Tools")
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Parameters", style="green")
        table.add_column("Description")
        for definition in definitions:
            params = ", ".join(
                p.name if p.required else f"[{p.name}]" for p in definition.parameters
            )
            table.add_row(definition.name, params or "-", definition.description)
        console.print(table)
    else:
        console.print(f"[red]Unknown format: {format}[/red]")
        raise typer.Exit(2)


@app.command()
def config(
    ctx: typer.Context,
    init: bool = typer.Option(False, "--init", help="Create the user config file if missing"),
) -> None:
    """Show current configuration."""
    if init:
        path = create_default_config()
        console.print(f"[green]Config file: {path}[/green]")
        return

    settings = _settings(ctx)

    console.print(Panel("[bold]Current Configuration[/bold]", border_style="blue"))

    console.print("\n[bold]Commands:[/bold]")
    console.print(f"  Auto-stage: {settings.commands.auto_stage}")
    console.print(f"  Auto-push: {settings.commands.auto_push}")
    console.print(f"  Conventional commits: {settings.commands.conventional_commits}")
    console.print(f"  Log limit: {settings.commands.log_limit}")
    console.print(f"  Skip hooks: {settings.commands.no_verify}")

    console.print("\n[bold]Git:[/bold]")
    console.print(f"  Executable: {settings.git.executable}")
    console.print(f"  Remote: {settings.git.remote}")
    console.print(f"  Timeout: {settings.git.timeout or 'none'}")

    console.print("\n[bold]Logging:[/bold]")
    console.print(f"  Level: {settings.logging.level}")
    console.print(f"  File: {settings.logging.resolved_file or '-'}")

    console.print(f"\n[dim]User config: {CONFIG_FILE}[/dim]")


if __name__ == "__main__":
    app()
