"""
UI utilities for consistent CLI output.

Provides icons, styling helpers, and output functions for the teamforge CLI.
"""

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from teamforge.capabilities import CapabilityRegistry
from teamforge.models import DeployedConfig, DeploymentResult, Team

# Shared console instance
console = Console(soft_wrap=True, legacy_windows=False)


# Icons/symbols for consistent visual language
class Icons:
    """Unicode symbols for CLI output."""
    # Status
    SUCCESS = "✓"
    ERROR = "✗"
    WARNING = "!"
    INFO = "•"
    SKIP = "○"

    # Structure
    ARROW = "→"
    INDENT = "  "


def success(message: str, prefix: bool = True) -> None:
    """Print a success message."""
    icon = f"[green]{Icons.SUCCESS}[/green] " if prefix else ""
    console.print(f"{icon}[green]{message}[/green]")


def error(message: str, prefix: bool = True) -> None:
    """Print an error message."""
    icon = f"[red]{Icons.ERROR}[/red] " if prefix else ""
    console.print(f"{icon}[red]{message}[/red]")


def warning(message: str, prefix: bool = True) -> None:
    """Print a warning message."""
    icon = f"[yellow]{Icons.WARNING}[/yellow] " if prefix else ""
    console.print(f"{icon}[yellow]{message}[/yellow]")


def info(message: str, prefix: bool = True) -> None:
    """Print an info message."""
    icon = f"[blue]{Icons.INFO}[/blue] " if prefix else ""
    console.print(f"{icon}{message}")


def dim(message: str) -> None:
    """Print dimmed/secondary text."""
    console.print(f"[dim]{message}[/dim]")


def path(p: str) -> str:
    """Format a file path."""
    return f"[dim]{p}[/dim]"


def kv(key: str, value: str, indent: int = 1) -> None:
    """Print a key-value pair."""
    prefix = Icons.INDENT * indent
    console.print(f"{prefix}[dim]{key}:[/dim] {value}")


def blank() -> None:
    """Print a blank line."""
    console.print()


def hint(message: str) -> None:
    """Print a helpful hint."""
    console.print(f"[dim]{Icons.ARROW} {message}[/dim]")


def count_summary(items: str, count: int) -> str:
    """Format a count summary (e.g., '3 files')."""
    return f"{count} {items}" if count != 1 else f"{count} {items.rstrip('s')}"


def _mark(supported: bool) -> str:
    return f"[green]{Icons.SUCCESS}[/green]" if supported else f"[dim]{Icons.ERROR}[/dim]"


def capabilities_table(registry: CapabilityRegistry) -> None:
    """Print a table of systems and the categories they support."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("System", style="cyan")
    columns = ("agents", "skills", "hooks", "mcpServers", "constitution", "memory", "security")
    for column in columns:
        table.add_column(column, justify="center")
    table.add_column("Scopes", style="dim")

    for system in registry.get_all_systems():
        descriptor = registry.get_descriptor(system)
        caps = descriptor.capabilities.to_dict()
        table.add_row(
            f"{descriptor.display_name} ({system})",
            *(_mark(caps[c]) for c in columns),
            ", ".join(descriptor.scopes),
        )
    console.print(table)


def deployment_result(result: DeploymentResult) -> None:
    """Print one target's outcome with its warnings and skipped categories."""
    if result.success:
        note = count_summary("files", len(result.files_written))
        console.print(
            f"  [green]{Icons.SUCCESS}[/green] [bold]{result.system}[/bold] [dim]({note})[/dim]"
        )
    else:
        console.print(f"  [red]{Icons.ERROR}[/red] [bold]{result.system}[/bold]")
        console.print(f"    [red]{result.error}[/red]")
        if result.files_written:
            console.print(
                f"    [dim]written before failure: {len(result.files_written)}[/dim]"
            )

    for category in result.skipped:
        console.print(f"    [dim]{Icons.SKIP} {category} skipped (not supported)[/dim]")
    for message in result.warnings:
        console.print(f"    [yellow]{Icons.WARNING} {message}[/yellow]")


def config_status(config: DeployedConfig) -> None:
    """Print detected artifacts for a system as a tree."""
    state = "[green]deployed[/green]" if config.deployed else "[dim]not deployed[/dim]"
    tree = Tree(f"[bold]{config.system}[/bold] {state}")

    for label, entries in (("project", config.project), ("global", config.global_)):
        if not entries:
            continue
        scope_node = tree.add(f"[dim]{label}[/dim]")
        for name, status in entries.items():
            icon = f"[green]{Icons.SUCCESS}[/green]" if status.exists else f"[dim]{Icons.SKIP}[/dim]"
            text = f"{icon} {name} {path(status.path)}"
            if status.count is not None:
                text += f" [cyan]({status.count})[/cyan]"
            scope_node.add(text)

    console.print(tree)


def team_tree(team: Team) -> None:
    """Print a team's elements as a tree, in deployment order."""
    tree = Tree(f"[cyan]{team.name}[/cyan] [dim]{team.id}[/dim]")

    if team.agents:
        node = tree.add("[dim]agents[/dim]")
        for ref in team.sorted_agents():
            node.add(f"[green]{ref.agent_id}[/green]")
    if team.skills:
        node = tree.add("[dim]skills[/dim]")
        for ref in team.sorted_skills():
            node.add(f"[green]{ref.skill_id}[/green]")
    if team.hooks:
        node = tree.add("[dim]hooks[/dim]")
        for ref in team.sorted_hooks():
            node.add(f"[green]{ref.hook_id}[/green]")
    if team.mcp_servers:
        node = tree.add("[dim]mcpServers[/dim]")
        for ref in team.mcp_servers:
            node.add(f"[green]{ref.mcp_id}[/green]")
    if team.security_configured:
        tree.add("[dim]security configured[/dim]")
    if team.constitution:
        tree.add("[dim]constitution[/dim]")
    if team.has_memory_bank:
        tree.add("[dim]memory bank[/dim]")

    console.print(tree)
