# ABOUTME: Shared display utilities for consistent output formatting
# ABOUTME: Renders layer tables and scaffolding summaries

"""Shared display utilities for consistent output formatting across commands."""

from rich import box
from rich.console import Console
from rich.table import Table


def display_layers(console: Console, region: str, layers: list[dict[str, str]], format_type: str = "table") -> None:
    """
    Display the layers available in a region.

    Args:
        console: Console to print to
        region: AWS region the layers belong to
        layers: Layer entries with "name", "version" and "arn" keys
        format_type: Display format - "table" for rich table, "simple" for one ARN per line
    """
    if format_type == "table":
        table = Table(title=f"Layers in {region}", box=box.SIMPLE)
        table.add_column("Layer", style="cyan")
        table.add_column("Version", justify="right")
        table.add_column("ARN", style="dim", overflow="fold")

        for layer in layers:
            table.add_row(layer["name"], layer["version"], layer["arn"])

        console.print(table)
    else:
        for layer in layers:
            console.print(layer["arn"], markup=False, highlight=False, soft_wrap=True)


def display_created_files(console: Console, files: list[str]) -> None:
    """Display the files written by the init command."""
    console.print("\n[bold]Created files:[/bold]")
    for name in files:
        console.print(f"  • [cyan]{name}[/cyan]")
