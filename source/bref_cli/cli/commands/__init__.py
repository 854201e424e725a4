# ABOUTME: Commands module for Bref CLI
# ABOUTME: Contains all CLI command implementations

"""CLI commands for Bref CLI."""

from .cli import CliCommand
from .dashboard import DashboardCommand
from .init import InitCommand
from .layers import LayersCommand

__all__ = [
    "InitCommand",
    "CliCommand",
    "DashboardCommand",
    "LayersCommand",
]
