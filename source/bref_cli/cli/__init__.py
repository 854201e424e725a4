# ABOUTME: CLI module for Bref CLI
# ABOUTME: Provides the command-line interface and logging setup

"""Command-line interface for Bref CLI."""

import logging
import sys

from cleo.application import Application

from bref_cli import __version__
from bref_cli.config import Settings

from .commands.cli import CliCommand
from .commands.dashboard import DashboardCommand
from .commands.init import InitCommand
from .commands.layers import LayersCommand


def configure_logging(debug: bool = False) -> None:
    """Send diagnostics to stderr, keeping stdout for command output."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def create_application() -> Application:
    """Create the CLI application."""
    application = Application("bref", __version__)

    # Add commands
    application.add(InitCommand())
    application.add(CliCommand())
    application.add(DashboardCommand())
    application.add(LayersCommand())

    return application


def main():
    """Main entry point for the CLI."""
    configure_logging(Settings.from_env().debug)
    application = create_application()
    application.run()


if __name__ == "__main__":
    main()
