# ABOUTME: Dashboard command to monitor a deployed application locally
# ABOUTME: Runs the dashboard container for the current serverless.yml stack

"""Dashboard command - Start the local monitoring dashboard."""

import sys

from cleo.commands.command import Command
from cleo.helpers import option
from rich.console import Console

from bref_cli.cli.utils.validators import validate_port, validate_stage_name
from bref_cli.config import DashboardSettings, Settings
from bref_cli.dashboard import EXIT_CANCELLED, DashboardBootstrapper


class DashboardCommand(Command):
    name = "dashboard"
    description = "Start a local dashboard showing the metrics of the deployed application"

    options = [
        option("host", description="Host the dashboard listens on", flag=False, default="localhost"),
        option("port", description="Port the dashboard listens on", flag=False, default="8000"),
        option("profile", "p", description="AWS profile (default: AWS_PROFILE or default)", flag=False),
        option("stage", "s", description="Serverless stage to monitor", flag=False, default="dev"),
    ]

    def handle(self) -> int:
        """Execute the dashboard command."""
        console = Console(file=sys.stdout)
        error_console = Console(file=sys.stderr)

        port = self.option("port")
        if not validate_port(port):
            error_console.print(f"[red]Invalid port: {port}[/red]")
            return 1

        stage = self.option("stage")
        if not validate_stage_name(stage):
            error_console.print(f"[red]Invalid stage name: {stage}[/red]")
            return 1

        settings = Settings.from_env().resolve(profile=self.option("profile"))
        dashboard_settings = DashboardSettings(
            profile=settings.profile,
            host=self.option("host"),
            port=int(port),
            stage=stage,
        )

        bootstrapper = DashboardBootstrapper(dashboard_settings, console, error_console)
        try:
            return bootstrapper.run()
        except KeyboardInterrupt:
            bootstrapper.cancel()
            error_console.print("\n[yellow]Dashboard stopped.[/yellow]")
            return EXIT_CANCELLED
