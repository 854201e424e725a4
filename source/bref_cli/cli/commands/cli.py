# ABOUTME: CLI command to run console commands in a deployed Lambda function
# ABOUTME: Forwards the remote output and exit code to the local terminal

"""Cli command - Run a command in a remote function."""

import sys

from cleo.commands.command import Command
from cleo.helpers import argument, option
from rich.console import Console

from bref_cli.cli.utils.validators import validate_aws_region
from bref_cli.config import Settings
from bref_cli.invoker import RemoteInvoker


class CliCommand(Command):
    name = "cli"
    description = "Run a console command in a function deployed with the console layer"

    arguments = [
        argument("function", description="Name or ARN of the Lambda function"),
        argument(
            "arguments",
            description="Command and arguments to run remotely (separate them with -- to pass options)",
            optional=True,
            multiple=True,
        ),
    ]

    options = [
        option("region", "r", description="AWS region (default: AWS_DEFAULT_REGION or us-east-1)", flag=False),
        option("profile", "p", description="AWS profile (default: AWS_PROFILE or default)", flag=False),
    ]

    def handle(self) -> int:
        """Execute the cli command."""
        console = Console(file=sys.stdout)
        error_console = Console(file=sys.stderr)

        settings = Settings.from_env().resolve(region=self.option("region"), profile=self.option("profile"))
        if not validate_aws_region(settings.region):
            error_console.print(f"[red]Invalid AWS region: {settings.region}[/red]")
            return 1

        invoker = RemoteInvoker(settings, console, error_console)
        return invoker.invoke(self.argument("function"), self.argument("arguments") or [])
