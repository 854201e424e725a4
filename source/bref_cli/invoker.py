# ABOUTME: Runs a console command inside a remote Lambda function
# ABOUTME: Maps the invocation payload onto local output and a process exit code

"""Remote command invocation."""

import json
import logging
import shlex
from collections.abc import Callable, Sequence

from rich.console import Console
from rich.markup import escape

from bref_cli.config import MAX_INVOCATION_SECONDS, Settings
from bref_cli.utils.exceptions import InvocationFailed
from bref_cli.utils.lambda_client import SimpleLambdaClient
from bref_cli.utils.terminal import write_verbatim

logger = logging.getLogger(__name__)


def escape_arguments(arguments: Sequence[str]) -> str:
    """Quote each argument for the remote shell and join them with spaces."""
    return " ".join(shlex.quote(argument) for argument in arguments)


class RemoteInvoker:
    """Invokes a function running the console runtime and forwards its result."""

    def __init__(
        self,
        settings: Settings,
        console: Console,
        error_console: Console,
        client_factory: Callable[..., SimpleLambdaClient] = SimpleLambdaClient,
    ):
        self.settings = settings
        self.console = console
        self.error_console = error_console
        self.client_factory = client_factory

    def invoke(self, function_name: str, arguments: Sequence[str] = ()) -> int:
        """Run the arguments as a command in the remote function and return its exit code."""
        if not function_name:
            self.error_console.print("[red]Error: a function name is required.[/red]")
            return 1

        command = escape_arguments(arguments)
        logger.debug("Remote command for %s: %s", function_name, command)

        client = self.client_factory(self.settings.region, self.settings.profile, MAX_INVOCATION_SECONDS)

        try:
            result = client.invoke(function_name, json.dumps(command))
        except InvocationFailed as e:
            if e.logs:
                write_verbatim(self.error_console, e.logs)
            self.error_console.print(f"[red]Error: {escape(e.message)}[/red]")
            return 1

        payload = result.payload
        if isinstance(payload, dict) and "output" in payload:
            write_verbatim(self.console, str(payload["output"]))
            return self._exit_code(payload)

        self.error_console.print("[red]Error: The command did not return a valid response.[/red]")
        self.error_console.print("[green]Logs:[/green]")
        write_verbatim(self.error_console, result.logs)
        self.console.print("Lambda result payload:", highlight=False)
        write_verbatim(self.console, json.dumps(payload, indent=4) + "\n")
        return 1

    @staticmethod
    def _exit_code(payload: dict) -> int:
        # A missing exit code counts as a failure
        try:
            return int(payload.get("exitCode", 1))
        except (TypeError, ValueError):
            return 1
