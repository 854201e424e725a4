# ABOUTME: Starts the local monitoring dashboard for a deployed serverless stack
# ABOUTME: Chains serverless info, docker pull and docker run with progress and cancellation

"""Dashboard bootstrap sequence."""

import logging
import re
import shutil
import threading
import webbrowser
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from bref_cli.config import DASHBOARD_CONTAINER_PORT, POLL_INTERVAL, DashboardSettings
from bref_cli.utils.exceptions import (
    BrefError,
    DescriptorNotFoundError,
    MissingDependencyError,
    StackInfoNotFoundError,
    StageCancelledError,
    StageFailedError,
)
from bref_cli.utils.process import STDERR, STDOUT, ProcessHandle, ProcessStage
from bref_cli.utils.progress import PollingSpinner
from bref_cli.utils.terminal import write_verbatim

logger = logging.getLogger(__name__)

REGION_PATTERN = re.compile(r"region: ([a-z0-9-]+)")
STACK_PATTERN = re.compile(r"stack: ([a-zA-Z0-9-]+)")

REQUIRED_EXECUTABLES = {
    "docker": ("Docker", "https://docs.docker.com/get-docker/"),
    "serverless": ("The Serverless Framework", "https://www.serverless.com/framework/docs/getting-started"),
}

EXIT_CANCELLED = 130


@dataclass(frozen=True)
class StackInfo:
    """Values read from `serverless info`; None when the field was not found."""

    region: str | None = None
    stack: str | None = None


def extract_stack_info(text: str) -> StackInfo:
    """Extract the region and stack name from `serverless info` output."""
    region = REGION_PATTERN.search(text)
    stack = STACK_PATTERN.search(text)
    return StackInfo(
        region=region.group(1) if region else None,
        stack=stack.group(1) if stack else None,
    )


class DashboardBootstrapper:
    """
    Runs the dashboard container against the stack described by serverless.yml.

    Every step is gated on the previous one. The bootstrapper owns a
    cancellation event: calling cancel() wakes the current poll and
    terminates whatever process is in flight.
    """

    def __init__(
        self,
        settings: DashboardSettings,
        console: Console,
        error_console: Console,
        working_directory: Path | None = None,
        which: Callable[[str], str | None] = shutil.which,
        handle_factory: Callable[[Sequence[str]], ProcessHandle] = ProcessHandle,
        open_url: Callable[[str], bool] = webbrowser.open,
        poll_interval: float = POLL_INTERVAL,
    ):
        self.settings = settings
        self.console = console
        self.error_console = error_console
        self.working_directory = working_directory or Path.cwd()
        self.which = which
        self.handle_factory = handle_factory
        self.open_url = open_url
        self.poll_interval = poll_interval
        self.cancel_event = threading.Event()
        self._current: ProcessHandle | None = None

    def run(self) -> int:
        """Run the whole sequence and return the container's exit code."""
        try:
            self.check_preconditions()
            stack_info = self.fetch_stack_info()
            self.pull_image()
            container, cursor = self.start_container(stack_info)
        except StageCancelledError:
            self.error_console.print("\n[yellow]Dashboard cancelled.[/yellow]")
            return EXIT_CANCELLED
        except StageFailedError as e:
            if e.output:
                self.error_console.print(escape(e.output.rstrip()), style="red", soft_wrap=True)
            self.error_console.print(f"[red]Error: {escape(e.message)}[/red]")
            return 1
        except MissingDependencyError as e:
            self.error_console.print(f"[red]Error: {escape(e.message)}[/red]")
            self.error_console.print(f"Installation instructions: [cyan]{e.install_url}[/cyan]")
            return 1
        except BrefError as e:
            self.error_console.print(f"[red]Error: {escape(e.message)}[/red]")
            return 1

        return self.serve(container, since=cursor)

    def cancel(self) -> None:
        """Stop the sequence and terminate the process currently running."""
        self.cancel_event.set()
        if self._current is not None:
            self._current.terminate()

    def check_preconditions(self) -> None:
        descriptor = self.working_directory / self.settings.descriptor
        if not descriptor.exists():
            raise DescriptorNotFoundError(
                f"No `{self.settings.descriptor}` file found in {self.working_directory}.", path=str(descriptor)
            )

        for executable, (label, install_url) in REQUIRED_EXECUTABLES.items():
            if not self.which(executable):
                raise MissingDependencyError(
                    f"{label} is not installed: `{executable}` was not found on the PATH.",
                    executable=executable,
                    install_url=install_url,
                )

    def fetch_stack_info(self) -> StackInfo:
        handle = self._run_stage(
            self._stage(
                "Retrieving the stack",
                ["serverless", "info", "--stage", self.settings.stage, "--aws-profile", self.settings.profile],
                report_stream=STDOUT,
            )
        )
        stack_info = extract_stack_info(handle.output)
        logger.debug("Stack info: %s", stack_info)

        if stack_info.region is None:
            raise StackInfoNotFoundError("Could not find the region in the `serverless info` output.", field="region")
        if stack_info.stack is None:
            raise StackInfoNotFoundError(
                "Could not find the stack name in the `serverless info` output.", field="stack"
            )
        return stack_info

    def pull_image(self) -> None:
        self._run_stage(
            self._stage(
                "Retrieving the latest version of the dashboard",
                ["docker", "pull", self.settings.image],
                report_stream=STDERR,
            )
        )

    def container_command(self, stack_info: StackInfo) -> list[str]:
        settings = self.settings
        return [
            "docker",
            "run",
            "--rm",
            "-p",
            f"{settings.host}:{settings.port}:{DASHBOARD_CONTAINER_PORT}",
            "-v",
            f"{settings.aws_directory}:/root/.aws:ro",
            "--env",
            f"STACKNAME={stack_info.stack}",
            "--env",
            f"REGION={stack_info.region}",
            "--env",
            f"AWS_PROFILE={settings.profile}",
            settings.image,
        ]

    def start_container(self, stack_info: StackInfo) -> tuple[ProcessHandle, int]:
        """Start the container and return it with the number of lines printed before it was ready."""
        marker = self.settings.readiness_marker
        stage = self._stage(
            "Starting the dashboard",
            self.container_command(stack_info),
            ready=lambda handle: marker in handle.combined_output,
            report_stream=STDERR,
        )
        return self._run_stage(stage), stage.ready_cursor

    def serve(self, container: ProcessHandle, since: int | None = None) -> int:
        """Open the dashboard and stream the container output from line `since` until it stops."""
        cursor = container.line_count if since is None else since
        url = self.settings.url
        self.console.print(f"Dashboard started: [bold green underline]{url}[/bold green underline]")
        try:
            if not self.open_url(url):
                logger.warning("No browser available to open %s", url)
        except webbrowser.Error as e:
            logger.warning("Could not open %s: %s", url, e)

        try:
            exit_code = container.wait(self._stream_line, since=cursor)
        except KeyboardInterrupt:
            self.cancel()
            return EXIT_CANCELLED
        finally:
            self._current = None
        return exit_code

    def _stream_line(self, origin: str, line: str) -> None:
        if not line.endswith("\n"):
            line += "\n"
        if origin == STDERR:
            write_verbatim(self.error_console, f"ERR > {line}")
        else:
            write_verbatim(self.console, f"OUT > {line}")

    def _stage(self, name: str, command: list[str], ready=None, report_stream: str = STDOUT) -> ProcessStage:
        return ProcessStage(
            name,
            command,
            ready=ready,
            report_stream=report_stream,
            cancel_event=self.cancel_event,
            poll_interval=self.poll_interval,
            handle_factory=self._track(self.handle_factory),
        )

    def _run_stage(self, stage: ProcessStage) -> ProcessHandle:
        try:
            with PollingSpinner(self.console) as spinner:
                return stage.run(on_tick=spinner.tick)
        except KeyboardInterrupt:
            self.cancel()
            raise StageCancelledError(f"{stage.name} was cancelled", stage=stage.name) from None
        finally:
            if stage.handle is not None and not stage.handle.is_running():
                self._current = None

    def _track(self, factory):
        def create(command):
            self._current = factory(command)
            return self._current

        return create
