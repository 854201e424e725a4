# ABOUTME: Progress indicator for polled subprocess stages
# ABOUTME: Renders a spinner on each poll and clears it once the stage ends

"""Progress indicator utilities for CLI commands."""

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn


class PollingSpinner:
    """Spinner redrawn by the caller on every poll instead of a background thread."""

    def __init__(self, console: Console):
        self.console = console
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            auto_refresh=False,
            transient=True,
        )
        self._task = None

    def __enter__(self) -> "PollingSpinner":
        self._progress.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._progress.stop()

    def tick(self, description: str) -> None:
        """Advance the spinner and show the current stage description."""
        if self._task is None:
            self._task = self._progress.add_task(f"{description}...", total=None)
        else:
            self._progress.update(self._task, description=f"{description}...")
        self._progress.refresh()
