# ABOUTME: Subprocess supervision for multi-step CLI operations
# ABOUTME: Polls external processes for completion or readiness with cancellation support

"""Subprocess handles and polled stages."""

import io
import logging
import subprocess
import threading
from collections.abc import Callable, Sequence
from enum import Enum

from bref_cli.config import POLL_INTERVAL

from .exceptions import StageCancelledError, StageFailedError, StartupFailedError

logger = logging.getLogger(__name__)

STDOUT = "out"
STDERR = "err"


class ProcessHandle:
    """
    Owns a single external process and its captured output.

    Both pipes are drained by background reader threads so that a process
    writing a lot of output never blocks while the caller is polling it.
    """

    def __init__(self, command: Sequence[str], cwd: str = None, env: dict[str, str] = None):
        self.command = list(command)
        self.cwd = cwd
        self.env = env
        self._process: subprocess.Popen | None = None
        self._chunks: list[tuple[str, str]] = []
        self._open_streams = 0
        self._readers: list[threading.Thread] = []
        self._changed = threading.Condition()

    def start(self) -> "ProcessHandle":
        logger.debug("Starting: %s", " ".join(self.command))
        self._process = subprocess.Popen(
            self.command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=self.cwd,
            env=self.env,
        )
        self._open_streams = 2
        for origin, stream in ((STDOUT, self._process.stdout), (STDERR, self._process.stderr)):
            reader = threading.Thread(target=self._pump, args=(origin, stream), daemon=True)
            reader.start()
            self._readers.append(reader)
        return self

    def _pump(self, origin: str, stream) -> None:
        # Split on "\n" only and keep "\r" as the process wrote it
        stream = io.TextIOWrapper(stream, errors="replace", newline="\n")
        try:
            for line in iter(stream.readline, ""):
                with self._changed:
                    self._chunks.append((origin, line))
                    self._changed.notify_all()
        finally:
            stream.close()
            with self._changed:
                self._open_streams -= 1
                self._changed.notify_all()

    def is_running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    @property
    def exit_code(self) -> int | None:
        if self._process is None:
            return None
        return self._process.poll()

    def _collect(self, origin: str | None = None) -> str:
        with self._changed:
            return "".join(text for source, text in self._chunks if origin is None or source == origin)

    @property
    def output(self) -> str:
        return self._collect(STDOUT)

    @property
    def error_output(self) -> str:
        return self._collect(STDERR)

    @property
    def combined_output(self) -> str:
        return self._collect()

    def flush(self, timeout: float | None = None) -> None:
        """Wait for the reader threads to reach the end of both pipes."""
        for reader in self._readers:
            reader.join(timeout)

    def wait(self, callback: Callable[[str, str], None] = None, since: int = 0) -> int:
        """
        Block until the process exits, passing each new line to the callback.

        Args:
            callback: Receives the stream origin ("out" or "err") and the line
            since: Number of already captured lines to skip

        Returns:
            The process exit code
        """
        cursor = since
        while True:
            with self._changed:
                self._changed.wait_for(lambda: len(self._chunks) > cursor or self._open_streams == 0)
                pending = self._chunks[cursor:]
                cursor = len(self._chunks)
                finished = self._open_streams == 0
            if callback:
                for origin, line in pending:
                    callback(origin, line)
            if finished and not pending:
                break
        return self._process.wait()

    @property
    def line_count(self) -> int:
        with self._changed:
            return len(self._chunks)

    def terminate(self, grace_period: float = 5.0) -> None:
        """Stop the process, killing it if it ignores the termination request."""
        if not self.is_running():
            return
        logger.debug("Terminating: %s", " ".join(self.command))
        self._process.terminate()
        try:
            self._process.wait(timeout=grace_period)
        except subprocess.TimeoutExpired:
            self._process.kill()
            self._process.wait()


class StageState(Enum):
    STARTING = "starting"
    POLLING = "polling"
    READY_OR_DONE = "ready_or_done"
    FAILED = "failed"


class ProcessStage:
    """
    Runs one external command and polls it until it is done or ready.

    Without a readiness check the stage succeeds when the process exits with
    status 0. With one, the stage succeeds as soon as the check passes while
    the process is still running, and fails if the process stops first.
    Each poll waits on the cancellation event, so cancelling a stage wakes it
    immediately and terminates the process.
    """

    def __init__(
        self,
        name: str,
        command: Sequence[str],
        ready: Callable[[ProcessHandle], bool] = None,
        report_stream: str = STDOUT,
        cancel_event: threading.Event = None,
        poll_interval: float = POLL_INTERVAL,
        handle_factory: Callable[[Sequence[str]], ProcessHandle] = ProcessHandle,
    ):
        self.name = name
        self.command = list(command)
        self.ready = ready
        self.report_stream = report_stream
        self.cancel_event = cancel_event or threading.Event()
        self.poll_interval = poll_interval
        self.handle_factory = handle_factory
        self.state = StageState.STARTING
        self.handle: ProcessHandle | None = None
        self.ready_cursor = 0

    def run(self, on_tick: Callable[[str], None] = None) -> ProcessHandle:
        """
        Start the command and poll it.

        Returns:
            The process handle; still running when the stage has a readiness check.
            ready_cursor then holds the number of lines captured before the check passed.

        Raises:
            StageFailedError: the process exited with a non-zero status
            StartupFailedError: the process stopped before becoming ready
            StageCancelledError: the cancellation event was set
        """
        self.state = StageState.STARTING
        try:
            self.handle = self.handle_factory(self.command).start()
        except OSError as e:
            self.state = StageState.FAILED
            raise StageFailedError(f"Could not start {self.command[0]}: {e}", stage=self.name) from e

        self.state = StageState.POLLING
        while True:
            if on_tick:
                on_tick(self.name)
            cursor = self.handle.line_count
            if self.ready and self.ready(self.handle):
                self.ready_cursor = cursor
                self.state = StageState.READY_OR_DONE
                return self.handle
            if not self.handle.is_running():
                break
            if self.cancel_event.wait(self.poll_interval):
                self.handle.terminate()
                self.state = StageState.FAILED
                raise StageCancelledError(f"{self.name} was cancelled", stage=self.name)

        self.handle.flush()
        exit_code = self.handle.exit_code
        logger.debug("%s exited with status %s", self.name, exit_code)

        # A process that has exited is never ready, even when its last output holds the marker
        if self.ready:
            self.state = StageState.FAILED
            raise StartupFailedError(
                f"{self.name} stopped before it was ready",
                stage=self.name,
                output=self._report(),
                exit_code=exit_code,
            )

        if exit_code != 0:
            self.state = StageState.FAILED
            raise StageFailedError(
                f"{self.name} failed with exit code {exit_code}",
                stage=self.name,
                output=self._report(),
                exit_code=exit_code,
            )

        self.state = StageState.READY_OR_DONE
        return self.handle

    def _report(self) -> str:
        # Fall back to the other stream when the preferred one is empty
        if self.report_stream == STDERR:
            return self.handle.error_output or self.handle.output
        return self.handle.output or self.handle.error_output
