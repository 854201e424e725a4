# ABOUTME: Tests for subprocess handles and polled stages
# ABOUTME: Uses fake handles for state transitions and the Python interpreter for real processes

import sys
import threading

import pytest

from bref_cli.utils.exceptions import StageCancelledError, StageFailedError, StartupFailedError
from bref_cli.utils.process import STDERR, STDOUT, ProcessHandle, ProcessStage, StageState

from .fakes import FakeHandle


def python(code):
    return [sys.executable, "-c", code]


def factory_for(**behaviour):
    created = []

    def create(command):
        handle = FakeHandle(command, **behaviour)
        created.append(handle)
        return handle

    create.created = created
    return create


class TestProcessStage:
    """State transitions of a polled stage"""

    def test_successful_completion(self):
        factory = factory_for(stdout="done\n", exit_code=0, running_polls=3)
        stage = ProcessStage("Build", ["make"], poll_interval=0, handle_factory=factory)
        ticks = []

        handle = stage.run(on_tick=ticks.append)

        assert stage.state == StageState.READY_OR_DONE
        assert handle.output == "done\n"
        assert ticks == ["Build"] * 4

    def test_failure_reports_preferred_stream(self):
        factory = factory_for(stdout="partial\n", stderr="permission denied\n", exit_code=2)
        stage = ProcessStage("Pull", ["docker", "pull"], report_stream=STDERR, poll_interval=0, handle_factory=factory)

        with pytest.raises(StageFailedError) as exc_info:
            stage.run()

        assert stage.state == StageState.FAILED
        assert exc_info.value.exit_code == 2
        assert exc_info.value.output == "permission denied\n"
        assert exc_info.value.stage == "Pull"

    def test_failure_falls_back_to_other_stream(self):
        factory = factory_for(stdout="Serverless Error: stage not found\n", exit_code=1)
        stage = ProcessStage(
            "Info", ["serverless", "info"], report_stream=STDERR, poll_interval=0, handle_factory=factory
        )

        with pytest.raises(StageFailedError) as exc_info:
            stage.run()

        assert exc_info.value.output == "Serverless Error: stage not found\n"

    def test_readiness_returns_running_handle(self):
        factory = factory_for(stderr="Server started\n", running_polls=None)
        stage = ProcessStage(
            "Serve",
            ["server"],
            ready=lambda handle: "started" in handle.combined_output,
            poll_interval=0,
            handle_factory=factory,
        )

        handle = stage.run()

        assert stage.state == StageState.READY_OR_DONE
        assert handle.is_running()

    def test_stopping_before_ready_is_a_startup_failure(self):
        factory = factory_for(stderr="Killed\n", exit_code=137, running_polls=2)
        stage = ProcessStage(
            "Serve",
            ["server"],
            ready=lambda handle: "started" in handle.combined_output,
            report_stream=STDERR,
            poll_interval=0,
            handle_factory=factory,
        )

        with pytest.raises(StartupFailedError) as exc_info:
            stage.run()

        assert stage.state == StageState.FAILED
        assert exc_info.value.exit_code == 137
        assert exc_info.value.output == "Killed\n"

    def test_stopping_with_success_before_ready_is_still_a_failure(self):
        factory = factory_for(exit_code=0)
        stage = ProcessStage("Serve", ["server"], ready=lambda handle: False, poll_interval=0, handle_factory=factory)

        with pytest.raises(StartupFailedError):
            stage.run()

    def test_marker_arriving_with_exit_is_not_ready(self):
        factory = factory_for(stdout="started\n", exit_code=0)
        checks = []

        def ready(handle):
            # The marker lands between this check and the exit of the process
            checks.append(handle)
            return False

        stage = ProcessStage("Serve", ["server"], ready=ready, poll_interval=0, handle_factory=factory)

        with pytest.raises(StartupFailedError) as exc_info:
            stage.run()

        assert len(checks) == 1
        assert exc_info.value.output == "started\n"

    def test_ready_cursor_counts_lines_before_readiness(self):
        factory = factory_for(stdout="booting\nstarted\n", running_polls=None)
        stage = ProcessStage(
            "Serve", ["server"], ready=lambda handle: "started" in handle.output, poll_interval=0, handle_factory=factory
        )

        stage.run()
        assert stage.ready_cursor == 2

    def test_cancellation_terminates_the_process(self):
        factory = factory_for(running_polls=None)
        cancel_event = threading.Event()
        cancel_event.set()
        stage = ProcessStage("Serve", ["server"], cancel_event=cancel_event, poll_interval=0, handle_factory=factory)

        with pytest.raises(StageCancelledError):
            stage.run()

        assert stage.state == StageState.FAILED
        assert factory.created[0].terminated

    def test_missing_executable(self):
        stage = ProcessStage("Missing", ["definitely-not-a-real-executable-bref"], poll_interval=0)

        with pytest.raises(StageFailedError, match="Could not start"):
            stage.run()

        assert stage.state == StageState.FAILED


class TestProcessHandle:
    """Real subprocesses driven through ProcessHandle"""

    def test_captures_both_streams(self):
        handle = ProcessHandle(python("import sys; print('out'); print('err', file=sys.stderr)")).start()

        assert handle.wait() == 0
        assert handle.output == "out\n"
        assert handle.error_output == "err\n"
        assert handle.exit_code == 0

    def test_wait_streams_lines_with_their_origin(self):
        handle = ProcessHandle(python("import sys; print('a'); sys.stdout.flush(); print('b', file=sys.stderr)"))
        lines = []

        handle.start().wait(lambda origin, line: lines.append((origin, line)))

        assert (STDOUT, "a\n") in lines
        assert (STDERR, "b\n") in lines

    def test_wait_skips_lines_already_seen(self):
        handle = ProcessHandle(python("print('first'); print('second')")).start()
        handle.wait()
        lines = []

        handle.wait(lambda origin, line: lines.append(line), since=1)
        assert lines == ["second\n"]

    def test_line_endings_and_tabs_are_kept(self):
        handle = ProcessHandle(python("import sys; sys.stdout.write('a\\tb\\r\\nprogress\\rdone\\n')")).start()
        lines = []

        handle.wait(lambda origin, line: lines.append(line))
        assert lines == ["a\tb\r\n", "progress\rdone\n"]

    def test_non_zero_exit_code(self):
        stage = ProcessStage("Exit", python("import sys; sys.exit(3)"), poll_interval=0.01)

        with pytest.raises(StageFailedError) as exc_info:
            stage.run()

        assert exc_info.value.exit_code == 3

    def test_readiness_then_terminate(self):
        code = "import time; print('ready', flush=True); time.sleep(30)"
        stage = ProcessStage("Ready", python(code), ready=lambda h: "ready" in h.output, poll_interval=0.01)

        handle = stage.run()
        assert handle.is_running()

        handle.terminate(grace_period=5)
        assert not handle.is_running()
