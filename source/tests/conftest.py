# ABOUTME: Shared fixtures for the Bref CLI test suite
# ABOUTME: Provides in-memory consoles and fake subprocess handles

import io

import pytest
from rich.console import Console

from .fakes import FakeProcesses


@pytest.fixture
def stdout():
    return io.StringIO()


@pytest.fixture
def stderr():
    return io.StringIO()


@pytest.fixture
def console(stdout):
    return Console(file=stdout, width=200)


@pytest.fixture
def error_console(stderr):
    return Console(file=stderr, width=200)


@pytest.fixture
def processes():
    return FakeProcesses()
