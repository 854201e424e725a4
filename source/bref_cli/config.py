# ABOUTME: Configuration management for Bref CLI
# ABOUTME: Resolves flags and environment variables once at the command boundary

"""Configuration management for Bref CLI."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

DEFAULT_REGION = "us-east-1"
DEFAULT_PROFILE = "default"

# Lambda refuses to run a function for longer than 15 minutes
MAX_INVOCATION_SECONDS = 15 * 60

# Delay between two observations of a running subprocess
POLL_INTERVAL = 0.1

DESCRIPTOR_FILE = "serverless.yml"
DASHBOARD_IMAGE = "bref/dashboard"
DASHBOARD_CONTAINER_PORT = 8000
READINESS_MARKER = "Development Server (http://0.0.0.0:8000) started"

TRUTHY_VALUES = ("true", "1", "yes", "y")


@dataclass(frozen=True)
class Settings:
    """Global settings shared by every command."""

    region: str = DEFAULT_REGION
    profile: str = DEFAULT_PROFILE
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Create settings from environment variables, falling back to defaults."""
        if environ is None:
            environ = os.environ

        return cls(
            region=environ.get("AWS_DEFAULT_REGION") or DEFAULT_REGION,
            profile=environ.get("AWS_PROFILE") or DEFAULT_PROFILE,
            debug=environ.get("BREF_DEBUG", "").lower() in TRUTHY_VALUES,
        )

    def resolve(self, region: str | None = None, profile: str | None = None) -> "Settings":
        """Apply command-line flags on top of the environment defaults."""
        return replace(self, region=region or self.region, profile=profile or self.profile)


@dataclass(frozen=True)
class DashboardSettings:
    """Everything the dashboard command needs, resolved before any process starts."""

    profile: str = DEFAULT_PROFILE
    host: str = "localhost"
    port: int = 8000
    stage: str = "dev"
    aws_directory: Path = field(default_factory=lambda: Path.home() / ".aws")
    image: str = DASHBOARD_IMAGE
    readiness_marker: str = READINESS_MARKER
    descriptor: str = DESCRIPTOR_FILE

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"
