# ABOUTME: Bref CLI - Deployment assistant for serverless PHP applications
# ABOUTME: Main package for running commands, dashboards and scaffolding against AWS Lambda

"""Bref CLI - Serverless PHP deployment assistant."""

__version__ = "1.0.0"
__all__ = ["cli", "config", "dashboard", "invoker", "layers"]
