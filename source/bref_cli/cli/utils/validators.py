# ABOUTME: Input validation functions for CLI commands
# ABOUTME: Validates regions, ports, stages and layer tables before any process starts

"""Input validators for CLI commands."""

import re


def validate_aws_region(region: str) -> bool:
    """Validate AWS region format."""
    if not region:
        return False

    # AWS region format: us-east-1, eu-west-2, us-gov-west-1, etc.
    pattern = r"^[a-z]{2}(-[a-z]+)+-\d{1,2}$"
    return bool(re.match(pattern, region))


def validate_port(port) -> bool:
    """Validate a TCP port number given as a string or an integer."""
    try:
        value = int(port)
    except (TypeError, ValueError):
        return False
    return 0 < value < 65536


def validate_stage_name(stage: str) -> bool:
    """Validate a Serverless stage name.

    Stages end up in CloudFormation stack names, so they are limited to
    alphanumeric characters and hyphens.
    """
    if not stage or len(stage) > 64:
        return False

    pattern = r"^[a-zA-Z0-9][a-zA-Z0-9-]*$"
    return bool(re.match(pattern, stage))


def validate_php_version(version: str) -> bool:
    """Validate a PHP version such as 8.1 or 74."""
    if not version:
        return False

    pattern = r"^\d\.?\d$"
    return bool(re.match(pattern, version))
