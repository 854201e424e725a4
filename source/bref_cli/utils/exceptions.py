# ABOUTME: Custom exception classes for Bref CLI operations
# ABOUTME: Provides structured errors for invocations, subprocess stages and scaffolding

"""Custom exceptions for Bref CLI operations."""


class BrefError(Exception):
    """Base exception for all Bref CLI operations."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InvocationFailed(BrefError):
    """Raised when a Lambda invocation fails or the function reports an error."""

    def __init__(self, message: str, logs: str = "", function_name: str = None):
        super().__init__(message)
        self.logs = logs
        self.function_name = function_name


class MissingDependencyError(BrefError):
    """Raised when a required executable cannot be found on the PATH."""

    def __init__(self, message: str, executable: str = None, install_url: str = None):
        super().__init__(message)
        self.executable = executable
        self.install_url = install_url


class DescriptorNotFoundError(BrefError):
    """Raised when the serverless.yml file is missing from the working directory."""

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class StageFailedError(BrefError):
    """Raised when a subprocess stage exits unsuccessfully."""

    def __init__(self, message: str, stage: str = None, output: str = "", exit_code: int | None = None):
        super().__init__(message)
        self.stage = stage
        self.output = output
        self.exit_code = exit_code


class StartupFailedError(StageFailedError):
    """Raised when a long-running process stops before it reports being ready."""

    pass


class StageCancelledError(BrefError):
    """Raised when a stage is interrupted through its cancellation signal."""

    def __init__(self, message: str, stage: str = None):
        super().__init__(message)
        self.stage = stage


class StackInfoNotFoundError(BrefError):
    """Raised when `serverless info` output does not mention the expected field."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class LayerNotFoundError(BrefError):
    """Raised when a layer or region is missing from the layers table."""

    pass


class ProjectExistsError(BrefError):
    """Raised when scaffolding would overwrite existing project files."""

    def __init__(self, message: str, existing_files: list = None):
        super().__init__(message)
        self.existing_files = existing_files or []
