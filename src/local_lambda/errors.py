"""Exceptions raised by the local run pipeline."""

from typing import Optional


class LocalLambdaError(Exception):
    """Base class for every failure the pipeline propagates."""


class DebugConfigurationError(LocalLambdaError):
    """Debugging was requested without the information needed to attach."""


class SamCliError(LocalLambdaError):
    """An external SAM CLI command failed."""

    def __init__(self, message: str, stderr: Optional[str] = None):
        super().__init__(message)
        self.stderr = stderr


class SamCliBuildError(SamCliError):
    """``sam build`` did not complete successfully."""


class SamCliLaunchError(SamCliError):
    """``sam local invoke`` could not be started."""


class PortWaitTimeoutError(LocalLambdaError, TimeoutError):
    """The debug port did not open within the allotted time."""

    def __init__(self, port: int, timeout_millis: int):
        super().__init__(
            f"Timed out after {timeout_millis}ms waiting for port {port} to open"
        )
        self.port = port
        self.timeout_millis = timeout_millis
