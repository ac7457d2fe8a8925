from .errors import (
    DebugConfigurationError,
    LocalLambdaError,
    PortWaitTimeoutError,
    SamCliBuildError,
    SamCliError,
    SamCliLaunchError,
)
from .local_lambda_runner import LocalLambdaRunner, report_run_failure
from .models import DebugConfiguration, HandlerConfig, InvocationRequest


async def run(request: InvocationRequest, **collaborators) -> LocalLambdaRunner:
    """
    Run one handler locally.

    Args:
        request: The handler, runtime and paths of the run
        **collaborators: Keyword arguments forwarded to LocalLambdaRunner

    Returns:
        The runner, exposing the launched process and attach result
    """
    runner = LocalLambdaRunner(request, **collaborators)
    await runner.run()
    return runner


__all__ = [
    "DebugConfiguration",
    "DebugConfigurationError",
    "HandlerConfig",
    "InvocationRequest",
    "LocalLambdaError",
    "LocalLambdaRunner",
    "PortWaitTimeoutError",
    "SamCliBuildError",
    "SamCliError",
    "SamCliLaunchError",
    "report_run_failure",
    "run",
]
