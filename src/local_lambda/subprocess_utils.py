"""
Subprocess helpers with consistent logging.

Two shapes are provided: ``run_logged_subprocess`` runs a command to
completion and reports a CommandResult, ``launch_logged_subprocess`` starts a
long-lived process and hands back its Popen object.
"""

import logging
import shlex
import subprocess
from typing import Any, Dict, List, Optional

from .constants import NAMESPACE
from .models import CommandResult


_default_logger = logging.getLogger(f"{NAMESPACE}.subprocess_utils")


def _format_command(command: List[str]) -> str:
    return " ".join(shlex.quote(part) for part in command)


def run_logged_subprocess(
    command: List[str],
    logger: Optional[logging.Logger] = None,
    operation_name: str = "",
    timeout: Optional[float] = None,
    env: Optional[Dict[str, str]] = None,
    suppress_output: bool = False,
    **popen_kwargs: Any,
) -> CommandResult:
    """
    Execute a command to completion, logging the command line and its output.

    Args:
        command: Command and arguments to execute
        logger: Logger instance (module logger if None)
        operation_name: Description of operation for log messages
        timeout: Seconds to wait before killing the process, None waits forever
        env: Environment variables to pass to subprocess
        suppress_output: If True, only log command execution, not output
        **popen_kwargs: Additional arguments passed to subprocess.Popen

    Returns:
        CommandResult with success status, stdout, and error details
    """
    logger = logger or _default_logger
    log_prefix = f"{operation_name}: " if operation_name else ""

    logger.debug(f"{log_prefix}Executing: {_format_command(command)}")

    try:
        popen_kwargs.setdefault("stdout", subprocess.PIPE)
        popen_kwargs.setdefault("stderr", subprocess.PIPE)
        popen_kwargs["text"] = True
        if env:
            popen_kwargs["env"] = env

        process = subprocess.Popen(command, **popen_kwargs)

        try:
            stdout, stderr = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.communicate()
            error_msg = f"Command timed out after {timeout} seconds"
            logger.debug(f"{log_prefix}Error: {error_msg}")
            return CommandResult(success=False, error=error_msg)

        if not suppress_output:
            if stdout:
                logger.debug(f"{log_prefix}Output: {stdout.strip()}")
            if stderr:
                if process.returncode == 0:
                    logger.debug(f"{log_prefix}Warnings: {stderr.strip()}")
                else:
                    logger.debug(f"{log_prefix}Errors: {stderr.strip()}")

        if process.returncode == 0:
            return CommandResult(success=True, returncode=0, stdout=stdout)
        else:
            return CommandResult(
                success=False,
                returncode=process.returncode,
                stdout=stdout,
                error=stderr or f"Command exited with code {process.returncode}",
            )

    except OSError as e:
        error_msg = str(e)
        logger.debug(f"{log_prefix}Exception: {error_msg}")
        return CommandResult(success=False, error=error_msg)


def launch_logged_subprocess(
    command: List[str],
    logger: Optional[logging.Logger] = None,
    operation_name: str = "",
    **popen_kwargs: Any,
) -> "subprocess.Popen[Any]":
    """
    Start a command without waiting for it and return the Popen object.

    Output is inherited from the current process so the user sees it in the
    terminal. Launch failures (missing executable, permissions) propagate.
    """
    logger = logger or _default_logger
    log_prefix = f"{operation_name}: " if operation_name else ""

    logger.debug(f"{log_prefix}Launching: {_format_command(command)}")

    return subprocess.Popen(command, **popen_kwargs)
