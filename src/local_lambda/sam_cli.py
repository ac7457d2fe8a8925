"""
Wrappers around the SAM CLI commands used by the local run pipeline.

``sam build`` is run to completion through a SamCliProcessInvoker.
``sam local invoke`` stays resident so a debugger can attach to it, and is
launched through a SamCliTaskInvoker instead.
"""

import asyncio
import logging
import os
import subprocess
from pathlib import Path
from typing import Any, List, Optional, Union

from .constants import NAMESPACE, SAM_CLI_EXECUTABLE, SAM_CLI_EXECUTABLE_ENV
from .errors import SamCliBuildError, SamCliLaunchError
from .models import CommandResult
from .subprocess_utils import launch_logged_subprocess, run_logged_subprocess


PathLike = Union[str, Path]


def resolve_sam_cli_executable() -> str:
    """SAM CLI executable, overridable with the SAM_CLI_PATH environment variable."""
    return os.environ.get(SAM_CLI_EXECUTABLE_ENV) or SAM_CLI_EXECUTABLE


class SamCliProcessInvoker:
    """Runs SAM CLI commands to completion."""

    def __init__(self, executable: Optional[str] = None) -> None:
        self.logger = logging.getLogger(f"{NAMESPACE}.{__name__.split('.')[-1]}")
        self.executable = executable or resolve_sam_cli_executable()

    async def invoke(self, args: List[str]) -> CommandResult:
        return await asyncio.to_thread(
            run_logged_subprocess,
            [self.executable, *args],
            logger=self.logger,
            operation_name=f"sam {args[0]}" if args else "sam",
        )


class SamCliTaskInvoker:
    """Launches long-lived SAM CLI commands without waiting for them to exit."""

    def __init__(self, executable: Optional[str] = None) -> None:
        self.logger = logging.getLogger(f"{NAMESPACE}.{__name__.split('.')[-1]}")
        self.executable = executable or resolve_sam_cli_executable()

    async def invoke(self, args: List[str]) -> "subprocess.Popen[Any]":
        """
        Launch the command.

        Raises:
            SamCliLaunchError: If the process could not be started
        """
        command = [self.executable, *args]
        try:
            return await asyncio.to_thread(
                launch_logged_subprocess,
                command,
                logger=self.logger,
                operation_name=f"sam {' '.join(args[:2])}",
            )
        except OSError as e:
            raise SamCliLaunchError(f"Failed to launch {command[0]}: {e}") from e


class SamCliBuildInvocation:
    """``sam build`` against a template, writing its output to ``build_dir``."""

    def __init__(
        self,
        build_dir: PathLike,
        base_dir: PathLike,
        template_path: PathLike,
        invoker: SamCliProcessInvoker,
        manifest_path: Optional[PathLike] = None,
    ) -> None:
        self.build_dir = str(build_dir)
        self.base_dir = str(base_dir)
        self.template_path = str(template_path)
        self.invoker = invoker
        self.manifest_path = str(manifest_path) if manifest_path else None

    def arguments(self) -> List[str]:
        args = [
            "build",
            "--build-dir",
            self.build_dir,
            "--base-dir",
            self.base_dir,
            "--template",
            self.template_path,
        ]
        if self.manifest_path:
            args.extend(["--manifest", self.manifest_path])
        return args

    async def execute(self) -> CommandResult:
        """
        Run the build and wait for it.

        Raises:
            SamCliBuildError: If sam build did not succeed
        """
        result = await self.invoker.invoke(self.arguments())
        if not result.success:
            detail = (result.error or "").strip()
            raise SamCliBuildError(
                f"sam build failed: {detail}" if detail else "sam build failed",
                stderr=result.error,
            )
        return result


class SamCliLocalInvokeInvocation:
    """``sam local invoke`` of one resource, optionally waiting for a debugger."""

    def __init__(
        self,
        template_resource_name: str,
        template_path: PathLike,
        event_path: PathLike,
        environment_variable_path: PathLike,
        invoker: SamCliTaskInvoker,
        debug_port: Optional[str] = None,
    ) -> None:
        if not template_resource_name:
            raise ValueError("template_resource_name is required")
        self.template_resource_name = template_resource_name
        self.template_path = str(template_path)
        self.event_path = str(event_path)
        self.environment_variable_path = str(environment_variable_path)
        self.invoker = invoker
        self.debug_port = debug_port

    def arguments(self) -> List[str]:
        args = [
            "local",
            "invoke",
            self.template_resource_name,
            "--template",
            self.template_path,
            "--event",
            self.event_path,
            "--env-vars",
            self.environment_variable_path,
        ]
        if self.debug_port:
            args.extend(["--debug-port", self.debug_port])
        return args

    async def execute(self) -> "subprocess.Popen[Any]":
        return await self.invoker.invoke(self.arguments())
