import asyncio
import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional

from .configuration import LocalLambdaConfigurationStore, SettingsConfiguration
from .constants import (
    ATTACH_TIMEOUT_SETTING,
    NAMESPACE,
    PORT_CHECK_RETRY_INTERVAL_MILLIS,
    PORT_CHECK_RETRY_TIMEOUT_MILLIS_DEFAULT,
    TEMPLATE_RESOURCE_NAME,
)
from .debugger import DebuggerAttacher
from .errors import DebugConfigurationError
from .models import (
    AttachResult,
    HandlerConfig,
    InvocationRequest,
    OnWillAttachDebuggerHook,
    WorkspaceLayout,
)
from .port_wait import wait_until_used
from .sam_cli import SamCliLocalInvokeInvocation, SamCliTaskInvoker


def get_environment_variables(config: HandlerConfig) -> Dict[str, Dict[str, str]]:
    """
    Environment variable file contents: keyed by the template resource, or empty.

    Non-string values are written in their JSON spelling (8080 -> "8080",
    true -> "true").
    """
    if config.environment_variables is not None:
        return {
            TEMPLATE_RESOURCE_NAME: {
                name: value if isinstance(value, str) else json.dumps(value)
                for name, value in config.environment_variables.items()
            }
        }
    return {}


def containing_workspace(document_path: Path, workspace_folder: Optional[Path]) -> Optional[Path]:
    """The workspace folder when it contains the document, otherwise None."""
    if workspace_folder is None:
        return None
    try:
        Path(document_path).resolve().relative_to(Path(workspace_folder).resolve())
    except ValueError:
        return None
    return workspace_folder


class LocalInvoker:
    """Runs the built function with sam local invoke and attaches a debugger on request."""

    def __init__(
        self,
        configuration: SettingsConfiguration,
        config_store: LocalLambdaConfigurationStore,
        task_invoker: SamCliTaskInvoker,
        attacher: DebuggerAttacher,
    ) -> None:
        self.logger = logging.getLogger(f"{NAMESPACE}.{__name__.split('.')[-1]}")
        self.configuration = configuration
        self.config_store = config_store
        self.task_invoker = task_invoker
        self.attacher = attacher
        self.process: Optional["subprocess.Popen[Any]"] = None
        self.attach_result: Optional[AttachResult] = None

    async def get_config(self, request: InvocationRequest) -> HandlerConfig:
        workspace_folder = containing_workspace(request.document_path, request.workspace_folder)
        if workspace_folder is None:
            return HandlerConfig()

        return await self.config_store.get_local_lambda_configuration(
            workspace_folder, request.handler_name
        )

    def _write_invocation_files(self, layout: WorkspaceLayout, config: HandlerConfig) -> None:
        layout.root.mkdir(parents=True, exist_ok=True)
        layout.event_path.write_text(json.dumps(config.event or {}), encoding="utf-8")
        layout.env_vars_path.write_text(
            json.dumps(get_environment_variables(config)), encoding="utf-8"
        )

    async def write_invocation_files(self, layout: WorkspaceLayout, config: HandlerConfig) -> None:
        """Write event.json and env-vars.json into the workspace."""
        await asyncio.to_thread(self._write_invocation_files, layout, config)

    async def invoke(
        self,
        template_path: Path,
        layout: WorkspaceLayout,
        request: InvocationRequest,
        on_will_attach_debugger: Optional[OnWillAttachDebuggerHook] = None,
    ) -> "subprocess.Popen[Any]":
        """
        Start the function locally and, when debugging, attach to it.

        Args:
            template_path: Template produced by sam build
            layout: Workspace receiving the event and environment files
            request: The run being performed
            on_will_attach_debugger: Optional coroutine awaited before attaching

        Returns:
            The resident sam local invoke process

        Raises:
            SamCliLaunchError: If sam local invoke cannot be started
            PortWaitTimeoutError: If the debug port never opens
        """
        self.logger.info("Starting the SAM Application locally (see Terminal for output)")

        config = await self.get_config(request)
        await self.write_invocation_files(layout, config)

        debug_port = request.debug_port if request.is_debug else None
        command = SamCliLocalInvokeInvocation(
            template_resource_name=TEMPLATE_RESOURCE_NAME,
            template_path=template_path,
            event_path=layout.event_path,
            environment_variable_path=layout.env_vars_path,
            invoker=self.task_invoker,
            debug_port=str(debug_port) if debug_port else None,
        )
        process = self.process = await command.execute()

        if not request.is_debug:
            return process

        if request.debug_config is None:
            raise DebugConfigurationError("Debug port was expected but is undefined")

        self.logger.info("Waiting for SAM Application to start before attaching debugger...")

        timeout_millis = self.configuration.read_setting(
            ATTACH_TIMEOUT_SETTING, PORT_CHECK_RETRY_TIMEOUT_MILLIS_DEFAULT
        )
        await wait_until_used(
            request.debug_config.port,
            PORT_CHECK_RETRY_INTERVAL_MILLIS,
            timeout_millis,
        )

        self.attach_result = await self.attacher.attach(
            request.debug_config, on_will_attach_debugger
        )
        return process
