import logging
import subprocess
from typing import Any, Optional

from .configuration import LocalLambdaConfigurationStore, SettingsConfiguration
from .constants import NAMESPACE
from .debugger import ConsoleDebugHost, DebugHost, DebuggerAttacher
from .detect_local_lambdas import detect_local_lambdas
from .errors import DebugConfigurationError
from .input_template import InputTemplateSynthesizer, LambdaDetector
from .local_invoker import LocalInvoker
from .models import (
    AttachResult,
    InvocationRequest,
    OnDidBuildHook,
    OnDidBuildParams,
    OnWillAttachDebuggerHook,
)
from .notifications import ConsoleNotifier, Notifier
from .sam_builder import SamBuilder
from .sam_cli import SamCliProcessInvoker, SamCliTaskInvoker
from .workspace_manager import WorkspaceManager


def report_run_failure(error: BaseException, logger: logging.Logger, notifier: Notifier) -> None:
    """
    Turn a failed run into a log entry and a user notification.

    This is the only place pipeline failures are absorbed.
    """
    logger.debug("Local run failed", exc_info=error)
    logger.error(f"Error: {error}")
    notifier.show_error_message(
        f"An error occurred trying to run SAM Application locally: {error}"
    )


class LocalLambdaRunner:
    """
    Runs one function handler locally, optionally under a debugger.

    Sequences template synthesis, sam build, sam local invoke and, for debug
    runs, the debug port wait and debugger attach. Uses composition: every
    stage is a separate component sharing this run's workspace.
    """

    def __init__(
        self,
        request: InvocationRequest,
        configuration: Optional[SettingsConfiguration] = None,
        process_invoker: Optional[SamCliProcessInvoker] = None,
        task_invoker: Optional[SamCliTaskInvoker] = None,
        notifier: Optional[Notifier] = None,
        debug_host: Optional[DebugHost] = None,
        workspace_manager: Optional[WorkspaceManager] = None,
        config_store: Optional[LocalLambdaConfigurationStore] = None,
        detector: LambdaDetector = detect_local_lambdas,
        on_did_build: Optional[OnDidBuildHook] = None,
        on_will_attach_debugger: Optional[OnWillAttachDebuggerHook] = None,
    ) -> None:
        if request.is_debug and not request.debug_port:
            raise DebugConfigurationError(
                "Debug port must be provided when launching in debug mode"
            )

        self.logger = logging.getLogger(f"{NAMESPACE}.{__name__.split('.')[-1]}")
        self.request = request
        self.notifier = notifier or ConsoleNotifier()
        self.on_did_build = on_did_build
        self.on_will_attach_debugger = on_will_attach_debugger

        self.workspace_manager = workspace_manager or WorkspaceManager()
        self.synthesizer = InputTemplateSynthesizer(detector)
        self.builder = SamBuilder(process_invoker or SamCliProcessInvoker())
        self.invoker = LocalInvoker(
            configuration=configuration or SettingsConfiguration(),
            config_store=config_store or LocalLambdaConfigurationStore(),
            task_invoker=task_invoker or SamCliTaskInvoker(),
            attacher=DebuggerAttacher(debug_host or ConsoleDebugHost()),
        )

    @property
    def local_process(self) -> Optional["subprocess.Popen[Any]"]:
        """The sam local invoke process, once launched. It is left running."""
        return self.invoker.process

    @property
    def attach_result(self) -> Optional[AttachResult]:
        return self.invoker.attach_result

    async def run(self) -> None:
        """
        Execute the whole pipeline.

        Never raises for pipeline failures: they are logged and shown to the
        user through the notifier instead.
        """
        try:
            request = self.request
            self.logger.info(f"Preparing to run {request.handler_name} locally...")

            layout = self.workspace_manager.ensure_workspace()

            input_template = await self.synthesizer.synthesize(
                code_root=request.code_root,
                document_path=request.document_path,
                handler_name=request.handler_name,
                runtime=request.runtime,
                layout=layout,
                workspace_folder=request.workspace_folder,
            )
            built_template = await self.builder.build(
                request.code_root,
                input_template,
                layout,
                manifest_path=request.manifest_path,
            )

            if self.on_did_build:
                await self.on_did_build(
                    OnDidBuildParams(
                        build_dir=layout.output_dir,
                        debug_port=request.debug_port,
                        handler_name=request.handler_name,
                        is_debug=request.is_debug,
                    )
                )

            await self.invoker.invoke(
                built_template,
                layout,
                request,
                on_will_attach_debugger=self.on_will_attach_debugger,
            )

        except Exception as e:
            report_run_failure(e, self.logger, self.notifier)
