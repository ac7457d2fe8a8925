import logging
from pathlib import Path
from typing import Optional

from .constants import NAMESPACE
from .models import WorkspaceLayout
from .sam_cli import SamCliBuildInvocation, SamCliProcessInvoker


class SamBuilder:
    """Runs sam build against the synthesized input template."""

    def __init__(self, process_invoker: SamCliProcessInvoker) -> None:
        self.logger = logging.getLogger(f"{NAMESPACE}.{__name__.split('.')[-1]}")
        self.process_invoker = process_invoker

    async def build(
        self,
        code_root: Path,
        input_template_path: Path,
        layout: WorkspaceLayout,
        manifest_path: Optional[Path] = None,
    ) -> Path:
        """
        Build the application and return the built template.

        Args:
            code_root: Base directory the template's CodeUri is resolved against
            input_template_path: Template produced by the synthesizer
            layout: Workspace whose output directory receives the build
            manifest_path: Optional dependency manifest (requirements.txt...)

        Returns:
            Path of the template written by sam build

        Raises:
            SamCliBuildError: If the build fails
        """
        self.logger.info("Building SAM Application...")

        invocation = SamCliBuildInvocation(
            build_dir=layout.output_dir,
            base_dir=code_root,
            template_path=input_template_path,
            invoker=self.process_invoker,
            manifest_path=manifest_path,
        )
        await invocation.execute()

        self.logger.info("Build complete.")

        return layout.output_template_path
