"""Synthesis of the single-function input template handed to sam build."""

import logging
import os
import re
from pathlib import Path
from typing import Awaitable, Callable, Iterable, List, Optional, Union

from .constants import NAMESPACE, TEMPLATE_RESOURCE_NAME
from .detect_local_lambdas import detect_local_lambdas
from .models import LocalLambda, WorkspaceLayout
from .template_generator import SamTemplateGenerator


LambdaDetector = Callable[[Iterable[Path]], Awaitable[List[LocalLambda]]]

_REPEATED_SEPARATORS = re.compile(r"/{2,}")


def relative_function_handler(
    code_root: Union[str, Path],
    document_path: Union[str, Path],
    handler_name: str,
) -> str:
    """
    Handler string relative to the code root, always using "/" separators.

    A document directly inside ``code_root`` yields the bare handler name.

    Example:
        relative_function_handler("/proj/src", "/proj/src/sub/index.py", "app.handler")
        -> "sub/app.handler"
    """
    relative_dir = os.path.relpath(os.path.dirname(document_path), code_root)
    if relative_dir == os.curdir:
        joined = handler_name
    else:
        joined = os.path.join(relative_dir, handler_name)

    return _REPEATED_SEPARATORS.sub("/", joined.replace("\\", "/"))


class InputTemplateSynthesizer:
    """Writes the template describing the one function under test."""

    def __init__(self, detector: LambdaDetector = detect_local_lambdas) -> None:
        self.logger = logging.getLogger(f"{NAMESPACE}.{__name__.split('.')[-1]}")
        self.detector = detector

    async def find_existing_lambda(
        self, workspace_folder: Optional[Path], handler: str
    ) -> Optional[LocalLambda]:
        """First function in the workspace declaring exactly this handler, if any."""
        if workspace_folder is None:
            return None

        lambdas = await self.detector([workspace_folder])
        return next((item for item in lambdas if item.handler == handler), None)

    async def synthesize(
        self,
        code_root: Path,
        document_path: Path,
        handler_name: str,
        runtime: str,
        layout: WorkspaceLayout,
        workspace_folder: Optional[Path] = None,
    ) -> Path:
        """
        Generate the input template for sam build.

        Environment settings of a matching function already declared in the
        workspace are carried over, so the local run sees the same variables.

        Args:
            code_root: Root directory of the function code (the CodeUri)
            document_path: Source file declaring the handler
            handler_name: Handler identifier within that file
            runtime: Lambda runtime
            layout: Workspace the template is written into
            workspace_folder: Project root searched for existing templates

        Returns:
            Path to the generated template file
        """
        handler = relative_function_handler(code_root, document_path, handler_name)

        existing = await self.find_existing_lambda(workspace_folder, handler)
        if existing:
            self.logger.debug(
                f"Reusing settings of {existing.resource_name} from {existing.template_path}"
            )

        template = (
            SamTemplateGenerator()
            .with_code_uri(code_root)
            .with_function_handler(handler)
            .with_resource_name(TEMPLATE_RESOURCE_NAME)
            .with_runtime(runtime)
        )

        properties = existing.resource.get("Properties") if existing else None
        # an empty Environment mapping is still copied
        if properties and properties.get("Environment") is not None:
            template = template.with_environment(properties["Environment"])

        return template.generate(layout.input_template_path)
