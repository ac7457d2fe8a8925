"""
Data model for running a single function handler locally.

All models are pydantic models, mirroring how the requests and responses
exchanged with the SAM CLI wrappers are validated at their boundaries.
"""

from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    ENV_VARS_FILE_NAME,
    EVENT_FILE_NAME,
    INPUT_DIR_NAME,
    INPUT_TEMPLATE_NAME,
    OUTPUT_DIR_NAME,
    OUTPUT_TEMPLATE_NAME,
)


class DebugConfiguration(BaseModel):
    """
    Host specific attach parameters, passed through to the debug host untouched.

    Only ``port`` is interpreted by the pipeline. Any other keys (``type``,
    ``request``, ``name``, ``localRoot``, ``remoteRoot``...) are preserved.

    Example:
        {
            "type": "python",
            "request": "attach",
            "name": "SamLocalDebug",
            "port": 5678
        }
    """

    port: int = Field(gt=0, lt=65536, description="Port the debugger attaches to")

    model_config = ConfigDict(extra="allow", frozen=True)


class InvocationRequest(BaseModel):
    """Everything needed for one local run of one handler."""

    document_path: Path = Field(description="Source file declaring the handler")
    handler_name: str = Field(description="Handler identifier, e.g. app.handler")
    runtime: str = Field(description="Lambda runtime, e.g. python3.12")
    code_root: Path = Field(description="Root directory of the function code")
    workspace_folder: Optional[Path] = Field(
        default=None, description="Project root used for configuration lookups"
    )
    is_debug: bool = False
    manifest_path: Optional[Path] = Field(
        default=None, description="Dependency manifest passed to sam build"
    )
    debug_config: Optional[DebugConfiguration] = None

    model_config = ConfigDict(frozen=True)

    @property
    def debug_port(self) -> Optional[int]:
        return self.debug_config.port if self.debug_config else None


class WorkspaceLayout(BaseModel):
    """Temporary directory of one run and the well-known paths below it."""

    root: Path

    model_config = ConfigDict(frozen=True)

    @property
    def input_dir(self) -> Path:
        return self.root / INPUT_DIR_NAME

    @property
    def input_template_path(self) -> Path:
        return self.input_dir / INPUT_TEMPLATE_NAME

    @property
    def output_dir(self) -> Path:
        return self.root / OUTPUT_DIR_NAME

    @property
    def output_template_path(self) -> Path:
        return self.output_dir / OUTPUT_TEMPLATE_NAME

    @property
    def event_path(self) -> Path:
        return self.root / EVENT_FILE_NAME

    @property
    def env_vars_path(self) -> Path:
        return self.root / ENV_VARS_FILE_NAME


class HandlerConfig(BaseModel):
    """Event payload and environment overrides configured for a handler."""

    event: Dict[str, Any] = Field(default_factory=dict)
    environment_variables: Optional[Dict[str, Union[str, int, float, bool]]] = Field(
        default=None, alias="environmentVariables"
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("event", mode="before")
    @classmethod
    def empty_event_when_null(cls, value: Any) -> Any:
        return {} if value is None else value


class LocalLambda(BaseModel):
    """A function resource declared by a SAM template found in the workspace."""

    template_path: Path
    handler: str
    resource_name: str
    resource: Dict[str, Any] = Field(default_factory=dict)


class OnDidBuildParams(BaseModel):
    """Arguments handed to the optional post-build hook."""

    build_dir: Path
    debug_port: Optional[int] = None
    handler_name: str
    is_debug: bool


class CommandResult(BaseModel):
    """Outcome of a command that was run to completion."""

    success: bool
    returncode: Optional[int] = None
    stdout: Optional[str] = None
    error: Optional[str] = None


class AttachResult(BaseModel):
    """Outcome of asking the debug host to attach."""

    attached: bool
    error: Optional[str] = None


# Type aliases for the optional pipeline hooks
OnDidBuildHook = Callable[[OnDidBuildParams], Awaitable[None]]
OnWillAttachDebuggerHook = Callable[[], Awaitable[None]]
