"""
Settings and per-handler configuration lookups.

Settings come from explicit overrides or the environment, in that order.
Per-handler configuration (event payload and environment variables) is read
from ``<workspace>/.aws/handlers.json``:

    {
        "handlers": {
            "app.handler": {
                "event": {"key": "value"},
                "environmentVariables": {"TABLE_NAME": "local-table"}
            }
        }
    }
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, TypeVar

from pydantic import ValidationError

from .constants import HANDLER_CONFIG_DIR_NAME, HANDLER_CONFIG_FILE_NAME, NAMESPACE
from .errors import LocalLambdaError
from .models import HandlerConfig


T = TypeVar("T")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def setting_env_var(key: str) -> str:
    """Environment variable consulted for a settings key (a.b.c -> A_B_C)."""
    return key.replace(".", "_").replace("-", "_").upper()


class SettingsConfiguration:
    """Read-only view of user settings."""

    def __init__(self, overrides: Optional[Dict[str, Any]] = None) -> None:
        self.logger = logging.getLogger(f"{NAMESPACE}.{__name__.split('.')[-1]}")
        self.overrides: Dict[str, Any] = dict(overrides or {})

    def read_setting(self, key: str, default: T) -> T:
        """
        Read a setting, falling back to ``default``.

        Environment values are converted to the type of ``default``. A value
        that cannot be converted is ignored with a warning.
        """
        if key in self.overrides:
            return self.overrides[key]

        raw = os.environ.get(setting_env_var(key))
        if raw is None:
            return default
        if default is None:
            return raw  # type: ignore[return-value]

        try:
            if isinstance(default, bool):
                return raw.strip().lower() in _TRUE_VALUES  # type: ignore[return-value]
            return type(default)(raw)  # type: ignore[call-arg]
        except (TypeError, ValueError):
            self.logger.warning(
                f"Ignoring invalid value {raw!r} for setting {key}, using {default!r}"
            )
            return default


def handler_config_path(workspace_folder: Path) -> Path:
    return Path(workspace_folder) / HANDLER_CONFIG_DIR_NAME / HANDLER_CONFIG_FILE_NAME


class LocalLambdaConfigurationStore:
    """Per-handler event and environment configuration stored in the workspace."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"{NAMESPACE}.{__name__.split('.')[-1]}")

    def load(self, workspace_folder: Path, handler_name: str) -> HandlerConfig:
        config_path = handler_config_path(workspace_folder)
        if not config_path.is_file():
            self.logger.debug(f"No handler configuration at {config_path}")
            return HandlerConfig()

        try:
            document = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise LocalLambdaError(
                f"Invalid handler configuration file {config_path}: {e}"
            ) from e

        handlers = document.get("handlers") if isinstance(document, dict) else None
        entry = (handlers or {}).get(handler_name)
        if entry is None:
            return HandlerConfig()

        try:
            return HandlerConfig.model_validate(entry)
        except ValidationError as e:
            raise LocalLambdaError(
                f"Invalid configuration for handler {handler_name} in {config_path}: {e}"
            ) from e

    async def get_local_lambda_configuration(
        self, workspace_folder: Path, handler_name: str
    ) -> HandlerConfig:
        """
        Resolve the configuration of one handler.

        Args:
            workspace_folder: Project root containing the .aws directory
            handler_name: Handler identifier the configuration is keyed by

        Returns:
            HandlerConfig, empty when nothing is configured
        """
        return await asyncio.to_thread(self.load, workspace_folder, handler_name)
