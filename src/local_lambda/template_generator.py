"""Builder for single-function SAM templates."""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .constants import (
    SERVERLESS_FUNCTION_TYPE,
    SERVERLESS_TRANSFORM,
    TEMPLATE_FORMAT_VERSION,
)


class SamTemplateGenerator:
    """
    Fluent builder producing a SAM template with exactly one function resource.

    Example:
        SamTemplateGenerator()
            .with_code_uri("/proj/src")
            .with_function_handler("app.handler")
            .with_resource_name("MyFunction")
            .with_runtime("python3.12")
            .generate("/tmp/template.yaml")
    """

    def __init__(self) -> None:
        self.code_uri: Optional[str] = None
        self.function_handler: Optional[str] = None
        self.resource_name: Optional[str] = None
        self.runtime: Optional[str] = None
        self.environment: Optional[Dict[str, Any]] = None

    def with_code_uri(self, code_uri: Union[str, Path]) -> "SamTemplateGenerator":
        self.code_uri = str(code_uri)
        return self

    def with_function_handler(self, handler: str) -> "SamTemplateGenerator":
        self.function_handler = handler
        return self

    def with_resource_name(self, resource_name: str) -> "SamTemplateGenerator":
        self.resource_name = resource_name
        return self

    def with_runtime(self, runtime: str) -> "SamTemplateGenerator":
        self.runtime = runtime
        return self

    def with_environment(self, environment: Dict[str, Any]) -> "SamTemplateGenerator":
        self.environment = environment
        return self

    def build(self) -> Dict[str, Any]:
        """
        Assemble the template document.

        Raises:
            ValueError: If a required field was never set
        """
        for field in ("code_uri", "function_handler", "resource_name", "runtime"):
            if not getattr(self, field):
                raise ValueError(f"Missing value: {field}")

        properties: Dict[str, Any] = {
            "Handler": self.function_handler,
            "CodeUri": self.code_uri,
            "Runtime": self.runtime,
        }
        if self.environment is not None:
            properties["Environment"] = self.environment

        return {
            "AWSTemplateFormatVersion": TEMPLATE_FORMAT_VERSION,
            "Transform": SERVERLESS_TRANSFORM,
            "Resources": {
                self.resource_name: {
                    "Type": SERVERLESS_FUNCTION_TYPE,
                    "Properties": properties,
                }
            },
        }

    def generate(self, filename: Union[str, Path]) -> Path:
        """Write the template as YAML, creating parent directories as needed."""
        template = self.build()
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)

        with path.open("w", encoding="utf-8") as fh:
            yaml.safe_dump(template, fh, default_flow_style=False, sort_keys=False)

        return path
