"""
Discovery of function handlers declared by SAM templates in a workspace.

Templates are parsed with PyYAML. CloudFormation short-form intrinsic tags
(``!Ref``, ``!GetAtt``, ``!Sub``...) are expanded to their long form so that
resources can be copied into generated templates unchanged in meaning.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Union

import yaml

from .constants import (
    DISCOVERY_IGNORED_DIRS,
    NAMESPACE,
    SERVERLESS_FUNCTION_TYPE,
    TEMPLATE_FILE_NAMES,
)
from .models import LocalLambda


logger = logging.getLogger(f"{NAMESPACE}.{__name__.split('.')[-1]}")


class CloudFormationLoader(yaml.SafeLoader):
    """Safe loader that understands CloudFormation short-form tags."""


def _construct_intrinsic(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> Dict[str, Any]:
    if tag_suffix in ("Ref", "Condition"):
        function_name = tag_suffix
    else:
        function_name = f"Fn::{tag_suffix}"

    value: Any
    if isinstance(node, yaml.ScalarNode):
        value = loader.construct_scalar(node)
        # !GetAtt Resource.Attribute
        if tag_suffix == "GetAtt" and isinstance(value, str):
            value = value.split(".", 1)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)

    return {function_name: value}


CloudFormationLoader.add_multi_constructor("!", _construct_intrinsic)


def load_template(template_path: Union[str, Path]) -> Dict[str, Any]:
    """Parse a SAM/CloudFormation template into a dictionary."""
    with open(template_path, "r", encoding="utf-8") as fh:
        document = yaml.load(fh, Loader=CloudFormationLoader)

    return document if isinstance(document, dict) else {}


def find_templates(workspace_folder: Union[str, Path]) -> Iterator[Path]:
    """Yield every SAM template below a workspace folder."""
    for dirpath, dirnames, filenames in os.walk(workspace_folder):
        dirnames[:] = sorted(d for d in dirnames if d not in DISCOVERY_IGNORED_DIRS)
        for filename in sorted(filenames):
            if filename in TEMPLATE_FILE_NAMES:
                yield Path(dirpath) / filename


def get_template_lambdas(template_path: Path) -> List[LocalLambda]:
    """
    List the function resources of one template.

    Only resources of type AWS::Serverless::Function that declare a Handler
    are returned.
    """
    try:
        template = load_template(template_path)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Skipping unreadable template {template_path}: {e}")
        return []

    resources = template.get("Resources") or {}
    if not isinstance(resources, dict):
        return []

    lambdas = []
    for resource_name, resource in resources.items():
        if not isinstance(resource, dict):
            continue
        if resource.get("Type") != SERVERLESS_FUNCTION_TYPE:
            continue

        properties = resource.get("Properties")
        if not isinstance(properties, dict):
            continue

        handler = properties.get("Handler")
        if not isinstance(handler, str):
            continue

        lambdas.append(
            LocalLambda(
                template_path=template_path,
                handler=handler,
                resource_name=resource_name,
                resource=resource,
            )
        )

    return lambdas


def _detect(workspace_folders: Iterable[Path]) -> List[LocalLambda]:
    lambdas: List[LocalLambda] = []
    for folder in workspace_folders:
        for template_path in find_templates(folder):
            lambdas.extend(get_template_lambdas(template_path))
    return lambdas


async def detect_local_lambdas(workspace_folders: Iterable[Path]) -> List[LocalLambda]:
    """
    Find all locally declared functions in the given workspace folders.

    Args:
        workspace_folders: Project roots to search

    Returns:
        One LocalLambda per function resource, in discovery order
    """
    lambdas = await asyncio.to_thread(_detect, list(workspace_folders))
    logger.debug(f"Detected {len(lambdas)} local function(s)")
    return lambdas
