# Logger Configuration
NAMESPACE = "local_lambda"
"""Application logger namespace for all components."""

# SAM Template
TEMPLATE_RESOURCE_NAME = "awsToolkitSamLocalResource"
"""Logical name of the single function resource shared by sam build and sam local invoke."""

TEMPLATE_FORMAT_VERSION = "2010-09-09"
"""CloudFormation template format version written into generated templates."""

SERVERLESS_TRANSFORM = "AWS::Serverless-2016-10-31"
"""SAM transform declared by generated templates."""

SERVERLESS_FUNCTION_TYPE = "AWS::Serverless::Function"
"""Resource type of a SAM function."""

TEMPLATE_FILE_NAMES = ("template.yaml", "template.yml")
"""File names recognised as SAM templates during handler discovery."""

DISCOVERY_IGNORED_DIRS = frozenset(
    {".aws-sam", ".git", ".venv", "venv", "node_modules", "__pycache__"}
)
"""Directories never descended into during handler discovery."""

# SAM CLI
SAM_CLI_EXECUTABLE = "sam"
"""Default SAM CLI executable, resolved on PATH."""

SAM_CLI_EXECUTABLE_ENV = "SAM_CLI_PATH"
"""Environment variable overriding the SAM CLI executable."""

# Workspace Layout
TEMP_FOLDER_PREFIX = "local-lambda-"
"""Prefix of the per-run temporary directory."""

INPUT_DIR_NAME = "input"
"""Directory holding the synthesized input template."""

INPUT_TEMPLATE_NAME = "input-template.yaml"
"""File name of the synthesized input template."""

OUTPUT_DIR_NAME = "output"
"""Directory passed to sam build as its build directory."""

OUTPUT_TEMPLATE_NAME = "template.yaml"
"""File name sam build writes its resolved template to."""

EVENT_FILE_NAME = "event.json"
"""File name of the serialized event payload."""

ENV_VARS_FILE_NAME = "env-vars.json"
"""File name of the serialized environment variable overrides."""

# Debugging
PORT_CHECK_RETRY_INTERVAL_MILLIS = 125
"""Interval between debug port probes."""

PORT_CHECK_RETRY_TIMEOUT_MILLIS_DEFAULT = 30000
"""Default time to wait for the debug port to open."""

ATTACH_TIMEOUT_SETTING = "samcli.debug.attach.timeout.millis"
"""Settings key overriding the debug port wait timeout."""

DEFAULT_DEBUG_HOST = "127.0.0.1"
"""Host probed for the debug port."""

# Handler Configuration
HANDLER_CONFIG_DIR_NAME = ".aws"
"""Workspace directory holding per-handler configuration."""

HANDLER_CONFIG_FILE_NAME = "handlers.json"
"""Per-handler configuration file (event payloads and environment variables)."""
