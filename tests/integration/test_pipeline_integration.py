"""
End-to-end runs of LocalLambdaRunner against a stand-in sam executable.

The stand-in records its arguments, copies the input template into the build
directory on ``sam build`` and, when given ``--debug-port``, listens on that
port until the debugger probe connects.
"""

import json
import socket
import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import yaml

from local_lambda.configuration import SettingsConfiguration
from local_lambda.constants import ATTACH_TIMEOUT_SETTING, TEMPLATE_RESOURCE_NAME
from local_lambda.debugger import DebugHost
from local_lambda.local_lambda_runner import LocalLambdaRunner
from local_lambda.models import DebugConfiguration
from local_lambda.sam_cli import SamCliProcessInvoker, SamCliTaskInvoker


pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="stand-in sam is a POSIX script")

FAKE_SAM = """\
import json
import os
import shutil
import socket
import sys

args = sys.argv[1:]
with open(os.environ["FAKE_SAM_LOG"], "a") as fh:
    fh.write(json.dumps(args) + "\\n")


def option(name):
    return args[args.index(name) + 1] if name in args else None


if args[0] == "build":
    if os.environ.get("FAKE_SAM_FAIL_BUILD"):
        sys.stderr.write("Build Failed\\n")
        sys.exit(1)
    build_dir = option("--build-dir")
    os.makedirs(build_dir, exist_ok=True)
    shutil.copy(option("--template"), os.path.join(build_dir, "template.yaml"))
elif args[:2] == ["local", "invoke"] and option("--debug-port"):
    server = socket.socket()
    server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    server.bind(("127.0.0.1", int(option("--debug-port"))))
    server.listen(1)
    server.settimeout(10)
    try:
        conn, _ = server.accept()
        conn.close()
    except socket.timeout:
        pass
    server.close()
"""

PROJECT_TEMPLATE = """\
Transform: AWS::Serverless-2016-10-31
Resources:
  OrdersFunction:
    Type: AWS::Serverless::Function
    Properties:
      CodeUri: src/
      Handler: sub/app.handler
      Runtime: python3.12
      Environment:
        Variables:
          TABLE_NAME: !Ref OrdersTable
  OrdersTable:
    Type: AWS::Serverless::SimpleTable
"""


@pytest.fixture
def sam_log(tmp_path, monkeypatch) -> Path:
    log = tmp_path / "sam-calls.log"
    monkeypatch.setenv("FAKE_SAM_LOG", str(log))
    return log


@pytest.fixture
def fake_sam(tmp_path, sam_log) -> str:
    path = tmp_path / "bin" / "sam"
    path.parent.mkdir()
    path.write_text(f"#!{sys.executable}\n{FAKE_SAM}")
    path.chmod(0o755)
    return str(path)


@pytest.fixture
def configured_project(project: Path) -> Path:
    (project / "template.yaml").write_text(PROJECT_TEMPLATE)
    (project / ".aws").mkdir()
    (project / ".aws" / "handlers.json").write_text(
        json.dumps(
            {
                "handlers": {
                    "app.handler": {
                        "event": {"orderId": "42"},
                        "environmentVariables": {"TABLE_NAME": "orders-local"},
                    }
                }
            }
        )
    )
    return project


@pytest.fixture
def debug_host() -> Mock:
    host = Mock(spec=DebugHost)
    host.start_debugging = AsyncMock(return_value=True)
    return host


def _calls(sam_log: Path):
    if not sam_log.exists():
        return []
    return [json.loads(line) for line in sam_log.read_text().splitlines()]


class TestPipelineIntegration:
    @pytest.mark.asyncio
    async def test_run_builds_and_invokes(
        self, fake_sam, sam_log, configured_project, make_request, workspace_manager, notifier, debug_host
    ):
        runner = LocalLambdaRunner(
            make_request(workspace_folder=configured_project),
            process_invoker=SamCliProcessInvoker(fake_sam),
            task_invoker=SamCliTaskInvoker(fake_sam),
            notifier=notifier,
            debug_host=debug_host,
            workspace_manager=workspace_manager,
        )

        await runner.run()
        assert runner.local_process.wait(timeout=30) == 0

        notifier.show_error_message.assert_not_called()
        layout = workspace_manager.layout

        input_template = yaml.safe_load(layout.input_template_path.read_text())
        properties = input_template["Resources"][TEMPLATE_RESOURCE_NAME]["Properties"]
        assert properties["Handler"] == "sub/app.handler"
        assert properties["Environment"] == {"Variables": {"TABLE_NAME": {"Ref": "OrdersTable"}}}
        assert layout.output_template_path.is_file()

        assert json.loads(layout.event_path.read_text()) == {"orderId": "42"}
        assert json.loads(layout.env_vars_path.read_text()) == {
            TEMPLATE_RESOURCE_NAME: {"TABLE_NAME": "orders-local"}
        }

        build, invoke = _calls(sam_log)
        assert build[0] == "build"
        assert invoke[:3] == ["local", "invoke", TEMPLATE_RESOURCE_NAME]
        assert invoke[invoke.index("--template") + 1] == str(layout.output_template_path)
        assert "--debug-port" not in invoke
        debug_host.start_debugging.assert_not_called()

    @pytest.mark.asyncio
    async def test_build_failure_is_notified(
        self, fake_sam, sam_log, make_request, workspace_manager, notifier, debug_host, monkeypatch
    ):
        monkeypatch.setenv("FAKE_SAM_FAIL_BUILD", "1")
        runner = LocalLambdaRunner(
            make_request(),
            process_invoker=SamCliProcessInvoker(fake_sam),
            task_invoker=SamCliTaskInvoker(fake_sam),
            notifier=notifier,
            debug_host=debug_host,
            workspace_manager=workspace_manager,
        )

        await runner.run()

        assert runner.local_process is None
        assert [call[0] for call in _calls(sam_log)] == ["build"]
        message = notifier.show_error_message.call_args[0][0]
        assert message.startswith("An error occurred trying to run SAM Application locally:")
        assert "Build Failed" in message

    @pytest.mark.asyncio
    async def test_missing_executable_is_notified(
        self, fake_sam, tmp_path, make_request, workspace_manager, notifier, debug_host
    ):
        runner = LocalLambdaRunner(
            make_request(),
            process_invoker=SamCliProcessInvoker(fake_sam),
            task_invoker=SamCliTaskInvoker(str(tmp_path / "no-such-sam")),
            notifier=notifier,
            debug_host=debug_host,
            workspace_manager=workspace_manager,
        )

        await runner.run()

        assert runner.local_process is None
        assert "Failed to launch" in notifier.show_error_message.call_args[0][0]

    @pytest.mark.asyncio
    async def test_debug_run_attaches_when_port_opens(
        self, fake_sam, sam_log, make_request, workspace_manager, notifier, debug_host
    ):
        with socket.socket() as sock:
            sock.bind(("127.0.0.1", 0))
            port = sock.getsockname()[1]
        debug_config = DebugConfiguration(port=port, type="python", request="attach")

        runner = LocalLambdaRunner(
            make_request(is_debug=True, debug_config=debug_config),
            configuration=SettingsConfiguration({ATTACH_TIMEOUT_SETTING: 20000}),
            process_invoker=SamCliProcessInvoker(fake_sam),
            task_invoker=SamCliTaskInvoker(fake_sam),
            notifier=notifier,
            debug_host=debug_host,
            workspace_manager=workspace_manager,
        )

        await runner.run()
        runner.local_process.wait(timeout=30)

        notifier.show_error_message.assert_not_called()
        assert runner.attach_result.attached is True
        debug_host.start_debugging.assert_awaited_once_with(debug_config)
        invoke = _calls(sam_log)[-1]
        assert invoke[-2:] == ["--debug-port", str(port)]
