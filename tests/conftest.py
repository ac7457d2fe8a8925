import logging
import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from local_lambda.debugger import DebugHost
from local_lambda.disposable_files import DisposableFiles
from local_lambda.models import CommandResult, DebugConfiguration, InvocationRequest
from local_lambda.notifications import Notifier
from local_lambda.sam_cli import SamCliProcessInvoker, SamCliTaskInvoker
from local_lambda.workspace_manager import WorkspaceManager


def pytest_collection_modifyitems(config, items):
    """Mark tests with unit or integration according to their directory"""
    for item in items:
        path = str(item.fspath)
        if "tests/unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration" in path:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo handlers and levels installed by setup_logging during a test."""
    package_logger = logging.getLogger("local_lambda")
    handlers, level = list(package_logger.handlers), package_logger.level
    asyncio_level = logging.getLogger("asyncio").level
    yield
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
    logging.getLogger("asyncio").setLevel(asyncio_level)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Project with its code under src/ and a handler file in src/sub/."""
    code_root = tmp_path / "proj" / "src"
    (code_root / "sub").mkdir(parents=True)
    (code_root / "sub" / "index.py").write_text("def handler(event, context):\n    return event\n")
    return tmp_path / "proj"


@pytest.fixture
def make_request(project: Path):
    """Factory for InvocationRequest objects pointing into the sample project."""

    def _make(**overrides) -> InvocationRequest:
        values = dict(
            document_path=project / "src" / "sub" / "index.py",
            handler_name="app.handler",
            runtime="python3.12",
            code_root=project / "src",
            workspace_folder=None,
        )
        values.update(overrides)
        return InvocationRequest(**values)

    return _make


@pytest.fixture
def debug_config() -> DebugConfiguration:
    return DebugConfiguration(port=5050, type="python", request="attach", name="SamLocalDebug")


@pytest.fixture
def disposer() -> DisposableFiles:
    return DisposableFiles()


@pytest.fixture
def workspace_manager(tmp_path: Path, disposer: DisposableFiles) -> WorkspaceManager:
    """WorkspaceManager allocating its directory under tmp_path."""

    def allocate() -> Path:
        root = tmp_path / "workspace"
        root.mkdir()
        return root

    return WorkspaceManager(disposer=disposer, allocator=allocate)


@pytest.fixture
def process_invoker() -> Mock:
    invoker = Mock(spec=SamCliProcessInvoker)
    invoker.invoke = AsyncMock(return_value=CommandResult(success=True, returncode=0))
    return invoker


@pytest.fixture
def local_process() -> Mock:
    process = Mock(spec=subprocess.Popen)
    process.wait.return_value = 0
    return process


@pytest.fixture
def task_invoker(local_process: Mock) -> Mock:
    invoker = Mock(spec=SamCliTaskInvoker)
    invoker.invoke = AsyncMock(return_value=local_process)
    return invoker


@pytest.fixture
def debug_host() -> Mock:
    host = Mock(spec=DebugHost)
    host.start_debugging = AsyncMock(return_value=True)
    return host


@pytest.fixture
def notifier() -> Mock:
    return Mock(spec=Notifier)


@pytest.fixture
def no_lambdas() -> AsyncMock:
    """Handler discovery that finds nothing."""
    return AsyncMock(return_value=[])
