"""Command line entry point: ``local-lambda run``."""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from .disposable_files import get_disposable_files
from .errors import DebugConfigurationError
from .local_lambda_runner import LocalLambdaRunner
from .logger import setup_logging
from .models import DebugConfiguration, InvocationRequest


app = typer.Typer(help="Run and debug a single SAM function handler locally")
console = Console(stderr=True)


def load_debug_config(debug_port: Optional[int], debug_config_file: Optional[Path]) -> Optional[DebugConfiguration]:
    """Attach configuration from an optional JSON file, with the port taken from the command line."""
    if debug_port is None:
        return None

    values: Dict[str, Any] = {}
    if debug_config_file is not None:
        values = json.loads(debug_config_file.read_text(encoding="utf-8"))
        if not isinstance(values, dict):
            raise ValueError(f"{debug_config_file} must contain a JSON object")

    values["port"] = debug_port
    return DebugConfiguration(**values)


@app.callback()
def main() -> None:
    """Run and debug a single SAM function handler locally."""


@app.command()
def run(
    document: Path = typer.Argument(
        ..., exists=True, dir_okay=False, resolve_path=True, help="Source file declaring the handler"
    ),
    handler: str = typer.Option(..., "--handler", help="Handler name, e.g. app.handler"),
    runtime: str = typer.Option(..., "--runtime", help="Lambda runtime, e.g. python3.12"),
    code_root: Optional[Path] = typer.Option(
        None, "--code-root", file_okay=False, resolve_path=True,
        help="Function code root (defaults to the document's directory)",
    ),
    workspace: Optional[Path] = typer.Option(
        None, "--workspace", file_okay=False, resolve_path=True,
        help="Project root searched for templates and handler configuration (defaults to cwd)",
    ),
    debug: bool = typer.Option(False, "--debug", help="Wait for the debug port and attach"),
    debug_port: Optional[int] = typer.Option(None, "--debug-port", help="Debug port of the function"),
    debug_config_file: Optional[Path] = typer.Option(
        None, "--debug-config", exists=True, dir_okay=False,
        help="JSON file with extra debugger attach settings",
    ),
    manifest: Optional[Path] = typer.Option(
        None, "--manifest", exists=True, dir_okay=False, resolve_path=True,
        help="Dependency manifest passed to sam build",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Overrides LOG_LEVEL"),
) -> None:
    """Build the handler with sam build and run it with sam local invoke."""
    setup_logging(level=log_level)

    try:
        request = InvocationRequest(
            document_path=document,
            handler_name=handler,
            runtime=runtime,
            code_root=code_root or document.parent,
            workspace_folder=workspace or Path.cwd(),
            is_debug=debug,
            manifest_path=manifest,
            debug_config=load_debug_config(debug_port, debug_config_file),
        )
        runner = LocalLambdaRunner(request)
    except (DebugConfigurationError, ValidationError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}", style="bold")
        raise typer.Exit(1)

    disposer = get_disposable_files()
    try:
        asyncio.run(runner.run())

        process = runner.local_process
        if process is None:
            raise typer.Exit(1)

        try:
            returncode = process.wait()
        except KeyboardInterrupt:
            console.print("[yellow]Stopping local invocation...[/yellow]")
            process.terminate()
            returncode = process.wait()

        raise typer.Exit(returncode)
    finally:
        disposer.dispose()


if __name__ == "__main__":
    app()
