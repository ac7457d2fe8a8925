"""Debugger attach stage."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console

from .constants import NAMESPACE
from .models import AttachResult, DebugConfiguration, OnWillAttachDebuggerHook


ATTACH_FAILURE_MESSAGE = (
    "Unable to attach Debugger. Check the Terminal tab for output. "
    "If it took longer than expected to successfully start, you may still attach to it."
)


class DebugHost(ABC):
    """Host environment able to start a debugging session."""

    @abstractmethod
    async def start_debugging(self, debug_config: DebugConfiguration) -> bool:
        """
        Start a debug session for ``debug_config``.

        Returns False when the session could not be started. Implementations
        should not raise for ordinary failures.
        """


class ConsoleDebugHost(DebugHost):
    """Prints the attach configuration for an IDE or a manual attach."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(stderr=True)

    async def start_debugging(self, debug_config: DebugConfiguration) -> bool:
        self.console.print(
            f"[bold cyan]Debug port {debug_config.port} is open.[/bold cyan] "
            "Attach your debugger with this configuration:"
        )
        self.console.print_json(json.dumps(debug_config.model_dump()))
        return True


class DebuggerAttacher:
    """Requests the debug host to attach to the locally running function."""

    def __init__(self, debug_host: DebugHost) -> None:
        self.logger = logging.getLogger(f"{NAMESPACE}.{__name__.split('.')[-1]}")
        self.debug_host = debug_host

    async def attach(
        self,
        debug_config: DebugConfiguration,
        on_will_attach: Optional[OnWillAttachDebuggerHook] = None,
    ) -> AttachResult:
        """
        Attach the debugger, reporting rather than raising on failure.

        Any exception from the hook or the debug host is caught here and
        turned into AttachResult(attached=False). This covers the attach
        stage only; failures of earlier stages reach the run's error boundary.

        Args:
            debug_config: Configuration passed to the debug host unchanged
            on_will_attach: Optional coroutine awaited right before attaching

        Returns:
            AttachResult describing whether the debugger attached
        """
        try:
            if on_will_attach:
                await on_will_attach()

            self.logger.info("Attaching to SAM Application...")
            self.logger.debug(
                f"start_debugging with debug_config: {debug_config.model_dump_json(indent=2)}"
            )
            attached = await self.debug_host.start_debugging(debug_config)
        except Exception as e:
            self.logger.error(f"{ATTACH_FAILURE_MESSAGE} ({e})", exc_info=True)
            return AttachResult(attached=False, error=str(e))

        if attached:
            self.logger.info("Debugger attached")
            return AttachResult(attached=True)

        self.logger.error(ATTACH_FAILURE_MESSAGE)
        return AttachResult(attached=False, error=ATTACH_FAILURE_MESSAGE)
