"""Polling wait for a TCP port to start accepting connections."""

import asyncio
import logging

from .constants import DEFAULT_DEBUG_HOST, NAMESPACE
from .errors import PortWaitTimeoutError


logger = logging.getLogger(f"{NAMESPACE}.{__name__.split('.')[-1]}")


async def is_port_in_use(port: int, host: str = DEFAULT_DEBUG_HOST, timeout: float = 1.0) -> bool:
    """Return True when something accepts a TCP connection on host:port."""
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
    except (OSError, asyncio.TimeoutError):
        return False

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True


async def wait_until_used(
    port: int,
    interval_millis: int,
    timeout_millis: int,
    host: str = DEFAULT_DEBUG_HOST,
) -> None:
    """
    Probe ``port`` every ``interval_millis`` until it is open.

    Args:
        port: TCP port to probe
        interval_millis: Delay between probes
        timeout_millis: Total time allowed before giving up
        host: Host the port is probed on

    Raises:
        PortWaitTimeoutError: If the port is still closed after timeout_millis
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_millis / 1000
    probe_timeout = max(interval_millis / 1000, 0.05)
    attempts = 0

    while True:
        attempts += 1
        if await is_port_in_use(port, host, timeout=probe_timeout):
            logger.debug(f"Port {port} open after {attempts} probe(s)")
            return

        remaining = deadline - loop.time()
        if remaining <= 0:
            raise PortWaitTimeoutError(port, timeout_millis)

        await asyncio.sleep(min(interval_millis / 1000, remaining))
