"""Engine subprocess launch.

Starts the engine with piped stdin/stdout and hands the resulting asyncio
streams to the gateway. Supervision and restart policy belong to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from uci_gateway.core.errors import TransportError

logger = logging.getLogger(__name__)

# Engine output lines can be long (multi-PV lines, long option lists).
STREAM_LIMIT = 1 << 20


@dataclass
class EngineProcess:
    """A running engine process and its two streams."""

    process: asyncio.subprocess.Process
    stdin: asyncio.StreamWriter
    stdout: asyncio.StreamReader

    @property
    def pid(self) -> int:
        return self.process.pid

    async def terminate(self, grace_seconds: float = 2.0) -> int | None:
        """Close stdin and stop the process, killing it after a grace period.

        Returns:
            The exit code, or None if the process could not be reaped.
        """
        if not self.stdin.is_closing():
            self.stdin.close()
        if self.process.returncode is not None:
            return self.process.returncode
        try:
            self.process.terminate()
        except ProcessLookupError:
            return self.process.returncode
        try:
            return await asyncio.wait_for(self.process.wait(), timeout=grace_seconds)
        except asyncio.TimeoutError:
            logger.warning("Engine pid=%s ignored SIGTERM, killing", self.pid)
            try:
                self.process.kill()
            except ProcessLookupError:
                return self.process.returncode
            return await self.process.wait()


async def spawn_engine(path: Path | str, *args: str) -> EngineProcess:
    """Start the engine executable at ``path``.

    Raises:
        TransportError: If the process cannot be started or its streams are
            unavailable.
    """
    logger.info("Starting engine %s ...", path)
    try:
        process = await asyncio.create_subprocess_exec(
            str(path),
            *args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            limit=STREAM_LIMIT,
            start_new_session=sys.platform != "win32",
        )
    except OSError as exc:
        raise TransportError(f"failed to start engine {path}: {exc}") from exc

    if process.stdin is None:
        raise TransportError("engine stdin closed")
    if process.stdout is None:
        raise TransportError("engine stdout closed")
    logger.debug("Engine started: pid=%s", process.pid)
    return EngineProcess(process=process, stdin=process.stdin, stdout=process.stdout)
