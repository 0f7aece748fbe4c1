"""Structural interfaces for the gateway's collaborators.

The gateway core never touches a process or parses text itself. It writes
to an EngineInput, reads from an EngineOutput, and converts between lines and
structured messages through a Codec. asyncio.StreamWriter and
asyncio.StreamReader satisfy the stream protocols directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uci_gateway.domain.uci import Command, Event


@runtime_checkable
class EngineInput(Protocol):
    """Buffered byte stream connected to the engine's stdin."""

    def write(self, data: bytes) -> None: ...

    async def drain(self) -> None: ...


@runtime_checkable
class EngineOutput(Protocol):
    """Buffered byte stream connected to the engine's stdout."""

    async def readline(self) -> bytes: ...


@runtime_checkable
class Codec(Protocol):
    """Line codec for the engine protocol."""

    def serialize(self, command: Command) -> str:
        """Render ``command`` as one line, without the line terminator."""
        ...

    def parse(self, line: str) -> Event | None:
        """Decode one line (terminator stripped).

        Returns None for lines that carry no recognized event. Raises
        ProtocolDecodeError for a recognized event that is malformed.
        """
        ...
