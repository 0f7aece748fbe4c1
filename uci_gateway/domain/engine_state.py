"""Busy/idle state machine for a single engine.

The engine is idle when it owes no handshake acknowledgment (``uciok``), no
readiness acknowledgment (``readyok``) and is not searching. Counters are
incremented on the send path and decremented on the receive path only.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class EngineState:
    pending_uciok: int = 0
    pending_readyok: int = 0
    searching: bool = False
    name: str | None = None
    author: str | None = None

    def is_idle(self) -> bool:
        return self.pending_uciok == 0 and self.pending_readyok == 0 and not self.searching

    # Send path

    def expect_uciok(self) -> None:
        self.pending_uciok += 1
        self.name = None
        self.author = None

    def expect_readyok(self) -> None:
        self.pending_readyok += 1

    def start_search(self) -> None:
        self.searching = True

    # Receive path. Decrements saturate at zero to tolerate an engine that
    # acknowledges more often than asked.

    def uciok_received(self) -> None:
        self.pending_uciok = max(self.pending_uciok - 1, 0)

    def readyok_received(self) -> None:
        self.pending_readyok = max(self.pending_readyok - 1, 0)

    def search_finished(self) -> None:
        self.searching = False
