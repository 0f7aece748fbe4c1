"""In-memory fake implementations for testing.

This module provides fake implementations of the gateway's stream protocols
for use in unit tests. Fakes are preferred over mocks because they:

1. Implement real protocol contracts, catching interface mismatches at test time
2. Provide deterministic, predictable behavior without call-order dependencies
3. Enable behavior-based testing (assert transmitted lines and state) over
   interaction testing

Available fakes:
- FakeEngineInput: Captures every line written to the engine
- FakeEngineOutput: Scripted engine output; reads past the script return EOF
- SimulatedEngine: Cooperative engine answering uci/isready/go/stop

Usage:
    from tests.fakes import SimulatedEngine

    async def test_something():
        sim = SimulatedEngine()
        engine = Engine(sim.input, sim.output, EngineParameters())
        await engine.handshake()
        assert sim.received == ["uci"]
"""

from tests.fakes.engine import (
    DEFAULT_OPTION_LINES,
    FakeEngineInput,
    FakeEngineOutput,
    SimulatedEngine,
)

__all__ = [
    "DEFAULT_OPTION_LINES",
    "FakeEngineInput",
    "FakeEngineOutput",
    "SimulatedEngine",
]
