"""Structured UCI commands (to the engine) and events (from the engine).

Commands are constructed by callers and validated on construction: no text
field may contain a line break, so a single command always serializes to a
single protocol line.

Events are produced by the codec from engine output lines.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .options import OptionName, OptionSpec


def _single_line(field_name: str, value: str | None) -> None:
    if value is not None and ("\r" in value or "\n" in value):
        raise ValueError(f"{field_name} must not contain line breaks")


def _move_tokens(field_name: str, moves: tuple[str, ...]) -> None:
    for move in moves:
        if not move or any(c.isspace() for c in move):
            raise ValueError(f"{field_name} entries must be single tokens: {move!r}")


# Commands


@dataclass(frozen=True)
class Uci:
    """Start (or restart) the handshake."""


@dataclass(frozen=True)
class Debug:
    on: bool


@dataclass(frozen=True)
class IsReady:
    """Readiness probe, answered with readyok once queued work is drained."""


@dataclass(frozen=True)
class SetOption:
    name: OptionName
    value: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.name, str):
            object.__setattr__(self, "name", OptionName(self.name))
        _single_line("value", self.value)


@dataclass(frozen=True)
class UciNewGame:
    pass


@dataclass(frozen=True)
class Position:
    """Set up a position, either ``startpos`` (fen is None) or a FEN."""

    fen: str | None = None
    moves: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _single_line("fen", self.fen)
        object.__setattr__(self, "moves", tuple(self.moves))
        _move_tokens("moves", self.moves)


@dataclass(frozen=True)
class Go:
    searchmoves: tuple[str, ...] = ()
    ponder: bool = False
    wtime: int | None = None
    btime: int | None = None
    winc: int | None = None
    binc: int | None = None
    movestogo: int | None = None
    depth: int | None = None
    nodes: int | None = None
    mate: int | None = None
    movetime: int | None = None
    infinite: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "searchmoves", tuple(self.searchmoves))
        _move_tokens("searchmoves", self.searchmoves)


@dataclass(frozen=True)
class Stop:
    pass


@dataclass(frozen=True)
class PonderHit:
    pass


Command = Union[Uci, Debug, IsReady, SetOption, UciNewGame, Position, Go, Stop, PonderHit]


# Events


@dataclass(frozen=True)
class IdName:
    name: str


@dataclass(frozen=True)
class IdAuthor:
    author: str


@dataclass(frozen=True)
class UciOk:
    pass


@dataclass(frozen=True)
class ReadyOk:
    pass


@dataclass(frozen=True)
class BestMove:
    move: str | None
    ponder: str | None = None


@dataclass(frozen=True)
class CopyProtection:
    status: str


@dataclass(frozen=True)
class Registration:
    status: str


@dataclass(frozen=True)
class OptionEvent:
    name: OptionName
    spec: OptionSpec


@dataclass(frozen=True)
class Score:
    """Engine evaluation: centipawns or moves to mate, possibly a bound."""

    cp: int | None = None
    mate: int | None = None
    lowerbound: bool = False
    upperbound: bool = False


@dataclass(frozen=True)
class Info:
    depth: int | None = None
    seldepth: int | None = None
    time: int | None = None
    nodes: int | None = None
    pv: tuple[str, ...] | None = None
    multipv: int | None = None
    score: Score | None = None
    currmove: str | None = None
    currmovenumber: int | None = None
    hashfull: int | None = None
    nps: int | None = None
    tbhits: int | None = None
    sbhits: int | None = None
    cpuload: int | None = None
    refutation: tuple[str, ...] | None = None
    currline: tuple[str, ...] | None = None
    string: str | None = None

    def is_noise(self) -> bool:
        """True for progress lines carrying neither a line, a score nor text."""
        return self.pv is None and self.score is None and self.string is None


Event = Union[
    IdName,
    IdAuthor,
    UciOk,
    ReadyOk,
    BestMove,
    CopyProtection,
    Registration,
    OptionEvent,
    Info,
]
