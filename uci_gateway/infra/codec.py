"""Default UCI line codec.

Implements the established UCI text format for the commands and events the
gateway handles. Other codecs can be passed to the gateway as long as they
follow uci_gateway.core.protocols.Codec.
"""

from __future__ import annotations

from uci_gateway.core.errors import ProtocolDecodeError
from uci_gateway.domain.options import (
    ButtonOption,
    CheckOption,
    ComboOption,
    OptionName,
    OptionSpec,
    SpinOption,
    StringOption,
)
from uci_gateway.domain.uci import (
    BestMove,
    Command,
    CopyProtection,
    Debug,
    Event,
    Go,
    IdAuthor,
    IdName,
    Info,
    IsReady,
    OptionEvent,
    PonderHit,
    Position,
    ReadyOk,
    Registration,
    Score,
    SetOption,
    Stop,
    Uci,
    UciNewGame,
    UciOk,
)

# Integer-valued go parameters, in the order they are written.
GO_INT_FIELDS = ("wtime", "btime", "winc", "binc", "movestogo", "depth", "nodes", "mate", "movetime")

INFO_INT_FIELDS = frozenset(
    {
        "depth",
        "seldepth",
        "time",
        "nodes",
        "multipv",
        "currmovenumber",
        "hashfull",
        "nps",
        "tbhits",
        "sbhits",
        "cpuload",
    }
)
INFO_MOVE_LIST_FIELDS = frozenset({"pv", "refutation", "currline"})
INFO_KEYWORDS = INFO_INT_FIELDS | INFO_MOVE_LIST_FIELDS | {"score", "currmove", "string"}

OPTION_KEYWORDS = frozenset({"default", "min", "max", "var"})

# Engines write this instead of an empty default string.
EMPTY_DEFAULT = "<empty>"


def _rest(line: str, skip: int) -> str:
    """Text following the first ``skip`` whitespace-separated tokens."""
    parts = line.split(None, skip)
    return parts[skip] if len(parts) > skip else ""


def _int(value: str, line: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ProtocolDecodeError(f"expected integer, got {value!r}", line) from None


class UciCodec:
    """Serializes commands to UCI lines and parses engine output lines."""

    def serialize(self, command: Command) -> str:
        if isinstance(command, Uci):
            return "uci"
        if isinstance(command, Debug):
            return "debug on" if command.on else "debug off"
        if isinstance(command, IsReady):
            return "isready"
        if isinstance(command, SetOption):
            line = f"setoption name {command.name}"
            if command.value is not None:
                line += f" value {command.value}"
            return line
        if isinstance(command, UciNewGame):
            return "ucinewgame"
        if isinstance(command, Position):
            line = "position startpos" if command.fen is None else f"position fen {command.fen}"
            if command.moves:
                line += " moves " + " ".join(command.moves)
            return line
        if isinstance(command, Go):
            return self._serialize_go(command)
        if isinstance(command, Stop):
            return "stop"
        if isinstance(command, PonderHit):
            return "ponderhit"
        raise TypeError(f"not a UCI command: {command!r}")

    def _serialize_go(self, command: Go) -> str:
        parts = ["go"]
        if command.searchmoves:
            parts.append("searchmoves")
            parts.extend(command.searchmoves)
        if command.ponder:
            parts.append("ponder")
        for name in GO_INT_FIELDS:
            value = getattr(command, name)
            if value is not None:
                parts.extend((name, str(value)))
        if command.infinite:
            parts.append("infinite")
        return " ".join(parts)

    def parse(self, line: str) -> Event | None:
        tokens = line.split()
        if not tokens:
            return None
        head = tokens[0]

        if head == "uciok":
            return UciOk()
        if head == "readyok":
            return ReadyOk()
        if head == "id":
            if len(tokens) < 2:
                raise ProtocolDecodeError("id without field", line)
            if tokens[1] == "name":
                return IdName(_rest(line, 2))
            if tokens[1] == "author":
                return IdAuthor(_rest(line, 2))
            return None
        if head == "bestmove":
            if len(tokens) < 2:
                raise ProtocolDecodeError("bestmove without move", line)
            move = None if tokens[1] in ("(none)", "0000") else tokens[1]
            ponder = tokens[3] if len(tokens) >= 4 and tokens[2] == "ponder" else None
            return BestMove(move, ponder)
        if head == "copyprotection":
            if len(tokens) < 2:
                raise ProtocolDecodeError("copyprotection without status", line)
            return CopyProtection(tokens[1])
        if head == "registration":
            if len(tokens) < 2:
                raise ProtocolDecodeError("registration without status", line)
            return Registration(tokens[1])
        if head == "option":
            return self._parse_option(line, tokens)
        if head == "info":
            return self._parse_info(line, tokens)
        return None

    def _parse_option(self, line: str, tokens: list[str]) -> OptionEvent:
        if len(tokens) < 2 or tokens[1] != "name":
            raise ProtocolDecodeError("option without name", line)
        try:
            type_index = tokens.index("type", 2)
        except ValueError:
            raise ProtocolDecodeError("option without type", line) from None
        if type_index == 2 or type_index + 1 >= len(tokens):
            raise ProtocolDecodeError("option name or type missing", line)
        name = OptionName(" ".join(tokens[2:type_index]))
        kind = tokens[type_index + 1]

        sections: dict[str, list[str]] = {}
        variants: list[str] = []
        key: str | None = None
        current: list[str] = []
        for token in tokens[type_index + 2 :]:
            if token in OPTION_KEYWORDS:
                if key == "var":
                    variants.append(" ".join(current))
                elif key is not None:
                    sections[key] = current
                key, current = token, []
            elif key is None:
                raise ProtocolDecodeError(f"unexpected token {token!r}", line)
            else:
                current.append(token)
        if key == "var":
            variants.append(" ".join(current))
        elif key is not None:
            sections[key] = current

        default = " ".join(sections["default"]) if "default" in sections else None
        if default == EMPTY_DEFAULT:
            default = ""
        return OptionEvent(name, self._option_spec(kind, default, sections, variants, line))

    def _option_spec(
        self,
        kind: str,
        default: str | None,
        sections: dict[str, list[str]],
        variants: list[str],
        line: str,
    ) -> OptionSpec:
        if kind == "check":
            if default not in (None, "true", "false"):
                raise ProtocolDecodeError("check default must be true or false", line)
            return CheckOption(default == "true")
        if kind == "spin":
            bounds: dict[str, int] = {}
            for key in ("default", "min", "max"):
                if len(sections.get(key, [])) != 1:
                    raise ProtocolDecodeError(f"spin option needs a single {key}", line)
                bounds[key] = _int(sections[key][0], line)
            if bounds["min"] > bounds["max"]:
                raise ProtocolDecodeError("spin option min exceeds max", line)
            return SpinOption(bounds["default"], bounds["min"], bounds["max"])
        if kind == "combo":
            return ComboOption(default or "", tuple(variants))
        if kind == "button":
            return ButtonOption()
        if kind == "string":
            return StringOption(default or "")
        raise ProtocolDecodeError(f"unknown option type {kind!r}", line)

    def _parse_info(self, line: str, tokens: list[str]) -> Info:
        fields: dict[str, object] = {}
        i = 1
        while i < len(tokens):
            key = tokens[i]
            if key == "string":
                fields["string"] = _rest(line, i + 1)
                break
            if key in INFO_INT_FIELDS:
                if i + 1 >= len(tokens):
                    raise ProtocolDecodeError(f"info {key} without value", line)
                fields[key] = _int(tokens[i + 1], line)
                i += 2
            elif key == "currmove":
                if i + 1 >= len(tokens):
                    raise ProtocolDecodeError("info currmove without move", line)
                fields[key] = tokens[i + 1]
                i += 2
            elif key in INFO_MOVE_LIST_FIELDS:
                i += 1
                moves: list[str] = []
                while i < len(tokens) and tokens[i] not in INFO_KEYWORDS:
                    moves.append(tokens[i])
                    i += 1
                fields[key] = tuple(moves)
            elif key == "score":
                score, i = self._parse_score(line, tokens, i + 1)
                fields["score"] = score
            else:
                # Unknown keyword, e.g. an engine-specific extension.
                i += 1
        return Info(**fields)  # type: ignore[arg-type]

    def _parse_score(self, line: str, tokens: list[str], i: int) -> tuple[Score, int]:
        cp: int | None = None
        mate: int | None = None
        lowerbound = upperbound = False
        while i < len(tokens):
            token = tokens[i]
            if token in ("cp", "mate"):
                if i + 1 >= len(tokens):
                    raise ProtocolDecodeError(f"score {token} without value", line)
                value = _int(tokens[i + 1], line)
                if token == "cp":
                    cp = value
                else:
                    mate = value
                i += 2
            elif token == "lowerbound":
                lowerbound = True
                i += 1
            elif token == "upperbound":
                upperbound = True
                i += 1
            else:
                break
        if cp is None and mate is None:
            raise ProtocolDecodeError("score without cp or mate", line)
        return Score(cp=cp, mate=mate, lowerbound=lowerbound, upperbound=upperbound), i
