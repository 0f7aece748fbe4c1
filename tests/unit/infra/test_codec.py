"""Unit tests for the default UCI line codec."""

import pytest

from uci_gateway.core.errors import ProtocolDecodeError
from uci_gateway.domain.options import (
    ButtonOption,
    CheckOption,
    ComboOption,
    OptionName,
    SpinOption,
    StringOption,
)
from uci_gateway.domain.uci import (
    BestMove,
    CopyProtection,
    Debug,
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
from uci_gateway.infra.codec import UciCodec

pytestmark = pytest.mark.unit


@pytest.fixture
def codec() -> UciCodec:
    return UciCodec()


class TestSerialize:
    @pytest.mark.parametrize(
        ("command", "line"),
        [
            (Uci(), "uci"),
            (IsReady(), "isready"),
            (UciNewGame(), "ucinewgame"),
            (Stop(), "stop"),
            (PonderHit(), "ponderhit"),
            (Debug(on=True), "debug on"),
            (Debug(on=False), "debug off"),
        ],
    )
    def test_simple_commands(self, codec: UciCodec, command: object, line: str) -> None:
        assert codec.serialize(command) == line  # type: ignore[arg-type]

    def test_setoption_with_value(self, codec: UciCodec) -> None:
        command = SetOption(OptionName("Skill Level"), "5")
        assert codec.serialize(command) == "setoption name Skill Level value 5"

    def test_setoption_without_value(self, codec: UciCodec) -> None:
        assert codec.serialize(SetOption("Clear Hash")) == "setoption name Clear Hash"

    def test_position_startpos_with_moves(self, codec: UciCodec) -> None:
        command = Position(moves=("e2e4", "e7e5"))
        assert codec.serialize(command) == "position startpos moves e2e4 e7e5"

    def test_position_fen(self, codec: UciCodec) -> None:
        fen = "8/8/8/8/8/8/8/K6k w - - 0 1"
        assert codec.serialize(Position(fen=fen)) == f"position fen {fen}"

    def test_go_parameters_in_order(self, codec: UciCodec) -> None:
        command = Go(searchmoves=("e2e4",), ponder=True, wtime=1000, btime=900, depth=12)
        assert codec.serialize(command) == "go searchmoves e2e4 ponder wtime 1000 btime 900 depth 12"

    def test_go_infinite(self, codec: UciCodec) -> None:
        assert codec.serialize(Go(infinite=True)) == "go infinite"

    def test_rejects_non_commands(self, codec: UciCodec) -> None:
        with pytest.raises(TypeError):
            codec.serialize(UciOk())  # type: ignore[arg-type]


class TestCommandConstruction:
    def test_setoption_value_cannot_smuggle_a_line(self) -> None:
        with pytest.raises(ValueError, match="line breaks"):
            SetOption("Hash", "16\r\nsetoption name EvalFile value /etc/passwd")

    def test_setoption_accepts_plain_string_name(self) -> None:
        assert SetOption("hash", "1").name == OptionName("Hash")

    def test_position_moves_must_be_tokens(self) -> None:
        with pytest.raises(ValueError, match="single tokens"):
            Position(moves=("e2e4 e7e5",))

    def test_go_searchmoves_must_be_tokens(self) -> None:
        with pytest.raises(ValueError, match="single tokens"):
            Go(searchmoves=("",))


class TestParseSimpleEvents:
    def test_blank_line_is_skipped(self, codec: UciCodec) -> None:
        assert codec.parse("") is None
        assert codec.parse("   ") is None

    def test_unknown_line_is_skipped(self, codec: UciCodec) -> None:
        assert codec.parse("Stockfish 16 by the Stockfish developers") is None

    def test_acknowledgments(self, codec: UciCodec) -> None:
        assert codec.parse("uciok") == UciOk()
        assert codec.parse("readyok") == ReadyOk()

    def test_id_keeps_inner_spacing(self, codec: UciCodec) -> None:
        assert codec.parse("id name Stockfish 16.1") == IdName("Stockfish 16.1")
        assert codec.parse("id author T. Romstad,  M. Costalba") == IdAuthor("T. Romstad,  M. Costalba")

    def test_id_without_field_is_malformed(self, codec: UciCodec) -> None:
        with pytest.raises(ProtocolDecodeError):
            codec.parse("id")

    def test_bestmove(self, codec: UciCodec) -> None:
        assert codec.parse("bestmove e2e4 ponder e7e5") == BestMove("e2e4", "e7e5")
        assert codec.parse("bestmove g1f3") == BestMove("g1f3", None)

    def test_bestmove_none(self, codec: UciCodec) -> None:
        assert codec.parse("bestmove (none)") == BestMove(None)

    def test_bestmove_without_move_is_malformed(self, codec: UciCodec) -> None:
        with pytest.raises(ProtocolDecodeError, match="bestmove"):
            codec.parse("bestmove")

    def test_status_events(self, codec: UciCodec) -> None:
        assert codec.parse("copyprotection ok") == CopyProtection("ok")
        assert codec.parse("registration checking") == Registration("checking")


class TestParseOption:
    def test_spin(self, codec: UciCodec) -> None:
        event = codec.parse("option name Threads type spin default 1 min 1 max 1024")
        assert event == OptionEvent(OptionName("Threads"), SpinOption(1, 1, 1024))

    def test_check(self, codec: UciCodec) -> None:
        event = codec.parse("option name Ponder type check default false")
        assert event == OptionEvent(OptionName("Ponder"), CheckOption(False))

    def test_combo_with_multi_word_vars(self, codec: UciCodec) -> None:
        event = codec.parse("option name Style type combo default Normal var Solid var Normal var Very Risky")
        assert isinstance(event, OptionEvent)
        assert event.spec == ComboOption("Normal", ("Solid", "Normal", "Very Risky"))

    def test_button_with_multi_word_name(self, codec: UciCodec) -> None:
        event = codec.parse("option name Clear Hash type button")
        assert event == OptionEvent(OptionName("Clear Hash"), ButtonOption())

    def test_string_empty_default(self, codec: UciCodec) -> None:
        event = codec.parse("option name SyzygyPath type string default <empty>")
        assert isinstance(event, OptionEvent)
        assert event.spec == StringOption("")

    def test_string_default_with_spaces(self, codec: UciCodec) -> None:
        event = codec.parse("option name Comment type string default hello  world")
        assert isinstance(event, OptionEvent)
        assert event.spec == StringOption("hello world")

    @pytest.mark.parametrize(
        "line",
        [
            "option",
            "option type spin",
            "option name Threads",
            "option name Threads type",
            "option name Threads type spin default 1 min 1",
            "option name Threads type spin default one min 1 max 8",
            "option name Threads type spin default 1 min 9 max 8",
            "option name Ponder type check default maybe",
            "option name Foo type slider default 1",
        ],
    )
    def test_malformed_options(self, codec: UciCodec, line: str) -> None:
        with pytest.raises(ProtocolDecodeError):
            codec.parse(line)


class TestParseInfo:
    def test_full_line(self, codec: UciCodec) -> None:
        event = codec.parse(
            "info depth 20 seldepth 28 multipv 1 score cp 35 nodes 123456 nps 987654 "
            "hashfull 12 tbhits 0 time 125 pv e2e4 e7e5 g1f3"
        )
        assert event == Info(
            depth=20,
            seldepth=28,
            multipv=1,
            score=Score(cp=35),
            nodes=123456,
            nps=987654,
            hashfull=12,
            tbhits=0,
            time=125,
            pv=("e2e4", "e7e5", "g1f3"),
        )

    def test_mate_score_with_bound(self, codec: UciCodec) -> None:
        event = codec.parse("info score mate -3 upperbound depth 9")
        assert isinstance(event, Info)
        assert event.score == Score(mate=-3, upperbound=True)
        assert event.depth == 9

    def test_string_takes_rest_of_line(self, codec: UciCodec) -> None:
        event = codec.parse("info string NNUE evaluation using nn-1234.nnue  enabled")
        assert event == Info(string="NNUE evaluation using nn-1234.nnue  enabled")

    def test_currmove(self, codec: UciCodec) -> None:
        event = codec.parse("info depth 5 currmove e2e4 currmovenumber 1")
        assert event == Info(depth=5, currmove="e2e4", currmovenumber=1)

    def test_unknown_keywords_are_ignored(self, codec: UciCodec) -> None:
        event = codec.parse("info depth 3 wdl 500 300 200")
        assert isinstance(event, Info)
        assert event.depth == 3

    def test_noise_detection(self, codec: UciCodec) -> None:
        noise = codec.parse("info depth 1 seldepth 1 nodes 20")
        assert isinstance(noise, Info)
        assert noise.is_noise()
        signal = codec.parse("info depth 1 score cp 13")
        assert isinstance(signal, Info)
        assert not signal.is_noise()

    @pytest.mark.parametrize(
        "line",
        ["info depth x", "info depth", "info score", "info score cp", "info currmove"],
    )
    def test_malformed_info(self, codec: UciCodec, line: str) -> None:
        with pytest.raises(ProtocolDecodeError):
            codec.parse(line)
