"""Unit tests for option names, option shapes and the option registry."""

import pytest

from uci_gateway.core.errors import InvalidOptionValueError
from uci_gateway.domain.options import (
    HASH,
    THREADS,
    ButtonOption,
    CheckOption,
    ComboOption,
    OptionName,
    OptionRegistry,
    SpinOption,
    StringOption,
    limit_option_max,
    option_max,
    option_vars,
)

pytestmark = pytest.mark.unit


class TestOptionName:
    def test_comparison_ignores_case(self) -> None:
        assert OptionName("Threads") == OptionName("threads")
        assert hash(OptionName("Threads")) == hash(OptionName("THREADS"))

    def test_never_equal_to_plain_strings(self) -> None:
        name = OptionName("Threads")
        assert name != "Threads"
        assert name in {OptionName("THREADS")}
        assert name not in {"Threads"}

    def test_strips_surrounding_whitespace(self) -> None:
        name = OptionName("  MultiPV ")
        assert str(name) == "MultiPV"
        assert name == OptionName("multipv")

    def test_rejects_empty_name(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            OptionName("   ")

    def test_rejects_line_breaks(self) -> None:
        with pytest.raises(ValueError, match="single line"):
            OptionName("Hash\nuci")


class TestCheckOption:
    @pytest.mark.parametrize("value", ["true", "false"])
    def test_accepts_booleans(self, value: str) -> None:
        CheckOption(default=False).validate("Ponder", value)

    @pytest.mark.parametrize("value", ["yes", "TRUE", "False", " false", "true\t"])
    def test_rejects_other_spellings(self, value: str) -> None:
        with pytest.raises(InvalidOptionValueError, match="'true' or 'false'"):
            CheckOption(default=False).validate("Ponder", value)

    def test_rejects_missing_value(self) -> None:
        with pytest.raises(InvalidOptionValueError, match="value required"):
            CheckOption(default=False).validate("Ponder", None)


class TestSpinOption:
    spec = SpinOption(default=1, min=1, max=512)

    @pytest.mark.parametrize("value", ["1", "512", "64"])
    def test_accepts_values_in_range(self, value: str) -> None:
        self.spec.validate("Threads", value)

    @pytest.mark.parametrize("value", ["0", "513", "-4"])
    def test_rejects_values_out_of_range(self, value: str) -> None:
        with pytest.raises(InvalidOptionValueError, match="1 <= value <= 512"):
            self.spec.validate("Threads", value)

    @pytest.mark.parametrize("value", ["four", "", "0_3", " 5", "5 ", "+5", "٢", "1e2", "0x10"])
    def test_rejects_anything_but_plain_decimal(self, value: str) -> None:
        with pytest.raises(InvalidOptionValueError, match="integer"):
            self.spec.validate("Threads", value)

    def test_error_carries_name_and_value(self) -> None:
        with pytest.raises(InvalidOptionValueError) as exc_info:
            self.spec.validate("Threads", "9999")
        assert exc_info.value.name == "Threads"
        assert exc_info.value.value == "9999"

    def test_limit_max_lowers_maximum(self) -> None:
        limited = self.spec.limit_max(8)
        assert limited.max == 8
        assert limited.min == 1

    def test_limit_max_never_raises_maximum(self) -> None:
        assert self.spec.limit_max(4096).max == 512

    def test_limit_max_pulls_default_into_range(self) -> None:
        spec = SpinOption(default=256, min=1, max=1024)
        assert spec.limit_max(64).default == 64

    def test_limit_max_returns_new_spec(self) -> None:
        self.spec.limit_max(2)
        assert self.spec.max == 512


class TestComboOption:
    spec = ComboOption(default="chess", vars=("chess", "atomic", "crazyhouse"))

    def test_accepts_listed_value(self) -> None:
        self.spec.validate("UCI_Variant", "atomic")

    @pytest.mark.parametrize("value", ["Atomic", " atomic", "ATOMIC"])
    def test_requires_exact_spelling(self, value: str) -> None:
        with pytest.raises(InvalidOptionValueError):
            self.spec.validate("UCI_Variant", value)

    def test_rejects_unlisted_value(self) -> None:
        with pytest.raises(InvalidOptionValueError, match="expected one of"):
            self.spec.validate("UCI_Variant", "shogi")


class TestButtonAndString:
    def test_button_accepts_no_value(self) -> None:
        ButtonOption().validate("Clear Hash", None)

    def test_button_rejects_value(self) -> None:
        with pytest.raises(InvalidOptionValueError, match="no value"):
            ButtonOption().validate("Clear Hash", "now")

    @pytest.mark.parametrize("value", [None, "", "anything at all"])
    def test_string_accepts_anything(self, value: str | None) -> None:
        StringOption(default="").validate("Book", value)


class TestAccessors:
    def test_option_max_only_for_spin(self) -> None:
        assert option_max(SpinOption(1, 1, 8)) == 8
        assert option_max(CheckOption(True)) is None

    def test_option_vars_only_for_combo(self) -> None:
        assert option_vars(ComboOption("a", ("a", "b"))) == ("a", "b")
        assert option_vars(StringOption("a")) is None

    def test_limit_option_max_leaves_other_shapes_alone(self) -> None:
        spec = StringOption("x")
        assert limit_option_max(spec, 1) is spec


class TestOptionRegistry:
    def test_lookup_ignores_case(self) -> None:
        registry = OptionRegistry()
        registry.insert(THREADS, SpinOption(1, 1, 8))
        assert registry.get("threads") == SpinOption(1, 1, 8)
        assert "THREADS" in registry

    def test_insert_replaces_previous_entry(self) -> None:
        registry = OptionRegistry()
        registry.insert(HASH, SpinOption(16, 1, 1024))
        registry.insert(OptionName("hash"), SpinOption(16, 1, 64))
        assert len(registry) == 1
        assert registry.get(HASH) == SpinOption(16, 1, 64)
        assert [str(n) for n in registry] == ["hash"]

    def test_clear_discards_everything(self) -> None:
        registry = OptionRegistry()
        registry.insert(THREADS, SpinOption(1, 1, 8))
        registry.clear()
        assert len(registry) == 0
        assert registry.get(THREADS) is None

    def test_snapshot_is_read_only_copy(self) -> None:
        registry = OptionRegistry()
        registry.insert(THREADS, SpinOption(1, 1, 8))
        snapshot = registry.snapshot()
        registry.clear()
        assert snapshot[THREADS] == SpinOption(1, 1, 8)
        with pytest.raises(TypeError):
            snapshot[HASH] = SpinOption(1, 1, 1)  # type: ignore[index]

    def test_snapshot_lookup_by_plain_string(self) -> None:
        registry = OptionRegistry()
        registry.insert(THREADS, SpinOption(1, 1, 8))
        snapshot = registry.snapshot()
        assert "threads" in snapshot
        assert snapshot["THREADS"] == SpinOption(1, 1, 8)
        assert "Hash" not in snapshot
        assert 3 not in snapshot
        with pytest.raises(KeyError):
            snapshot["Hash"]
        assert dict(snapshot) == {THREADS: SpinOption(1, 1, 8)}
