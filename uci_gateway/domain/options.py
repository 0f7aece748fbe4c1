"""Engine-advertised options and the registry that tracks them.

An engine announces each configurable parameter during the handshake with an
``option`` line. The gateway keeps the most recent announcement per name and
validates every ``setoption`` against it before the command reaches the
engine.

Option shapes:
- CheckOption: boolean, values ``true`` / ``false``
- SpinOption: integer within ``[min, max]``
- ComboOption: one of a fixed list of strings
- ButtonOption: an action, sent without a value
- StringOption: free text
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, replace
from typing import Union

from uci_gateway.core.errors import InvalidOptionValueError


class OptionName:
    """Option identifier, compared without regard to ASCII case."""

    __slots__ = ("_key", "_name")

    def __init__(self, name: str) -> None:
        stripped = name.strip()
        if not stripped:
            raise ValueError("option name must not be empty")
        if "\r" in stripped or "\n" in stripped:
            raise ValueError("option name must be a single line")
        self._name = stripped
        self._key = stripped.lower()

    def __eq__(self, other: object) -> bool:
        # Never equal to a plain str: the two could not share a hash.
        if isinstance(other, OptionName):
            return self._key == other._key
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._key)

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"OptionName({self._name!r})"

    @property
    def normalized(self) -> str:
        """Lower-cased name used for comparisons and policy checks."""
        return self._key


_INTEGER = re.compile(r"-?[0-9]+", re.ASCII)

THREADS = OptionName("Threads")
HASH = OptionName("Hash")
UCI_VARIANT = OptionName("UCI_Variant")


def _require_value(name: OptionName | str, value: str | None) -> str:
    if value is None:
        raise InvalidOptionValueError(str(name), value, "value required")
    return value


@dataclass(frozen=True)
class CheckOption:
    default: bool

    kind = "check"

    def validate(self, name: OptionName | str, value: str | None) -> None:
        if _require_value(name, value) not in ("true", "false"):
            raise InvalidOptionValueError(
                str(name), value, "expected 'true' or 'false'"
            )


@dataclass(frozen=True)
class SpinOption:
    default: int
    min: int
    max: int

    kind = "spin"

    def validate(self, name: OptionName | str, value: str | None) -> None:
        raw = _require_value(name, value)
        # The text is sent as-is, so it must already be a plain decimal.
        if not _INTEGER.fullmatch(raw):
            raise InvalidOptionValueError(str(name), value, "expected an integer")
        if not self.min <= int(raw) <= self.max:
            raise InvalidOptionValueError(
                str(name), value, f"expected {self.min} <= value <= {self.max}"
            )

    def limit_max(self, limit: int) -> SpinOption:
        """Lower the maximum to ``limit``; never raises it.

        The default is pulled into the resulting range so the advertised
        default always remains a valid value.
        """
        new_max = min(self.max, limit)
        new_default = max(min(self.default, new_max), self.min)
        return replace(self, max=new_max, default=new_default)


@dataclass(frozen=True)
class ComboOption:
    default: str
    vars: tuple[str, ...]

    kind = "combo"

    def validate(self, name: OptionName | str, value: str | None) -> None:
        if _require_value(name, value) not in self.vars:
            raise InvalidOptionValueError(
                str(name), value, f"expected one of {list(self.vars)}"
            )


@dataclass(frozen=True)
class ButtonOption:
    kind = "button"

    def validate(self, name: OptionName | str, value: str | None) -> None:
        if value is not None:
            raise InvalidOptionValueError(str(name), value, "button takes no value")


@dataclass(frozen=True)
class StringOption:
    default: str

    kind = "string"

    def validate(self, name: OptionName | str, value: str | None) -> None:
        # Any text is acceptable; line breaks are rejected when the command
        # is constructed.
        return None


OptionSpec = Union[CheckOption, SpinOption, ComboOption, ButtonOption, StringOption]


def option_max(spec: OptionSpec) -> int | None:
    """Declared maximum of a spin option, None for other shapes."""
    return spec.max if isinstance(spec, SpinOption) else None


def option_vars(spec: OptionSpec) -> tuple[str, ...] | None:
    """Allowed values of a combo option, None for other shapes."""
    return spec.vars if isinstance(spec, ComboOption) else None


def limit_option_max(spec: OptionSpec, limit: int) -> OptionSpec:
    """Clamp a spin option's maximum; other shapes are returned unchanged."""
    if isinstance(spec, SpinOption):
        return spec.limit_max(limit)
    return spec


class OptionRegistry:
    """Current knowledge of the options the engine has advertised.

    Wholly discarded at every handshake start, so nothing learned from an
    earlier negotiation survives an engine renegotiating its options.
    """

    def __init__(self) -> None:
        self._options: dict[OptionName, OptionSpec] = {}

    def clear(self) -> None:
        self._options.clear()

    def insert(self, name: OptionName, spec: OptionSpec) -> None:
        """Store ``spec`` for ``name``, replacing any earlier announcement."""
        # Drop first so the stored key keeps the most recent spelling.
        self._options.pop(name, None)
        self._options[name] = spec

    def get(self, name: OptionName | str) -> OptionSpec | None:
        key = _lookup_key(name)
        return self._options.get(key) if key is not None else None

    def __contains__(self, name: object) -> bool:
        key = _lookup_key(name)
        return key is not None and key in self._options

    def __len__(self) -> int:
        return len(self._options)

    def __iter__(self) -> Iterator[OptionName]:
        return iter(self._options)

    def snapshot(self) -> OptionSnapshot:
        """Read-only copy of the registry."""
        return OptionSnapshot(self._options)


class OptionSnapshot(Mapping[OptionName, OptionSpec]):
    """Immutable view of the registry at one point in time.

    Lookups accept plain strings as well as OptionName, both compared
    without regard to case.
    """

    def __init__(self, options: Mapping[OptionName, OptionSpec]) -> None:
        self._options = dict(options)

    def __getitem__(self, name: OptionName | str) -> OptionSpec:
        key = _lookup_key(name)
        if key is None:
            raise KeyError(name)
        return self._options[key]

    def __contains__(self, name: object) -> bool:
        key = _lookup_key(name)
        return key is not None and key in self._options

    def __len__(self) -> int:
        return len(self._options)

    def __iter__(self) -> Iterator[OptionName]:
        return iter(self._options)

    def __repr__(self) -> str:
        return f"OptionSnapshot({self._options!r})"


def _lookup_key(name: object) -> OptionName | None:
    """OptionName for a lookup argument, or None if it cannot name an option."""
    if isinstance(name, OptionName):
        return name
    if isinstance(name, str):
        try:
            return OptionName(name)
        except ValueError:
            return None
    return None
