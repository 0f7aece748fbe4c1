"""Policy for options that remote callers must not set.

Some engine options reach outside the engine process: they name files to
read or write, directories to scan, or log destinations. A caller that can
set them can make the engine read or overwrite arbitrary files on the host,
so setoption commands naming them are dropped before they reach the engine.

The policy is a plain predicate over option names. ``is_safe_option`` is the
default; ``make_option_policy`` builds a variant with operator-supplied
additions and exceptions.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from .options import OptionName

OptionPolicy = Callable[[OptionName], bool]

# Option names that are blocked outright (compared lower-cased).
UNSAFE_OPTION_NAMES = frozenset(
    {
        "debug log file",
        "evalfile",
        "evalfilesmall",
        "nalimovpath",
        "syzygypath",
        "gaviotatbpath",
        "bookfile",
        "book file",
        "ownbook",
        "uci_setpositionvalue",
        "learning",
        "persisted learning",
        "write debug log",
        "write search log",
    }
)

# Fragments that mark an option as touching the filesystem, e.g.
# "NNUE File", "Tablebase Dir", "Search Log". Matched against the
# lower-cased name.
UNSAFE_NAME_FRAGMENTS = (
    "file",
    "path",
    "dir",
    "log",
    "book",
)


def is_safe_option(name: OptionName) -> bool:
    """Return True if a remote caller may set ``name``."""
    key = name.normalized
    if key in UNSAFE_OPTION_NAMES:
        return False
    return not any(fragment in key for fragment in UNSAFE_NAME_FRAGMENTS)


def make_option_policy(
    *,
    extra_unsafe: Iterable[str] = (),
    always_safe: Iterable[str] = (),
    base: OptionPolicy = is_safe_option,
) -> OptionPolicy:
    """Build an option policy on top of ``base``.

    Args:
        extra_unsafe: Additional option names to block.
        always_safe: Option names to allow even if ``base`` blocks them.
        base: Policy consulted for every other name.

    Returns:
        A predicate returning True for options remote callers may set.
    """
    blocked = frozenset(OptionName(n).normalized for n in extra_unsafe)
    allowed = frozenset(OptionName(n).normalized for n in always_safe)

    def policy(name: OptionName) -> bool:
        if name.normalized in allowed:
            return True
        if name.normalized in blocked:
            return False
        return base(name)

    return policy
