"""Shared dataclasses for the engine gateway.

Types:
- Session: Caller tag attached to every command for log correlation
- EngineParameters: Operator-configured ceilings for well-known options
- Admission: Outcome of submitting a command to the gateway
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Session:
    """Opaque caller tag.

    Only used to correlate log lines with the caller that issued a command.
    It confers no privilege: every session goes through the same screens.
    """

    id: int

    def __str__(self) -> str:
        return str(self.id)


# Session used by the gateway itself (construction handshake, CLI).
OPERATOR_SESSION = Session(0)


@dataclass(frozen=True)
class EngineParameters:
    """Resource ceilings applied to engine-advertised options.

    Attributes:
        max_threads: Upper bound for the advertised maximum of ``Threads``.
        max_hash: Upper bound (MiB) for the advertised maximum of ``Hash``.
    """

    max_threads: int = 1
    max_hash: int = 16

    def __post_init__(self) -> None:
        if self.max_threads < 1:
            raise ValueError("max_threads must be at least 1")
        if self.max_hash < 1:
            raise ValueError("max_hash must be at least 1")


class Admission(Enum):
    """What happened to a command that was accepted without error.

    Only SENT means the engine actually received the command. The other
    values report commands that were absorbed by the gateway.
    """

    SENT = "sent"
    REJECTED_UNSAFE = "rejected_unsafe"
    IGNORED_UNKNOWN = "ignored_unknown"

    @property
    def transmitted(self) -> bool:
        return self is Admission.SENT
