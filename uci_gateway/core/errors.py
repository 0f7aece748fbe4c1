"""Exception hierarchy for the engine gateway.

Fatal errors (transport and decode failures) leave the gateway unusable:
every later call raises EngineClosedError. Recoverable errors leave the
engine instance intact, so the caller can correct the command or retry once
the engine is idle.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for all gateway errors."""

    fatal: bool = False


class TransportError(EngineError):
    """Raised when a stream cannot be set up, written, or read.

    Includes the engine closing its output stream.
    """

    fatal = True


class EngineClosedError(TransportError):
    """Raised by every call on a gateway that already hit a fatal error."""

    def __init__(self, cause: BaseException | None = None) -> None:
        self.cause = cause
        message = "engine gateway is unusable"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ProtocolDecodeError(EngineError):
    """Raised when an engine output line cannot be decoded."""

    fatal = True

    def __init__(self, message: str, line: str | None = None) -> None:
        self.line = line
        super().__init__(message if line is None else f"{message}: {line!r}")


class EngineBusyError(EngineError):
    """Raised when a command other than stop/ponderhit/isready is sent
    while the engine is searching."""


class InvalidOptionValueError(EngineError, ValueError):
    """Raised when a setoption value does not fit the advertised option."""

    def __init__(self, name: str, value: str | None, reason: str) -> None:
        self.name = name
        self.value = value
        self.reason = reason
        super().__init__(f"invalid value {value!r} for option {name!r}: {reason}")
