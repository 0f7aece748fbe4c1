"""Session-safe gateway to a single UCI engine process.

The Engine owns the engine's streams, the option registry and the busy/idle
state machine. Every command goes through admission control before it is
written; every line the engine prints is decoded and applied to the state
machine before it is handed back to the caller.

Key entry points:
- Engine.start(): Spawn an engine and run the construction handshake
- Engine.send(): Screened send for commands from remote callers
- Engine.send_dangerous(): Unscreened send for trusted operator input
- Engine.recv(): Read the next reportable event
- Engine.ensure_idle() / Engine.ensure_newgame(): Drive the engine to a
  known idle state

The gateway performs no locking. Exactly one task may use an instance at a
time; see uci_gateway.orchestration.exclusive for a guarded handle.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

from uci_gateway.core.errors import (
    EngineBusyError,
    EngineClosedError,
    EngineError,
    ProtocolDecodeError,
    TransportError,
)
from uci_gateway.core.models import OPERATOR_SESSION, Admission, EngineParameters, Session
from uci_gateway.domain.engine_state import EngineState
from uci_gateway.domain.option_safety import OptionPolicy, is_safe_option
from uci_gateway.domain.options import (
    HASH,
    THREADS,
    UCI_VARIANT,
    OptionName,
    OptionRegistry,
    OptionSpec,
    limit_option_max,
    option_max,
    option_vars,
)
from uci_gateway.domain.uci import (
    BestMove,
    Command,
    Event,
    Go,
    IdAuthor,
    IdName,
    Info,
    IsReady,
    OptionEvent,
    PonderHit,
    ReadyOk,
    SetOption,
    Stop,
    Uci,
    UciNewGame,
    UciOk,
)
from uci_gateway.infra.codec import UciCodec
from uci_gateway.infra.process import EngineProcess, spawn_engine

if TYPE_CHECKING:
    from uci_gateway.core.protocols import Codec, EngineInput, EngineOutput

logger = logging.getLogger(__name__)

DEFAULT_MAX_THREADS = 1
DEFAULT_MAX_HASH = 16

InitialOptions = Mapping[OptionName | str, str] | Iterable[tuple[OptionName | str, str]]


class Engine:
    """Gateway for one engine process."""

    def __init__(
        self,
        stdin: EngineInput,
        stdout: EngineOutput,
        params: EngineParameters,
        *,
        codec: Codec | None = None,
        option_policy: OptionPolicy = is_safe_option,
        process: EngineProcess | None = None,
    ) -> None:
        """Wrap already-acquired engine streams.

        Args:
            stdin: Stream connected to the engine's input.
            stdout: Stream connected to the engine's output.
            params: Resource ceilings for Threads and Hash.
            codec: Line codec; defaults to UciCodec.
            option_policy: Predicate deciding which options remote callers
                may set through send().
            process: The owning process, terminated by close().
        """
        self._stdin = stdin
        self._stdout = stdout
        self._params = params
        self._codec: Codec = codec if codec is not None else UciCodec()
        self._is_safe = option_policy
        self._process = process
        self._state = EngineState()
        self._options = OptionRegistry()
        self._failure: EngineError | None = None

    @classmethod
    async def start(
        cls,
        path: Path | str,
        params: EngineParameters,
        options: InitialOptions | None = None,
        *,
        codec: Codec | None = None,
        option_policy: OptionPolicy = is_safe_option,
    ) -> Engine:
        """Spawn the engine at ``path`` and complete the handshake.

        Raises:
            TransportError: If the process cannot be started or a stream
                fails during the handshake.
            ProtocolDecodeError: If the engine prints an undecodable line.
            InvalidOptionValueError: If an initial option value does not fit
                the advertised option.
        """
        process = await spawn_engine(path)
        engine = cls(
            process.stdin,
            process.stdout,
            params,
            codec=codec,
            option_policy=option_policy,
            process=process,
        )
        try:
            await engine.handshake(options)
        except BaseException:
            await engine.close()
            raise
        return engine

    async def handshake(
        self, options: InitialOptions | None = None, session: Session = OPERATOR_SESSION
    ) -> None:
        """Negotiate with the engine and apply the initial option values.

        Initial values are trusted operator input, so they bypass the option
        safety screen but are still validated against the advertised shape.
        """
        await self.send(session, Uci())
        await self.ensure_idle(session)
        if options is None:
            return
        items = options.items() if isinstance(options, Mapping) else options
        for name, value in items:
            await self.send_dangerous(session, SetOption(OptionName(str(name)), value))

    # Admission control

    async def send(self, session: Session, command: Command) -> Admission:
        """Send a command from a remote caller.

        setoption commands naming options the safety policy rejects are
        dropped and reported as Admission.REJECTED_UNSAFE.
        """
        self._ensure_usable()
        if isinstance(command, SetOption) and not self._is_safe(command.name):
            logger.error(
                "%s: rejected potentially unsafe option: %s",
                session,
                self._codec.serialize(command),
            )
            return Admission.REJECTED_UNSAFE
        return await self.send_dangerous(session, command)

    async def send_dangerous(self, session: Session, command: Command) -> Admission:
        """Send a command without the option safety screen.

        Raises:
            EngineBusyError: If the engine is searching and the command is
                not stop, ponderhit or isready.
            InvalidOptionValueError: If a setoption value does not fit the
                advertised option.
            TransportError: If writing to the engine fails.
        """
        self._ensure_usable()
        line = self._codec.serialize(command)

        if isinstance(command, IsReady):
            self._state.expect_readyok()
        elif isinstance(command, (Stop, PonderHit)):
            pass
        elif self._state.searching:
            logger.error("%s: engine is busy: %s", session, line)
            raise EngineBusyError("engine is busy")
        elif isinstance(command, Uci):
            self._state.expect_uciok()
            self._options.clear()
        elif isinstance(command, Go):
            self._state.start_search()
        elif isinstance(command, SetOption):
            spec = self._options.get(command.name)
            if spec is None:
                logger.warning("%s: ignoring unknown option: %s", session, line)
                return Admission.IGNORED_UNKNOWN
            spec.validate(command.name, command.value)

        logger.info("%s << %s", session, line)
        try:
            self._stdin.write(f"{line}\r\n".encode())
            await self._stdin.drain()
        except OSError as exc:
            raise self._fail(TransportError(f"failed to write to engine: {exc}")) from exc
        return Admission.SENT

    # Event application

    async def recv(self, session: Session) -> Event:
        """Read engine output until a reportable event arrives.

        Raises:
            TransportError: If the engine closed its output or reading failed.
            ProtocolDecodeError: If a line cannot be decoded.
        """
        self._ensure_usable()
        while True:
            try:
                raw = await self._stdout.readline()
            except (OSError, ValueError) as exc:
                # ValueError: line exceeded the stream buffer limit.
                raise self._fail(TransportError(f"failed to read from engine: {exc}")) from exc
            if not raw:
                raise self._fail(TransportError("unexpected end of stream"))
            try:
                line = raw.decode("utf-8").rstrip("\r\n")
            except UnicodeDecodeError as exc:
                logger.error("%s >> %r", session, raw)
                raise self._fail(ProtocolDecodeError(f"invalid utf-8: {exc}")) from exc

            try:
                event = self._codec.parse(line)
            except ProtocolDecodeError as exc:
                logger.error("%s >> %s", session, line)
                raise self._fail(exc) from None
            if event is None:
                logger.warning("%s >> %s", session, line)
                continue

            if isinstance(event, Info):
                if event.is_noise():
                    logger.debug("%s >> %s (skipped)", session, line)
                    continue
                logger.debug("%s >> %s", session, line)
            else:
                logger.info("%s >> %s", session, line)

            return self._apply(event)

    def _apply(self, event: Event) -> Event:
        if isinstance(event, IdName):
            self._state.name = event.name
        elif isinstance(event, IdAuthor):
            self._state.author = event.author
        elif isinstance(event, UciOk):
            self._state.uciok_received()
        elif isinstance(event, ReadyOk):
            self._state.readyok_received()
        elif isinstance(event, BestMove):
            self._state.search_finished()
        elif isinstance(event, OptionEvent):
            spec = self._limit(event.name, event.spec)
            self._options.insert(event.name, spec)
            if spec is not event.spec:
                event = replace(event, spec=spec)
        return event

    def _limit(self, name: OptionName, spec: OptionSpec) -> OptionSpec:
        # Applied to each fresh advertisement, so repeats never compound.
        if name == THREADS:
            return limit_option_max(spec, self._params.max_threads)
        if name == HASH:
            return limit_option_max(spec, self._params.max_hash)
        return spec

    # Orchestration

    def is_idle(self) -> bool:
        return self._state.is_idle()

    async def ensure_idle(self, session: Session) -> None:
        """Process events until no acknowledgment is pending and no search
        is running.

        A running search is stopped and probed with isready, since the loop
        would otherwise wait for a bestmove that may never come.
        """
        self._ensure_usable()
        while not self.is_idle():
            if self._state.searching and self._state.pending_readyok < 1:
                await self.send(session, Stop())
                await self.send(session, IsReady())
            await self.recv(session)

    async def ensure_newgame(self, session: Session) -> None:
        self._ensure_usable()
        await self.ensure_idle(session)
        await self.send(session, UciNewGame())
        await self.send(session, IsReady())
        await self.ensure_idle(session)

    # Accessors

    def name(self) -> str | None:
        return self._state.name

    def author(self) -> str | None:
        return self._state.author

    def max_threads(self) -> int:
        spec = self._options.get(THREADS)
        value = option_max(spec) if spec is not None else None
        return value if value is not None else DEFAULT_MAX_THREADS

    def max_hash(self) -> int:
        spec = self._options.get(HASH)
        value = option_max(spec) if spec is not None else None
        return value if value is not None else DEFAULT_MAX_HASH

    def variants(self) -> list[str]:
        spec = self._options.get(UCI_VARIANT)
        values = option_vars(spec) if spec is not None else None
        return list(values) if values is not None else []

    def options(self) -> Mapping[OptionName, OptionSpec]:
        return self._options.snapshot()

    def is_searching(self) -> bool:
        return self._state.searching

    @property
    def params(self) -> EngineParameters:
        return self._params

    # Lifecycle

    @property
    def usable(self) -> bool:
        """False once a fatal error occurred or the engine was closed."""
        return self._failure is None

    def _ensure_usable(self) -> None:
        if self._failure is not None:
            raise EngineClosedError(self._failure)

    def _fail(self, error: EngineError) -> EngineError:
        if self._failure is None:
            self._failure = error
        return error

    async def close(self) -> None:
        """Mark the gateway unusable and stop the owned process, if any."""
        self._fail(TransportError("engine closed"))
        if self._process is not None:
            code = await self._process.terminate()
            logger.info("Engine exited with code %s", code)
