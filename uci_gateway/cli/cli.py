"""
uci-gateway CLI: inspect and exercise a UCI engine through the gateway.

Usage:
    uci-gateway probe [OPTIONS] [ENGINE]
    uci-gateway analyse [OPTIONS] [ENGINE]
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from pathlib import Path
from typing import Annotated, Never

import typer
from tabulate import tabulate

from uci_gateway.core.errors import EngineError
from uci_gateway.core.models import OPERATOR_SESSION
from uci_gateway.domain.options import (
    ButtonOption,
    CheckOption,
    ComboOption,
    OptionSpec,
    SpinOption,
    StringOption,
)
from uci_gateway.domain.uci import BestMove, Go, Info, Position
from uci_gateway.infra.io.config import (
    ConfigurationError,
    GatewayConfig,
    parse_option_assignment,
)
from uci_gateway.infra.io.log_output.console import Colors, log, set_verbose, truncate_text
from uci_gateway.infra.tools.env import get_default_config_file, load_user_env
from uci_gateway.orchestration.engine import Engine

app = typer.Typer(
    name="uci-gateway",
    help="Session-safe gateway to a UCI engine",
    add_completion=False,
)

NO_ENGINE = "no engine given (argument, config file or UCI_GATEWAY_ENGINE)"

EngineArg = Annotated[
    Path | None,
    typer.Argument(help="Engine executable (default: config file, then UCI_GATEWAY_ENGINE)"),
]
ConfigOpt = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="YAML config file (default: ~/.config/uci-gateway/engine.yaml)"),
]
MaxThreadsOpt = Annotated[
    int | None,
    typer.Option("--max-threads", help="Ceiling for the engine's Threads option"),
]
MaxHashOpt = Annotated[
    int | None,
    typer.Option("--max-hash", help="Ceiling for the engine's Hash option (MiB)"),
]
OptionOpt = Annotated[
    list[str] | None,
    typer.Option("--option", "-o", help="Initial option value NAME=VALUE (repeatable)"),
]
TimeoutOpt = Annotated[
    float,
    typer.Option("--timeout", "-t", help="Seconds before giving up on the engine"),
]
VerboseOpt = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Log every line exchanged with the engine"),
]


def resolve_config(
    engine: Path | None,
    config_path: Path | None,
    max_threads: int | None,
    max_hash: int | None,
    option_args: list[str] | None,
) -> GatewayConfig:
    """Build the effective configuration.

    Layers, lowest first: UCI_GATEWAY_* environment variables, the YAML
    config file (explicit or the default one, if present), command-line
    arguments.

    Raises:
        ConfigurationError: If any source is invalid or no engine is given.
    """
    if config_path is None and get_default_config_file().exists():
        config_path = get_default_config_file()
    config = GatewayConfig.from_env()
    if config_path is not None:
        config = GatewayConfig.from_yaml(config_path, base=config)

    overrides: dict[str, object] = {}
    if engine is not None:
        overrides["engine_path"] = engine
    if max_threads is not None:
        overrides["max_threads"] = max_threads
    if max_hash is not None:
        overrides["max_hash"] = max_hash
    if option_args:
        extra: list[tuple[str, str]] = []
        errors: list[str] = []
        for raw in option_args:
            try:
                extra.append(parse_option_assignment(raw, source="--option"))
            except ValueError as exc:
                errors.append(str(exc))
        if errors:
            raise ConfigurationError(errors)
        overrides["options"] = config.options + tuple(extra)
    if overrides:
        config = replace(config, **overrides)  # type: ignore[arg-type]

    errors = config.validate()
    if config.engine_path is None:
        errors.append(NO_ENGINE)
    if errors:
        raise ConfigurationError(errors)
    return config


async def start_engine(config: GatewayConfig) -> Engine:
    if config.engine_path is None:
        raise ConfigurationError([NO_ENGINE])
    return await Engine.start(
        config.engine_path,
        config.to_parameters(),
        config.options,
        option_policy=config.option_policy(),
    )


def describe_option(spec: OptionSpec) -> tuple[str, str, str]:
    """(type, default, range/values) columns for the options table."""
    if isinstance(spec, SpinOption):
        return "spin", str(spec.default), f"{spec.min}..{spec.max}"
    if isinstance(spec, CheckOption):
        return "check", "true" if spec.default else "false", ""
    if isinstance(spec, ComboOption):
        return "combo", spec.default, ", ".join(spec.vars)
    if isinstance(spec, StringOption):
        return "string", spec.default, ""
    if isinstance(spec, ButtonOption):
        return "button", "", ""
    return type(spec).__name__, "", ""


def format_info(info: Info) -> str:
    parts: list[str] = []
    if info.depth is not None:
        parts.append(f"depth {info.depth}")
    if info.score is not None:
        if info.score.mate is not None:
            parts.append(f"mate {info.score.mate}")
        elif info.score.cp is not None:
            parts.append(f"cp {info.score.cp}")
    if info.nodes is not None:
        parts.append(f"nodes {info.nodes}")
    if info.pv:
        parts.append("pv " + " ".join(info.pv))
    if info.string is not None:
        parts.append(info.string)
    return "  ".join(parts)


def _fail(message: str) -> Never:
    log("✗", message, Colors.RED)
    raise typer.Exit(1)


@app.command()
def probe(
    engine: EngineArg = None,
    config: ConfigOpt = None,
    max_threads: MaxThreadsOpt = None,
    max_hash: MaxHashOpt = None,
    option: OptionOpt = None,
    timeout: TimeoutOpt = 30.0,
    verbose: VerboseOpt = False,
) -> None:
    """Start the engine, complete the handshake and list what it advertises."""
    set_verbose(verbose)
    try:
        resolved = resolve_config(engine, config, max_threads, max_hash, option)
    except ConfigurationError as exc:
        _fail(str(exc))

    async def _probe() -> None:
        gateway = await start_engine(resolved)
        try:
            log("●", f"Engine: {gateway.name() or '(unnamed)'}", Colors.CYAN)
            if gateway.author():
                log("○", f"Author: {gateway.author()}", Colors.GRAY)
            log("○", f"Max threads: {gateway.max_threads()}", Colors.GRAY)
            log("○", f"Max hash: {gateway.max_hash()} MiB", Colors.GRAY)
            variants = gateway.variants()
            if variants:
                log("○", f"Variants: {', '.join(variants)}", Colors.GRAY)
            rows = [
                (str(name), *describe_option(spec))
                for name, spec in gateway.options().items()
            ]
            print()
            print(tabulate(rows, headers=["Option", "Type", "Default", "Range"], tablefmt="simple"))
        finally:
            await gateway.close()

    try:
        asyncio.run(asyncio.wait_for(_probe(), timeout=timeout))
    except asyncio.TimeoutError:
        _fail(f"Engine did not respond within {timeout}s")
    except EngineError as exc:
        _fail(f"Engine error: {exc}")


@app.command()
def analyse(
    engine: EngineArg = None,
    fen: Annotated[
        str | None,
        typer.Option("--fen", help="Position to analyse (default: start position)"),
    ] = None,
    moves: Annotated[
        list[str] | None,
        typer.Option("--move", "-m", help="Move to play from the position (repeatable)"),
    ] = None,
    depth: Annotated[int, typer.Option("--depth", "-d", help="Search depth")] = 12,
    config: ConfigOpt = None,
    max_threads: MaxThreadsOpt = None,
    max_hash: MaxHashOpt = None,
    option: OptionOpt = None,
    timeout: TimeoutOpt = 60.0,
    verbose: VerboseOpt = False,
) -> None:
    """Search a position to a fixed depth and print the engine's lines."""
    set_verbose(verbose)
    try:
        resolved = resolve_config(engine, config, max_threads, max_hash, option)
        position = Position(fen=fen, moves=tuple(moves or ()))
    except ConfigurationError as exc:
        _fail(str(exc))
    except ValueError as exc:
        _fail(f"Invalid position: {exc}")

    async def _analyse() -> None:
        gateway = await start_engine(resolved)
        session = OPERATOR_SESSION
        try:
            await gateway.ensure_newgame(session)
            await gateway.send(session, position)
            await gateway.send(session, Go(depth=depth))
            while True:
                event = await gateway.recv(session)
                if isinstance(event, Info):
                    log("◦", truncate_text(format_info(event), 120), Colors.GRAY)
                elif isinstance(event, BestMove):
                    log("✓", f"bestmove {event.move or '(none)'}", Colors.GREEN)
                    if event.ponder:
                        log("○", f"ponder {event.ponder}", Colors.GRAY)
                    break
        finally:
            await gateway.close()

    try:
        asyncio.run(asyncio.wait_for(_analyse(), timeout=timeout))
    except asyncio.TimeoutError:
        _fail(f"Search did not finish within {timeout}s")
    except EngineError as exc:
        _fail(f"Engine error: {exc}")


def main() -> None:
    load_user_env()
    app()


if __name__ == "__main__":
    main()
