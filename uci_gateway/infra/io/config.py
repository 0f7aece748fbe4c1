"""Configuration dataclass for uci-gateway.

Provides GatewayConfig for centralized configuration management. Programmatic
users construct it directly; the CLI loads it from a YAML file and/or the
environment.

Environment Variables:
    UCI_GATEWAY_ENGINE: Path to the engine executable
    UCI_GATEWAY_MAX_THREADS: Ceiling for the engine's Threads option (default: 1)
    UCI_GATEWAY_MAX_HASH: Ceiling for the engine's Hash option in MiB (default: 16)
    UCI_GATEWAY_OPTIONS: Initial option values (JSON object or comma
        NAME=VALUE list)
    UCI_GATEWAY_UNSAFE_OPTIONS: Extra option names remote callers may not set
        (comma separated)
    UCI_GATEWAY_SAFE_OPTIONS: Option names remote callers may set even if the
        default policy blocks them (comma separated)

YAML file keys: engine, max_threads, max_hash, options (mapping),
unsafe_options (list), safe_options (list). The CLI loads the environment
first and lets the file override it key by key (see from_yaml(base=...)).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from uci_gateway.core.models import EngineParameters
from uci_gateway.domain.option_safety import OptionPolicy, make_option_policy


def parse_option_values(raw: str | None, *, source: str) -> dict[str, str]:
    """Parse initial option values from a JSON object or NAME=VALUE list."""
    if not raw or not raw.strip():
        return {}

    stripped = raw.strip()
    if stripped.startswith("{"):
        try:
            data = json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{source}: invalid JSON ({exc})") from exc
        if not isinstance(data, dict):
            raise ValueError(f"{source}: JSON must be an object")
        return {str(key): _option_value_text(value) for key, value in data.items()}

    values: dict[str, str] = {}
    for part in [item.strip() for item in raw.split(",") if item.strip()]:
        name, value = parse_option_assignment(part, source=source)
        values[name] = value
    return values


def parse_option_assignment(raw: str, *, source: str) -> tuple[str, str]:
    """Parse a single NAME=VALUE assignment."""
    if "=" not in raw:
        raise ValueError(f"{source}: invalid entry '{raw}' (expected NAME=VALUE)")
    name, value = raw.split("=", 1)
    name = name.strip()
    if not name:
        raise ValueError(f"{source}: invalid entry '{raw}' (empty name)")
    return name, value.strip()


def _option_value_text(value: object) -> str:
    """Render a YAML/JSON scalar the way UCI expects it (true/false lower-case)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _split_names(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _int_env(var: str, default: int, errors: list[str]) -> int:
    """Read an integer env var, recording a parse error and falling back to default."""
    raw = os.environ.get(var)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        errors.append(f"{var} must be an integer, got '{raw}'")
        return default


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        message = "Configuration validation failed:\n" + "\n".join(
            f"  - {e}" for e in errors
        )
        super().__init__(message)


@dataclass(frozen=True)
class GatewayConfig:
    """Centralized configuration for one engine gateway.

    Attributes:
        engine_path: Engine executable. Env: UCI_GATEWAY_ENGINE
        max_threads: Ceiling for the advertised Threads maximum.
            Env: UCI_GATEWAY_MAX_THREADS (default: 1)
        max_hash: Ceiling for the advertised Hash maximum, in MiB.
            Env: UCI_GATEWAY_MAX_HASH (default: 16)
        options: Initial option values applied after the handshake, as
            (name, value) pairs. Trusted: not subject to the safety policy.
        unsafe_options: Extra option names blocked for remote callers.
        safe_options: Option names always allowed for remote callers.

    Example:
        config = GatewayConfig(
            engine_path=Path("/usr/bin/stockfish"),
            max_threads=4,
            max_hash=512,
            options=(("Threads", "2"),),
        )
        config = GatewayConfig.from_env()
    """

    engine_path: Path | None = None
    max_threads: int = 1
    max_hash: int = 16
    options: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    unsafe_options: tuple[str, ...] = field(default_factory=tuple)
    safe_options: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Normalize mutable containers for immutability.

        Since the dataclass is frozen, object.__setattr__ is used.
        """
        if isinstance(self.options, dict):
            object.__setattr__(self, "options", tuple(self.options.items()))
        elif isinstance(self.options, list):
            object.__setattr__(self, "options", tuple(tuple(o) for o in self.options))
        for name in ("unsafe_options", "safe_options"):
            value = getattr(self, name)
            if isinstance(value, list):
                object.__setattr__(self, name, tuple(value))
        if isinstance(self.engine_path, str):
            object.__setattr__(self, "engine_path", Path(self.engine_path))

    @classmethod
    def from_env(cls, *, validate: bool = True) -> GatewayConfig:
        """Create GatewayConfig from UCI_GATEWAY_* environment variables.

        Args:
            validate: If True (default), raise ConfigurationError on invalid
                values.

        Raises:
            ConfigurationError: If validate=True and configuration is invalid.
        """
        parse_errors: list[str] = []

        engine_raw = os.environ.get("UCI_GATEWAY_ENGINE") or None
        max_threads = _int_env("UCI_GATEWAY_MAX_THREADS", 1, parse_errors)
        max_hash = _int_env("UCI_GATEWAY_MAX_HASH", 16, parse_errors)

        try:
            options = parse_option_values(
                os.environ.get("UCI_GATEWAY_OPTIONS"), source="UCI_GATEWAY_OPTIONS"
            )
        except ValueError as exc:
            parse_errors.append(str(exc))
            options = {}

        config = cls(
            engine_path=Path(engine_raw) if engine_raw else None,
            max_threads=max_threads,
            max_hash=max_hash,
            options=tuple(options.items()),
            unsafe_options=_split_names(os.environ.get("UCI_GATEWAY_UNSAFE_OPTIONS")),
            safe_options=_split_names(os.environ.get("UCI_GATEWAY_SAFE_OPTIONS")),
        )
        if validate:
            errors = parse_errors + config.validate()
            if errors:
                raise ConfigurationError(errors)
        return config

    @classmethod
    def from_yaml(
        cls, path: Path, *, validate: bool = True, base: GatewayConfig | None = None
    ) -> GatewayConfig:
        """Load GatewayConfig from a YAML file.

        Keys the file leaves out keep their value from ``base`` (by default
        the built-in defaults). ``options`` from the file are appended to
        those of ``base``; the name lists are merged.

        Raises:
            ConfigurationError: If the file cannot be read or parsed, or if
                validate=True and configuration is invalid.
        """
        try:
            data = yaml.safe_load(path.read_text())
        except OSError as exc:
            raise ConfigurationError([f"{path}: {exc.strerror or exc}"]) from exc
        except yaml.YAMLError as exc:
            raise ConfigurationError([f"{path}: invalid YAML ({exc})"]) from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError([f"{path}: top level must be a mapping"])
        config, errors = cls._from_mapping(data, source=str(path), base=base or cls())
        if validate:
            errors = errors + config.validate()
        if errors:
            raise ConfigurationError(errors)
        return config

    @classmethod
    def _from_mapping(
        cls, data: dict[str, Any], *, source: str, base: GatewayConfig
    ) -> tuple[GatewayConfig, list[str]]:
        errors: list[str] = []
        known = {"engine", "max_threads", "max_hash", "options", "unsafe_options", "safe_options"}
        for key in sorted(set(data) - known):
            errors.append(f"{source}: unknown key '{key}'")

        ints: dict[str, int] = {}
        for key, default in (("max_threads", base.max_threads), ("max_hash", base.max_hash)):
            value = data.get(key, default)
            if isinstance(value, bool) or not isinstance(value, int):
                errors.append(f"{source}: {key} must be an integer")
                value = default
            ints[key] = value

        options = data.get("options") or {}
        if not isinstance(options, dict):
            errors.append(f"{source}: options must be a mapping")
            options = {}

        name_lists: dict[str, tuple[str, ...]] = {}
        for key in ("unsafe_options", "safe_options"):
            value = data.get(key) or []
            if not isinstance(value, list):
                errors.append(f"{source}: {key} must be a list")
                value = []
            name_lists[key] = getattr(base, key) + tuple(str(v) for v in value)

        engine = data.get("engine")
        config = cls(
            engine_path=Path(str(engine)).expanduser() if engine else base.engine_path,
            max_threads=ints["max_threads"],
            max_hash=ints["max_hash"],
            options=base.options
            + tuple((str(k), _option_value_text(v)) for k, v in options.items()),
            unsafe_options=name_lists["unsafe_options"],
            safe_options=name_lists["safe_options"],
        )
        return config, errors

    def validate(self) -> list[str]:
        """Return a list of configuration problems (empty when valid)."""
        errors: list[str] = []
        if self.max_threads < 1:
            errors.append(f"max_threads must be at least 1, got {self.max_threads}")
        if self.max_hash < 1:
            errors.append(f"max_hash must be at least 1, got {self.max_hash}")
        for name, value in self.options:
            if not name.strip():
                errors.append("option names must not be empty")
            if "\n" in value or "\r" in value:
                errors.append(f"option '{name}' value must be a single line")
        return errors

    def to_parameters(self) -> EngineParameters:
        return EngineParameters(max_threads=self.max_threads, max_hash=self.max_hash)

    def option_policy(self) -> OptionPolicy:
        return make_option_policy(
            extra_unsafe=self.unsafe_options, always_safe=self.safe_options
        )
