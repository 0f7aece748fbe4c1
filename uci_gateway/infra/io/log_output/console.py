"""Console output for the uci-gateway CLI.

Status lines go to stdout with a timestamp and color. Engine traffic is
logged through the stdlib ``logging`` tree and only shown in verbose mode.
"""

import logging
from datetime import datetime

_verbose_enabled: bool = False

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def set_verbose(enabled: bool) -> None:
    """Switch verbose mode and configure the root logger to match.

    Verbose mode lowers the root level to DEBUG, so every line exchanged
    with the engine is shown; otherwise only warnings and errors are.
    """
    global _verbose_enabled
    _verbose_enabled = enabled
    logging.basicConfig(
        level=logging.DEBUG if enabled else logging.WARNING,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=True,
    )


def truncate_text(text: str, max_length: int) -> str:
    """Shorten ``text`` to ``max_length`` characters unless verbose."""
    if _verbose_enabled or len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class Colors:
    """ANSI color codes for terminal output (bright variants)."""

    RESET = "\033[0m"
    GREEN = "\033[92m"
    CYAN = "\033[96m"
    RED = "\033[91m"
    GRAY = "\033[90m"


def log(icon: str, message: str, color: str = Colors.RESET) -> None:
    """Print a timestamped status line."""
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"{Colors.GRAY}{timestamp}{Colors.RESET} {color}{icon} {message}{Colors.RESET}")
