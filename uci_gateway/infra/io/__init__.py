"""I/O utilities for uci-gateway.

This package contains:
- config: GatewayConfig dataclass for configuration management
- log_output/: Console output for the CLI
"""

from uci_gateway.infra.io.config import ConfigurationError, GatewayConfig

__all__ = ["ConfigurationError", "GatewayConfig"]
