"""
uci-gateway: session-safe gateway to a UCI engine.

Thin shim so ``python -m uci_gateway`` runs the CLI from uci_gateway.cli.

Usage:
    uci-gateway probe [OPTIONS] [ENGINE]
    uci-gateway analyse [OPTIONS] [ENGINE]
"""

from .cli.cli import main

if __name__ == "__main__":
    main()
