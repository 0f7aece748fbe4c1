"""Command-line interface for uci-gateway."""
