"""Orchestration layer: the engine gateway and its exclusive-access handle."""
