"""Core types shared across the domain, infra and orchestration layers.

- models: Session tags, resource limits, admission outcomes
- errors: Gateway exception hierarchy
- protocols: Structural interfaces for streams and codecs
"""
