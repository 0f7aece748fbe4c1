"""Domain layer package.

This package contains the protocol-independent rules of the gateway:
- uci: Structured commands and events exchanged with the engine
- options: Option names, advertised option shapes, and the option registry
- option_safety: Policy deciding which options remote callers may set
- engine_state: The busy/idle state machine
"""
