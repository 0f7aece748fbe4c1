"""Infrastructure layer package.

- codec: Default UCI line codec
- process: Engine subprocess launch
- io/: Configuration and console output
- tools/: Environment loading
"""
