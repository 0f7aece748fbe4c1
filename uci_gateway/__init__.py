"""uci-gateway: session-safe access to a single UCI engine subprocess."""

from .orchestration.engine import Engine
from .orchestration.exclusive import ExclusiveEngine

__version__ = "0.1.0"
__all__ = ["Engine", "ExclusiveEngine", "__version__"]
