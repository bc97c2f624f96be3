"""Inspector Relay utilities

- Configuration (RelayConfig)
- Logging (configure_logging, get_logger)
"""

from .config import RelayConfig
from .logger import configure_logging, get_logger

__all__ = [
    "RelayConfig",
    "configure_logging",
    "get_logger",
]
