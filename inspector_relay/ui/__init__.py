"""
Network monitor UI

- Monitor page served over HTTP
- HTTP fallback for event ingestion
"""

from .server import UIServer, create_app

__all__ = [
    "UIServer",
    "create_app",
]
