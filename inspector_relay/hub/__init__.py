"""
Relay hub module

- WebSocket relay server and the process-wide hub handle
- Connection lifecycle
- Out-of-band ingestion
"""

from .server import (
    HEARTBEAT_INTERVAL,
    RelayHub,
    create_relay,
    get_active_hub,
    shutdown,
    close_relay,
)
from .manager import ConnectionManager
from .connection import Connection, generate_client_id
from .ingest import ingest

__all__ = [
    "HEARTBEAT_INTERVAL",
    "RelayHub",
    "create_relay",
    "get_active_hub",
    "shutdown",
    "close_relay",
    "ConnectionManager",
    "Connection",
    "generate_client_id",
    "ingest",
]
