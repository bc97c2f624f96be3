"""Relay connection manager"""

import time
from typing import Any, Dict, List, Optional

from .connection import Connection
from ..utils import get_logger


class ConnectionManager:
    """Set of live connections, keyed by identifier"""

    def __init__(self):
        self._connections: Dict[str, Connection] = {}
        self.logger = get_logger("inspector_relay.hub.manager")

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection: Connection) -> bool:
        return self._connections.get(connection.identifier) is connection

    def add(self, connection: Connection) -> bool:
        """Add a connection

        Args:
            connection: Newly accepted connection

        Returns:
            False if the identifier is already taken
        """
        if connection.identifier in self._connections:
            self.logger.warning(f"Client {connection.identifier} already registered")
            return False

        self._connections[connection.identifier] = connection
        return True

    def remove(self, client_id: str, connection: Optional[Connection] = None) -> bool:
        """Remove a connection; removing an unknown id is a no-op

        Args:
            client_id: Connection identifier
            connection: Only remove the entry if it is this connection

        Returns:
            Whether a connection was removed
        """
        stored = self._connections.get(client_id)
        if stored is None or (connection is not None and stored is not connection):
            return False

        del self._connections[client_id]
        stored.release()
        return True

    def get(self, client_id: str) -> Optional[Connection]:
        return self._connections.get(client_id)

    def all_connections(self) -> List[Connection]:
        """Snapshot of every registered connection"""
        return list(self._connections.values())

    def open_connections(self, exclude: Optional[Connection] = None) -> List[Connection]:
        """Snapshot of connections in the OPEN state

        Args:
            exclude: Connection to leave out, usually the sender

        Returns:
            List of open connections
        """
        return [
            connection
            for connection in self._connections.values()
            if connection is not exclude and connection.is_open
        ]

    def clear(self) -> List[Connection]:
        """Remove every connection

        Returns:
            The removed connections
        """
        connections = list(self._connections.values())
        self._connections.clear()
        for connection in connections:
            connection.release()
        return connections

    def get_stats(self) -> Dict[str, Any]:
        open_count = sum(1 for c in self._connections.values() if c.is_open)
        alive_count = sum(1 for c in self._connections.values() if c.is_alive)
        return {
            "total": len(self._connections),
            "open": open_count,
            "alive": alive_count,
            "oldest_age": round(self.oldest_age(), 3),
        }

    def oldest_age(self) -> float:
        """Seconds since the longest-lived connection was accepted, 0 when empty"""
        if not self._connections:
            return 0.0
        oldest = min(c.connected_at for c in self._connections.values())
        return max(0.0, time.time() - oldest)
