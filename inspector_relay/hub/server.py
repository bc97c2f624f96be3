"""Relay hub WebSocket server"""

import asyncio
import contextlib
from typing import Any, Mapping, Optional, Union

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosedError

from .connection import Connection
from .manager import ConnectionManager
from ..exceptions import BindError, MalformedEventError, TransportFault
from ..protocol import (
    Event,
    encode_event,
    event_type_of,
    parse_frame,
    shutdown_event,
    welcome_event,
)
from ..utils import get_logger

HEARTBEAT_INTERVAL = 30.0

logger = get_logger("inspector_relay.hub.server")


class RelayHub:
    """Broadcast hub

    Every well-formed frame received on one connection is relayed, unchanged,
    to every other open connection.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8080,
        heartbeat_interval: float = HEARTBEAT_INTERVAL,
        close_timeout: float = 2.0,
    ):
        self.host = host
        self.port = port
        self.heartbeat_interval = heartbeat_interval
        self.close_timeout = close_timeout

        self.connection_manager = ConnectionManager()

        self.server: Optional[Server] = None
        self.running = False
        self._heartbeat_task: Optional[asyncio.Task] = None

        self.relayed_count = 0
        self.dropped_count = 0

    async def start(self) -> None:
        """Bind the listening socket and start the heartbeat

        Raises:
            BindError: if the port cannot be bound
        """
        if self.running:
            logger.warning("Relay hub is already running")
            return

        try:
            self.server = await serve(
                self._handle_client,
                self.host,
                self.port,
                max_size=None,
                # the heartbeat below replaces the library keepalive
                ping_interval=None,
                close_timeout=self.close_timeout,
            )
        except OSError as e:
            logger.error(f"Failed to start relay hub on {self.host}:{self.port}: {e}")
            raise BindError(self.host, self.port, e) from e

        sockets = list(self.server.sockets)
        if sockets:
            self.port = sockets[0].getsockname()[1]

        self.running = True
        self._heartbeat_task = asyncio.create_task(self._heartbeat_loop())
        logger.info(f"Relay hub running on ws://{self.host}:{self.port}")

    async def close(self) -> None:
        """Stop the heartbeat, close every connection and the listening socket"""
        if not self.running:
            return
        self.running = False
        _release(self)

        if self._heartbeat_task is not None:
            self._heartbeat_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._heartbeat_task
            self._heartbeat_task = None

        self.connection_manager.clear()

        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()
            self.server = None

        logger.info(f"Relay hub on port {self.port} closed")

    async def shutdown(self) -> None:
        """Notify every open connection, then close"""
        if not self.running:
            logger.info("Relay hub already closed")
            return

        connections = self.connection_manager.open_connections()
        logger.info(f"Shutting down relay hub, notifying {len(connections)} clients")
        if connections:
            notice = shutdown_event().to_json()
            try:
                await asyncio.wait_for(
                    asyncio.gather(*(c.send(notice) for c in connections)),
                    timeout=self.close_timeout,
                )
            except asyncio.TimeoutError:
                logger.warning("Could not notify every client of shutdown")

        await self.close()

    def broadcast(
        self,
        event: Union[Event, Mapping[str, Any]],
        exclude: Optional[Connection] = None,
    ) -> int:
        """Send an event to every open connection

        Delivery is fire-and-forget: failed sends are logged by the
        connection and never reported here.

        Args:
            event: Event to relay
            exclude: Connection that must not receive it (the sender)

        Returns:
            Number of deliveries scheduled
        """
        try:
            payload = encode_event(event)
        except MalformedEventError as e:
            logger.error(f"Not broadcasting event: {e}")
            self.dropped_count += 1
            return 0

        targets = self.connection_manager.open_connections(exclude=exclude)
        if not targets:
            logger.debug(f"No open clients for {event_type_of(event)} event")
            return 0

        for connection in targets:
            connection.send_nowait(payload)

        self.relayed_count += 1
        logger.debug(
            f"Relayed {event_type_of(event)} event to {len(targets)} clients"
        )
        return len(targets)

    def heartbeat_sweep(self) -> int:
        """Run one heartbeat tick

        Connections that did not answer the previous probe are terminated;
        the others are probed again.

        Returns:
            Number of connections terminated
        """
        terminated = 0
        for connection in self.connection_manager.open_connections():
            if not connection.is_alive:
                logger.info(f"Terminating inactive client {connection.identifier}")
                connection.terminate()
                self.connection_manager.remove(connection.identifier, connection)
                terminated += 1
                continue
            connection.probe()
        return terminated

    async def _heartbeat_loop(self) -> None:
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            try:
                logger.debug(
                    f"Heartbeat check - {len(self.connection_manager)} clients"
                )
                self.heartbeat_sweep()
            except Exception as e:
                logger.error(f"Heartbeat check failed: {e}")

    async def _handle_client(self, websocket: ServerConnection) -> None:
        """Serve one connection until it closes

        Args:
            websocket: Accepted WebSocket connection
        """
        connection = Connection(websocket)
        if not self.connection_manager.add(connection):
            logger.error(f"Rejecting client with duplicate id {connection.identifier}")
            await websocket.close(1011, "Duplicate client id")
            return

        logger.info(
            f"Client connected: {connection.identifier} "
            f"({len(self.connection_manager)} total)"
        )

        await connection.send(welcome_event(connection.identifier).to_json())

        try:
            async for raw_message in websocket:
                self._handle_message(connection, raw_message)
        except ConnectionClosedError as e:
            logger.warning("%s", TransportFault(connection.identifier, e))
        finally:
            self.connection_manager.remove(connection.identifier, connection)
            logger.info(
                f"Client {connection.identifier} disconnected - "
                f"code: {websocket.close_code}, reason: {websocket.close_reason!r}"
            )

    def _handle_message(self, connection: Connection, raw_message: Union[str, bytes]) -> None:
        try:
            event = parse_frame(raw_message)
        except MalformedEventError as e:
            logger.warning(
                f"Dropping message from client {connection.identifier}: {e.message}"
            )
            self.dropped_count += 1
            return

        logger.debug(f"Message from client {connection.identifier}: {event.type}")
        self.broadcast(event, exclude=connection)

    def get_stats(self) -> dict:
        """Server statistics

        Returns:
            Statistics dictionary
        """
        return {
            "server": {
                "running": self.running,
                "host": self.host,
                "port": self.port,
                "heartbeat_interval": self.heartbeat_interval,
            },
            "connections": self.connection_manager.get_stats(),
            "messages": {
                "relayed": self.relayed_count,
                "dropped": self.dropped_count,
            },
        }


# the one active hub of this process
_active_hub: Optional[RelayHub] = None


def _release(hub: RelayHub) -> None:
    global _active_hub
    if _active_hub is hub:
        _active_hub = None


async def create_relay(
    port: int,
    host: str = "localhost",
    heartbeat_interval: float = HEARTBEAT_INTERVAL,
    close_timeout: float = 2.0,
) -> RelayHub:
    """Start the process-wide relay hub

    An existing hub is closed first.

    Args:
        port: Port to listen on, 0 for any free port
        host: Address to listen on
        heartbeat_interval: Seconds between heartbeat sweeps
        close_timeout: Seconds to wait for close handshakes

    Returns:
        The running hub

    Raises:
        BindError: if the port cannot be bound
    """
    global _active_hub
    previous = _active_hub
    if previous is not None:
        logger.info(f"Closing existing relay hub on port {previous.port}")
        _active_hub = None
        await previous.close()

    hub = RelayHub(host, port, heartbeat_interval, close_timeout)
    await hub.start()
    _active_hub = hub
    return hub


def get_active_hub() -> Optional[RelayHub]:
    return _active_hub


async def shutdown() -> None:
    """Notify clients and close the active hub; no-op without one"""
    hub = _active_hub
    if hub is None:
        logger.info("No relay hub to close")
        return
    await hub.shutdown()


close_relay = shutdown
