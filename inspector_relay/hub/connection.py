"""Relay client connection"""

import asyncio
import secrets
import string
import time
from typing import Optional, Set

from websockets.asyncio.server import ServerConnection
from websockets.exceptions import ConnectionClosed
from websockets.protocol import State

from ..exceptions import DeliverySendError
from ..utils import get_logger

_ID_ALPHABET = string.digits + string.ascii_lowercase

logger = get_logger("inspector_relay.hub.connection")


def generate_client_id() -> str:
    """Millisecond timestamp followed by a 9 character base-36 suffix"""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}{suffix}"


class Connection:
    """One attached endpoint, producer or consumer"""

    def __init__(self, websocket: ServerConnection, identifier: Optional[str] = None):
        self.websocket = websocket
        self.identifier = identifier or generate_client_id()
        self.is_alive = True
        self.connected_at = time.time()

        self._probe: Optional[asyncio.Task] = None
        self._sends: Set[asyncio.Task] = set()

    def __repr__(self) -> str:
        return f"Connection({self.identifier!r}, alive={self.is_alive})"

    @property
    def is_open(self) -> bool:
        return self.websocket.state is State.OPEN

    async def send(self, text: str) -> bool:
        """Send a text frame

        Args:
            text: Serialized event

        Returns:
            Whether the frame was handed to the transport
        """
        try:
            await self.websocket.send(text)
            return True
        except ConnectionClosed as e:
            logger.debug("%s", DeliverySendError(self.identifier, e))
        except Exception as e:
            logger.warning("%s", DeliverySendError(self.identifier, e))
        return False

    def send_nowait(self, text: str) -> None:
        """Schedule a send without waiting for it

        Frames scheduled from the same connection keep their order.
        """
        task = asyncio.ensure_future(self.send(text))
        self._sends.add(task)
        task.add_done_callback(self._sends.discard)

    def mark_alive(self) -> None:
        self.is_alive = True

    def probe(self) -> None:
        """Clear the liveness flag and send a ping

        Only the matching pong sets the flag again.
        """
        self.is_alive = False
        if self._probe is not None and not self._probe.done():
            self._probe.cancel()
        self._probe = asyncio.ensure_future(self._await_pong())

    async def _await_pong(self) -> None:
        try:
            pong_waiter = await self.websocket.ping()
            await pong_waiter
        except ConnectionClosed:
            return
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug(f"Ping to client {self.identifier} failed: {e}")
            return
        logger.debug(f"Pong received from client {self.identifier}")
        self.mark_alive()

    def terminate(self) -> None:
        """Drop the transport immediately, without a close handshake"""
        self.release()
        transport = self.websocket.transport
        if transport is not None:
            transport.abort()

    def release(self) -> None:
        """Cancel the pending probe"""
        if self._probe is not None and not self._probe.done():
            self._probe.cancel()
        self._probe = None
