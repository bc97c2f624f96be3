"""Process supervisor

Starts the relay hub and the UI server, then waits for a termination signal
or an unhandled fault and shuts everything down.
"""

import asyncio
import signal
from typing import Any, Dict, List, Optional

from .exceptions import BindError
from .hub import create_relay, shutdown as shutdown_relay
from .ui import UIServer
from .utils import RelayConfig, get_logger

logger = get_logger("inspector_relay.supervisor")

# interrupt, terminate and the reload signal sent by file watchers
SHUTDOWN_SIGNALS = [
    getattr(signal, name)
    for name in ("SIGINT", "SIGTERM", "SIGUSR2")
    if hasattr(signal, name)
]


class Supervisor:
    """Owns the servers of one process"""

    def __init__(self, config: Optional[RelayConfig] = None):
        self.config = config or RelayConfig()
        self.ui_server: Optional[UIServer] = None
        self.exit_code = 0

        self.started = asyncio.Event()
        self._stop_event = asyncio.Event()
        self._signals: List[int] = []

    async def start(self) -> None:
        """Start the hub, then the UI server

        Raises:
            BindError: if either port cannot be bound
        """
        config = self.config
        if not config.ui_only:
            hub = await create_relay(
                config.ws_port,
                host=config.host,
                heartbeat_interval=config.heartbeat_interval,
                close_timeout=config.close_timeout,
            )
            config.ws_port = hub.port

        if not config.ws_only:
            self.ui_server = UIServer(
                host=config.host,
                port=config.ui_port,
                ui_path=config.ui_path,
                ws_port=config.ws_port,
            )
            await self.ui_server.start()
            config.ui_port = self.ui_server.port

    async def stop(self) -> None:
        """Close owned servers, then shut the hub down"""
        if self.ui_server is not None:
            try:
                await self.ui_server.close()
            except Exception as e:
                logger.error(f"Error closing UI server: {e}")
            self.ui_server = None

        await shutdown_relay()
        logger.info("Servers closed")

    def request_stop(self, exit_code: int = 0) -> None:
        """Ask ``run`` to shut down and return ``exit_code``"""
        if exit_code:
            self.exit_code = exit_code
        self._stop_event.set()

    def _on_signal(self, signum: int) -> None:
        logger.info(f"Received {signal.Signals(signum).name}, shutting down")
        self.request_stop(0)

    def _on_fault(self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        exception = context.get("exception")
        message = context.get("message", "Unhandled error")
        if exception is not None:
            logger.error(f"{message}: {exception!r}", exc_info=exception)
        else:
            logger.error(message)
        self.request_stop(1)

    def install_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        """Register signal handlers and the fault handler on ``loop``"""
        for signum in SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(signum, self._on_signal, signum)
                self._signals.append(signum)
            except (NotImplementedError, RuntimeError):
                # Windows: Ctrl+C arrives as KeyboardInterrupt instead
                logger.debug(f"Signal {signum} handler not supported")
        loop.set_exception_handler(self._on_fault)

    def remove_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for signum in self._signals:
            loop.remove_signal_handler(signum)
        self._signals.clear()
        loop.set_exception_handler(None)

    async def run(self) -> int:
        """Run until a signal or fault

        Returns:
            Process exit status
        """
        loop = asyncio.get_running_loop()
        self.install_handlers(loop)
        try:
            try:
                await self.start()
            except BindError as e:
                logger.error(f"Failed to start servers: {e}")
                await self.stop()
                return 1

            self.started.set()
            await self._stop_event.wait()
            await self.stop()
            return self.exit_code
        finally:
            self.remove_handlers(loop)
