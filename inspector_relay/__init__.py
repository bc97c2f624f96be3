"""
HTTP Inspector Relay

Relays HTTP telemetry captured inside an application to the browser-based
network monitor, in real time:
- protocol: event model and JSON frame handling
- hub: WebSocket relay hub, connection lifecycle, ingestion
- ui: monitor page and HTTP ingestion endpoint
- supervisor: process startup and shutdown
- cli: command line entry point
- utils: configuration and logging
"""

__version__ = "1.0.0"

from .exceptions import (
    RelayError,
    BindError,
    MalformedEventError,
    DeliverySendError,
    TransportFault,
)
from .protocol import Event, EventType, InfoEvent, RawEvent
from .hub import (
    RelayHub,
    create_relay,
    get_active_hub,
    shutdown,
    close_relay,
    ingest,
)
from .supervisor import Supervisor
from .utils import RelayConfig, configure_logging, get_logger

__all__ = [
    "__version__",
    # exceptions
    "RelayError",
    "BindError",
    "MalformedEventError",
    "DeliverySendError",
    "TransportFault",
    # protocol
    "Event",
    "EventType",
    "InfoEvent",
    "RawEvent",
    # hub
    "RelayHub",
    "create_relay",
    "get_active_hub",
    "shutdown",
    "close_relay",
    "ingest",
    # process
    "Supervisor",
    # utils
    "RelayConfig",
    "configure_logging",
    "get_logger",
]
