"""Out-of-band event ingestion

Producers that cannot hold a WebSocket open (one-shot HTTP calls, for
instance) hand their events to ``ingest``; every live consumer receives them.
"""

from typing import Any, Mapping, Union

from .server import get_active_hub
from ..protocol import Event, event_type_of
from ..utils import get_logger

logger = get_logger("inspector_relay.hub.ingest")


def ingest(event: Union[Event, Mapping[str, Any]]) -> bool:
    """Forward an event to every connection of the active hub

    Args:
        event: Event to forward

    Returns:
        False if no hub is active and the event was dropped
    """
    hub = get_active_hub()
    if hub is None:
        logger.warning(f"No relay hub available, dropping {event_type_of(event)} event")
        return False

    delivered = hub.broadcast(event)
    logger.debug(f"Ingested {event_type_of(event)} event for {delivered} clients")
    return True
