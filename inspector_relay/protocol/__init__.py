"""
Inspector Relay Protocol Module

Event model and JSON frame handling
"""

from .events import (
    EventType,
    Event,
    InfoEvent,
    RawEvent,
    WELCOME_MESSAGE,
    SHUTDOWN_MESSAGE,
    welcome_event,
    shutdown_event,
    parse_frame,
    decode_event,
    encode_event,
    event_type_of,
)

__all__ = [
    "EventType",
    "Event",
    "InfoEvent",
    "RawEvent",
    "WELCOME_MESSAGE",
    "SHUTDOWN_MESSAGE",
    "welcome_event",
    "shutdown_event",
    "parse_frame",
    "decode_event",
    "encode_event",
    "event_type_of",
]
