"""Relay event model

Events travelling through the relay are a closed tagged union: ``InfoEvent`` for
the notices the relay itself emits, and ``RawEvent`` for everything producers
send. A ``RawEvent`` keeps the exact text it arrived with so that forwarding
never re-formats a producer's JSON.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from ..exceptions import MalformedEventError


class EventType(Enum):
    """Well-known ``type`` discriminators"""

    INFO = "info"
    FETCH = "fetch"
    FETCH_ERROR = "fetch_error"
    PING = "ping"


WELCOME_MESSAGE = "Connected"
SHUTDOWN_MESSAGE = "Server shutting down"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def dumps(data: Any) -> str:
    """Serialize to compact JSON text"""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def loads(text: str) -> Any:
    """Parse strict JSON text (``NaN`` and ``Infinity`` are rejected)"""
    return json.loads(text, parse_constant=_reject_constant)


@dataclass
class InfoEvent:
    """Server-to-client notice"""

    message: str
    client_id: Optional[str] = None

    @property
    def type(self) -> str:
        return EventType.INFO.value

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the wire dictionary

        Returns:
            Dictionary with ``type``, ``message`` and, when set, ``clientId``
        """
        result = {"type": self.type, "message": self.message}
        if self.client_id is not None:
            result["clientId"] = self.client_id
        return result

    def to_json(self) -> str:
        return dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InfoEvent":
        """Build from a wire dictionary

        Raises:
            MalformedEventError: if the dictionary is not an info notice
        """
        if data.get("type") != EventType.INFO.value or "message" not in data:
            raise MalformedEventError(f"Not an info event: {data!r}")
        return cls(message=data["message"], client_id=data.get("clientId"))


@dataclass(frozen=True)
class RawEvent:
    """Opaque producer event, forwarded byte-for-byte"""

    text: str
    type: Optional[str] = None

    def to_json(self) -> str:
        return self.text


Event = Union[InfoEvent, RawEvent]


def welcome_event(client_id: str) -> InfoEvent:
    return InfoEvent(message=WELCOME_MESSAGE, client_id=client_id)


def shutdown_event() -> InfoEvent:
    return InfoEvent(message=SHUTDOWN_MESSAGE)


def parse_frame(data: Union[str, bytes]) -> RawEvent:
    """Validate an inbound frame and wrap its original text

    Args:
        data: Text or binary frame payload

    Returns:
        RawEvent holding the untouched text

    Raises:
        MalformedEventError: if the payload is not UTF-8 JSON
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        try:
            data = bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedEventError(f"Frame is not UTF-8: {e}")

    try:
        parsed = loads(data)
    except (ValueError, RecursionError) as e:
        raise MalformedEventError(f"Invalid JSON: {e}", raw=data)

    event_type = None
    if isinstance(parsed, dict) and isinstance(parsed.get("type"), str):
        event_type = parsed["type"]
    return RawEvent(text=data, type=event_type)


def decode_event(text: str) -> Event:
    """Parse a frame into the tagged union

    Info notices become ``InfoEvent``; anything else stays opaque.
    """
    raw = parse_frame(text)
    if raw.type == EventType.INFO.value:
        return InfoEvent.from_dict(loads(raw.text))
    return raw


def encode_event(event: Union[Event, Mapping[str, Any]]) -> str:
    """Serialize an event for the wire

    Args:
        event: InfoEvent, RawEvent or a plain mapping

    Returns:
        JSON text

    Raises:
        MalformedEventError: if a mapping cannot be serialized
    """
    if isinstance(event, (InfoEvent, RawEvent)):
        return event.to_json()
    try:
        return dumps(event)
    except (TypeError, ValueError) as e:
        raise MalformedEventError(f"Event is not serializable: {e}")


def event_type_of(event: Union[Event, Mapping[str, Any]]) -> Optional[str]:
    """Best-effort ``type`` of an event, for logging"""
    if isinstance(event, (InfoEvent, RawEvent)):
        return event.type
    if isinstance(event, Mapping):
        value = event.get("type")
        return value if isinstance(value, str) else None
    return None
