"""
Inspector Relay Exceptions

Custom exception classes for error handling
"""

from typing import Optional


class RelayError(Exception):
    """Base relay exception"""

    def __init__(self, message: str, error_code: str = "RELAY000", details: dict = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary format"""
        return {
            "error_code": self.error_code,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class BindError(RelayError):
    """Listening socket could not be created"""

    def __init__(self, host: str, port: int, reason: Optional[BaseException] = None):
        message = f"Cannot listen on {host}:{port}"
        if reason is not None:
            message = f"{message}: {reason}"
        super().__init__(message, "BIND001", {"host": host, "port": port})
        self.host = host
        self.port = port


class MalformedEventError(RelayError):
    """Inbound data is not valid JSON, or an event cannot be serialized"""

    def __init__(self, message: str, raw: Optional[str] = None):
        details = {}
        if raw is not None:
            # keep log lines bounded
            details["raw"] = raw[:200]
        super().__init__(message, "MSG001", details)
        self.raw = raw


class DeliverySendError(RelayError):
    """A send to one connection failed"""

    def __init__(self, client_id: str, reason: BaseException):
        super().__init__(
            f"Failed to deliver to client {client_id}: {reason}",
            "SEND001",
            {"client_id": client_id},
        )
        self.client_id = client_id
        self.reason = reason


class TransportFault(RelayError):
    """Per-connection transport error"""

    def __init__(self, client_id: str, reason: BaseException):
        super().__init__(
            f"Transport error on client {client_id}: {reason}",
            "CONN001",
            {"client_id": client_id},
        )
        self.client_id = client_id
        self.reason = reason
