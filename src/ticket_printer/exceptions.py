"""
Error types for the thermal ticket printer client.

Exception Hierarchy:
    TicketPrinterError (base)
    ├── ConfigurationError         - missing/invalid address, no device selected
    ├── TransportError             - connect timeout, socket/radio failure, write failure
    ├── ProtocolEncodingError      - payload exceeds a command's length field
    ├── StateError                 - send attempted while not connected
    └── UnsupportedTransportError  - transport kind not implemented

The connection manager and the print service catch these at their boundary
and hand callers a PrintResult carrying the ErrorKind and a short message.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorKind(str, Enum):
    """Tag carried by failed results."""
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    PROTOCOL_ENCODING = "protocol_encoding"
    STATE = "state"
    UNSUPPORTED_TRANSPORT = "unsupported_transport"


class TicketPrinterError(Exception):
    """Base exception for all printer client errors."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(TicketPrinterError):
    """Printer configuration cannot be used to open a transport."""

    kind = ErrorKind.CONFIGURATION


class TransportError(TicketPrinterError):
    """Socket or radio link failed to connect or to accept a write."""

    kind = ErrorKind.TRANSPORT


class ProtocolEncodingError(TicketPrinterError):
    """A payload does not fit the command it was given to."""

    kind = ErrorKind.PROTOCOL_ENCODING


class StateError(TicketPrinterError):
    """Operation not allowed in the current connection state."""

    kind = ErrorKind.STATE


class UnsupportedTransportError(TicketPrinterError):
    """The requested transport kind has no implementation."""

    kind = ErrorKind.UNSUPPORTED_TRANSPORT
