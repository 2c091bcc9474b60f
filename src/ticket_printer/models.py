"""
Data model for the thermal ticket printer client.
"""

import time
import uuid
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional

from .exceptions import ConfigurationError, ErrorKind, TicketPrinterError


DEFAULT_NETWORK_PORT = 9100

REQUIRED_TICKET_FIELDS = (
    "booking_reference", "pnr", "passenger_name",
    "flight_number", "departure_code", "arrival_code",
)


class TransportKind(str, Enum):
    """How the printer is reached."""
    NETWORK = "network"
    RADIO = "radio"
    USB = "usb"


class PrinterStatus(str, Enum):
    """Connection status published by the connection manager."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    PRINTING = "printing"
    ERROR = "error"
    PAPER_OUT = "paper_out"
    OFFLINE = "offline"


class PaperWidth(Enum):
    """Paper roll classes with their character columns and dot widths."""
    NARROW = (58, 32, 384)
    WIDE = (80, 48, 576)

    def __init__(self, width_mm: int, columns: int, dots: int):
        self.width_mm = width_mm
        self.columns = columns
        self.dots = dots


class Layout(str, Enum):
    """Named print layouts."""
    FULL_TICKET = "full_ticket"
    COMPACT_TICKET = "compact_ticket"
    SIMPLE_RECEIPT = "simple_receipt"
    TEST_PAGE = "test_page"


@dataclass(frozen=True)
class PrinterConfig:
    """Printer connection and print settings. Replaced wholesale, never mutated."""

    transport_kind: TransportKind = TransportKind.NETWORK
    network_address: str = ""
    network_port: int = DEFAULT_NETWORK_PORT
    radio_device_name: str = ""
    radio_device_address: str = ""
    paper_width: PaperWidth = PaperWidth.WIDE
    printer_model: str = "GA-E200I"
    command_protocol: str = "ESCIP05"
    print_density: int = 15
    print_speed: int = 4
    auto_reconnect: bool = True

    def validate(self):
        """Raise ConfigurationError when the selected transport cannot be opened."""
        if self.transport_kind == TransportKind.NETWORK:
            if not self.network_address:
                raise ConfigurationError("Printer network address is not set")
            if not (1 <= self.network_port <= 65535):
                raise ConfigurationError(
                    "Printer network port must be between 1 and 65535",
                    {"port": self.network_port},
                )
        elif self.transport_kind == TransportKind.RADIO:
            if not (self.radio_device_address or self.radio_device_name):
                raise ConfigurationError("No radio printer selected")

    @property
    def target(self) -> str:
        """Human readable transport target for logs and messages."""
        if self.transport_kind == TransportKind.NETWORK:
            return f"{self.network_address}:{self.network_port}"
        if self.transport_kind == TransportKind.RADIO:
            return self.radio_device_address or self.radio_device_name
        return self.transport_kind.value


@dataclass(frozen=True)
class TicketRecord:
    """Read-only travel ticket fields consumed by the formatter."""

    booking_reference: str
    pnr: str
    passenger_name: str
    flight_number: str
    departure_code: str
    arrival_code: str
    departure_time: str = ""
    arrival_time: str = ""
    duration: str = ""
    travel_date: str = ""
    booking_date: str = ""
    seat_number: str = ""
    class_name: str = "Economy"
    terminal: str = "T1"
    gate: str = "A1"
    boarding_time: str = ""
    passenger_phone: str = ""
    baggage_allowance: str = "15 KG"
    cabin_baggage: str = "7 KG"
    total_amount: str = "0"
    currency: str = "INR"
    payment_status: str = "PAID"
    scan_code: str = ""
    qr_data: str = ""
    ticket_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def barcode_payload(self) -> str:
        """Payload printed as a 1D barcode."""
        return self.scan_code or self.booking_reference

    @property
    def qr_payload(self) -> str:
        """Payload printed as a QR code."""
        if self.qr_data:
            return self.qr_data
        return (
            f"TICKET:{self.ticket_id}|BOOKING:{self.booking_reference}"
            f"|PASSENGER:{self.passenger_name}|FLIGHT:{self.flight_number}"
            f"|SEAT:{self.seat_number}"
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TicketRecord":
        """Build a ticket from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: str(v) for k, v in data.items() if k in known and v is not None}
        missing = [name for name in REQUIRED_TICKET_FIELDS if name not in values]
        if missing:
            raise ValueError(f"Ticket is missing required fields: {', '.join(missing)}")
        return cls(**values)

    @classmethod
    def sample(cls) -> "TicketRecord":
        """Demo ticket for test prints."""
        stamp = str(int(time.time() * 1000))
        return cls(
            booking_reference=f"IND{stamp[-6:]}",
            pnr=f"PNR{stamp[-8:]}",
            passenger_name="JOHN DOE",
            passenger_phone="+91 9876543210",
            flight_number="6E-2024",
            departure_code="DEL",
            arrival_code="BOM",
            departure_time="06:00",
            arrival_time="08:10",
            duration="2h 10m",
            travel_date="15 Nov 2025",
            booking_date="14 Nov 2025",
            seat_number="C12",
            terminal="T2",
            gate="B7",
            boarding_time="05:20",
            total_amount="5499",
        )


@dataclass(frozen=True)
class PrintJob:
    """A queued print request."""

    job_id: str
    ticket: TicketRecord
    copies: int = 1
    layout: Layout = Layout.COMPACT_TICKET
    submitted_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class PrintResult:
    """Tagged outcome of a printer operation: success value or error kind + message."""

    ok: bool
    value: Any = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def success(cls, value: Any = None) -> "PrintResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "PrintResult":
        return cls(ok=False, error_kind=kind, message=message)

    @classmethod
    def from_error(cls, error: TicketPrinterError, prefix: str = "") -> "PrintResult":
        message = f"{prefix}: {error.message}" if prefix else error.message
        return cls.failure(error.kind, message)

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class JobOutcome:
    """Record of a job once it has left the queue."""

    job: PrintJob
    copies_printed: int
    result: PrintResult

    @property
    def partial(self) -> bool:
        """Failed before every requested copy was printed."""
        return not self.result.ok and self.copies_printed < self.job.copies
