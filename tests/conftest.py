"""
Shared fixtures for the thermal ticket printer tests.
"""

import os

# Keep test runs from writing a rotating log file in the working directory
os.environ["LOG_FILE"] = ""

import socket
from unittest.mock import MagicMock

import pytest

from ticket_printer.connection import ConnectionManager
from ticket_printer.models import PaperWidth, PrinterConfig, TicketRecord, TransportKind
from ticket_printer.preferences import PrinterPreferences
from ticket_printer.status import StatusChannel


class FakeConnector:
    """Stands in for socket.create_connection and records every socket it hands out."""

    def __init__(self):
        self.sockets = []
        self.addresses = []
        self.error = None
        self.send_errors = []

    def __call__(self, address, timeout=None):
        self.addresses.append((address, timeout))
        if self.error is not None:
            raise self.error
        sock = MagicMock(spec=socket.socket)
        if self.send_errors:
            sock.sendall.side_effect = self.send_errors.pop(0)
        self.sockets.append(sock)
        return sock


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def status_channel():
    return StatusChannel()


@pytest.fixture
def radio_adapter():
    adapter = MagicMock()
    adapter.is_available.return_value = True
    adapter.resolve_channel.return_value = 1
    return adapter


@pytest.fixture
def connection(status_channel, connector, radio_adapter):
    return ConnectionManager(
        status_channel,
        connect_timeout=2.0,
        settle_delay=0,
        network_connector=connector,
        radio_adapter=radio_adapter,
    )


@pytest.fixture
def network_config():
    return PrinterConfig(
        transport_kind=TransportKind.NETWORK,
        network_address="192.168.11.200",
        network_port=9100,
        paper_width=PaperWidth.WIDE,
    )


@pytest.fixture
def preferences(tmp_path):
    return PrinterPreferences(tmp_path / "printer.env")


@pytest.fixture
def ticket():
    return TicketRecord(
        booking_reference="IND123456",
        pnr="PNR12345678",
        passenger_name="Jane Traveller",
        flight_number="6E-2024",
        departure_code="DEL",
        arrival_code="BOM",
        departure_time="06:00",
        arrival_time="08:10",
        travel_date="15 Nov 2025",
        seat_number="C12",
        gate="B7",
        ticket_id="ticket-1",
    )
