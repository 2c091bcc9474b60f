"""
Ticket layouts for ESCIP05 thermal printers.

Each layout is a fixed sequence of encoder calls against a TicketRecord and
returns one complete byte stream ending in feed-and-cut. Dividers and wrapping
always follow the configured paper width.
"""

import re
from typing import Callable, Dict, List, Optional

from PIL import Image

from . import commands as cmd
from .commands import BarcodeSymbology
from .models import Layout, PaperWidth, TicketRecord
from .qr_generator import QRGenerator
from .utils.bitmap import fit_to_width, image_to_pixels
from .utils.formatting import format_key_value, two_columns, wrap_text
from .utils.logger import logger


# Order matters: first match wins. The EAN-8 rule can never fire because the
# UPC-E rule already takes every 8 digit payload.
SYMBOLOGY_RULES = [
    (BarcodeSymbology.UPC_A, lambda data: re.fullmatch(r"[0-9]{12}", data)),
    (BarcodeSymbology.UPC_E, lambda data: re.fullmatch(r"[0-9]{8}", data)),
    (BarcodeSymbology.EAN13, lambda data: re.fullmatch(r"[0-9]{13}", data)),
    (BarcodeSymbology.EAN8, lambda data: re.fullmatch(r"[0-9]{8}", data) and data.startswith("0")),
    (BarcodeSymbology.CODE39, lambda data: re.fullmatch(r"[A-Z0-9 \-.$/%+]+", data)),
    (BarcodeSymbology.ITF, lambda data: re.fullmatch(r"[0-9]+", data) and len(data) % 2 == 0),
    (BarcodeSymbology.CODABAR, lambda data: re.fullmatch(r"([A-D])[0-9\-$:/.+]+\1", data)),
    (BarcodeSymbology.CODE93, lambda data: re.fullmatch(r"[A-Z0-9]+", data)),
]


def detect_symbology(data: str) -> BarcodeSymbology:
    """Pick the barcode symbology for a payload, CODE128 when nothing else fits."""
    for symbology, rule in SYMBOLOGY_RULES:
        if rule(data):
            return symbology
    return BarcodeSymbology.CODE128


NOTICES = [
    "Report at gate 45 mins before departure",
    "Carry valid photo ID proof",
    "Check-in closes 60 mins prior to departure",
]


class TicketFormatter:
    """
    Builds printable byte streams for tickets and test pages.

    Args:
        paper_width: Configured paper class, drives dividers and wrapping
        density: Print density sent at the start of ticket layouts
        qr_module_size: Module size for native QR codes
        qr_error_correction: L, M, Q or H
        raster_qr: Print QR codes as raster images instead of GS ( k
        logo: Optional image printed at the top of the full ticket
        airline_name: Brand printed in headers and footers
        printer_model: Model name shown on the test page
        command_protocol: Protocol name shown on the test page
    """

    def __init__(self, paper_width: PaperWidth = PaperWidth.WIDE, density: int = 15,
                 qr_module_size: int = 6, qr_error_correction: str = "M",
                 raster_qr: bool = False, logo: Optional[Image.Image] = None,
                 airline_name: str = "IndoGo", printer_model: str = "GA-E200I",
                 command_protocol: str = "ESCIP05", qr_generator: Optional[QRGenerator] = None):
        self.paper_width = paper_width
        self.density = density
        self.qr_module_size = qr_module_size
        self.qr_error_correction = qr_error_correction
        self.raster_qr = raster_qr
        self.logo = logo
        self.airline_name = airline_name
        self.printer_model = printer_model
        self.command_protocol = command_protocol
        self.qr_generator = qr_generator

        self._layouts: Dict[Layout, Callable[..., bytes]] = {
            Layout.FULL_TICKET: self.format_full_ticket,
            Layout.COMPACT_TICKET: self.format_compact_ticket,
            Layout.SIMPLE_RECEIPT: self.format_simple_receipt,
        }

    @property
    def columns(self) -> int:
        return self.paper_width.columns

    def render(self, layout: Layout, ticket: Optional[TicketRecord] = None) -> bytes:
        """Render a named layout. The test page ignores the ticket."""
        if layout == Layout.TEST_PAGE:
            return self.format_test_page()
        if ticket is None:
            raise ValueError(f"Layout {layout.value} needs a ticket")
        data = self._layouts[layout](ticket)
        logger.debug("🧾 Layout rendered", layout=layout.value, bytes=len(data))
        return data

    # Layouts

    def format_compact_ticket(self, ticket: TicketRecord) -> bytes:
        """Boarding pass with only the essential fields and a large barcode."""
        return cmd.join([
            cmd.init(),
            cmd.density(self.density),
            self._compact_header(),
            self._essential_info(ticket),
            self._barcode_block(ticket, height=120, prominent=True),
            self._minimal_footer(),
            cmd.feed_and_cut(),
        ])

    def format_full_ticket(self, ticket: TicketRecord) -> bytes:
        """Boarding pass with every detail block and a QR code."""
        return cmd.join([
            cmd.init(),
            cmd.density(self.density),
            self._header(),
            self._flight_info(ticket),
            self._passenger_info(ticket),
            self._boarding_info(ticket),
            self._baggage_info(ticket),
            self._payment_info(ticket),
            self._qr_block(ticket),
            self._notices_footer(),
            cmd.feed_and_cut(),
        ])

    def format_simple_receipt(self, ticket: TicketRecord) -> bytes:
        """Short receipt: route, flight, passenger, seat, gate and barcode."""
        brand = self.airline_name.upper()
        parts = [
            cmd.init(),
            cmd.align_center(),
            cmd.blank_lines(1),
            cmd.line(brand),
            cmd.line("=" * min(self.columns, len(brand) + 8)),
            cmd.blank_lines(1),
            cmd.bold(True),
            cmd.size_double(),
            cmd.line(brand),
            cmd.size_normal(),
            cmd.line("BOARDING PASS"),
            cmd.bold(False),
            cmd.blank_lines(1),
            cmd.align_left(),
            cmd.line(f"{ticket.departure_code} -> {ticket.arrival_code}"),
            cmd.line(f"Flight: {ticket.flight_number}"),
            cmd.line(f"Passenger: {ticket.passenger_name}"),
            cmd.line(f"Seat: {ticket.seat_number}"),
            cmd.line(f"Gate: {ticket.gate}"),
            cmd.blank_lines(1),
            cmd.align_center(),
            cmd.barcode(ticket.barcode_payload, detect_symbology(ticket.barcode_payload), 80),
            cmd.blank_lines(1),
            cmd.line(ticket.barcode_payload),
            cmd.align_left(),
            cmd.feed_and_cut(),
        ]
        return cmd.join(parts)

    def format_test_page(self) -> bytes:
        """Connectivity check page listing printer settings and symbologies."""
        parts = [
            cmd.init(),
            cmd.align_center(),
            self._banner(),
            cmd.bold(True),
            cmd.size_double(),
            cmd.line("TEST PRINT"),
            cmd.size_normal(),
            cmd.bold(False),
            cmd.blank_lines(1),
            cmd.align_left(),
            cmd.line(f"Printer: {self.printer_model}"),
            cmd.line(f"Protocol: {self.command_protocol}"),
            cmd.line(f"Paper Width: {self.paper_width.width_mm}mm ({self.columns} cols)"),
            cmd.line("Status: OK"),
            cmd.divider(self.columns),
            cmd.bold(True),
            cmd.line("Supported Barcode Types:"),
            cmd.bold(False),
            cmd.line("- UPC-A / UPC-E"),
            cmd.line("- EAN8 / EAN13 (JAN)"),
            cmd.line("- CODE39 / CODE93"),
            cmd.line("- CODE128 / ITF"),
            cmd.line("- CODABAR"),
            cmd.blank_lines(1),
            cmd.centered_line("Printer is ready!"),
            cmd.blank_lines(2),
            cmd.feed_and_cut(),
        ]
        return cmd.join(parts)

    # Sections

    def _banner(self) -> bytes:
        brand = f"* {self.airline_name.upper()} AIRLINES *"
        return cmd.join([
            cmd.blank_lines(1),
            cmd.line("__|__"),
            cmd.line("--@--@--(_)--@--@--"),
            cmd.blank_lines(1),
            cmd.line(brand),
            cmd.blank_lines(1),
            cmd.line("=" * min(self.columns, len(brand))),
            cmd.blank_lines(1),
        ])

    def _logo(self) -> bytes:
        if self.logo is None:
            return b""
        pixels, width, height = image_to_pixels(fit_to_width(self.logo, self.paper_width.dots))
        return cmd.align_center() + cmd.raster_image(pixels, width, height) + cmd.align_left()

    def _header(self) -> bytes:
        return cmd.join([
            self._logo(),
            cmd.align_center(),
            self._banner(),
            cmd.bold(True),
            cmd.size_double(),
            cmd.line(self.airline_name.upper()),
            cmd.size_normal(),
            cmd.bold(False),
            cmd.blank_lines(1),
            cmd.bold(True),
            cmd.line("BOARDING PASS"),
            cmd.bold(False),
            cmd.align_left(),
            cmd.blank_lines(1),
            cmd.double_divider(self.columns),
        ])

    def _compact_header(self) -> bytes:
        return cmd.join([
            cmd.blank_lines(1),
            cmd.align_center(),
            cmd.line("__|__"),
            cmd.line("--@-(_)-@--"),
            cmd.blank_lines(1),
            cmd.bold(True),
            cmd.size_double(),
            cmd.line(self.airline_name.upper()),
            cmd.size_normal(),
            cmd.blank_lines(1),
            cmd.line("--- BOARDING PASS ---"),
            cmd.bold(False),
            cmd.align_left(),
            cmd.blank_lines(1),
            cmd.divider(self.columns),
        ])

    def _section_title(self, title: str) -> bytes:
        return cmd.blank_lines(1) + cmd.bold(True) + cmd.line(title) + cmd.bold(False)

    def _key_value(self, key: str, value: str) -> bytes:
        return cmd.join(cmd.line(text) for text in format_key_value(key, value, self.columns))

    def _flight_info(self, ticket: TicketRecord) -> bytes:
        return cmd.join([
            cmd.blank_lines(1),
            cmd.align_center(),
            cmd.bold(True),
            cmd.size_triple(),
            cmd.line(ticket.departure_code),
            cmd.size_normal(),
            cmd.line("TO"),
            cmd.size_triple(),
            cmd.line(ticket.arrival_code),
            cmd.size_normal(),
            cmd.bold(False),
            cmd.align_left(),
            cmd.blank_lines(1),
            self._key_value("Flight", ticket.flight_number),
            self._key_value("Date", ticket.travel_date),
            self._key_value("Departure", ticket.departure_time),
            self._key_value("Arrival", ticket.arrival_time),
            self._key_value("Duration", ticket.duration),
            cmd.divider(self.columns),
        ])

    def _passenger_info(self, ticket: TicketRecord) -> bytes:
        parts = [
            self._section_title("PASSENGER DETAILS"),
            self._key_value("Name", ticket.passenger_name),
            self._key_value("PNR", ticket.pnr),
            self._key_value("Booking Ref", ticket.booking_reference),
        ]
        if ticket.passenger_phone:
            parts.append(self._key_value("Phone", ticket.passenger_phone))
        parts.append(cmd.divider(self.columns))
        return cmd.join(parts)

    def _boarding_info(self, ticket: TicketRecord) -> bytes:
        return cmd.join([
            self._section_title("BOARDING INFORMATION"),
            self._key_value("Seat", ticket.seat_number),
            self._key_value("Class", ticket.class_name),
            self._key_value("Terminal", ticket.terminal),
            self._key_value("Gate", ticket.gate),
            self._key_value("Boarding Time", ticket.boarding_time),
            cmd.divider(self.columns),
        ])

    def _baggage_info(self, ticket: TicketRecord) -> bytes:
        return cmd.join([
            self._section_title("BAGGAGE ALLOWANCE"),
            self._key_value("Check-in", ticket.baggage_allowance),
            self._key_value("Cabin", ticket.cabin_baggage),
            cmd.divider(self.columns),
        ])

    def _payment_info(self, ticket: TicketRecord) -> bytes:
        return cmd.join([
            self._section_title("PAYMENT DETAILS"),
            self._key_value("Total Amount", f"{ticket.currency} {ticket.total_amount}"),
            self._key_value("Status", ticket.payment_status),
            self._key_value("Booked On", ticket.booking_date),
            cmd.divider(self.columns),
        ])

    def _essential_info(self, ticket: TicketRecord) -> bytes:
        width = self.columns
        return cmd.join([
            cmd.blank_lines(1),
            cmd.align_center(),
            cmd.bold(True),
            cmd.size_triple(),
            cmd.line(f"{ticket.departure_code} → {ticket.arrival_code}"),
            cmd.size_normal(),
            cmd.bold(False),
            cmd.align_left(),
            cmd.blank_lines(1),
            cmd.bold(True),
            cmd.size_wide(),
            cmd.line("PASSENGER"),
            cmd.size_normal(),
            cmd.bold(False),
            cmd.line(ticket.passenger_name.upper()),
            cmd.blank_lines(1),
            cmd.line(two_columns(f"Flight: {ticket.flight_number}", f"Date: {ticket.travel_date}", width)),
            cmd.line(two_columns(f"Depart: {ticket.departure_time}", f"Class: {ticket.class_name}", width)),
            cmd.blank_lines(1),
            cmd.bold(True),
            cmd.line("BOARDING INFO"),
            cmd.bold(False),
            cmd.line(two_columns(f"Seat: {ticket.seat_number}", f"Gate: {ticket.gate}", width)),
            cmd.line(f"Terminal: {ticket.terminal}"),
            cmd.line(f"Board: {ticket.boarding_time}"),
            cmd.blank_lines(1),
            cmd.line(f"PNR: {ticket.pnr}"),
            cmd.line(f"Ref: {ticket.booking_reference}"),
            cmd.blank_lines(1),
            cmd.divider(width),
        ])

    def _barcode_block(self, ticket: TicketRecord, height: int, prominent: bool) -> bytes:
        payload = ticket.barcode_payload
        symbology = detect_symbology(payload)
        logger.debug("🏷️ Barcode symbology detected", payload=payload, symbology=symbology.name)

        caption = [cmd.line(payload)]
        if prominent:
            caption = [cmd.bold(True), cmd.size_wide(), cmd.line(payload),
                       cmd.size_normal(), cmd.bold(False)]

        return cmd.join([
            cmd.blank_lines(1),
            cmd.align_center(),
            cmd.barcode(payload, symbology, height),
            cmd.blank_lines(1),
            *caption,
            cmd.align_left(),
            cmd.blank_lines(1),
            cmd.divider(self.columns),
        ])

    def _qr_block(self, ticket: TicketRecord) -> bytes:
        if self.raster_qr:
            generator = self.qr_generator or QRGenerator(error_correction=self.qr_error_correction)
            img = generator.render_image(ticket.qr_payload, self.paper_width.dots)
            pixels, width, height = image_to_pixels(img)
            symbol = cmd.raster_image(pixels, width, height)
        else:
            symbol = cmd.qr_code(ticket.qr_payload, self.qr_module_size, self.qr_error_correction)

        return cmd.join([
            cmd.blank_lines(1),
            cmd.align_center(),
            symbol,
            cmd.blank_lines(1),
            cmd.bold(True),
            cmd.line("SCAN QR CODE"),
            cmd.bold(False),
            cmd.line(ticket.booking_reference),
            cmd.align_left(),
            cmd.divider(self.columns),
        ])

    def _notices_footer(self) -> bytes:
        notice_lines: List[bytes] = []
        for notice in NOTICES:
            notice_lines.extend(cmd.line(text) for text in wrap_text(notice, self.columns, "* "))

        return cmd.join([
            cmd.blank_lines(1),
            cmd.align_center(),
            cmd.size_normal(),
            cmd.line("IMPORTANT NOTICES"),
            cmd.blank_lines(1),
            cmd.align_left(),
            *notice_lines,
            cmd.blank_lines(1),
            cmd.align_center(),
            cmd.bold(True),
            cmd.line(f"Thank you for choosing {self.airline_name}!"),
            cmd.bold(False),
            cmd.blank_lines(1),
            cmd.line("Have a pleasant journey!"),
            cmd.align_left(),
            cmd.blank_lines(2),
        ])

    def _minimal_footer(self) -> bytes:
        return cmd.join([
            cmd.blank_lines(1),
            cmd.align_center(),
            cmd.line(f"{self.airline_name} Airlines"),
            cmd.line("Have a pleasant journey!"),
            cmd.align_left(),
            cmd.blank_lines(1),
        ])
