"""
Unit tests for ticket layouts and barcode symbology detection.
"""

from dataclasses import replace

import pytest
from PIL import Image

from ticket_printer import commands as cmd
from ticket_printer.commands import BarcodeSymbology
from ticket_printer.exceptions import ProtocolEncodingError
from ticket_printer.formatter import TicketFormatter, detect_symbology
from ticket_printer.models import Layout, PaperWidth
from ticket_printer.utils.formatting import KEY_COLUMN_WIDTH, format_key_value, two_columns, wrap_text


class TestSymbologyDetection:

    @pytest.mark.parametrize("payload", ["123456789012", "000000000000", "987654321098"])
    def test_twelve_digits_is_upc_a(self, payload):
        assert detect_symbology(payload) == BarcodeSymbology.UPC_A

    @pytest.mark.parametrize("payload", ["1234567890123", "4006381333931"])
    def test_thirteen_digits_is_ean13(self, payload):
        assert detect_symbology(payload) == BarcodeSymbology.EAN13

    def test_eight_digits_never_reach_ean8(self):
        assert detect_symbology("01234567") == BarcodeSymbology.UPC_E
        assert detect_symbology("12345678") == BarcodeSymbology.UPC_E

    def test_code39(self):
        assert detect_symbology("ABC-123") == BarcodeSymbology.CODE39
        assert detect_symbology("IND123456") == BarcodeSymbology.CODE39

    def test_other_digit_runs_are_claimed_by_code39(self):
        assert detect_symbology("1234") == BarcodeSymbology.CODE39
        assert detect_symbology("12345") == BarcodeSymbology.CODE39

    def test_codabar_needs_matching_start_and_stop(self):
        assert detect_symbology("A12:34A") == BarcodeSymbology.CODABAR
        assert detect_symbology("A12:34B") == BarcodeSymbology.CODE128

    @pytest.mark.parametrize("payload", ["ind123456", "Booking#1", "ABC_123", "pnr:xy"])
    def test_lowercase_or_other_punctuation_is_code128(self, payload):
        assert detect_symbology(payload) == BarcodeSymbology.CODE128


class TestTextHelpers:

    def test_key_value_alignment(self):
        assert format_key_value("Seat", "C12") == ["Seat" + " " * 16 + ": C12"]

    def test_long_key_is_truncated(self):
        line = format_key_value("A very long label for a field", "X")[0]
        assert line.index(":") == KEY_COLUMN_WIDTH

    def test_long_value_wraps_under_value_column(self):
        lines = format_key_value("Name", "X" * 40, 48)
        assert len(lines) == 2
        assert all(len(text) <= 48 for text in lines)
        assert lines[1].startswith(" " * (KEY_COLUMN_WIDTH + 2))

    def test_two_columns_fill_the_line(self):
        assert two_columns("Seat: C12", "Gate: B7", 32) == "Seat: C12" + " " * 15 + "Gate: B7"

    def test_wrap_text_bullet(self):
        lines = wrap_text("Carry valid photo ID proof at all times", 20, "* ")
        assert lines[0].startswith("* ")
        assert all(text.startswith("  ") for text in lines[1:])


class TestLayouts:

    def test_full_ticket_framing(self, ticket):
        data = TicketFormatter().format_full_ticket(ticket)
        assert data.startswith(cmd.init() + cmd.density(15))
        assert data.endswith(cmd.feed_and_cut())

    def test_full_ticket_contains_native_qr(self, ticket):
        data = TicketFormatter().format_full_ticket(ticket)
        assert cmd.qr_code(ticket.qr_payload) in data
        assert b"PASSENGER DETAILS" in data

    @pytest.mark.parametrize("paper_width", [PaperWidth.NARROW, PaperWidth.WIDE])
    def test_dividers_follow_paper_width(self, ticket, paper_width):
        formatter = TicketFormatter(paper_width=paper_width)
        for layout in (Layout.FULL_TICKET, Layout.COMPACT_TICKET):
            data = formatter.render(layout, ticket)
            assert cmd.divider(paper_width.columns) in data
            assert b"-" * (paper_width.columns + 1) not in data

    def test_narrow_key_values_fit_paper(self, ticket):
        data = TicketFormatter(paper_width=PaperWidth.NARROW).format_full_ticket(ticket)
        assert b"Flight              : 6E-2024\n" in data

    def test_simple_receipt_uses_detected_symbology(self, ticket):
        data = TicketFormatter().render(Layout.SIMPLE_RECEIPT, ticket)
        assert cmd.barcode("IND123456", BarcodeSymbology.CODE39, 80) in data
        assert b"DEL -> BOM\n" in data

    def test_compact_ticket_prefers_scan_code(self, ticket):
        data = TicketFormatter().format_compact_ticket(replace(ticket, scan_code="123456789012"))
        assert cmd.barcode("123456789012", BarcodeSymbology.UPC_A, 120) in data

    def test_test_page_lists_settings(self):
        formatter = TicketFormatter(paper_width=PaperWidth.NARROW, printer_model="GA-E200I")
        data = formatter.render(Layout.TEST_PAGE)
        assert b"Printer: GA-E200I\n" in data
        assert b"Paper Width: 58mm (32 cols)\n" in data
        assert data.endswith(cmd.feed_and_cut())

    def test_ticket_layout_requires_ticket(self):
        with pytest.raises(ValueError):
            TicketFormatter().render(Layout.FULL_TICKET)

    def test_raster_qr(self, ticket):
        data = TicketFormatter(paper_width=PaperWidth.NARROW, raster_qr=True).format_full_ticket(ticket)
        assert b"\x1b*\x21" in data
        assert b"\x1d(k" not in data

    def test_raster_qr_overflow_is_encoding_error(self, ticket):
        formatter = TicketFormatter(raster_qr=True)

        with pytest.raises(ProtocolEncodingError) as exc_info:
            formatter.format_full_ticket(replace(ticket, qr_data="x" * 5000))

        assert exc_info.value.details["length"] == 5000

    def test_logo_is_printed_as_raster(self, ticket):
        logo = Image.new("RGB", (16, 8), "black")
        data = TicketFormatter(logo=logo).format_full_ticket(ticket)
        assert b"\x1b*\x21\x10\x00" in data
