"""
Unit tests for the data model and bitmap helpers.
"""

import pytest
from PIL import Image

from ticket_printer.exceptions import ConfigurationError, ErrorKind, TransportError
from ticket_printer.models import JobOutcome, Layout, PaperWidth, PrinterConfig, PrintJob, PrintResult, TicketRecord, TransportKind
from ticket_printer.utils.bitmap import fit_to_width, image_to_pixels, pixel_is_ink


class TestPrinterConfig:

    def test_paper_widths(self):
        assert (PaperWidth.NARROW.columns, PaperWidth.NARROW.dots) == (32, 384)
        assert (PaperWidth.WIDE.columns, PaperWidth.WIDE.dots) == (48, 576)

    def test_invalid_port(self):
        with pytest.raises(ConfigurationError):
            PrinterConfig(network_address="10.0.0.1", network_port=70000).validate()

    def test_radio_needs_device(self):
        with pytest.raises(ConfigurationError):
            PrinterConfig(transport_kind=TransportKind.RADIO).validate()

    def test_target(self):
        assert PrinterConfig(network_address="10.0.0.1").target == "10.0.0.1:9100"


class TestTicketRecord:

    def test_barcode_payload_falls_back_to_booking_reference(self, ticket):
        assert ticket.barcode_payload == "IND123456"

    def test_default_qr_payload(self, ticket):
        assert ticket.qr_payload == (
            "TICKET:ticket-1|BOOKING:IND123456|PASSENGER:Jane Traveller|FLIGHT:6E-2024|SEAT:C12"
        )

    def test_from_dict_requires_core_fields(self):
        with pytest.raises(ValueError) as exc_info:
            TicketRecord.from_dict({"pnr": "PNR1"})
        assert "booking_reference" in str(exc_info.value)

    def test_sample_is_printable(self):
        sample = TicketRecord.sample()
        assert sample.booking_reference.startswith("IND")


class TestResults:

    def test_from_error_keeps_kind(self):
        result = PrintResult.from_error(TransportError("socket closed"), "Send failed")
        assert not result
        assert result.error_kind == ErrorKind.TRANSPORT
        assert result.message == "Send failed: socket closed"

    def test_partial_outcome(self, ticket):
        job = PrintJob(job_id="job-1", ticket=ticket, copies=3)
        assert JobOutcome(job, 2, PrintResult.failure(ErrorKind.TRANSPORT, "x")).partial
        assert JobOutcome(job, 0, PrintResult.failure(ErrorKind.TRANSPORT, "x")).partial
        assert not JobOutcome(job, 3, PrintResult.success(3)).partial

    def test_single_copy_failure_is_partial(self, ticket):
        job = PrintJob(job_id="job-1", ticket=ticket)
        assert job.layout == Layout.COMPACT_TICKET
        assert JobOutcome(job, 0, PrintResult.failure(ErrorKind.STATE, "x")).partial


class TestBitmap:

    def test_ink_threshold(self):
        assert pixel_is_ink(0x000000)
        assert pixel_is_ink((100, 100, 100))
        assert not pixel_is_ink(0xFFFFFF)
        assert not pixel_is_ink((200, 200, 200))

    def test_transparent_pixels_stay_blank(self):
        img = Image.new("RGBA", (2, 1), (0, 0, 0, 0))
        pixels, width, height = image_to_pixels(img)
        assert (width, height) == (2, 1)
        assert pixels == [(255, 255, 255), (255, 255, 255)]

    def test_fit_to_width(self):
        img = Image.new("L", (768, 100), 0)
        assert fit_to_width(img, 384).size == (384, 50)
        assert fit_to_width(img, 1000) is img
