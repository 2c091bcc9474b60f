"""
Unit tests for persisted printer preferences.
"""

from ticket_printer.models import PaperWidth, PrinterConfig, TransportKind
from ticket_printer.preferences import (
    DEFAULT_DENSITY,
    DEFAULT_NETWORK_ADDRESS,
    KEY_DENSITY,
    KEY_PAPER_WIDTH,
    KEY_TRANSPORT,
    PrinterPreferences,
)


class TestPrinterPreferences:

    def test_defaults_without_file(self, preferences):
        config = preferences.get_printer_config()

        assert config.transport_kind == TransportKind.NETWORK
        assert config.network_address == DEFAULT_NETWORK_ADDRESS
        assert config.network_port == 9100
        assert config.paper_width == PaperWidth.WIDE
        assert config.print_density == DEFAULT_DENSITY
        assert config.auto_reconnect is True

    def test_round_trip(self, preferences):
        config = PrinterConfig(
            transport_kind=TransportKind.RADIO,
            radio_device_name="GA-E200I Printer",
            radio_device_address="AA:BB:CC:DD:EE:FF",
            paper_width=PaperWidth.NARROW,
            printer_model="GA-E200I",
            command_protocol="ESCIP05",
            print_density=9,
            print_speed=2,
            auto_reconnect=False,
        )

        preferences.save_printer_config(config)

        assert PrinterPreferences(preferences.path).get_printer_config() == config

    def test_corrupt_values_fall_back(self, preferences):
        preferences.path.write_text(
            f"{KEY_TRANSPORT}=carrier-pigeon\n"
            f"{KEY_PAPER_WIDTH}=A4\n"
            f"{KEY_DENSITY}=dark\n"
        )

        config = preferences.get_printer_config()

        assert config.transport_kind == TransportKind.NETWORK
        assert config.paper_width == PaperWidth.WIDE
        assert config.print_density == DEFAULT_DENSITY

    def test_helpers_update_single_fields(self, preferences):
        preferences.save_network_settings("10.1.1.5", 9101)
        preferences.save_paper_width(PaperWidth.NARROW)
        preferences.save_print_density(42)

        config = preferences.get_printer_config()
        assert config.network_address == "10.1.1.5"
        assert config.network_port == 9101
        assert preferences.get_paper_width() == PaperWidth.NARROW
        assert preferences.get_print_density() == 15

    def test_radio_settings_switch_transport(self, preferences):
        preferences.save_radio_settings("Ticket Printer", "11:22:33:44:55:66")

        config = preferences.get_printer_config()
        assert config.transport_kind == TransportKind.RADIO
        assert config.radio_device_name == "Ticket Printer"
        assert preferences.is_configured()

    def test_radio_without_device_is_not_configured(self, preferences):
        preferences.save_radio_settings("", "")
        assert not preferences.is_configured()

    def test_clear(self, preferences):
        preferences.save_network_settings("10.1.1.5")
        preferences.path.write_text(preferences.path.read_text() + "OTHER_SETTING=keep\n")

        preferences.clear()

        assert preferences.get_printer_config().network_address == DEFAULT_NETWORK_ADDRESS
        assert "OTHER_SETTING" in preferences.path.read_text()
