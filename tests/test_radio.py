"""
Unit tests for the Bluetooth SPP helper.
"""

import subprocess
from unittest.mock import patch

import pytest

from ticket_printer.exceptions import TransportError
from ticket_printer.radio import RadioAdapter, RadioDevice


def completed(stdout, returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr="")


PAIRED_OUTPUT = """Device AA:BB:CC:DD:EE:FF GA-E200I
Device 11:22:33:44:55:66 Office Headset
garbage line
"""

SDP_OUTPUT = """Searching for SP on AA:BB:CC:DD:EE:FF ...
Service Name: Serial Port
Protocol Descriptor List:
  "RFCOMM" (0x0003)
    Channel: 3
"""


class TestRadioAdapter:

    @patch("ticket_printer.radio.subprocess.run")
    def test_paired_devices(self, mock_run):
        mock_run.return_value = completed(PAIRED_OUTPUT)

        devices = RadioAdapter().paired_devices()

        assert devices == [
            RadioDevice("AA:BB:CC:DD:EE:FF", "GA-E200I"),
            RadioDevice("11:22:33:44:55:66", "Office Headset"),
        ]
        assert mock_run.call_args.args[0] == ["bluetoothctl", "devices", "Paired"]

    @patch("ticket_printer.radio.subprocess.run")
    def test_find_device_by_exact_name(self, mock_run):
        mock_run.return_value = completed(PAIRED_OUTPUT)
        adapter = RadioAdapter()

        assert adapter.find_device("GA-E200I").address == "AA:BB:CC:DD:EE:FF"
        assert adapter.find_device("GA-E200") is None

    @patch("ticket_printer.radio.subprocess.run")
    def test_missing_tool_gives_no_devices(self, mock_run):
        mock_run.side_effect = FileNotFoundError("bluetoothctl")
        assert RadioAdapter().paired_devices() == []

    @patch("ticket_printer.radio.subprocess.run")
    def test_resolve_channel_from_sdp(self, mock_run):
        mock_run.return_value = completed(SDP_OUTPUT)

        assert RadioAdapter().resolve_channel("AA:BB:CC:DD:EE:FF") == 3
        assert mock_run.call_args.args[0] == ["sdptool", "search", "--bdaddr", "AA:BB:CC:DD:EE:FF", "0x1101"]

    @patch("ticket_printer.radio.subprocess.run")
    def test_resolve_channel_default(self, mock_run):
        mock_run.return_value = completed("", returncode=1)
        assert RadioAdapter(default_channel=2).resolve_channel("AA:BB:CC:DD:EE:FF") == 2

    @patch("ticket_printer.radio.subprocess.run")
    def test_cancel_discovery_stops_scan(self, mock_run):
        mock_run.return_value = completed("")

        RadioAdapter().cancel_discovery()

        assert mock_run.call_args.args[0] == ["bluetoothctl", "scan", "off"]


class TestRadioOpen:

    @patch("ticket_printer.radio.socket")
    def test_open_connects_rfcomm_channel(self, mock_socket):
        sock = mock_socket.socket.return_value

        result = RadioAdapter().open("AA:BB:CC:DD:EE:FF", 3, timeout=4.0)

        assert result is sock
        mock_socket.socket.assert_called_once_with(
            mock_socket.AF_BLUETOOTH, mock_socket.SOCK_STREAM, mock_socket.BTPROTO_RFCOMM)
        sock.settimeout.assert_any_call(4.0)
        sock.connect.assert_called_once_with(("AA:BB:CC:DD:EE:FF", 3))
        sock.close.assert_not_called()

    @patch("ticket_printer.radio.socket")
    def test_failed_connect_closes_socket(self, mock_socket):
        sock = mock_socket.socket.return_value
        sock.connect.side_effect = OSError("host is down")

        with pytest.raises(TransportError) as exc_info:
            RadioAdapter().open("AA:BB:CC:DD:EE:FF", 3, timeout=4.0)

        sock.close.assert_called_once()
        assert exc_info.value.details["channel"] == 3

    def test_open_without_bluetooth_support(self):
        with patch.object(RadioAdapter, "is_available", return_value=False), \
                patch("ticket_printer.radio.socket") as mock_socket:
            with pytest.raises(TransportError):
                RadioAdapter().open("AA:BB:CC:DD:EE:FF", 1, timeout=1.0)

        mock_socket.socket.assert_not_called()
