"""
Bluetooth serial (SPP) link support for the thermal ticket printer client.

Paired devices and discovery are handled through the BlueZ command line tools
(bluetoothctl, sdptool); the data channel itself is a plain RFCOMM stream
socket.
"""

import re
import socket
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from .exceptions import TransportError
from .utils.logger import logger

# Serial Port Profile service class
SPP_UUID = "00001101-0000-1000-8000-00805F9B34FB"

_DEVICE_LINE = re.compile(r"^Device\s+([0-9A-Fa-f:]{17})\s+(.*)$")
_CHANNEL_LINE = re.compile(r"Channel:\s*(\d+)")


@dataclass(frozen=True)
class RadioDevice:
    address: str
    name: str


class RadioAdapter:
    """Thin wrapper over the host Bluetooth stack."""

    def __init__(self, default_channel: int = 1, command_timeout: float = 10.0):
        self.default_channel = default_channel
        self.command_timeout = command_timeout

    def is_available(self) -> bool:
        """True when the interpreter was built with AF_BLUETOOTH support."""
        return hasattr(socket, "AF_BLUETOOTH") and hasattr(socket, "BTPROTO_RFCOMM")

    def paired_devices(self) -> List[RadioDevice]:
        """
        List bonded devices reported by bluetoothctl.

        Returns an empty list when the tool is missing or fails.
        """
        output = self._run(["bluetoothctl", "devices", "Paired"])
        devices = []
        for line in output.splitlines():
            match = _DEVICE_LINE.match(line.strip())
            if match:
                devices.append(RadioDevice(address=match.group(1).upper(), name=match.group(2).strip()))
        return devices

    def find_device(self, name: str) -> Optional[RadioDevice]:
        """Find a paired device by its exact name."""
        for device in self.paired_devices():
            if device.name == name:
                return device
        return None

    def cancel_discovery(self):
        """Stop any inquiry scan; an active scan slows down connection setup."""
        self._run(["bluetoothctl", "scan", "off"])

    def resolve_channel(self, address: str) -> int:
        """
        Look up the RFCOMM channel of the device's serial port service.

        Falls back to the default channel when SDP gives no answer.
        """
        output = self._run(["sdptool", "search", "--bdaddr", address, "0x" + SPP_UUID[4:8]])
        match = _CHANNEL_LINE.search(output)
        if match:
            return int(match.group(1))
        logger.debug("🔍 SPP channel not advertised, using default",
                     address=address,
                     channel=self.default_channel)
        return self.default_channel

    def open(self, address: str, channel: int, timeout: float) -> socket.socket:
        """
        Open an RFCOMM stream to the device.

        Raises:
            TransportError: Bluetooth sockets unavailable or connect failed
        """
        if not self.is_available():
            raise TransportError("Bluetooth is not available on this host")

        sock = socket.socket(socket.AF_BLUETOOTH, socket.SOCK_STREAM, socket.BTPROTO_RFCOMM)
        try:
            sock.settimeout(timeout)
            sock.connect((address, channel))
            sock.settimeout(None)
        except OSError as e:
            sock.close()
            raise TransportError(
                f"Failed to connect to Bluetooth printer {address}",
                {"channel": channel, "error": str(e)},
            ) from e
        return sock

    def _run(self, args: List[str]) -> str:
        try:
            result = subprocess.run(args, capture_output=True, text=True,
                                    timeout=self.command_timeout)
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"🔍 {args[0]} failed: {str(e)}")
            return ""
        if result.returncode != 0:
            logger.debug(f"🔍 {args[0]} exited with {result.returncode}",
                         stderr=result.stderr.strip())
        return result.stdout
