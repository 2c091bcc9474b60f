"""
Persisted printer settings for the thermal ticket printer client.
Stores PrinterConfig as KEY=value pairs in a dotenv-format file.
"""

import dataclasses
from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import dotenv_values, set_key, unset_key

from .models import DEFAULT_NETWORK_PORT, PaperWidth, PrinterConfig, TransportKind
from .utils.logger import logger

# Preference keys
KEY_TRANSPORT = "PRINTER_TRANSPORT"
KEY_NETWORK_ADDRESS = "PRINTER_NETWORK_ADDRESS"
KEY_NETWORK_PORT = "PRINTER_NETWORK_PORT"
KEY_RADIO_NAME = "PRINTER_RADIO_NAME"
KEY_RADIO_ADDRESS = "PRINTER_RADIO_ADDRESS"
KEY_PAPER_WIDTH = "PRINTER_PAPER_WIDTH"
KEY_MODEL = "PRINTER_MODEL"
KEY_PROTOCOL = "PRINTER_PROTOCOL"
KEY_AUTO_RECONNECT = "PRINTER_AUTO_RECONNECT"
KEY_DENSITY = "PRINTER_DENSITY"
KEY_SPEED = "PRINTER_SPEED"

ALL_KEYS = (
    KEY_TRANSPORT, KEY_NETWORK_ADDRESS, KEY_NETWORK_PORT, KEY_RADIO_NAME,
    KEY_RADIO_ADDRESS, KEY_PAPER_WIDTH, KEY_MODEL, KEY_PROTOCOL,
    KEY_AUTO_RECONNECT, KEY_DENSITY, KEY_SPEED,
)

# Default values
DEFAULT_NETWORK_ADDRESS = "192.168.11.200"
DEFAULT_MODEL = "GA-E200I"
DEFAULT_PROTOCOL = "ESCIP05"
DEFAULT_DENSITY = 15
DEFAULT_SPEED = 4


class PrinterPreferences:
    """Key/value store for the printer configuration."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _values(self) -> Dict[str, Optional[str]]:
        if not self.path.is_file():
            return {}
        return dotenv_values(self.path)

    def _write(self, values: Dict[str, str]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        for key, value in values.items():
            set_key(str(self.path), key, value)

    def save_printer_config(self, config: PrinterConfig):
        """Persist every field of config, replacing what was stored."""
        self._write({
            KEY_TRANSPORT: config.transport_kind.value,
            KEY_NETWORK_ADDRESS: config.network_address,
            KEY_NETWORK_PORT: str(config.network_port),
            KEY_RADIO_NAME: config.radio_device_name,
            KEY_RADIO_ADDRESS: config.radio_device_address,
            KEY_PAPER_WIDTH: config.paper_width.name,
            KEY_MODEL: config.printer_model,
            KEY_PROTOCOL: config.command_protocol,
            KEY_AUTO_RECONNECT: "true" if config.auto_reconnect else "false",
            KEY_DENSITY: str(config.print_density),
            KEY_SPEED: str(config.print_speed),
        })
        logger.debug("💾 Printer config saved", path=self.path, transport=config.transport_kind.value)

    def get_printer_config(self) -> PrinterConfig:
        """Load the stored configuration; missing or corrupt values fall back to defaults."""
        values = self._values()

        def text(key: str, default: str) -> str:
            value = values.get(key)
            return default if value is None else value

        def number(key: str, default: int) -> int:
            try:
                return int(values.get(key) or default)
            except ValueError:
                logger.warning(f"⚠️ Invalid stored value for {key}, using default", value=values.get(key))
                return default

        try:
            transport_kind = TransportKind(text(KEY_TRANSPORT, TransportKind.NETWORK.value).lower())
        except ValueError:
            transport_kind = TransportKind.NETWORK

        try:
            paper_width = PaperWidth[text(KEY_PAPER_WIDTH, PaperWidth.WIDE.name).upper()]
        except KeyError:
            paper_width = PaperWidth.WIDE

        return PrinterConfig(
            transport_kind=transport_kind,
            network_address=text(KEY_NETWORK_ADDRESS, DEFAULT_NETWORK_ADDRESS),
            network_port=number(KEY_NETWORK_PORT, DEFAULT_NETWORK_PORT),
            radio_device_name=text(KEY_RADIO_NAME, ""),
            radio_device_address=text(KEY_RADIO_ADDRESS, ""),
            paper_width=paper_width,
            printer_model=text(KEY_MODEL, DEFAULT_MODEL),
            command_protocol=text(KEY_PROTOCOL, DEFAULT_PROTOCOL),
            auto_reconnect=text(KEY_AUTO_RECONNECT, "true").lower() in ("true", "1", "yes", "on"),
            print_density=number(KEY_DENSITY, DEFAULT_DENSITY),
            print_speed=number(KEY_SPEED, DEFAULT_SPEED),
        )

    def is_configured(self) -> bool:
        config = self.get_printer_config()
        if config.transport_kind == TransportKind.NETWORK:
            return bool(config.network_address)
        if config.transport_kind == TransportKind.RADIO:
            return bool(config.radio_device_name or config.radio_device_address)
        return False

    def clear(self):
        """Remove every stored printer key."""
        if not self.path.is_file():
            return
        stored = self._values()
        for key in ALL_KEYS:
            if key in stored:
                unset_key(str(self.path), key)

    def save_network_settings(self, address: str, port: int = DEFAULT_NETWORK_PORT):
        self._update(transport_kind=TransportKind.NETWORK, network_address=address, network_port=port)

    def save_radio_settings(self, device_name: str, device_address: str):
        self._update(transport_kind=TransportKind.RADIO, radio_device_name=device_name,
                     radio_device_address=device_address)

    def save_paper_width(self, paper_width: PaperWidth):
        self._update(paper_width=paper_width)

    def get_paper_width(self) -> PaperWidth:
        return self.get_printer_config().paper_width

    def save_print_density(self, density: int):
        self._update(print_density=max(0, min(15, int(density))))

    def get_print_density(self) -> int:
        return self.get_printer_config().print_density

    def _update(self, **changes):
        self.save_printer_config(dataclasses.replace(self.get_printer_config(), **changes))
