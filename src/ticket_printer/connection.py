"""
Printer connection manager for the thermal ticket printer client.
Owns the single live transport (TCP socket or Bluetooth RFCOMM link), the
printer status state machine and the raw send primitive.

    DISCONNECTED -> CONNECTING -> CONNECTED -> PRINTING -> CONNECTED
    CONNECTING / CONNECTED / PRINTING -> ERROR on any transport fault
    any state -> DISCONNECTED on disconnect()
"""

import socket
import threading
import time
from typing import Callable, Dict, Optional

from . import commands
from .config import config as settings
from .exceptions import (
    ConfigurationError,
    StateError,
    TicketPrinterError,
    TransportError,
    UnsupportedTransportError,
    ErrorKind,
)
from .models import PrinterConfig, PrinterStatus, PrintResult, TransportKind
from .radio import RadioAdapter
from .status import StatusChannel
from .utils.logger import logger


class Transport:
    """An open byte stream to the printer. Only the connection manager holds one."""

    def __init__(self, kind: TransportKind, sock: socket.socket, target: str):
        self.kind = kind
        self.target = target
        self._sock = sock

    def write(self, data: bytes):
        """Write the whole buffer; a short write surfaces as OSError."""
        self._sock.sendall(data)

    def close(self):
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Peer already gone; closing is still required
            pass
        finally:
            self._sock.close()


class ConnectionManager:
    """
    Transport-agnostic printer connection with status publishing.

    Args:
        status_channel: Channel this manager publishes status to (sole writer)
        connect_timeout: Seconds allowed for connection setup
        settle_delay: Seconds to let the printer process data after a write
        network_connector: Callable compatible with socket.create_connection
        radio_adapter: Bluetooth helper used for radio transports
    """

    def __init__(self, status_channel: Optional[StatusChannel] = None,
                 connect_timeout: Optional[float] = None,
                 settle_delay: Optional[float] = None,
                 network_connector: Callable[..., socket.socket] = socket.create_connection,
                 radio_adapter: Optional[RadioAdapter] = None):
        self.status_channel = status_channel or StatusChannel()
        self.connect_timeout = settings.CONNECT_TIMEOUT if connect_timeout is None else connect_timeout
        self.settle_delay = settings.SEND_SETTLE_DELAY if settle_delay is None else settle_delay
        self.network_connector = network_connector
        self.radio_adapter = radio_adapter or RadioAdapter(settings.RADIO_DEFAULT_CHANNEL)

        self._transport: Optional[Transport] = None
        self._lock = threading.RLock()
        self._openers: Dict[TransportKind, Callable[[PrinterConfig], Transport]] = {
            TransportKind.NETWORK: self._open_network,
            TransportKind.RADIO: self._open_radio,
        }

    @property
    def status(self) -> PrinterStatus:
        return self.status_channel.value

    @property
    def is_connected(self) -> bool:
        return self.status == PrinterStatus.CONNECTED

    @property
    def transport_kind(self) -> Optional[TransportKind]:
        transport = self._transport
        return transport.kind if transport else None

    def connect(self, config: PrinterConfig) -> PrintResult:
        """
        Open a transport for config, closing any existing one first.

        Returns:
            Success, or failure tagged with the error kind
        """
        with self._lock:
            self._teardown()
            self._set_status(PrinterStatus.CONNECTING)
            logger.info(f"🔌 Connecting to printer: {config.printer_model}",
                        transport=config.transport_kind.value,
                        target=config.target)

            try:
                config.validate()
                opener = self._openers.get(config.transport_kind)
                if opener is None:
                    raise UnsupportedTransportError(
                        f"{config.transport_kind.value.upper()} printers are not supported yet"
                    )
                transport = opener(config)
            except TicketPrinterError as e:
                logger.error(f"❌ Printer connection failed: {e.message}",
                             kind=e.kind.value, **e.details)
                self._set_status(PrinterStatus.ERROR)
                return PrintResult.from_error(e)
            except Exception as e:
                logger.exception(f"❌ Printer connection error: {str(e)}")
                self._set_status(PrinterStatus.ERROR)
                return PrintResult.failure(ErrorKind.TRANSPORT, f"Printer connection error: {str(e)}")

            self._transport = transport
            self._set_status(PrinterStatus.CONNECTED)
            logger.transport_connected(transport.kind.value, transport.target)
            return PrintResult.success()

    def send(self, data: bytes) -> PrintResult:
        """
        Write a complete print stream to the printer.

        Fails with StateError, without touching the transport, unless the
        manager is CONNECTED. Partial writes are failures and are not retried.
        """
        with self._lock:
            transport = self._transport
            if self.status != PrinterStatus.CONNECTED or transport is None:
                error = StateError("Printer is not connected")
                logger.warning(f"⚠️ {error.message}", status=self.status.value)
                return PrintResult.from_error(error)

            self._set_status(PrinterStatus.PRINTING)
            try:
                transport.write(data)
            except OSError as e:
                error = TransportError("Failed to send data to printer", {"error": str(e)})
                logger.error(f"❌ {error.message}: {str(e)}", bytes=len(data))
                self._set_status(PrinterStatus.ERROR)
                return PrintResult.from_error(error)

            # Give the printer time to process the buffer
            if self.settle_delay > 0:
                time.sleep(self.settle_delay)

            self._set_status(PrinterStatus.CONNECTED)
            logger.data_sent(len(data))
            return PrintResult.success(len(data))

    def disconnect(self):
        """Close the transport. Always ends DISCONNECTED, never raises."""
        with self._lock:
            self._teardown()

    def test_connection(self, config: PrinterConfig) -> PrintResult:
        """
        Connect, send a reset probe and disconnect.

        Returns:
            Success carrying True when the printer accepted the probe, False otherwise
        """
        with self._lock:
            if not self.connect(config):
                return PrintResult.success(False)
            probe = self.send(commands.init())
            self.disconnect()
            logger.info("🧪 Connection test finished", target=config.target, reachable=probe.ok)
            return PrintResult.success(probe.ok)

    def _open_network(self, config: PrinterConfig) -> Transport:
        address = (config.network_address, config.network_port)
        try:
            sock = self.network_connector(address, timeout=self.connect_timeout)
        except socket.timeout as e:
            raise TransportError(
                f"Timed out connecting to printer at {config.target}",
                {"timeout": self.connect_timeout},
            ) from e
        except OSError as e:
            raise TransportError(
                f"Failed to connect to printer at {config.target}",
                {"error": str(e)},
            ) from e

        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
            # Small command writes go out immediately
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            sock.settimeout(None)
        except OSError as e:
            sock.close()
            raise TransportError("Failed to configure printer socket", {"error": str(e)}) from e

        return Transport(TransportKind.NETWORK, sock, config.target)

    def _open_radio(self, config: PrinterConfig) -> Transport:
        adapter = self.radio_adapter
        if not adapter.is_available():
            raise TransportError("Bluetooth is not available on this host")

        address = config.radio_device_address
        if not address:
            device = adapter.find_device(config.radio_device_name)
            if device is None:
                raise ConfigurationError(f"Bluetooth device not found: {config.radio_device_name}")
            address = device.address

        adapter.cancel_discovery()
        channel = adapter.resolve_channel(address)
        sock = adapter.open(address, channel, self.connect_timeout)
        return Transport(TransportKind.RADIO, sock, address)

    def _teardown(self):
        transport, self._transport = self._transport, None
        if transport is not None:
            try:
                transport.close()
            except Exception as e:
                logger.debug(f"🔍 Disconnect error: {str(e)}")
            logger.transport_disconnected()
        self._set_status(PrinterStatus.DISCONNECTED)

    def _set_status(self, status: PrinterStatus):
        self.status_channel.publish(status)
