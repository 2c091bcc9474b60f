"""
Thermal ticket printer client.
Prints travel tickets on ESC/POS receipt printers over TCP or Bluetooth SPP.
"""

from .connection import ConnectionManager
from .exceptions import (
    ConfigurationError,
    ErrorKind,
    ProtocolEncodingError,
    StateError,
    TicketPrinterError,
    TransportError,
    UnsupportedTransportError,
)
from .formatter import TicketFormatter, detect_symbology
from .models import (
    JobOutcome,
    Layout,
    PaperWidth,
    PrinterConfig,
    PrinterStatus,
    PrintJob,
    PrintResult,
    TicketRecord,
    TransportKind,
)
from .preferences import PrinterPreferences
from .service import ThermalPrinterService
from .status import StatusChannel

__version__ = "1.0.0"
