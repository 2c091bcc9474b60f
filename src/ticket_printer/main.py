#!/usr/bin/env python3
"""
Thermal Ticket Printer - Command line client
Prints travel tickets, test pages and connection checks on ESC/POS printers.
"""

import argparse
import json
import signal
import sys
from pathlib import Path
from typing import List, Optional

from .config import config
from .connection import ConnectionManager
from .models import Layout, TicketRecord
from .preferences import PrinterPreferences
from .service import ThermalPrinterService
from .status import StatusChannel
from .utils.logger import logger


class PrinterClientApp:
    """Wires the printer service together and runs one command."""

    def __init__(self, preferences_file: Optional[str] = None):
        self.status_channel = StatusChannel()
        self.connection = ConnectionManager(self.status_channel)
        self.preferences = PrinterPreferences(preferences_file or config.PREFERENCES_FILE)
        self.service = ThermalPrinterService(self.connection, self.preferences)
        self.interrupted = False
        logger.debug(str(config))

        # Setup signal handlers
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def test_page(self) -> bool:
        """Print the test page with the saved configuration."""
        result = self.service.print_test_page()
        if not result:
            logger.error(f"❌ Test page failed: {result.message}", kind=result.error_kind.value)
        return result.ok

    def test_connection(self) -> bool:
        """Check that the configured printer accepts data."""
        result = self.service.test_connection()
        reachable = bool(result.value)
        if reachable:
            logger.info("✅ Printer reachable", target=self.service.get_config().target)
        else:
            logger.error("❌ Printer not reachable", target=self.service.get_config().target)
        return reachable

    def print_file(self, path: str, copies: int = 1, simple: bool = False, qr: bool = False) -> bool:
        """Queue a ticket from a JSON file and wait for it to finish."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                ticket = TicketRecord.from_dict(json.load(f))
        except (OSError, ValueError) as e:
            logger.error(f"❌ Cannot load ticket: {str(e)}", path=path)
            return False

        layout = Layout.FULL_TICKET if qr else None
        job_id = self.service.enqueue(ticket, copies, full_format=not simple, layout=layout)

        # Poll so a signal can interrupt the wait
        while not self.service.wait_until_idle(timeout=0.5):
            if self.interrupted:
                self.service.clear_queue()

        outcome = next((o for o in self.service.outcomes() if o.job.job_id == job_id), None)
        return outcome is not None and outcome.result.ok

    def show_status(self) -> bool:
        """Print the saved configuration and whether the printer answers."""
        printer_config = self.service.get_config()
        print("=" * 60)
        print("🖨️  Thermal Ticket Printer")
        print("=" * 60)
        print(f"📁 Preferences: {self.preferences.path}")
        print(f"⚙️  Configured: {self.preferences.is_configured()}")
        print(f"🔌 Transport: {printer_config.transport_kind.value} ({printer_config.target})")
        print(f"📄 Paper: {printer_config.paper_width.width_mm}mm, {printer_config.paper_width.columns} columns")
        print(f"🖨️  Model: {printer_config.printer_model} / {printer_config.command_protocol}")
        print(f"🌑 Density: {printer_config.print_density}")

        connected = self.service.connect()
        print(f"📊 Status: {self.service.status().value}")
        print("=" * 60)
        return connected.ok

    def stop(self):
        self.service.shutdown(timeout=5)

    def _signal_handler(self, signum, frame):
        """Handle system signals."""
        logger.info(f"📝 Received signal {signum}")
        self.interrupted = True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ticket-printer",
                                     description="Print travel tickets on ESC/POS thermal printers")
    parser.add_argument("--preferences", help="Printer preferences file (default: PREFERENCES_FILE)")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("test-page", help="Print the printer test page")
    commands.add_parser("test-connection", help="Check that the printer is reachable")
    commands.add_parser("status", help="Show the configured printer and its status")

    print_cmd = commands.add_parser("print", help="Print a ticket from a JSON file")
    print_cmd.add_argument("ticket", type=Path, help="Ticket JSON file")
    print_cmd.add_argument("--copies", type=int, default=1, help="Number of copies")
    layouts = print_cmd.add_mutually_exclusive_group()
    layouts.add_argument("--simple", action="store_true", help="Print the simple receipt layout")
    layouts.add_argument("--qr", action="store_true", help="Print the full ticket with a QR code")
    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    args = build_parser().parse_args(argv)
    if args.command == "print" and args.copies < 1:
        logger.error("❌ --copies must be at least 1")
        sys.exit(2)

    try:
        app = PrinterClientApp(args.preferences)
        try:
            if args.command == "test-page":
                success = app.test_page()
            elif args.command == "test-connection":
                success = app.test_connection()
            elif args.command == "print":
                success = app.print_file(str(args.ticket), args.copies, args.simple, args.qr)
            else:
                success = app.show_status()
        finally:
            app.stop()

        # Exit with appropriate code
        sys.exit(0 if success else 1)

    except Exception as e:
        logger.critical(f"🚨 Critical error: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
