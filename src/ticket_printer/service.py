"""
Print job service for the thermal ticket printer client.

Accepts tickets, renders them with the configured layout and pushes the bytes
through the connection manager. Queued jobs run strictly one at a time, in
submission order, on a single background worker.
"""

import threading
import time
import uuid
from collections import deque
from typing import Callable, Deque, List, Optional, Tuple

from .config import config as settings
from .connection import ConnectionManager
from .exceptions import ErrorKind, TicketPrinterError
from .formatter import TicketFormatter
from .models import JobOutcome, Layout, PrinterConfig, PrinterStatus, PrintJob, PrintResult, TicketRecord
from .preferences import PrinterPreferences
from .qr_generator import QRGenerator
from .radio import RadioDevice
from .status import Subscription
from .utils.logger import logger

MAX_OUTCOMES = 100


class ThermalPrinterService:
    """
    Public entry point for printing tickets.

    Args:
        connection: Connection manager owning the printer transport
        preferences: Persisted printer configuration
        copy_delay: Seconds between copies of one job
        job_delay: Seconds between consecutive queued jobs
    """

    def __init__(self, connection: ConnectionManager, preferences: PrinterPreferences,
                 copy_delay: Optional[float] = None, job_delay: Optional[float] = None):
        self.connection = connection
        self.preferences = preferences
        self.copy_delay = settings.COPY_DELAY if copy_delay is None else copy_delay
        self.job_delay = settings.JOB_DELAY if job_delay is None else job_delay

        self._queue: Deque[PrintJob] = deque()
        self._outcomes: Deque[JobOutcome] = deque(maxlen=MAX_OUTCOMES)
        self._lock = threading.Lock()
        self._processing = False
        self._worker: Optional[threading.Thread] = None
        self._idle = threading.Event()
        self._idle.set()

    # Connection

    def connect(self, config: Optional[PrinterConfig] = None) -> PrintResult:
        """Connect with config (or the saved one) and save it on success."""
        config = config or self.preferences.get_printer_config()
        result = self.connection.connect(config)
        if result:
            self.preferences.save_printer_config(config)
        return result

    def disconnect(self):
        self.connection.disconnect()

    def test_connection(self, config: Optional[PrinterConfig] = None) -> PrintResult:
        return self.connection.test_connection(config or self.preferences.get_printer_config())

    def status(self) -> PrinterStatus:
        return self.connection.status

    def subscribe(self, callback: Callable[[PrinterStatus], None]) -> Subscription:
        return self.connection.status_channel.subscribe(callback)

    def is_bluetooth_available(self) -> bool:
        return self.connection.radio_adapter.is_available()

    def paired_bluetooth_devices(self) -> List[RadioDevice]:
        """Paired SPP devices a radio config can be pointed at."""
        return self.connection.radio_adapter.paired_devices()

    def get_config(self) -> PrinterConfig:
        return self.preferences.get_printer_config()

    def save_config(self, config: PrinterConfig):
        self.preferences.save_printer_config(config)

    # Printing

    def send_data(self, data: bytes) -> PrintResult:
        """Send a raw byte stream, connecting with the saved config first if needed."""
        connected = self._ensure_connected(self.get_config())
        if not connected:
            return connected
        return self.connection.send(data)

    def print_ticket(self, ticket: TicketRecord, full_format: bool = True,
                     layout: Optional[Layout] = None) -> PrintResult:
        """
        Print one copy of a ticket and wait for the send to finish.

        full_format picks the boarding pass over the simple receipt; layout,
        when given, overrides it (e.g. Layout.FULL_TICKET for the QR ticket).
        """
        return self.print_ticket_multiple(ticket, 1, full_format, layout)

    def print_ticket_multiple(self, ticket: TicketRecord, copies: int,
                              full_format: bool = True, layout: Optional[Layout] = None) -> PrintResult:
        """Print several copies; the first failure stops the rest."""
        _, result = self._print_copies(ticket, copies, layout or self._layout_for(full_format))
        return result

    def print_test_page(self) -> PrintResult:
        config = self.get_config()
        connected = self._ensure_connected(config)
        if not connected:
            return connected
        data = self._formatter(config).render(Layout.TEST_PAGE)
        result = self.connection.send(data)
        if result:
            logger.info("🧪 Test page printed")
        return result

    # Queue

    def enqueue(self, ticket: TicketRecord, copies: int = 1, full_format: bool = True,
                layout: Optional[Layout] = None) -> str:
        """
        Queue a ticket for background printing.

        Returns:
            The job id
        """
        if copies < 1:
            raise ValueError("copies must be at least 1")

        job = PrintJob(job_id=str(uuid.uuid4()), ticket=ticket, copies=copies,
                       layout=layout or self._layout_for(full_format))
        with self._lock:
            self._queue.append(job)
            size = len(self._queue)
            start_worker = not self._processing
            if start_worker:
                self._processing = True
                self._idle.clear()

        logger.job_queued(job.job_id, copies, size)
        if start_worker:
            self._worker = threading.Thread(target=self._worker_loop, name="print-worker", daemon=True)
            self._worker.start()
        return job.job_id

    def clear_queue(self) -> int:
        """Drop every pending job. The job being printed is not interrupted."""
        with self._lock:
            dropped = len(self._queue)
            self._queue.clear()
        if dropped:
            logger.info(f"🗑️ Cleared {dropped} pending print job(s)")
        return dropped

    def queue_size(self) -> int:
        with self._lock:
            return len(self._queue)

    def outcomes(self) -> List[JobOutcome]:
        """Finished jobs, oldest first."""
        with self._lock:
            return list(self._outcomes)

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until the queue is drained. Returns False on timeout."""
        return self._idle.wait(timeout)

    def shutdown(self, timeout: Optional[float] = None):
        """Drop pending jobs, let the current one finish and close the printer."""
        self.clear_queue()
        worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout)
        self.disconnect()
        logger.info("🛑 Print service stopped")

    def _worker_loop(self):
        while True:
            with self._lock:
                if not self._queue:
                    self._processing = False
                    self._idle.set()
                    return
                job = self._queue.popleft()

            outcome = self._run_job(job)
            with self._lock:
                self._outcomes.append(outcome)

            if self.job_delay > 0:
                time.sleep(self.job_delay)

    def _run_job(self, job: PrintJob) -> JobOutcome:
        logger.job_start(job.job_id, job.copies)
        try:
            printed, result = self._print_copies(job.ticket, job.copies, job.layout)
        except Exception as e:
            logger.exception(f"❌ Unexpected print job error: {str(e)}", job_id=job.job_id)
            printed = 0
            result = PrintResult.failure(ErrorKind.STATE, f"Print job failed: {str(e)}")

        if result:
            logger.job_complete(job.job_id, printed, job.copies)
        else:
            logger.job_failed(job.job_id, printed, job.copies, result.message)
        return JobOutcome(job=job, copies_printed=printed, result=result)

    def _print_copies(self, ticket: TicketRecord, copies: int, layout: Layout) -> Tuple[int, PrintResult]:
        config = self.get_config()
        printed = 0
        for copy in range(copies):
            if copy > 0 and self.copy_delay > 0:
                time.sleep(self.copy_delay)

            result = self._print_once(ticket, layout, config)
            if not result:
                message = f"Printed {printed} of {copies} copies: {result.message}"
                result = PrintResult.failure(result.error_kind, message)
                return printed, result
            printed += 1

        return printed, PrintResult.success(printed)

    def _print_once(self, ticket: TicketRecord, layout: Layout, config: PrinterConfig) -> PrintResult:
        connected = self._ensure_connected(config)
        if not connected:
            return connected
        try:
            data = self._formatter(config).render(layout, ticket)
        except TicketPrinterError as e:
            logger.error(f"❌ Failed to render ticket: {e.message}", ticket_id=ticket.ticket_id)
            return PrintResult.from_error(e, "Failed to render ticket")
        return self.connection.send(data)

    def _ensure_connected(self, config: PrinterConfig) -> PrintResult:
        if self.connection.is_connected:
            return PrintResult.success()
        logger.info("🔄 Printer not connected, connecting with saved config")
        return self.connection.connect(config)

    def _formatter(self, config: PrinterConfig) -> TicketFormatter:
        qr = settings.get_qr_config()
        return TicketFormatter(
            paper_width=config.paper_width,
            density=config.print_density,
            qr_module_size=qr["module_size"],
            qr_error_correction=qr["error_correction"],
            raster_qr=qr["raster"],
            printer_model=config.printer_model,
            command_protocol=config.command_protocol,
            qr_generator=QRGenerator(qr["error_correction"], qr["box_size"], qr["border"]),
        )

    @staticmethod
    def _layout_for(full_format: bool) -> Layout:
        return Layout.COMPACT_TICKET if full_format else Layout.SIMPLE_RECEIPT
