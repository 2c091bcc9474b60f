"""
Logging utilities for the thermal ticket printer client.
Rotating file log plus a colored console stream, with key=value context
appended to every message.
"""

import logging
import logging.handlers
import sys

from ..config import config

SIZE_UNITS = {"KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3}


def parse_size(size: str) -> int:
    """Convert a size such as '10MB' or '512KB' to bytes."""
    size = size.strip().upper()
    for unit, factor in SIZE_UNITS.items():
        if size.endswith(unit):
            return int(size[:-len(unit)]) * factor
    return int(size)


class ColoredFormatter(logging.Formatter):
    """Console formatter that tints the level name."""

    COLORS = {
        logging.DEBUG: '\033[36m',     # Cyan
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        plain = record.levelname
        record.levelname = f"{color}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers share the record
            record.levelname = plain


class PrinterLogger:
    """Logger facade used across the printer client."""

    def __init__(self, name: str = "ticket_printer"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel("DEBUG" if config.DEBUG_MODE else config.LOG_LEVEL.upper())

        if not self.logger.handlers:
            self._attach_handlers()

    def _attach_handlers(self):
        if config.LOG_FILE:
            rotating = logging.handlers.RotatingFileHandler(
                config.LOG_FILE,
                maxBytes=parse_size(config.LOG_MAX_SIZE),
                backupCount=config.LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
            rotating.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - [%(threadName)s] %(levelname)s - %(message)s'
            ))
            self.logger.addHandler(rotating)

        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(ColoredFormatter('%(asctime)s - %(levelname)s - %(message)s',
                                              datefmt='%H:%M:%S'))
        self.logger.addHandler(console)

    def _log(self, level: int, message: str, context: dict, exc_info: bool = False):
        if context:
            message = f"{message} | " + " | ".join(f"{k}={v}" for k, v in context.items())
        self.logger.log(level, message, exc_info=exc_info)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs):
        """Log at ERROR with the active traceback attached."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)

    def critical(self, message: str, **kwargs):
        self._log(logging.CRITICAL, message, kwargs)

    # Printer and queue events

    def status_changed(self, previous: str, current: str):
        self.debug("🖨️ Printer status changed", previous=previous, current=current)

    def transport_connected(self, kind: str, target: str):
        self.info("🔌 Printer connected", transport=kind, target=target)

    def transport_disconnected(self, reason: str = ""):
        self.info("🔌 Printer disconnected", reason=reason or "requested")

    def data_sent(self, size: int):
        self.debug("📤 Data sent", bytes=size)

    def job_queued(self, job_id: str, copies: int, queue_size: int):
        self.info("📥 Print job queued", job_id=job_id, copies=copies, queue_size=queue_size)

    def job_start(self, job_id: str, copies: int):
        self.info("🖨️ Print job started", job_id=job_id, copies=copies)

    def job_complete(self, job_id: str, printed: int, copies: int):
        self.info("✅ Print job completed", job_id=job_id, printed=printed, copies=copies)

    def job_failed(self, job_id: str, printed: int, copies: int, error: str):
        self.error("❌ Print job failed", job_id=job_id, printed=printed, copies=copies, error=error)


# Global logger instance
logger = PrinterLogger()
