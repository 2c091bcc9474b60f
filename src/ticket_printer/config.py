"""
Configuration management for the thermal ticket printer client.
Handles loading and validation of environment variables and settings.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Process-wide settings for the printer client."""

    def __init__(self):
        self._load_config()
        self._validate_config()

    def _load_config(self):
        """Load configuration from environment variables."""

        # Printer preferences store (dotenv-format key/value file)
        self.PREFERENCES_FILE = os.getenv("PREFERENCES_FILE", "printer.env")

        # Transport timing
        self.CONNECT_TIMEOUT = float(os.getenv("CONNECT_TIMEOUT", "10"))
        self.SEND_SETTLE_DELAY = float(os.getenv("SEND_SETTLE_DELAY", "0.1"))
        self.RADIO_DEFAULT_CHANNEL = int(os.getenv("RADIO_DEFAULT_CHANNEL", "1"))

        # Print queue timing
        self.COPY_DELAY = float(os.getenv("COPY_DELAY", "0.5"))
        self.JOB_DELAY = float(os.getenv("JOB_DELAY", "1.0"))

        self.DEBUG_MODE = os.getenv("DEBUG_MODE", "false").lower() == "true"

        # QR Code Configuration
        self.QR_MODULE_SIZE = int(os.getenv("QR_MODULE_SIZE", "6"))
        self.QR_RASTER = os.getenv("QR_RASTER", "false").lower() == "true"
        self.QR_ERROR_CORRECTION = os.getenv("QR_ERROR_CORRECTION", "M")
        self.QR_BORDER = int(os.getenv("QR_BORDER", "4"))
        self.QR_BOX_SIZE = int(os.getenv("QR_BOX_SIZE", "6"))

        # Logging Configuration
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_FILE = os.getenv("LOG_FILE", "ticket_printer.log")
        self.LOG_MAX_SIZE = os.getenv("LOG_MAX_SIZE", "10MB")
        self.LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

    def _validate_config(self):
        """Validate configuration values."""

        if not self.PREFERENCES_FILE:
            raise ValueError("PREFERENCES_FILE is required")

        if not (0 < self.CONNECT_TIMEOUT <= 120):
            raise ValueError("CONNECT_TIMEOUT must be between 0 and 120 seconds")

        for name in ("SEND_SETTLE_DELAY", "COPY_DELAY", "JOB_DELAY"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

        if not (1 <= self.RADIO_DEFAULT_CHANNEL <= 30):
            raise ValueError("RADIO_DEFAULT_CHANNEL must be between 1 and 30")

        # Validate QR configuration
        if not (1 <= self.QR_MODULE_SIZE <= 16):
            raise ValueError("QR_MODULE_SIZE must be between 1 and 16")

        if self.QR_ERROR_CORRECTION not in ["L", "M", "Q", "H"]:
            raise ValueError("QR_ERROR_CORRECTION must be L, M, Q, or H")

        if not (0 <= self.QR_BORDER <= 20):
            raise ValueError("QR_BORDER must be between 0 and 20")

        if not (1 <= self.QR_BOX_SIZE <= 20):
            raise ValueError("QR_BOX_SIZE must be between 1 and 20")

        if self.LOG_LEVEL.upper() not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError("LOG_LEVEL must be a standard logging level name")

    def get_qr_config(self) -> dict:
        """Get QR code configuration as a dictionary."""
        return {
            "module_size": self.QR_MODULE_SIZE,
            "raster": self.QR_RASTER,
            "error_correction": self.QR_ERROR_CORRECTION,
            "border": self.QR_BORDER,
            "box_size": self.QR_BOX_SIZE,
        }

    def __str__(self) -> str:
        """String representation of configuration."""
        return f"""
Thermal Ticket Printer Configuration:
=====================================
Preferences File: {self.PREFERENCES_FILE}
Connect Timeout: {self.CONNECT_TIMEOUT}s
Settle Delay: {self.SEND_SETTLE_DELAY}s
Copy Delay: {self.COPY_DELAY}s
Job Delay: {self.JOB_DELAY}s
QR: module {self.QR_MODULE_SIZE}, raster {self.QR_RASTER}, level {self.QR_ERROR_CORRECTION}
Log Level: {self.LOG_LEVEL}
Debug Mode: {self.DEBUG_MODE}
"""


# Global configuration instance
config = Config()
