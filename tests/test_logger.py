"""
Unit tests for the logging facade.
"""

import logging

import pytest

from ticket_printer.utils.logger import ColoredFormatter, logger, parse_size


@pytest.mark.parametrize("size, expected", [
    ("10MB", 10 * 1024 * 1024),
    ("512kb", 512 * 1024),
    ("1GB", 1024 ** 3),
    ("2048", 2048),
])
def test_parse_size(size, expected):
    assert parse_size(size) == expected


def test_context_is_appended(caplog):
    with caplog.at_level(logging.INFO, logger="ticket_printer"):
        logger.job_queued("job-1", 2, 5)

    assert "📥 Print job queued | job_id=job-1 | copies=2 | queue_size=5" in caplog.text


def test_colored_formatter_restores_level_name():
    record = logging.LogRecord("ticket_printer", logging.WARNING, __file__, 1, "paper low", None, None)

    output = ColoredFormatter("%(levelname)s %(message)s").format(record)

    assert "\033[33mWARNING\033[0m paper low" == output
    assert record.levelname == "WARNING"
