"""
Unit tests for the printer status channel.
"""

import threading

from ticket_printer.models import PrinterStatus
from ticket_printer.status import StatusChannel


class TestStatusChannel:

    def test_initial_value(self):
        channel = StatusChannel()
        assert channel.value == PrinterStatus.DISCONNECTED
        assert channel.sequence == 0

    def test_late_subscriber_sees_only_latest(self):
        channel = StatusChannel()
        channel.publish(PrinterStatus.CONNECTING)
        channel.publish(PrinterStatus.CONNECTED)

        seen = []
        channel.subscribe(seen.append)
        channel.publish(PrinterStatus.PRINTING)

        assert seen == [PrinterStatus.CONNECTED, PrinterStatus.PRINTING]
        assert channel.sequence == 3

    def test_cancel_stops_delivery(self):
        channel = StatusChannel()
        seen = []
        subscription = channel.subscribe(seen.append)

        subscription.cancel()
        channel.publish(PrinterStatus.CONNECTING)

        assert seen == [PrinterStatus.DISCONNECTED]
        assert not subscription.active

    def test_failing_subscriber_does_not_break_publish(self):
        channel = StatusChannel()
        seen = []

        def broken(status):
            raise RuntimeError("subscriber bug")

        channel.subscribe(broken)
        channel.subscribe(seen.append)
        channel.publish(PrinterStatus.ERROR)

        assert channel.value == PrinterStatus.ERROR
        assert seen[-1] == PrinterStatus.ERROR

    def test_wait_for(self):
        channel = StatusChannel()
        timer = threading.Timer(0.05, channel.publish, args=(PrinterStatus.CONNECTED,))
        timer.start()

        assert channel.wait_for(PrinterStatus.CONNECTED, timeout=5)
        timer.join()

    def test_wait_for_timeout(self):
        channel = StatusChannel()
        assert not channel.wait_for(PrinterStatus.CONNECTED, timeout=0.01)
