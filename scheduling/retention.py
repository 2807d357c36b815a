"""
Retention sweeper.

Periodically deletes served bookings whose date is more than
AGENDA_RETENTION_DAYS in the past. Pending bookings are never purged.
Each sweep also drops receipt PDFs that were never downloaded.

The sweeper runs in a background thread (or in the foreground through the
``sweep_bookings --loop`` command) and takes an injectable clock so the
retention boundary can be tested with a fixed "today".
"""

from __future__ import annotations

import logging
import threading
from datetime import date as date_type
from datetime import timedelta
from typing import Callable

from django.conf import settings
from django.db import DatabaseError, close_old_connections
from django.utils import timezone

from .models import Booking, BookingStatus
from .receipts import purge_stale_receipts


logger = logging.getLogger(__name__)


def retention_cutoff(today: date_type, retention_days: int | None = None) -> date_type:
    if retention_days is None:
        retention_days = settings.AGENDA_RETENTION_DAYS
    return today - timedelta(days=retention_days)


def purge_expired_bookings(*, today: date_type, retention_days: int | None = None) -> int:
    cutoff = retention_cutoff(today, retention_days)
    deleted, _ = Booking.objects.filter(status=BookingStatus.SERVED, date__lt=cutoff).delete()
    return deleted


class RetentionSweeper:
    def __init__(
        self,
        *,
        interval_seconds: float | None = None,
        clock: Callable[[], date_type] = timezone.localdate,
        retention_days: int | None = None,
        receipt_ttl_seconds: float | None = None,
    ):
        if interval_seconds is None:
            interval_seconds = settings.AGENDA_SWEEP_INTERVAL_SECONDS
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.retention_days = retention_days
        self.receipt_ttl_seconds = receipt_ttl_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def run_once(self) -> int:
        """One sweep. Store failures are logged and retried on the next run."""
        today = self.clock()
        self._purge_receipts()

        try:
            deleted = purge_expired_bookings(today=today, retention_days=self.retention_days)
        except DatabaseError:
            logger.exception("Retention sweep failed (today=%s)", today.isoformat())
            return 0

        if deleted:
            logger.info("Retention sweep removed %d served bookings (today=%s)", deleted, today.isoformat())
        return deleted

    def _purge_receipts(self) -> int:
        try:
            removed = purge_stale_receipts(max_age_seconds=self.receipt_ttl_seconds)
        except OSError:
            logger.exception("Receipt cleanup failed")
            return 0
        if removed:
            logger.info("Removed %d receipts that were never downloaded", removed)
        return removed

    def run_forever(self) -> None:
        logger.info("Retention sweeper started (every %ss)", self.interval_seconds)
        while not self._stop.is_set():
            try:
                self.run_once()
            finally:
                close_old_connections()
            self._stop.wait(self.interval_seconds)
        logger.info("Retention sweeper stopped")

    def start(self) -> threading.Thread:
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._stop.clear()
        self._thread = threading.Thread(target=self.run_forever, name="retention-sweeper", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()
