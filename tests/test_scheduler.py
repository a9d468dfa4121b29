"""Periyodik yenileme zamanlayıcısı unit testleri."""

import threading
from unittest.mock import MagicMock

import pytest

from lubristock.models.inventory import RefreshResult
from lubristock.services.scheduler import RefreshScheduler


class TestRefreshScheduler:
    def test_invalid_interval_raises(self):
        with pytest.raises(ValueError):
            RefreshScheduler(MagicMock(), interval_seconds=0)

    def test_run_once_records_result(self):
        refresh = MagicMock(return_value=RefreshResult(success=True, created=2))
        scheduler = RefreshScheduler(refresh)
        result = scheduler.run_once()
        assert result.created == 2
        assert scheduler.cycles == 1
        assert scheduler.last_result is result

    def test_run_once_survives_exception(self):
        refresh = MagicMock(side_effect=RuntimeError("patladı"))
        scheduler = RefreshScheduler(refresh)
        assert scheduler.run_once() is None
        assert scheduler.cycles == 0

    def test_failed_refresh_still_counts_cycle(self):
        refresh = MagicMock(return_value=RefreshResult(success=False, error="timeout", transient=True))
        scheduler = RefreshScheduler(refresh)
        scheduler.run_once()
        assert scheduler.cycles == 1
        assert scheduler.last_result.success is False

    def test_start_and_stop(self):
        called = threading.Event()

        def refresh():
            called.set()
            return RefreshResult(success=True)

        scheduler = RefreshScheduler(refresh, interval_seconds=60)
        scheduler.start()
        try:
            assert called.wait(2)
            assert scheduler.is_running
        finally:
            scheduler.stop()
        assert scheduler.is_running is False

    def test_start_twice_single_thread(self):
        refresh = MagicMock(return_value=RefreshResult(success=True))
        scheduler = RefreshScheduler(refresh, interval_seconds=60)
        scheduler.start()
        first_thread = scheduler._thread
        scheduler.start()
        try:
            assert scheduler._thread is first_thread
        finally:
            scheduler.stop()
