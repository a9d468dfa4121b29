"""Periyodik uyarı yenileme zamanlayıcısı (opsiyonel).

Manuel refresh ile aynı uzlaştırma kurallarını kullanır; sadece tetikleyici farklıdır.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from lubristock.models.inventory import RefreshResult

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 120.0  # 2 dakika


class RefreshScheduler:
    def __init__(self, refresh: Callable[[], RefreshResult], interval_seconds: float = DEFAULT_POLL_INTERVAL):
        if interval_seconds <= 0:
            raise ValueError("Yenileme aralığı pozitif olmalı")
        self._refresh = refresh
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.cycles = 0
        self.last_result: Optional[RefreshResult] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> Optional[RefreshResult]:
        """Tek bir yenileme döngüsü; hata döngüyü durdurmaz."""
        try:
            result = self._refresh()
        except Exception:
            logger.exception("Zamanlanmış yenileme hatası")
            return None
        self.cycles += 1
        self.last_result = result
        if not result.success:
            logger.warning("Zamanlanmış yenileme başarısız: %s", result.error)
        return result

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            self.run_once()
            self._stop_event.wait(self.interval_seconds)

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="alert-refresh", daemon=True)
        self._thread.start()
        logger.info("Uyarı yenileme zamanlayıcısı başlatıldı (%ss)", self.interval_seconds)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Uyarı yenileme zamanlayıcısı durduruldu")
