"""Uyarı bazlı kilitler - aynı uyarı üzerindeki eşzamanlı değişiklikleri sıraya sokar.

Farklı uyarılar için kilitler bağımsızdır; sadece aynı alert_id için gelen
çağrılar birbirini bekler.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class AlertLockTimeout(TimeoutError):
    """Uyarı kilidi zamanında alınamadı."""
    pass


class AlertLockRegistry:
    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._lock_owners: dict[str, str] = {}
        self._master_lock = threading.Lock()

    def _lock_for(self, alert_id: str) -> threading.Lock:
        with self._master_lock:
            if alert_id not in self._locks:
                self._locks[alert_id] = threading.Lock()
            return self._locks[alert_id]

    def acquire(self, alert_id: str, owner: str, timeout: float = 10.0) -> bool:
        """Bir uyarı için kilit alır."""
        acquired = self._lock_for(alert_id).acquire(timeout=timeout)
        if acquired:
            self._lock_owners[alert_id] = owner
            logger.debug("Kilit alındı: %s -> %s", owner, alert_id)
        else:
            logger.warning("Kilit alınamadı: %s -> %s (timeout)", owner, alert_id)
        return acquired

    def release(self, alert_id: str, owner: str) -> bool:
        """Bir uyarı kilidini serbest bırakır."""
        if alert_id not in self._locks:
            return False

        current_owner = self._lock_owners.get(alert_id)
        if current_owner != owner:
            logger.warning("Kilit sahibi uyuşmazlığı: %s != %s", owner, current_owner)
            return False

        try:
            del self._lock_owners[alert_id]
            self._locks[alert_id].release()
            return True
        except RuntimeError:
            return False

    def is_locked(self, alert_id: str) -> bool:
        """Uyarının kilitli olup olmadığını kontrol eder."""
        if alert_id not in self._locks:
            return False
        return self._locks[alert_id].locked()

    @contextmanager
    def locked(self, alert_id: str, owner: str, timeout: float = 10.0) -> Iterator[None]:
        if not self.acquire(alert_id, owner, timeout):
            raise AlertLockTimeout(f"Uyarı kilidi alınamadı: {alert_id}")
        try:
            yield
        finally:
            self.release(alert_id, owner)
