"""Uyarı yaşam döngüsü deposu - stok uyarılarının tek yetkili kaynağı.

- Her refresh() çağrısında değerlendirici çıktısını mevcut durumla uzlaştırır
- Uyarı durumlarını yönetir: new -> viewed -> resolved
- Kullanıcının çözdüğü uyarıları aynı stok açığı sürdükçe geri getirmez
- Backend'e yansıtma başarısız olursa yerel değişikliği geri alır
- Refresh hatasında son başarılı uyarı kümesini korur
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from lubristock.engine.stock_evaluator import candidate_sort_key, evaluate_stock, snapshot_stock
from lubristock.models.inventory import (
    AlertCandidate,
    LifecycleStatus,
    MutationResult,
    Product,
    RefreshResult,
    ResolutionReason,
    StockAlert,
    utc_now,
)
from lubristock.services.alert_persistence import (
    AlertPersistence,
    AlertPersistenceError,
    NullAlertPersistence,
)
from lubristock.services.event_log import AlertEventLog
from lubristock.services.facts_provider import FactsProviderError, InventoryFactsProvider
from lubristock.services.locks import AlertLockRegistry

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_TIMEOUT = 10.0
DEFAULT_HISTORY_LIMIT = 500


class AlertNotFoundError(LookupError):
    """Bilinmeyen uyarı kimliği."""
    pass


def alert_id_for(product_id: str) -> str:
    return f"alert-{product_id}"


def _visible_sort_key(alert: StockAlert):
    deficit = (alert.min_stock - alert.current_stock) / alert.min_stock if alert.min_stock else 0.0
    return candidate_sort_key(alert.urgency, round(deficit, 6), alert.current_stock, alert.product_id)


class AlertLifecycleStore:
    """Süreç genelinde tek bir örnek olarak kurulan uyarı deposu."""

    def __init__(
        self,
        facts_provider: InventoryFactsProvider,
        persistence: Optional[AlertPersistence] = None,
        refresh_timeout: float = DEFAULT_REFRESH_TIMEOUT,
        event_log: Optional[AlertEventLog] = None,
        clock: Callable[[], datetime] = utc_now,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self.facts_provider = facts_provider
        self.persistence = persistence or NullAlertPersistence()
        self.refresh_timeout = refresh_timeout
        self.event_log = event_log or AlertEventLog(remote_enabled=False)
        self._clock = clock

        self._lock = threading.RLock()
        self._refresh_lock = threading.Lock()
        self._alert_locks = AlertLockRegistry()
        # Zaman aşımına uğrayıp hâlâ çalışan veri çekme thread'i
        self._fetch_worker: Optional[threading.Thread] = None

        # Takip edilen uyarılar: görünür olanlar + stok açığı süren kullanıcı çözümleri
        self._alerts: dict[str, StockAlert] = {}
        # Arşivlenmiş çözülmüş uyarılar (en yeni başta)
        self._history: deque[StockAlert] = deque(maxlen=history_limit)
        self._archived: dict[str, StockAlert] = {}
        # Trend için bir önceki değerlendirmenin stokları: {product_id: stock}
        self._previous_stock: dict[str, int] = {}
        self._has_unseen = False

        self.last_refresh_at: Optional[datetime] = None
        self.last_error: Optional[str] = None

    # --- Veri çekme ---

    def _fetch_products(self) -> list[Product]:
        """Ürünleri sınırlı süre içinde çeker; süre aşılırsa FactsProviderError."""
        if self._fetch_worker is not None and self._fetch_worker.is_alive():
            raise FactsProviderError("Önceki veri çekme işlemi hâlâ sürüyor")

        outcome: dict = {}

        def target() -> None:
            try:
                outcome["products"] = self.facts_provider.list_products()
            except Exception as e:
                # Çağıran thread'e taşınır
                outcome["error"] = e

        worker = threading.Thread(target=target, name="facts-fetch", daemon=True)
        worker.start()
        worker.join(self.refresh_timeout)

        if worker.is_alive():
            self._fetch_worker = worker
            raise FactsProviderError(f"Ürün verisi zaman aşımına uğradı ({self.refresh_timeout}s)")
        error = outcome.get("error")
        if error is not None:
            if isinstance(error, FactsProviderError):
                raise error
            raise FactsProviderError(f"{type(error).__name__}: {error}") from error
        return outcome["products"]

    # --- Refresh ve uzlaştırma ---

    def refresh(self) -> RefreshResult:
        """Ürün verisini çeker, değerlendirir ve uyarı kümesini uzlaştırır.

        Hata durumunda önceki uyarı kümesi aynen korunur.
        """
        with self._refresh_lock:
            try:
                products = self._fetch_products()
            except FactsProviderError as e:
                self.last_error = str(e)
                logger.warning("Uyarı yenileme başarısız, önceki durum korunuyor: %s", e)
                self.event_log.record("refresh_failed", error=str(e))
                return RefreshResult(
                    success=False,
                    visible=self.visible_count(),
                    error=str(e),
                    transient=True,
                )

            evaluation = evaluate_stock(products, self._previous_stock)
            now = self._clock()

            with self._lock:
                skipped = {w.product_id for w in evaluation.warnings}
                created, updated, resolved = self._reconcile(evaluation.candidates, skipped, now)
                self._previous_stock = snapshot_stock(products)
                visible = self._visible_count_locked()

            self.last_refresh_at = now
            self.last_error = None

        if created or resolved:
            self.event_log.record(
                "alerts_reconciled", created=created, updated=updated, resolved=resolved, visible=visible
            )
        logger.info(
            "Uyarılar yenilendi: %d yeni, %d güncellendi, %d çözüldü, %d görünür, %d uyarı",
            created, updated, resolved, visible, len(evaluation.warnings),
        )
        return RefreshResult(
            success=True,
            created=created,
            updated=updated,
            resolved=resolved,
            visible=visible,
            warnings=evaluation.warnings,
        )

    def _reconcile(
        self, candidates: list[AlertCandidate], skipped: set[str], now: datetime
    ) -> tuple[int, int, int]:
        by_product = {c.product_id: c for c in candidates}
        created = updated = resolved = 0

        for alert_id, alert in list(self._alerts.items()):
            # Eşik verisi hatalı ürünün durumu bilinmiyor: uyarıya dokunma
            if alert.product_id in skipped:
                continue

            candidate = by_product.get(alert.product_id)
            if candidate is None:
                # Stok toparlandı (veya ürün kaldırıldı)
                if alert.is_visible:
                    self._set_status(alert, LifecycleStatus.RESOLVED, now, ResolutionReason.STOCK_RECOVERED)
                    resolved += 1
                self._archive(alert_id)
                continue

            if alert.is_visible:
                self._apply_candidate(alert, candidate, now)
                updated += 1
            # Kullanıcı çözmüş ve açık sürüyor: uyarı geri getirilmez

        for candidate in candidates:
            alert_id = alert_id_for(candidate.product_id)
            if alert_id in self._alerts:
                continue
            self._alerts[alert_id] = StockAlert(
                id=alert_id,
                product_id=candidate.product_id,
                product_name=candidate.product_name,
                category=candidate.category,
                supplier=candidate.supplier,
                sku=candidate.sku,
                unit=candidate.unit,
                current_stock=candidate.current_stock,
                min_stock=candidate.min_stock,
                unit_price=candidate.unit_price,
                urgency=candidate.urgency,
                trend=candidate.trend,
                lifecycle_status=LifecycleStatus.NEW,
                first_seen_at=now,
                last_evaluated_at=now,
            )
            self._has_unseen = True
            created += 1

        return created, updated, resolved

    @staticmethod
    def _apply_candidate(alert: StockAlert, candidate: AlertCandidate, now: datetime) -> None:
        alert.product_name = candidate.product_name
        alert.category = candidate.category
        alert.supplier = candidate.supplier
        alert.current_stock = candidate.current_stock
        alert.min_stock = candidate.min_stock
        alert.unit_price = candidate.unit_price
        alert.urgency = candidate.urgency
        alert.trend = candidate.trend
        alert.last_evaluated_at = now

    @staticmethod
    def _set_status(
        alert: StockAlert,
        status: LifecycleStatus,
        now: datetime,
        reason: Optional[ResolutionReason] = None,
    ) -> None:
        alert.lifecycle_status = status
        if status == LifecycleStatus.RESOLVED:
            alert.resolved_at = now
            alert.resolution = reason
        alert.status_revision += 1

    def _archive(self, alert_id: str) -> None:
        alert = self._alerts.pop(alert_id)
        self._history.appendleft(alert)
        self._archived[alert_id] = alert

    def _lookup(self, alert_id: str) -> StockAlert:
        alert = self._alerts.get(alert_id) or self._archived.get(alert_id)
        if alert is None:
            raise AlertNotFoundError(f"Uyarı bulunamadı: {alert_id}")
        return alert

    # --- Durum geçişleri ---

    def mark_viewed(self, alert_id: str) -> MutationResult:
        """new -> viewed; diğer durumlarda değişiklik yapmaz."""
        with self._alert_locks.locked(alert_id, owner="mark_viewed"):
            with self._lock:
                alert = self._lookup(alert_id)
                if alert.lifecycle_status != LifecycleStatus.NEW:
                    return MutationResult(success=True, alert_id=alert_id, status=alert.lifecycle_status)
                self._set_status(alert, LifecycleStatus.VIEWED, self._clock())
                revision = alert.status_revision

            try:
                self.persistence.persist_alert_viewed(alert_id)
            except AlertPersistenceError as e:
                with self._lock:
                    if alert.status_revision == revision:
                        alert.lifecycle_status = LifecycleStatus.NEW
                        alert.status_revision += 1
                logger.warning("Görüldü bilgisi kaydedilemedi, geri alındı: %s (%s)", alert_id, e)
                return MutationResult(
                    success=False,
                    alert_id=alert_id,
                    status=alert.lifecycle_status,
                    error=str(e),
                    transient=True,
                )

        self.event_log.record("alert_viewed", alert_id=alert_id)
        return MutationResult(success=True, alert_id=alert_id, status=LifecycleStatus.VIEWED, changed=True)

    def mark_resolved(self, alert_id: str) -> MutationResult:
        """Uyarıyı çözülmüş işaretler ve görünür kümeden hemen çıkarır."""
        with self._alert_locks.locked(alert_id, owner="mark_resolved"):
            with self._lock:
                alert = self._lookup(alert_id)
                if alert.lifecycle_status == LifecycleStatus.RESOLVED:
                    return MutationResult(success=True, alert_id=alert_id, status=LifecycleStatus.RESOLVED)
                previous_status = alert.lifecycle_status
                self._set_status(alert, LifecycleStatus.RESOLVED, self._clock(), ResolutionReason.USER)
                revision = alert.status_revision

            try:
                self.persistence.persist_alert_resolution(alert_id)
            except AlertPersistenceError as e:
                with self._lock:
                    # Arada refresh durumu değiştirdiyse geri alma yapılmaz
                    if alert.status_revision == revision and self._alerts.get(alert_id) is alert:
                        alert.lifecycle_status = previous_status
                        alert.resolved_at = None
                        alert.resolution = None
                        alert.status_revision += 1
                logger.warning("Çözüm kaydedilemedi, geri alındı: %s (%s)", alert_id, e)
                return MutationResult(
                    success=False,
                    alert_id=alert_id,
                    status=alert.lifecycle_status,
                    error=str(e),
                    transient=True,
                )

        self.event_log.record("alert_resolved", alert_id=alert_id, previous_status=previous_status.value)
        return MutationResult(success=True, alert_id=alert_id, status=LifecycleStatus.RESOLVED, changed=True)

    def clear_unseen_flag(self) -> None:
        """Yeni uyarı göstergesini temizler; uyarı durumlarına dokunmaz."""
        with self._lock:
            self._has_unseen = False

    # --- Okuma ---

    def get_visible_alerts(self) -> list[StockAlert]:
        """Çözülmemiş uyarıların kopyalarını aciliyet sırasıyla döndürür."""
        with self._lock:
            visible = [replace(a) for a in self._alerts.values() if a.is_visible]
        visible.sort(key=_visible_sort_key)
        return visible

    def get_alert(self, alert_id: str) -> StockAlert:
        with self._lock:
            return replace(self._lookup(alert_id))

    def get_unseen_flag(self) -> bool:
        with self._lock:
            return self._has_unseen

    def _visible_count_locked(self) -> int:
        return sum(1 for a in self._alerts.values() if a.is_visible)

    def visible_count(self) -> int:
        with self._lock:
            return self._visible_count_locked()

    def get_resolved_history(self, limit: Optional[int] = None) -> list[StockAlert]:
        """Arşivlenmiş ve hâlâ takip edilen çözülmüş uyarılar (en yeni başta)."""
        with self._lock:
            pending = [replace(a) for a in self._alerts.values() if not a.is_visible]
            archived = [replace(a) for a in self._history]
        pending.sort(key=lambda a: a.resolved_at or a.last_evaluated_at, reverse=True)
        history = pending + archived
        return history if limit is None else history[:limit]
