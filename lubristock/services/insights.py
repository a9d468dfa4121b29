"""Stok analiz servisi - uyarılar, atıl stok ve sınıflandırma için tek giriş noktası.

Süreç başına bir kez build_service() ile kurulur; tüm dış bağımlılıklar
kurucu üzerinden enjekte edilir.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from lubristock.config import EngineConfig
from lubristock.engine.classifier import classify_abc_by_revenue, classify_products
from lubristock.engine.obsolescence import detect_obsolete_products, obsolescence_history
from lubristock.models.inventory import (
    AbcClassEntry,
    ClassificationResult,
    MutationResult,
    ObsolescenceHistoryPoint,
    ObsolescenceMetrics,
    ObsolescenceReport,
    ObsoleteProductEntry,
    RefreshResult,
    StockAlert,
    utc_now,
)
from lubristock.services.alert_persistence import (
    AlertPersistence,
    DynamoDBAlertPersistence,
    NullAlertPersistence,
)
from lubristock.services.alert_store import AlertLifecycleStore
from lubristock.services.event_log import AlertEventLog
from lubristock.services.facts_provider import (
    DynamoDBFactsProvider,
    InMemoryFactsProvider,
    InventoryFactsProvider,
)
from lubristock.services.notifications import NotificationSurface
from lubristock.services.scheduler import RefreshScheduler

logger = logging.getLogger(__name__)


class StockInsightsService:
    def __init__(
        self,
        facts_provider: InventoryFactsProvider,
        persistence: Optional[AlertPersistence] = None,
        config: Optional[EngineConfig] = None,
        event_log: Optional[AlertEventLog] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config or EngineConfig()
        self.facts_provider = facts_provider
        self._clock = clock
        self.store = AlertLifecycleStore(
            facts_provider=facts_provider,
            persistence=persistence,
            refresh_timeout=self.config.refresh_timeout_seconds,
            event_log=event_log,
            clock=clock,
        )
        self.notifications = NotificationSurface(self.store)
        self._scheduler: Optional[RefreshScheduler] = None

    # --- Uyarı yaşam döngüsü ---

    def refresh(self) -> RefreshResult:
        return self.store.refresh()

    def mark_viewed(self, alert_id: str) -> MutationResult:
        return self.store.mark_viewed(alert_id)

    def mark_resolved(self, alert_id: str) -> MutationResult:
        return self.store.mark_resolved(alert_id)

    def clear_unseen_flag(self) -> None:
        self.store.clear_unseen_flag()

    def get_visible_alerts(self) -> list[StockAlert]:
        return self.store.get_visible_alerts()

    def get_unseen_flag(self) -> bool:
        return self.store.get_unseen_flag()

    # --- Atıl stok ---

    def get_obsolescence_report(
        self,
        top_n: Optional[int] = None,
        idle_threshold_days: Optional[int] = None,
        require_stock: bool = False,
    ) -> ObsolescenceReport:
        return detect_obsolete_products(
            self.facts_provider.list_products(),
            self.facts_provider.get_sale_history(),
            idle_threshold_days=(
                self.config.idle_threshold_days if idle_threshold_days is None else idle_threshold_days
            ),
            top_n=self.config.obsolete_top_n if top_n is None else top_n,
            now=self._clock(),
            require_stock=require_stock,
        )

    def get_obsolete_products(
        self, top_n: Optional[int] = None, idle_threshold_days: Optional[int] = None
    ) -> tuple[list[ObsoleteProductEntry], ObsolescenceMetrics]:
        """(listelenecek atıl ürünler, tam küme metrikleri) döndürür."""
        report = self.get_obsolescence_report(top_n=top_n, idle_threshold_days=idle_threshold_days)
        return report.entries, report.metrics

    def get_obsolescence_history(
        self, months: Optional[int] = None, idle_threshold_days: Optional[int] = None
    ) -> list[ObsolescenceHistoryPoint]:
        return obsolescence_history(
            self.facts_provider.list_products(),
            self.facts_provider.get_sale_history(),
            idle_threshold_days=(
                self.config.idle_threshold_days if idle_threshold_days is None else idle_threshold_days
            ),
            now=self._clock(),
            months=months,
        )

    # --- Sınıflandırma ---

    def get_classification(self, window_days: Optional[int] = None) -> ClassificationResult:
        window = self.config.rotation_window_days if window_days is None else window_days
        return classify_products(
            self.facts_provider.list_products(),
            self.facts_provider.get_sale_history(),
            window_days=window,
            now=self._clock(),
        )

    def get_abc_classification(self, window_days: Optional[int] = None) -> list[AbcClassEntry]:
        return classify_abc_by_revenue(
            self.facts_provider.list_products(),
            self.facts_provider.get_sale_history(),
            window_days=window_days,
            now=self._clock(),
        )

    # --- Zamanlayıcı ---

    def start_polling(self, interval_seconds: Optional[float] = None) -> RefreshScheduler:
        """Periyodik refresh başlatır (varsayılan aralık konfigürasyondan)."""
        if self._scheduler is None:
            self._scheduler = RefreshScheduler(
                self.refresh, interval_seconds or self.config.poll_interval_seconds
            )
        self._scheduler.start()
        return self._scheduler

    def stop_polling(self) -> None:
        if self._scheduler is not None:
            self._scheduler.stop()


def build_service(
    config: Optional[EngineConfig] = None,
    facts_provider: Optional[InventoryFactsProvider] = None,
    dynamodb_resource: Optional[Any] = None,
    s3_client: Optional[Any] = None,
) -> StockInsightsService:
    """Konfigürasyona göre servisi ve bağımlılıklarını kurar.

    Backend kapalıysa veri bellekte tutulur ve uyarı durumları sadece yerelde
    saklanır.
    """
    config = config or EngineConfig.from_env()

    if config.backend_enabled:
        facts_provider = facts_provider or DynamoDBFactsProvider(
            region_name=config.region_name,
            products_table=config.products_table,
            sales_table=config.sales_table,
            dynamodb_resource=dynamodb_resource,
        )
        persistence: AlertPersistence = DynamoDBAlertPersistence(
            region_name=config.region_name,
            table_name=config.alerts_table,
            dynamodb_resource=dynamodb_resource,
        )
    else:
        facts_provider = facts_provider or InMemoryFactsProvider()
        persistence = NullAlertPersistence()

    event_log = AlertEventLog(
        region_name=config.region_name,
        table_name=config.events_table,
        bucket_name=config.log_bucket,
        remote_enabled=config.backend_enabled,
        dynamodb_resource=dynamodb_resource,
        s3_client=s3_client,
    )

    logger.info(
        "Stok analiz servisi kuruldu (backend=%s, region=%s)",
        "açık" if config.backend_enabled else "kapalı", config.region_name,
    )
    return StockInsightsService(
        facts_provider=facts_provider,
        persistence=persistence,
        config=config,
        event_log=event_log,
    )
