"""Bildirim yüzeyi - rozet sayısı ve açılır liste için uyarı deposunu okur."""

from __future__ import annotations

import logging
from typing import Optional, Union

from lubristock.models.inventory import AlertSummary, AlertUrgency, StockAlert
from lubristock.services.alert_store import AlertLifecycleStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 20


class NotificationSurface:
    def __init__(self, store: AlertLifecycleStore, max_items: int = DEFAULT_MAX_ITEMS):
        self.store = store
        self.max_items = max_items

    def badge_count(self) -> int:
        """Rozette gösterilen sayı: çözülmemiş uyarı adedi."""
        return self.store.visible_count()

    def has_unseen(self) -> bool:
        return self.store.get_unseen_flag()

    def open(self) -> list[StockAlert]:
        """Açılır liste açıldığında çağrılır: yeni uyarı göstergesini temizler."""
        self.store.clear_unseen_flag()
        return self.store.get_visible_alerts()[: self.max_items]

    def inspect(self, alert_id: str) -> StockAlert:
        """Uyarı detayını döndürür ve görüldü olarak işaretler."""
        result = self.store.mark_viewed(alert_id)
        if not result.success:
            logger.warning("Uyarı görüldü işaretlenemedi: %s (%s)", alert_id, result.error)
        return self.store.get_alert(alert_id)

    def summary(self) -> AlertSummary:
        alerts = self.store.get_visible_alerts()
        counts = {urgency: 0 for urgency in AlertUrgency}
        for alert in alerts:
            counts[alert.urgency] += 1
        return AlertSummary(
            total=len(alerts),
            critical=counts[AlertUrgency.CRITICAL],
            high=counts[AlertUrgency.HIGH],
            medium=counts[AlertUrgency.MEDIUM],
            low=counts[AlertUrgency.LOW],
            unseen=self.store.get_unseen_flag(),
        )

    def filter_by_urgency(self, urgency: Union[AlertUrgency, str] = "all") -> list[StockAlert]:
        alerts = self.store.get_visible_alerts()
        if urgency == "all":
            return alerts
        urgency = AlertUrgency(urgency)
        return [a for a in alerts if a.urgency == urgency]

    def build_notifications(self, alerts: Optional[list[StockAlert]] = None) -> list[dict]:
        """Görünür uyarıları dış katmanlar için bildirim kayıtlarına çevirir."""
        if alerts is None:
            alerts = self.store.get_visible_alerts()
        notifications = []
        for alert in alerts:
            notifications.append(
                {
                    "type": "low_stock_notification",
                    "alert_id": alert.id,
                    "product_id": alert.product_id,
                    "product_name": alert.product_name,
                    "current_stock": alert.current_stock,
                    "min_stock": alert.min_stock,
                    "urgency": alert.urgency.value,
                    "trend": alert.trend.value,
                    "status": alert.lifecycle_status.value,
                    "supplier": alert.supplier,
                    "requires_restock": True,
                }
            )
        return notifications
