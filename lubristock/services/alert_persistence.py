"""Uyarı durum geçişlerinin backend'e yansıtılması (opsiyonel)."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from lubristock.models.inventory import LifecycleStatus, utc_now

logger = logging.getLogger(__name__)


class AlertPersistenceError(Exception):
    """Backend durum değişikliğini reddetti veya erişilemedi."""
    pass


class AlertPersistence(ABC):
    @abstractmethod
    def persist_alert_resolution(self, alert_id: str) -> None:
        """Hata durumunda AlertPersistenceError fırlatır."""
        ...

    @abstractmethod
    def persist_alert_viewed(self, alert_id: str) -> None:
        ...


class NullAlertPersistence(AlertPersistence):
    """Backend kapalıyken kullanılır: her işlem yerel olarak başarılı sayılır."""

    def persist_alert_resolution(self, alert_id: str) -> None:
        return None

    def persist_alert_viewed(self, alert_id: str) -> None:
        return None


class DynamoDBAlertPersistence(AlertPersistence):
    """StockAlerts tablosuna durum yazan backend."""

    def __init__(
        self,
        region_name: str = "us-west-2",
        table_name: str = "StockAlerts",
        dynamodb_resource: Optional[Any] = None,
    ):
        self.dynamodb = dynamodb_resource or boto3.resource("dynamodb", region_name=region_name)
        self.alerts_table = self.dynamodb.Table(table_name)

    def _write_status(self, alert_id: str, status: LifecycleStatus) -> None:
        try:
            self.alerts_table.update_item(
                Key={"alert_id": alert_id},
                UpdateExpression="SET lifecycle_status = :s, updated_at = :t",
                ExpressionAttributeValues={":s": status.value, ":t": utc_now().isoformat()},
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Uyarı durumu yazılamadı [%s -> %s]: %s", alert_id, status.value, e)
            raise AlertPersistenceError(str(e)) from e

    def persist_alert_resolution(self, alert_id: str) -> None:
        self._write_status(alert_id, LifecycleStatus.RESOLVED)

    def persist_alert_viewed(self, alert_id: str) -> None:
        self._write_status(alert_id, LifecycleStatus.VIEWED)
