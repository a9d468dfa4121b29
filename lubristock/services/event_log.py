"""Uyarı yaşam döngüsü olay kaydı - DynamoDB ve S3'e best-effort yazım."""

from __future__ import annotations

import json
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


@dataclass
class AlertEvent:
    event_id: str
    event_type: str
    alert_id: Optional[str]
    details: dict
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class AlertEventLog:
    """Uyarı kararlarını loglar.

    Olaylar her zaman bellekte tutulur; uzak kayıt açıksa DynamoDB tablosuna
    ve (bucket tanımlıysa) S3'e de yazılır. Uzak yazım hataları sadece
    uyarı olarak loglanır, çağırana yansıtılmaz.
    """

    def __init__(
        self,
        region_name: str = "us-west-2",
        table_name: str = "AlertEvents",
        bucket_name: Optional[str] = None,
        remote_enabled: bool = True,
        dynamodb_resource: Optional[Any] = None,
        s3_client: Optional[Any] = None,
        max_events: int = 1000,
    ):
        self.remote_enabled = remote_enabled
        self.bucket_name = bucket_name
        self.max_events = max_events
        self._events: list[AlertEvent] = []
        self._lock = threading.Lock()

        if remote_enabled:
            # AWS istemcileri - dependency injection destekli
            self.dynamodb = dynamodb_resource or boto3.resource("dynamodb", region_name=region_name)
            self.s3 = s3_client or boto3.client("s3", region_name=region_name)
            self.events_table = self.dynamodb.Table(table_name)

    def record(self, event_type: str, alert_id: Optional[str] = None, **details: Any) -> AlertEvent:
        """Bir olayı kaydeder ve döndürür."""
        event = AlertEvent(
            event_id=str(uuid.uuid4()),
            event_type=event_type,
            alert_id=alert_id,
            details=details,
        )
        with self._lock:
            self._events.append(event)
            if len(self._events) > self.max_events:
                del self._events[: len(self._events) - self.max_events]

        logger.debug("Uyarı olayı: %s %s %s", event_type, alert_id or "-", details)

        if self.remote_enabled:
            self._write_remote(event)
        return event

    def _write_remote(self, event: AlertEvent) -> None:
        try:
            self.events_table.put_item(
                Item={
                    "event_id": event.event_id,
                    "event_type": event.event_type,
                    "alert_id": event.alert_id or "-",
                    "details": json.dumps(event.details, default=str),
                    "timestamp": event.timestamp,
                }
            )
        except (BotoCoreError, ClientError) as e:
            logger.warning("Olay loglama hatası: %s", e)

        if not self.bucket_name:
            return
        key = f"alert-logs/{event.event_type}/{event.timestamp.replace(':', '-')}-{event.event_id[:8]}.json"
        try:
            self.s3.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=json.dumps(
                    {
                        "event_id": event.event_id,
                        "event_type": event.event_type,
                        "alert_id": event.alert_id,
                        "details": event.details,
                        "timestamp": event.timestamp,
                    },
                    default=str,
                ),
            )
        except (BotoCoreError, ClientError) as e:
            logger.warning("S3 log hatası: %s", e)

    def get_events(self, event_type: Optional[str] = None, alert_id: Optional[str] = None) -> list[AlertEvent]:
        """Olay logunu filtreli olarak döndürür."""
        with self._lock:
            events = list(self._events)
        if event_type:
            events = [e for e in events if e.event_type == event_type]
        if alert_id:
            events = [e for e in events if e.alert_id == alert_id]
        return list(events)
