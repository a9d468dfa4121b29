"""Motor konfigürasyonu - ortam değişkenlerinden okunur.

Scriptler önce `env_loader` ile .env dosyasını yükler, ardından
EngineConfig.from_env() ile ayarları okur.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class EngineConfig:
    region_name: str = "us-west-2"
    # Kapalıyken uyarı durumları yalnızca yerelde tutulur
    backend_enabled: bool = False
    products_table: str = "Products"
    sales_table: str = "SalesHistory"
    alerts_table: str = "StockAlerts"
    events_table: str = "AlertEvents"
    log_bucket: Optional[str] = None
    refresh_timeout_seconds: float = 10.0
    poll_interval_seconds: float = 120.0
    idle_threshold_days: int = 180
    obsolete_top_n: int = 10
    rotation_window_days: int = 90

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """Ortam değişkenlerinden konfigürasyon oluşturur."""
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            region_name=env.get("AWS_DEFAULT_REGION", defaults.region_name),
            backend_enabled=env.get("LUBRISTOCK_BACKEND_ENABLED", "").strip().lower() in _TRUE_VALUES,
            products_table=env.get("LUBRISTOCK_PRODUCTS_TABLE", defaults.products_table),
            sales_table=env.get("LUBRISTOCK_SALES_TABLE", defaults.sales_table),
            alerts_table=env.get("LUBRISTOCK_ALERTS_TABLE", defaults.alerts_table),
            events_table=env.get("LUBRISTOCK_EVENTS_TABLE", defaults.events_table),
            log_bucket=env.get("LUBRISTOCK_LOG_BUCKET") or None,
            refresh_timeout_seconds=_read_number(
                env, "LUBRISTOCK_REFRESH_TIMEOUT", defaults.refresh_timeout_seconds, float
            ),
            poll_interval_seconds=_read_number(
                env, "LUBRISTOCK_POLL_INTERVAL", defaults.poll_interval_seconds, float
            ),
            idle_threshold_days=_read_number(env, "LUBRISTOCK_IDLE_DAYS", defaults.idle_threshold_days, int),
            obsolete_top_n=_read_number(env, "LUBRISTOCK_OBSOLETE_TOP_N", defaults.obsolete_top_n, int),
            rotation_window_days=_read_number(
                env, "LUBRISTOCK_ROTATION_WINDOW_DAYS", defaults.rotation_window_days, int
            ),
        )


def _read_number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{name} sayısal olmalı: {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} negatif olamaz: {raw!r}")
    return value
