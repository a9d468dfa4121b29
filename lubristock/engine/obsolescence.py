"""Atıl stok (obsolescence) tespiti.

- Her ürün için son satıştan bu yana geçen gün sayısını hesaplar
- Hiç satılmamış ürünleri en uzun süre atıl kabul eder (NEVER_SOLD_DAYS)
- Eşiği aşan ürünleri en atıl olandan başlayarak sıralar
- Toplu metrikleri (adet, ortalama gün, finansal etki) tam küme üzerinden hesaplar
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from lubristock.models.inventory import (
    ObsolescenceHistoryPoint,
    ObsolescenceMetrics,
    ObsolescenceReport,
    ObsoleteProductEntry,
    Product,
    SaleRecord,
    as_utc,
    utc_now,
)

logger = logging.getLogger(__name__)

DEFAULT_IDLE_THRESHOLD_DAYS = 180
DEFAULT_TOP_N = 10
NEVER_SOLD_DAYS = 9999

# Dönem seçimi -> atıl gün eşiği
PERIOD_IDLE_DAYS: dict[str, int] = {
    "1m": 30,
    "3m": 90,
    "6m": 180,
    "1y": 365,
}


def period_to_idle_days(period: Optional[str]) -> int:
    """Rapor dönemini atıl gün eşiğine çevirir (bilinmeyen dönem: 180 gün)."""
    return PERIOD_IDLE_DAYS.get(period or "", DEFAULT_IDLE_THRESHOLD_DAYS)


def last_sale_by_product(sales: Iterable[SaleRecord]) -> dict[str, datetime]:
    """Her ürün için en son satış zamanını döndürür."""
    last_sales: dict[str, datetime] = {}
    for sale in sales:
        ts = as_utc(sale.timestamp)
        previous = last_sales.get(sale.product_id)
        if previous is None or ts > previous:
            last_sales[sale.product_id] = ts
    return last_sales


def days_since(moment: datetime, now: datetime) -> int:
    days = (as_utc(now) - as_utc(moment)).days
    return max(days, 0)


def detect_obsolete_products(
    products: Iterable[Product],
    sales: Iterable[SaleRecord],
    idle_threshold_days: int = DEFAULT_IDLE_THRESHOLD_DAYS,
    top_n: Optional[int] = DEFAULT_TOP_N,
    now: Optional[datetime] = None,
    require_stock: bool = False,
) -> ObsolescenceReport:
    """Atıl ürünleri tespit eder.

    Listelenen girişler top_n ile kısaltılır; metrikler ise kısaltılmamış
    tam küme üzerinden hesaplanır. require_stock=True ise stoğu olmayan
    ürünler atıl sayılmaz.
    """
    if idle_threshold_days < 0:
        raise ValueError("Atıl gün eşiği negatif olamaz")
    if top_n is not None and top_n < 0:
        raise ValueError("top_n negatif olamaz")

    now = as_utc(now) if now else utc_now()
    last_sales = last_sale_by_product(sales)

    obsolete: list[ObsoleteProductEntry] = []
    for product in products:
        last_sale = last_sales.get(product.id)
        days = NEVER_SOLD_DAYS if last_sale is None else days_since(last_sale, now)
        if days < idle_threshold_days:
            continue
        if require_stock and product.current_stock <= 0:
            continue
        obsolete.append(
            ObsoleteProductEntry(
                product_id=product.id,
                name=product.name,
                days_since_last_sale=days,
                current_stock=product.current_stock,
                unit_cost=product.unit_cost,
                category=product.category,
            )
        )

    obsolete.sort(key=lambda e: (-e.days_since_last_sale, e.product_id))

    count = len(obsolete)
    avg_days = round(sum(e.days_since_last_sale for e in obsolete) / count) if count else 0
    impact = sum(e.value_at_risk for e in obsolete)

    logger.debug(
        "Atıl ürün analizi: %d ürün eşiği (%d gün) aştı, etki=%.2f",
        count, idle_threshold_days, impact,
    )

    entries = obsolete if top_n is None else obsolete[:top_n]
    return ObsolescenceReport(
        entries=entries,
        metrics=ObsolescenceMetrics(count=count, avg_days=avg_days, impact=round(impact, 2)),
        idle_threshold_days=idle_threshold_days,
    )


def obsolescence_history(
    products: Iterable[Product],
    sales: Iterable[SaleRecord],
    idle_threshold_days: int = DEFAULT_IDLE_THRESHOLD_DAYS,
    now: Optional[datetime] = None,
    months: Optional[int] = None,
    require_stock: bool = False,
) -> list[ObsolescenceHistoryPoint]:
    """Son satış ayına göre aylık atıl ürün sayısı ve finansal etkiyi döndürür.

    Hiç satılmamış ürünler için last_updated kullanılır; o da yoksa ürün
    geçmişe dahil edilmez.
    """
    now = as_utc(now) if now else utc_now()
    last_sales = last_sale_by_product(sales)

    by_month: dict[str, list[float]] = {}
    for product in products:
        reference = last_sales.get(product.id) or product.last_updated
        if reference is None:
            continue
        reference = as_utc(reference)
        key = f"{reference.year}-{reference.month:02d}"
        bucket = by_month.setdefault(key, [0, 0.0])

        is_obsolete = days_since(reference, now) >= idle_threshold_days
        if require_stock and product.current_stock <= 0:
            is_obsolete = False
        if is_obsolete:
            bucket[0] += 1
            bucket[1] += product.unit_cost * product.current_stock

    points = [
        ObsolescenceHistoryPoint(
            period=key,
            obsolete_count=int(values[0]),
            financial_impact=round(values[1]),
        )
        for key, values in sorted(by_month.items())
    ]
    if months is not None:
        points = points[-months:] if months > 0 else []
    return points
