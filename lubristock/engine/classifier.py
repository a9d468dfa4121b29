"""Rotasyon ve kâr marjı sınıflandırması.

Ürünleri satış hızına göre (yüksek/orta/düşük rotasyon) ve kâr marjına göre
(yüksek/orta/düşük marj) üçe böler. Aynı girdi için her zaman aynı sonucu
üretir: sınırdaki eşitlikler ürün kimliğine göre çözülür.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from lubristock.models.inventory import (
    AbcClassEntry,
    ClassificationResult,
    Product,
    SaleRecord,
    as_utc,
    utc_now,
)

logger = logging.getLogger(__name__)

DEFAULT_ROTATION_WINDOW_DAYS = 90

# ABC eşikleri (kümülatif gelir yüzdesi)
ABC_A_LIMIT = 80.0
ABC_B_LIMIT = 95.0


def _in_window(ts: datetime, now: datetime, window_days: Optional[int]) -> bool:
    ts = as_utc(ts)
    if ts > now:
        return False
    if window_days is None:
        return True
    return ts > now - timedelta(days=window_days)


def sold_quantity_by_product(
    sales: Iterable[SaleRecord],
    window_days: Optional[int] = DEFAULT_ROTATION_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> dict[str, int]:
    """Pencere içindeki (now - window, now] satış adetlerini ürün bazında toplar."""
    now = as_utc(now) if now else utc_now()
    totals: dict[str, int] = {}
    for sale in sales:
        if _in_window(sale.timestamp, now, window_days):
            totals[sale.product_id] = totals.get(sale.product_id, 0) + sale.quantity
    return totals


def margin_ratio(product: Product) -> Optional[float]:
    """(fiyat - maliyet) / fiyat; fiyat sıfır veya negatifse None."""
    if not product.unit_price or product.unit_price <= 0:
        return None
    return (product.unit_price - product.unit_cost) / product.unit_price


def split_into_thirds(ranked_ids: Sequence[str]) -> tuple[list[str], list[str], list[str]]:
    """Sıralı listeyi üçe böler: ilk n//3 üst, sonraki n//3 orta, kalan alt dilim."""
    size = len(ranked_ids) // 3
    return (
        list(ranked_ids[:size]),
        list(ranked_ids[size:2 * size]),
        list(ranked_ids[2 * size:]),
    )


def classify_products(
    products: Iterable[Product],
    sales: Iterable[SaleRecord],
    window_days: int = DEFAULT_ROTATION_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> ClassificationResult:
    """Ürünleri rotasyon ve marj dilimlerine ayırır."""
    if window_days <= 0:
        raise ValueError("Rotasyon penceresi pozitif olmalı")

    products = list(products)
    sold = sold_quantity_by_product(sales, window_days, now)

    # Rotasyon: satış adedine göre azalan, eşitlikte ürün kimliği
    ranked = sorted(products, key=lambda p: (-sold.get(p.id, 0), p.id))
    high, medium, low = split_into_thirds([p.id for p in ranked])

    # Pencerede hiç satışı olmayan ürün üst dilimlerde kalamaz
    unsold = {p.id for p in products if sold.get(p.id, 0) <= 0}
    demoted = [pid for pid in high + medium if pid in unsold]
    high = [pid for pid in high if pid not in unsold]
    medium = [pid for pid in medium if pid not in unsold]
    low = sorted(set(low) | set(demoted), key=lambda pid: (-sold.get(pid, 0), pid))

    # Marj: oran azalan, eşitlikte ürün kimliği
    ratios: dict[str, float] = {}
    skipped: list[str] = []
    for product in products:
        ratio = margin_ratio(product)
        if ratio is None:
            logger.warning("Marj hesaplanamadı, fiyat sıfır: %s", product.id)
            skipped.append(product.id)
            continue
        ratios[product.id] = ratio

    ranked_margin = sorted(ratios, key=lambda pid: (-ratios[pid], pid))
    high_margin, medium_margin, low_margin = split_into_thirds(ranked_margin)

    return ClassificationResult(
        high_rotation=high,
        medium_rotation=medium,
        low_rotation=low,
        high_profit_margin=high_margin,
        medium_profit_margin=medium_margin,
        low_profit_margin=low_margin,
        skipped_margin=sorted(skipped),
    )


def classify_abc_by_revenue(
    products: Iterable[Product],
    sales: Iterable[SaleRecord],
    window_days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> list[AbcClassEntry]:
    """Gelire göre ABC analizi: kümülatif %80'e kadar A, %95'e kadar B, kalan C."""
    now = as_utc(now) if now else utc_now()
    revenue: dict[str, float] = {}
    for sale in sales:
        if _in_window(sale.timestamp, now, window_days):
            revenue[sale.product_id] = revenue.get(sale.product_id, 0.0) + sale.revenue

    ranked = sorted(products, key=lambda p: (-revenue.get(p.id, 0.0), p.id))
    total = sum(revenue.get(p.id, 0.0) for p in ranked)

    entries: list[AbcClassEntry] = []
    running = 0.0
    for product in ranked:
        amount = revenue.get(product.id, 0.0)
        if total <= 0:
            entries.append(AbcClassEntry(product.id, amount, 0.0, "C"))
            continue
        running += amount
        cumulative = running / total * 100
        if cumulative <= ABC_A_LIMIT:
            abc_class = "A"
        elif cumulative <= ABC_B_LIMIT:
            abc_class = "B"
        else:
            abc_class = "C"
        entries.append(AbcClassEntry(product.id, round(amount, 2), round(cumulative, 2), abc_class))

    return entries
