"""Stok değerlendirici - ürün eşiklerinden uyarı adaylarını üretir.

Saf fonksiyonlar: paylaşılan durumu değiştirmez, her çağrıda yeni bir
EvaluationResult döndürür.

- Minimum stok eşiğinin altındaki her ürün için bir aday oluşturur
- Stok oranına göre aciliyet (critical/high/medium/low) hesaplar
- Önceki değerlendirmeyle karşılaştırarak trend belirler
- Eşik verisi eksik/hatalı ürünleri atlar ve uyarı olarak raporlar
"""

from __future__ import annotations

import logging
from numbers import Real
from typing import Iterable, Optional

from lubristock.models.inventory import (
    AlertCandidate,
    AlertUrgency,
    EvaluationResult,
    EvaluationWarning,
    Product,
    StockTrend,
)

logger = logging.getLogger(__name__)

HIGH_URGENCY_RATIO = 0.25
MEDIUM_URGENCY_RATIO = 0.5


def calculate_urgency(current_stock: int, min_stock: int) -> AlertUrgency:
    """Stok seviyesine göre uyarı aciliyetini hesaplar.

    Sınırlar dahildir: stok tam olarak eşiğin %25'i ise high, %50'si ise medium.
    """
    if current_stock == 0:
        return AlertUrgency.CRITICAL
    if current_stock <= HIGH_URGENCY_RATIO * min_stock:
        return AlertUrgency.HIGH
    if current_stock <= MEDIUM_URGENCY_RATIO * min_stock:
        return AlertUrgency.MEDIUM
    return AlertUrgency.LOW


def calculate_trend(current_stock: int, previous_stock: Optional[int]) -> StockTrend:
    """Bir önceki değerlendirmeye göre stok yönünü belirler."""
    if previous_stock is None or current_stock == previous_stock:
        return StockTrend.STABLE
    if current_stock < previous_stock:
        return StockTrend.WORSENING
    return StockTrend.IMPROVING


def _is_number(value: object) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def validate_thresholds(product: Product) -> Optional[str]:
    """Ürünün eşik verisini doğrular; hata varsa açıklamasını döndürür."""
    if product.min_stock is None:
        return "min_stock tanımlı değil"
    if not _is_number(product.min_stock):
        return f"min_stock sayısal değil: {product.min_stock!r}"
    if product.min_stock < 0:
        return f"min_stock negatif: {product.min_stock}"
    if not _is_number(product.current_stock):
        return f"current_stock sayısal değil: {product.current_stock!r}"
    if product.current_stock < 0:
        return f"current_stock negatif: {product.current_stock}"
    if (
        product.max_stock is not None
        and _is_number(product.max_stock)
        and product.min_stock > product.max_stock
    ):
        return f"min_stock ({product.min_stock}) max_stock ({product.max_stock}) değerinden büyük"
    return None


def candidate_sort_key(urgency: AlertUrgency, deficit_ratio: float, current_stock: int, product_id: str):
    """Aciliyet, açık oranı, mutlak stok ve ürün kimliğine göre sıralama anahtarı."""
    return (-urgency.rank, -deficit_ratio, current_stock, product_id)


def evaluate_stock(
    products: Iterable[Product],
    previous_stock: Optional[dict[str, int]] = None,
) -> EvaluationResult:
    """Ürün listesini değerlendirir ve sıralı uyarı adaylarını döndürür.

    previous_stock: {product_id: önceki değerlendirmedeki stok}; trend için kullanılır.
    """
    previous_stock = previous_stock or {}
    result = EvaluationResult()

    for product in products:
        problem = validate_thresholds(product)
        if problem:
            logger.warning("Ürün değerlendirme dışı bırakıldı: %s (%s)", product.id, problem)
            result.warnings.append(EvaluationWarning(product_id=product.id, reason=problem))
            continue

        if product.current_stock >= product.min_stock:
            continue

        deficit_ratio = (product.min_stock - product.current_stock) / product.min_stock
        result.candidates.append(
            AlertCandidate(
                product_id=product.id,
                product_name=product.name,
                category=product.category,
                supplier=product.supplier,
                sku=product.sku,
                unit=product.unit,
                current_stock=product.current_stock,
                min_stock=product.min_stock,
                unit_price=product.unit_price,
                urgency=calculate_urgency(product.current_stock, product.min_stock),
                trend=calculate_trend(product.current_stock, previous_stock.get(product.id)),
                deficit_ratio=round(deficit_ratio, 6),
            )
        )

    result.candidates.sort(
        key=lambda c: candidate_sort_key(c.urgency, c.deficit_ratio, c.current_stock, c.product_id)
    )
    return result


def snapshot_stock(products: Iterable[Product]) -> dict[str, int]:
    """Bir sonraki trend hesabı için stok snapshot'ı alır."""
    return {
        p.id: p.current_stock
        for p in products
        if _is_number(p.current_stock) and p.current_stock >= 0
    }
