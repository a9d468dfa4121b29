"""Stok uyarı ve envanter sınıflandırma veri modelleri."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Saat dilimi olmayan tarihleri UTC kabul eder."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class AlertUrgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Sıralama için: critical en yüksek."""
        return _URGENCY_RANK[self]


_URGENCY_RANK = {
    AlertUrgency.LOW: 1,
    AlertUrgency.MEDIUM: 2,
    AlertUrgency.HIGH: 3,
    AlertUrgency.CRITICAL: 4,
}


class StockTrend(str, Enum):
    WORSENING = "worsening"
    STABLE = "stable"
    IMPROVING = "improving"


class LifecycleStatus(str, Enum):
    NEW = "new"
    VIEWED = "viewed"
    RESOLVED = "resolved"


class ResolutionReason(str, Enum):
    USER = "user"
    STOCK_RECOVERED = "stock_recovered"


@dataclass
class Product:
    id: str
    name: str
    category: str
    unit_cost: float
    unit_price: float
    current_stock: int
    min_stock: Optional[int]
    max_stock: Optional[int]
    supplier: str
    sku: str = ""
    unit: str = "unidad"
    last_updated: Optional[datetime] = None


@dataclass
class SaleRecord:
    product_id: str
    quantity: int
    timestamp: datetime
    unit_price: float

    @property
    def revenue(self) -> float:
        return self.quantity * self.unit_price


@dataclass
class AlertCandidate:
    product_id: str
    product_name: str
    category: str
    supplier: str
    sku: str
    unit: str
    current_stock: int
    min_stock: int
    unit_price: float
    urgency: AlertUrgency
    trend: StockTrend
    deficit_ratio: float

    @property
    def out_of_stock(self) -> bool:
        return self.current_stock == 0


@dataclass
class EvaluationWarning:
    product_id: str
    reason: str


@dataclass
class EvaluationResult:
    candidates: list[AlertCandidate] = field(default_factory=list)
    warnings: list[EvaluationWarning] = field(default_factory=list)


@dataclass
class StockAlert:
    id: str
    product_id: str
    product_name: str
    category: str
    supplier: str
    sku: str
    unit: str
    current_stock: int
    min_stock: int
    unit_price: float
    urgency: AlertUrgency
    trend: StockTrend
    lifecycle_status: LifecycleStatus = LifecycleStatus.NEW
    first_seen_at: datetime = field(default_factory=utc_now)
    last_evaluated_at: datetime = field(default_factory=utc_now)
    resolved_at: Optional[datetime] = None
    resolution: Optional[ResolutionReason] = None
    status_revision: int = 0

    @property
    def is_visible(self) -> bool:
        return self.lifecycle_status != LifecycleStatus.RESOLVED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "category": self.category,
            "supplier": self.supplier,
            "sku": self.sku,
            "unit": self.unit,
            "current_stock": self.current_stock,
            "min_stock": self.min_stock,
            "unit_price": self.unit_price,
            "urgency": self.urgency.value,
            "trend": self.trend.value,
            "lifecycle_status": self.lifecycle_status.value,
            "first_seen_at": self.first_seen_at.isoformat(),
            "last_evaluated_at": self.last_evaluated_at.isoformat(),
            "resolved_at": self.resolved_at.isoformat() if self.resolved_at else None,
            "resolution": self.resolution.value if self.resolution else None,
        }


@dataclass
class ObsoleteProductEntry:
    product_id: str
    name: str
    days_since_last_sale: int
    current_stock: int
    unit_cost: float = 0.0
    category: str = ""

    @property
    def value_at_risk(self) -> float:
        return self.current_stock * self.unit_cost


@dataclass
class ObsolescenceMetrics:
    count: int
    avg_days: int
    impact: float


@dataclass
class ObsolescenceReport:
    entries: list[ObsoleteProductEntry]
    metrics: ObsolescenceMetrics
    idle_threshold_days: int


@dataclass
class ObsolescenceHistoryPoint:
    period: str  # YYYY-MM
    obsolete_count: int
    financial_impact: int


@dataclass
class ClassificationResult:
    high_rotation: list[str] = field(default_factory=list)
    medium_rotation: list[str] = field(default_factory=list)
    low_rotation: list[str] = field(default_factory=list)
    high_profit_margin: list[str] = field(default_factory=list)
    medium_profit_margin: list[str] = field(default_factory=list)
    low_profit_margin: list[str] = field(default_factory=list)
    # Fiyatı sıfır olduğu için marj hesaplanamayan ürünler
    skipped_margin: list[str] = field(default_factory=list)


@dataclass
class AbcClassEntry:
    product_id: str
    revenue: float
    cumulative_percentage: float
    abc_class: str


@dataclass
class RefreshResult:
    success: bool
    created: int = 0
    updated: int = 0
    resolved: int = 0
    visible: int = 0
    warnings: list[EvaluationWarning] = field(default_factory=list)
    error: Optional[str] = None
    transient: bool = False


@dataclass
class MutationResult:
    success: bool
    alert_id: str
    status: Optional[LifecycleStatus] = None
    changed: bool = False
    error: Optional[str] = None
    transient: bool = False


@dataclass
class AlertSummary:
    total: int
    critical: int
    high: int
    medium: int
    low: int
    unseen: bool
