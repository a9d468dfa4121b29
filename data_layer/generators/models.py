"""Örnek veri üretimi için katalog tanımları."""
from dataclasses import dataclass


@dataclass
class Category:
    name: str
    price_min: float
    price_max: float
    # Maliyet / fiyat oranı aralığı
    cost_ratio_min: float
    cost_ratio_max: float
    min_stock: int


@dataclass
class Supplier:
    supplier_id: str
    name: str
    city: str
