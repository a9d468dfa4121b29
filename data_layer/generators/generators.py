"""Örnek veri üretim modülü - lubrikant mağaza zinciri kataloğu.

4 kategori, 40 ürün ve günlük satış geçmişi üretir. Kayıtlar DynamoDB
Products / SalesHistory tablolarının şemasındadır.

Problemli senaryolar:
- Stok tükenmesi (sıfır stok)
- Minimum eşiğin altına düşmüş ürünler
- Hiç satılmamış ürünler
- Uzun süredir satılmayan (atıl) ürünler
- Eşik verisi eksik ürün
"""
import json
import os
import random
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from .models import Category, Supplier


# --- SABİTLER ---

CATEGORIES = [
    Category("Aceites", 18.0, 65.0, 0.55, 0.75, 20),
    Category("Filtros", 6.0, 35.0, 0.45, 0.65, 15),
    Category("Lubricantes", 8.0, 40.0, 0.50, 0.70, 12),
    Category("Aditivos", 5.0, 25.0, 0.35, 0.60, 10),
]

SUPPLIERS = [
    Supplier("SUP001", "Lubricantes del Pacífico", "Guayaquil"),
    Supplier("SUP002", "Distribuidora Andina", "Quito"),
    Supplier("SUP003", "Filtros Ecuador", "Cuenca"),
    Supplier("SUP004", "Importadora Motor Oil", "Manta"),
]

PRODUCT_NAMES: Dict[str, List[str]] = {
    "Aceites": [
        "Aceite 20W-50 1gal", "Aceite 10W-40 1gal", "Aceite 5W-30 Sintético 1qt",
        "Aceite 15W-40 Diésel 1gal", "Aceite 2T Motos 1L", "Aceite 4T Motos 1L",
        "Aceite 0W-20 Sintético 1qt", "Aceite Hidráulico ISO 68 5gal",
        "Aceite de Transmisión ATF 1qt", "Aceite 25W-60 1gal",
    ],
    "Filtros": [
        "Filtro de Aceite PH3593A", "Filtro de Aceite PH8A", "Filtro de Aire CA10190",
        "Filtro de Combustible G3727", "Filtro de Cabina CF10285", "Filtro de Aceite Moto",
        "Filtro de Aire Diésel", "Filtro Separador de Agua", "Filtro de Aceite Diésel",
        "Filtro de Aire Moto",
    ],
    "Lubricantes": [
        "Grasa Multipropósito 1lb", "Grasa de Litio 14oz", "Lubricante de Cadena 400ml",
        "Aceite de Caja 80W-90 1gal", "Aceite de Diferencial 85W-140 1gal",
        "Lubricante Penetrante 11oz", "Grasa Chasis 3lb", "Lubricante Silicona 10oz",
        "Líquido de Frenos DOT4 12oz", "Refrigerante 50/50 1gal",
    ],
    "Aditivos": [
        "Limpiador de Inyectores 12oz", "Tratamiento de Aceite 15oz", "Estabilizador de Combustible",
        "Aditivo Antifricción", "Limpiador de Radiador", "Sellador de Fugas de Aceite",
        "Aditivo Diésel Cetano", "Octane Booster 15oz", "Limpiador de Carburador 12oz",
        "Aditivo Dirección Hidráulica",
    ],
}


def _product_id(index: int) -> str:
    return f"PRD{index:03d}"


def generate_products(now: Optional[datetime] = None) -> List[dict]:
    """40 ürün üretir (her kategoriden 10).

    Problemli senaryolar:
    - Her kategorinin ilk ürünü sıfır stokla başlar
    - İkinci ve üçüncü ürünler minimum eşiğin altındadır
    - Son ürün için min_stock tanımlı değildir (eşik verisi eksik)
    """
    now = now or datetime.now(timezone.utc)
    products = []
    counter = 1
    for cat in CATEGORIES:
        for position, name in enumerate(PRODUCT_NAMES[cat.name]):
            price = round(random.uniform(cat.price_min, cat.price_max), 2)
            cost = round(price * random.uniform(cat.cost_ratio_min, cat.cost_ratio_max), 2)
            min_stock = cat.min_stock
            max_stock = min_stock * 6

            # --- PROBLEMLİ SENARYO: Stok tükenmesi / düşük stok ---
            if position == 0:
                stock = 0
            elif position in (1, 2):
                stock = random.randint(1, min_stock - 1)
            else:
                stock = random.randint(min_stock, max_stock)

            supplier = random.choice(SUPPLIERS)
            item = {
                "product_id": _product_id(counter),
                "name": name,
                "category": cat.name,
                "unit_cost": cost,
                "unit_price": price,
                "current_stock": stock,
                "min_stock": min_stock,
                "max_stock": max_stock,
                "supplier": supplier.name,
                "sku": f"LUB-{cat.name[:3].upper()}-{counter:03d}",
                "unit": "unidad",
                "last_updated": (now - timedelta(days=random.randint(1, 400))).isoformat(),
            }

            # --- PROBLEMLİ SENARYO: Eşik verisi eksik ---
            if position == len(PRODUCT_NAMES[cat.name]) - 1:
                del item["min_stock"]

            products.append(item)
            counter += 1
    return products


def generate_sales(products: List[dict], days: int = 365, now: Optional[datetime] = None) -> List[dict]:
    """Günlük satış kayıtları üretir.

    - Her kategorinin 5. ürünü hiç satılmaz
    - 6. ürünün son satışı 200-400 gün öncesindedir (atıl stok)
    - Diğer ürünler için satış hızı ürüne göre değişir
    """
    now = now or datetime.now(timezone.utc)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    sales = []
    sale_counter = 1

    for index, prod in enumerate(products):
        position = index % 10

        # --- PROBLEMLİ SENARYO: Hiç satılmamış ürün ---
        if position == 4:
            continue

        # --- PROBLEMLİ SENARYO: Atıl stok ---
        if position == 5:
            last_day = random.randint(min(200, days - 1), min(400, days - 1))
            sale_days = [last_day + offset for offset in range(0, 30, 7)]
        else:
            # Ürün bazlı satış olasılığı: bazı ürünler çok hızlı döner
            daily_probability = random.uniform(0.1, 0.9)
            sale_days = [d for d in range(days) if random.random() < daily_probability]

        for day_offset in sale_days:
            if day_offset >= days:
                continue
            ts = today - timedelta(days=day_offset) + timedelta(hours=random.randint(8, 19))
            sales.append({
                "product_id": prod["product_id"],
                "sale_id": f"S{sale_counter:07d}",
                "quantity": random.randint(1, 6),
                "timestamp": ts.isoformat(),
                "unit_price": prod["unit_price"],
            })
            sale_counter += 1

    return sales


def save_json(data, filepath: str):
    """JSON dosyasına kaydet."""
    os.makedirs(os.path.dirname(filepath), exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    print(f"  ✓ {filepath} ({len(data)} kayıt)")


def generate_all(output_dir: Optional[str] = "data_layer/data", seed: int = 42, days: int = 365) -> dict:
    """Tüm örnek veriyi üretir; output_dir verilirse JSON olarak kaydeder."""
    random.seed(seed)
    now = datetime.now(timezone.utc)

    products = generate_products(now)
    sales = generate_sales(products, days=days, now=now)

    if output_dir:
        print("🏭 Örnek veri üretiliyor...\n")
        save_json(products, f"{output_dir}/products.json")
        save_json(sales, f"{output_dir}/sales-history.json")
        print(f"\n✅ Üretim tamamlandı: {len(products)} ürün, {len(sales):,} satış kaydı")

    return {"products": products, "sales": sales}


if __name__ == "__main__":
    generate_all()
