"""Envanter ve satış verisi sağlayıcıları.

Çekirdek bu verileri yalnızca okur; stok güncellemeleri çevredeki envanter
akışları tarafından yapılır ve bir sonraki refresh() ile yansır.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from lubristock.models.inventory import Product, SaleRecord, as_utc, utc_now

logger = logging.getLogger(__name__)


class FactsProviderError(Exception):
    """Envanter/satış verisine ulaşılamadı (geçici hata)."""
    pass


class InventoryFactsProvider(ABC):
    """Ürün ve satış verisi için okuma arayüzü."""

    @abstractmethod
    def list_products(self) -> list[Product]:
        ...

    @abstractmethod
    def get_sale_history(self, window_days: Optional[int] = None) -> list[SaleRecord]:
        ...

    @abstractmethod
    def update_product_stock(self, product_id: str, new_stock: int) -> Product:
        ...


class InMemoryFactsProvider(InventoryFactsProvider):
    """Bellek içi sağlayıcı; yerel mod ve testler için."""

    def __init__(
        self,
        products: Optional[Iterable[Product]] = None,
        sales: Optional[Iterable[SaleRecord]] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._products: dict[str, Product] = {p.id: replace(p) for p in products or []}
        self._sales: list[SaleRecord] = list(sales or [])

    def list_products(self) -> list[Product]:
        # Kopya döndürülür: çağıran tutarlı bir snapshot görür
        with self._lock:
            return [replace(p) for p in self._products.values()]

    def get_sale_history(self, window_days: Optional[int] = None) -> list[SaleRecord]:
        with self._lock:
            sales = list(self._sales)
        if window_days is None:
            return sales
        cutoff = utc_now() - timedelta(days=window_days)
        return [s for s in sales if as_utc(s.timestamp) >= cutoff]

    def update_product_stock(self, product_id: str, new_stock: int) -> Product:
        if new_stock < 0:
            raise ValueError("Stok negatif olamaz")
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                raise KeyError(f"Ürün bulunamadı: {product_id}")
            product.current_stock = new_stock
            product.last_updated = utc_now()
            return replace(product)

    def upsert_product(self, product: Product) -> None:
        with self._lock:
            self._products[product.id] = replace(product)

    def add_sale(self, sale: SaleRecord) -> None:
        with self._lock:
            self._sales.append(sale)


def _to_native(obj):
    """Decimal ve diğer tipleri Python tiplerine çevirir."""
    if isinstance(obj, Decimal):
        return int(obj) if obj == int(obj) else float(obj)
    if isinstance(obj, dict):
        return {k: _to_native(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_to_native(i) for i in obj]
    return obj


def _parse_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    text = str(value)
    # Python 3.10 fromisoformat "Z" sonekini tanımaz
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text))


def product_from_item(item: dict) -> Product:
    """DynamoDB kaydını Product nesnesine çevirir."""
    item = _to_native(item)
    return Product(
        id=str(item["product_id"]),
        name=item.get("name", item["product_id"]),
        category=item.get("category", ""),
        unit_cost=float(item.get("unit_cost", 0) or 0),
        unit_price=float(item.get("unit_price", 0) or 0),
        current_stock=int(item.get("current_stock", 0) or 0),
        min_stock=item.get("min_stock"),
        max_stock=item.get("max_stock"),
        supplier=item.get("supplier", ""),
        sku=item.get("sku", ""),
        unit=item.get("unit", "unidad"),
        last_updated=_parse_datetime(item.get("last_updated")),
    )


def sale_from_item(item: dict) -> SaleRecord:
    item = _to_native(item)
    return SaleRecord(
        product_id=str(item["product_id"]),
        quantity=int(item.get("quantity", 0)),
        timestamp=_parse_datetime(item["timestamp"]),
        unit_price=float(item.get("unit_price", 0) or 0),
    )


class DynamoDBFactsProvider(InventoryFactsProvider):
    """Products ve SalesHistory tablolarından okuyan sağlayıcı."""

    def __init__(
        self,
        region_name: str = "us-west-2",
        products_table: str = "Products",
        sales_table: str = "SalesHistory",
        dynamodb_resource: Optional[Any] = None,
    ):
        self.dynamodb = dynamodb_resource or boto3.resource("dynamodb", region_name=region_name)
        self.products_table = self.dynamodb.Table(products_table)
        self.sales_table = self.dynamodb.Table(sales_table)

    def _scan_all(self, table, **kwargs) -> list[dict]:
        items: list[dict] = []
        response = table.scan(**kwargs)
        items.extend(response.get("Items", []))
        while "LastEvaluatedKey" in response:
            response = table.scan(ExclusiveStartKey=response["LastEvaluatedKey"], **kwargs)
            items.extend(response.get("Items", []))
        return items

    def list_products(self) -> list[Product]:
        try:
            items = self._scan_all(self.products_table)
        except (BotoCoreError, ClientError) as e:
            logger.error("Ürün listesi okunamadı: %s", e)
            raise FactsProviderError(str(e)) from e

        products = []
        for item in items:
            try:
                products.append(product_from_item(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Hatalı ürün kaydı atlandı: %s (%s)", item.get("product_id"), e)
        logger.info("%d ürün yüklendi", len(products))
        return products

    def get_sale_history(self, window_days: Optional[int] = None) -> list[SaleRecord]:
        kwargs = {}
        if window_days is not None:
            cutoff = (utc_now() - timedelta(days=window_days)).isoformat()
            kwargs["FilterExpression"] = Attr("timestamp").gte(cutoff)
        try:
            items = self._scan_all(self.sales_table, **kwargs)
        except (BotoCoreError, ClientError) as e:
            logger.error("Satış geçmişi okunamadı: %s", e)
            raise FactsProviderError(str(e)) from e

        sales = []
        for item in items:
            try:
                sales.append(sale_from_item(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Hatalı satış kaydı atlandı: %s (%s)", item.get("product_id"), e)
        return sales

    def update_product_stock(self, product_id: str, new_stock: int) -> Product:
        if new_stock < 0:
            raise ValueError("Stok negatif olamaz")
        try:
            response = self.products_table.update_item(
                Key={"product_id": product_id},
                UpdateExpression="SET current_stock = :s, last_updated = :t",
                ConditionExpression="attribute_exists(product_id)",
                ExpressionAttributeValues={":s": new_stock, ":t": utc_now().isoformat()},
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise KeyError(f"Ürün bulunamadı: {product_id}") from e
            raise FactsProviderError(str(e)) from e
        except BotoCoreError as e:
            raise FactsProviderError(str(e)) from e
        return product_from_item(response["Attributes"])
