"""Rotasyon / marj sınıflandırması ve ABC analizi unit testleri."""

from datetime import datetime, timedelta, timezone

import pytest

from lubristock.engine.classifier import (
    classify_abc_by_revenue,
    classify_products,
    margin_ratio,
    sold_quantity_by_product,
    split_into_thirds,
)
from lubristock.models.inventory import Product, SaleRecord

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _product(pid, price=10.0, cost=6.0) -> Product:
    return Product(
        id=pid,
        name=f"Ürün {pid}",
        category="Lubricantes",
        unit_cost=cost,
        unit_price=price,
        current_stock=20,
        min_stock=5,
        max_stock=100,
        supplier="Lubricantes del Pacífico",
    )


def _sale(pid, quantity, days_ago=1, price=10.0) -> SaleRecord:
    return SaleRecord(pid, quantity, NOW - timedelta(days=days_ago), price)


def _all_rotation(result):
    return result.high_rotation + result.medium_rotation + result.low_rotation


def _all_margin(result):
    return result.high_profit_margin + result.medium_profit_margin + result.low_profit_margin


class TestThirds:
    def test_even_split(self):
        assert split_into_thirds(["a", "b", "c", "d", "e", "f"]) == (["a", "b"], ["c", "d"], ["e", "f"])

    def test_remainder_goes_to_bottom(self):
        assert split_into_thirds(["a", "b", "c", "d", "e"]) == (["a"], ["b"], ["c", "d", "e"])

    def test_small_lists(self):
        assert split_into_thirds(["a", "b"]) == ([], [], ["a", "b"])
        assert split_into_thirds([]) == ([], [], [])


class TestRotation:
    """Satış adedine göre rotasyon dilimleri."""

    def test_ranked_by_quantity(self):
        products = [_product(p) for p in "ABCDEF"]
        sales = [_sale("A", 50), _sale("B", 40), _sale("C", 30), _sale("D", 20), _sale("E", 10), _sale("F", 5)]
        result = classify_products(products, sales, window_days=90, now=NOW)
        assert result.high_rotation == ["A", "B"]
        assert result.medium_rotation == ["C", "D"]
        assert result.low_rotation == ["E", "F"]

    def test_partitions_exhaustive_and_disjoint(self):
        products = [_product(f"P{i:02d}", price=10 + i, cost=5) for i in range(11)]
        sales = [_sale(f"P{i:02d}", i + 1) for i in range(0, 11, 2)]
        result = classify_products(products, sales, window_days=90, now=NOW)
        rotation = _all_rotation(result)
        assert sorted(rotation) == sorted(p.id for p in products)
        assert len(rotation) == len(set(rotation))
        margin = _all_margin(result)
        assert sorted(margin) == sorted(p.id for p in products)
        assert len(margin) == len(set(margin))

    def test_unsold_products_in_low(self):
        products = [_product(p) for p in "ABCDEF"]
        sales = [_sale("A", 5)]
        result = classify_products(products, sales, window_days=90, now=NOW)
        assert result.high_rotation == ["A"]
        assert result.medium_rotation == []
        assert set(result.low_rotation) == {"B", "C", "D", "E", "F"}

    def test_sales_outside_window_ignored(self):
        products = [_product("A"), _product("B"), _product("C")]
        sales = [_sale("A", 100, days_ago=120), _sale("B", 1), _sale("C", 2)]
        result = classify_products(products, sales, window_days=90, now=NOW)
        assert result.high_rotation == ["C"]
        assert "A" in result.low_rotation

    def test_window_boundary_excluded(self):
        sold = sold_quantity_by_product([_sale("A", 3, days_ago=90)], window_days=90, now=NOW)
        assert sold == {}

    def test_future_sales_ignored(self):
        sold = sold_quantity_by_product([_sale("A", 3, days_ago=-1)], window_days=90, now=NOW)
        assert sold == {}

    def test_ties_broken_by_id(self):
        products = [_product(p) for p in "CBA"]
        sales = [_sale(p, 5) for p in "ABC"]
        result = classify_products(products, sales, window_days=90, now=NOW)
        assert result.high_rotation == ["A"]
        assert result.medium_rotation == ["B"]
        assert result.low_rotation == ["C"]

    def test_deterministic_regardless_of_input_order(self):
        products = [_product(f"P{i}") for i in range(9)]
        sales = [_sale(f"P{i}", i % 3) for i in range(9)]
        first = classify_products(products, sales, window_days=90, now=NOW)
        second = classify_products(list(reversed(products)), list(reversed(sales)), window_days=90, now=NOW)
        assert first == second

    def test_empty_catalog(self):
        result = classify_products([], [], window_days=90, now=NOW)
        assert _all_rotation(result) == []
        assert _all_margin(result) == []

    def test_invalid_window_raises(self):
        with pytest.raises(ValueError):
            classify_products([], [], window_days=0, now=NOW)


class TestMargin:
    """Kâr marjı dilimleri."""

    def test_margin_ratio(self):
        assert margin_ratio(_product("A", price=10.0, cost=6.0)) == pytest.approx(0.4)

    def test_zero_price_has_no_margin(self):
        assert margin_ratio(_product("A", price=0.0)) is None

    def test_ranked_by_margin(self):
        products = [
            _product("A", price=10, cost=9),
            _product("B", price=10, cost=2),
            _product("C", price=10, cost=5),
        ]
        result = classify_products(products, [], window_days=90, now=NOW)
        assert result.high_profit_margin == ["B"]
        assert result.medium_profit_margin == ["C"]
        assert result.low_profit_margin == ["A"]

    def test_zero_price_skipped(self):
        products = [_product("A", price=0.0), _product("B"), _product("C"), _product("D")]
        result = classify_products(products, [], window_days=90, now=NOW)
        assert result.skipped_margin == ["A"]
        assert "A" not in _all_margin(result)
        assert "A" in _all_rotation(result)

    def test_negative_margin_lands_low(self):
        products = [_product("A", price=10, cost=12), _product("B"), _product("C")]
        result = classify_products(products, [], window_days=90, now=NOW)
        assert result.low_profit_margin == ["A"]


class TestAbc:
    """Gelire göre ABC analizi."""

    def test_classes_by_cumulative_revenue(self):
        products = [_product(p) for p in "ABCD"]
        sales = [_sale("A", 70), _sale("B", 20), _sale("C", 7), _sale("D", 3)]
        entries = classify_abc_by_revenue(products, sales, now=NOW)
        classes = {e.product_id: e.abc_class for e in entries}
        assert classes == {"A": "A", "B": "B", "C": "C", "D": "C"}
        assert entries[0].cumulative_percentage == pytest.approx(70.0)
        assert entries[-1].cumulative_percentage == pytest.approx(100.0)

    def test_zero_revenue_all_c(self):
        products = [_product("A"), _product("B")]
        entries = classify_abc_by_revenue(products, [], now=NOW)
        assert [e.abc_class for e in entries] == ["C", "C"]

    def test_window_applied(self):
        products = [_product("A"), _product("B")]
        sales = [_sale("A", 100, days_ago=400), _sale("B", 1)]
        entries = classify_abc_by_revenue(products, sales, window_days=365, now=NOW)
        assert entries[0].product_id == "B"
        assert entries[1].revenue == 0
