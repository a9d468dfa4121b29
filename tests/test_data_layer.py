"""Örnek veri üretimi ve altyapı kurulumu testleri."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from data_layer.generators.generators import generate_all
from data_layer.infrastructure.dynamodb_setup import (
    TABLE_DEFINITIONS,
    convert_floats,
    create_tables,
    load_data_to_table,
)
from data_layer.infrastructure.s3_setup import create_bucket
from lubristock.engine.obsolescence import NEVER_SOLD_DAYS, detect_obsolete_products
from lubristock.engine.stock_evaluator import evaluate_stock
from lubristock.services.facts_provider import product_from_item, sale_from_item


@pytest.fixture(scope="module")
def sample_data():
    return generate_all(output_dir=None, seed=7)


class TestGenerators:
    """Problemli senaryoların üretilmesi."""

    def test_product_count(self, sample_data):
        assert len(sample_data["products"]) == 40

    def test_unique_ids(self, sample_data):
        ids = [p["product_id"] for p in sample_data["products"]]
        assert len(ids) == len(set(ids))

    def test_zero_stock_products(self, sample_data):
        zero = [p for p in sample_data["products"] if p["current_stock"] == 0]
        assert len(zero) == 4

    def test_missing_thresholds(self, sample_data):
        missing = [p for p in sample_data["products"] if "min_stock" not in p]
        assert len(missing) == 4

    def test_same_seed_same_data(self):
        first = generate_all(output_dir=None, seed=3, days=30)
        second = generate_all(output_dir=None, seed=3, days=30)
        assert [p["current_stock"] for p in first["products"]] == [p["current_stock"] for p in second["products"]]

    def test_evaluation_of_sample(self, sample_data):
        products = [product_from_item(p) for p in sample_data["products"]]
        result = evaluate_stock(products)
        assert len(result.candidates) == 12
        assert len(result.warnings) == 4

    def test_never_sold_products_obsolete(self, sample_data):
        products = [product_from_item(p) for p in sample_data["products"]]
        sales = [sale_from_item(s) for s in sample_data["sales"]]
        report = detect_obsolete_products(products, sales, 180, top_n=None, now=datetime.now(timezone.utc))
        never_sold = [e for e in report.entries if e.days_since_last_sale == NEVER_SOLD_DAYS]
        assert len(never_sold) == 4
        # Her kategorinin 6. ürünü de atıl
        assert report.metrics.count >= 8


class TestDynamoDBSetup:
    def test_table_definitions(self):
        names = [t["TableName"] for t in TABLE_DEFINITIONS]
        assert names == ["Products", "SalesHistory", "StockAlerts", "AlertEvents"]

    def test_create_missing_tables(self):
        client = MagicMock()
        client.describe_table.side_effect = ClientError(
            {"Error": {"Code": "ResourceNotFoundException", "Message": "yok"}}, "DescribeTable"
        )
        created = create_tables(client=client)
        assert created == ["Products", "SalesHistory", "StockAlerts", "AlertEvents"]
        assert client.create_table.call_count == 4

    def test_existing_tables_skipped(self):
        client = MagicMock()
        assert create_tables(client=client) == []
        client.create_table.assert_not_called()

    def test_convert_floats(self):
        converted = convert_floats({"price": 1.5, "items": [2.25], "name": "x", "qty": 3})
        assert converted == {"price": Decimal("1.5"), "items": [Decimal("2.25")], "name": "x", "qty": 3}

    def test_load_data_to_table(self):
        resource = MagicMock()
        data = [{"product_id": f"PRD{i:03d}", "unit_price": 9.9} for i in range(25)]
        loaded = load_data_to_table("Products", data, resource=resource, threads=1, chunk_size=10)
        assert loaded == 25
        batch = resource.Table.return_value.batch_writer.return_value.__enter__.return_value
        assert batch.put_item.call_count == 25


class TestS3Setup:
    def test_create_bucket_with_prefixes(self):
        s3 = MagicMock()
        assert create_bucket("lubristock-logs", region="eu-west-1", s3_client=s3) == "lubristock-logs"
        s3.create_bucket.assert_called_once_with(
            Bucket="lubristock-logs",
            CreateBucketConfiguration={"LocationConstraint": "eu-west-1"},
        )
        assert s3.put_object.call_count == 2

    def test_existing_bucket_ok(self):
        s3 = MagicMock()
        s3.create_bucket.side_effect = ClientError(
            {"Error": {"Code": "BucketAlreadyOwnedByYou", "Message": "var"}}, "CreateBucket"
        )
        assert create_bucket("lubristock-logs", s3_client=s3) == "lubristock-logs"
