"""DynamoDB tablo oluşturma ve veri yükleme.

4 tablo: Products, SalesHistory, StockAlerts, AlertEvents
"""
import json
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from decimal import Decimal
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError


REGION = "us-west-2"
BOTO_CONFIG = Config(retries={"max_attempts": 3})

TABLE_DEFINITIONS = [
    {
        "TableName": "Products",
        "KeySchema": [
            {"AttributeName": "product_id", "KeyType": "HASH"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "product_id", "AttributeType": "S"},
            {"AttributeName": "category", "AttributeType": "S"},
        ],
        "GlobalSecondaryIndexes": [
            {
                "IndexName": "CategoryIndex",
                "KeySchema": [
                    {"AttributeName": "category", "KeyType": "HASH"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": "SalesHistory",
        "KeySchema": [
            {"AttributeName": "product_id", "KeyType": "HASH"},
            {"AttributeName": "sale_id", "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "product_id", "AttributeType": "S"},
            {"AttributeName": "sale_id", "AttributeType": "S"},
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": "StockAlerts",
        "KeySchema": [
            {"AttributeName": "alert_id", "KeyType": "HASH"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "alert_id", "AttributeType": "S"},
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": "AlertEvents",
        "KeySchema": [
            {"AttributeName": "event_id", "KeyType": "HASH"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "event_id", "AttributeType": "S"},
            {"AttributeName": "alert_id", "AttributeType": "S"},
            {"AttributeName": "timestamp", "AttributeType": "S"},
        ],
        "GlobalSecondaryIndexes": [
            {
                "IndexName": "AlertTimeIndex",
                "KeySchema": [
                    {"AttributeName": "alert_id", "KeyType": "HASH"},
                    {"AttributeName": "timestamp", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
]


def _client(region: str, client: Optional[Any]):
    return client or boto3.client("dynamodb", region_name=region, config=BOTO_CONFIG)


def create_tables(region: str = REGION, client: Optional[Any] = None) -> list[str]:
    """Eksik DynamoDB tablolarını oluşturur; oluşturulan tablo adlarını döndürür."""
    dynamodb = _client(region, client)
    created = []

    for table_def in TABLE_DEFINITIONS:
        table_name = table_def["TableName"]
        try:
            dynamodb.describe_table(TableName=table_name)
            print(f"  ⏭️  {table_name} zaten mevcut, atlanıyor")
        except ClientError as e:
            if e.response["Error"]["Code"] == "ResourceNotFoundException":
                print(f"  🔨 {table_name} oluşturuluyor...")
                dynamodb.create_table(**table_def)
                # Tablonun aktif olmasını bekle
                waiter = dynamodb.get_waiter("table_exists")
                waiter.wait(TableName=table_name)
                print(f"  ✓  {table_name} oluşturuldu")
                created.append(table_name)
            else:
                raise
    return created


def convert_floats(obj):
    """DynamoDB float kabul etmez: float -> Decimal."""
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: convert_floats(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [convert_floats(i) for i in obj]
    return obj


def load_data_to_table(
    table_name: str,
    data: list,
    region: str = REGION,
    threads: int = 4,
    resource: Optional[Any] = None,
    chunk_size: int = 10000,
) -> int:
    """Kayıtları DynamoDB tablosuna yükler (paralel batch write)."""
    data = convert_floats(data)
    total = len(data)
    counter = {"done": 0}
    lock = threading.Lock()
    dynamodb = resource or boto3.resource("dynamodb", region_name=region, config=BOTO_CONFIG)

    def upload_chunk(chunk):
        """Bir chunk'ı batch write ile yükler."""
        table = dynamodb.Table(table_name)
        with table.batch_writer() as batch:
            for item in chunk:
                batch.put_item(Item=item)
        with lock:
            counter["done"] += len(chunk)

    chunks = [data[i:i + chunk_size] for i in range(0, total, chunk_size)]

    with ThreadPoolExecutor(max_workers=threads) as executor:
        futures = [executor.submit(upload_chunk, chunk) for chunk in chunks]
        for future in as_completed(futures):
            future.result()  # hata varsa raise eder

    print(f"  ✓  {table_name}: {counter['done']} kayıt yüklendi")
    return counter["done"]


def load_all_data(data_dir: str = "data_layer/data", region: str = REGION, resource: Optional[Any] = None):
    """Üretilmiş JSON verilerini DynamoDB'ye yükler."""
    print("\n📤 DynamoDB'ye veri yükleniyor...\n")

    with open(f"{data_dir}/products.json", "r", encoding="utf-8") as f:
        load_data_to_table("Products", json.load(f), region, resource=resource)

    with open(f"{data_dir}/sales-history.json", "r", encoding="utf-8") as f:
        load_data_to_table("SalesHistory", json.load(f), region, resource=resource)

    print("\n✅ Tüm veriler DynamoDB'ye yüklendi!")


def delete_tables(region: str = REGION, client: Optional[Any] = None):
    """Tüm tabloları siler (dikkatli kullan)."""
    dynamodb = _client(region, client)
    for table_def in TABLE_DEFINITIONS:
        table_name = table_def["TableName"]
        try:
            dynamodb.delete_table(TableName=table_name)
            print(f"  🗑️  {table_name} silindi")
        except ClientError:
            print(f"  ⏭️  {table_name} bulunamadı, atlanıyor")


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "--delete":
        print("🗑️  Tablolar siliniyor...")
        delete_tables()
    else:
        print("🏗️  DynamoDB tabloları oluşturuluyor...\n")
        create_tables()
        load_all_data()
