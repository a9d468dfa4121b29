"""Uyarı olay logları için S3 bucket kurulumu.

Bucket yapısı:
  lubristock-alert-logs-{account_id}/
  ├── alert-logs/
  └── reports/
"""
from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError


REGION = "us-west-2"
BUCKET_PREFIX = "lubristock-alert-logs"
LOG_PREFIXES = ["alert-logs/", "reports/"]


def get_bucket_name(region: str = REGION, sts_client: Optional[Any] = None) -> str:
    """Account ID ile unique bucket adı oluşturur."""
    sts = sts_client or boto3.client("sts", region_name=region)
    account_id = sts.get_caller_identity()["Account"]
    return f"{BUCKET_PREFIX}-{account_id}"


def create_bucket(bucket_name: str, region: str = REGION, s3_client: Optional[Any] = None) -> str:
    """Log bucket'ını ve klasör prefix'lerini oluşturur."""
    s3 = s3_client or boto3.client("s3", region_name=region)

    try:
        if region == "us-east-1":
            s3.create_bucket(Bucket=bucket_name)
        else:
            s3.create_bucket(
                Bucket=bucket_name,
                CreateBucketConfiguration={"LocationConstraint": region},
            )
        print(f"  ✓ Bucket oluşturuldu: {bucket_name}")
    except ClientError as e:
        if e.response["Error"]["Code"] in ("BucketAlreadyOwnedByYou", "BucketAlreadyExists"):
            print(f"  ⏭️  Bucket zaten mevcut: {bucket_name}")
        else:
            raise

    # Boş prefix'ler oluştur (klasör yapısı)
    for prefix in LOG_PREFIXES:
        s3.put_object(Bucket=bucket_name, Key=prefix, Body=b"")

    return bucket_name


def delete_bucket(bucket_name: str, region: str = REGION, s3_resource: Optional[Any] = None):
    """Bucket ve içeriğini siler (dikkatli kullan)."""
    s3 = s3_resource or boto3.resource("s3", region_name=region)
    try:
        bucket = s3.Bucket(bucket_name)
        bucket.objects.all().delete()
        bucket.delete()
        print(f"  🗑️  {bucket_name} silindi")
    except ClientError:
        print(f"  ⏭️  {bucket_name} bulunamadı")
