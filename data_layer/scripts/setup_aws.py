"""AWS altyapısını kurar ve örnek veriyi yükler.

Kullanım:
    python -m data_layer.scripts.setup_aws              # Kur ve yükle
    python -m data_layer.scripts.setup_aws --delete     # Her şeyi sil
    python -m data_layer.scripts.setup_aws --region eu-west-1  # Farklı region
"""
import os
import sys

import env_loader  # noqa: F401
from data_layer.generators.generators import generate_all
from data_layer.infrastructure.dynamodb_setup import create_tables, delete_tables, load_all_data
from data_layer.infrastructure.s3_setup import create_bucket, delete_bucket, get_bucket_name


def main(argv=None):
    region = os.environ.get("AWS_DEFAULT_REGION", "us-west-2")
    delete_mode = False

    # Argümanları parse et
    args = sys.argv[1:] if argv is None else argv
    for i, arg in enumerate(args):
        if arg == "--delete":
            delete_mode = True
        elif arg == "--region" and i + 1 < len(args):
            region = args[i + 1]

    bucket = os.environ.get("LUBRISTOCK_LOG_BUCKET") or get_bucket_name(region)

    if delete_mode:
        print("🗑️  AWS kaynakları siliniyor...\n")
        print("--- DynamoDB ---")
        delete_tables(region)
        print("\n--- S3 ---")
        delete_bucket(bucket, region)
        print("\n✅ Tüm kaynaklar silindi!")
        return

    print("=" * 60)
    print("🚀 AWS Altyapı Kurulumu - Lubrikant Stok Uyarı Sistemi")
    print(f"   Region: {region}")
    print("=" * 60)

    # 1. Örnek veri
    print("\n🏭 ADIM 1: Örnek Veri")
    print("-" * 40)
    generate_all()

    # 2. DynamoDB
    print("\n📊 ADIM 2: DynamoDB Tabloları")
    print("-" * 40)
    create_tables(region)

    # 3. S3
    print("\n📦 ADIM 3: S3 Log Bucket")
    print("-" * 40)
    create_bucket(bucket, region)

    # 4. Veri yükleme
    print("\n📤 ADIM 4: Veri Yükleme")
    print("-" * 40)
    load_all_data(region=region)

    print("\n" + "=" * 60)
    print("✅ AWS altyapısı hazır!")
    print("   DynamoDB: 4 tablo oluşturuldu ve veri yüklendi")
    print(f"   S3: {bucket} (LUBRISTOCK_LOG_BUCKET olarak ayarla)")
    print(f"   Region: {region}")
    print("=" * 60)


if __name__ == "__main__":
    main()
