"""
Stok Uyarı ve Envanter Sınıflandırma Demo Script'i.

Varsayılan olarak örnek veriyi bellekte üretir. LUBRISTOCK_BACKEND_ENABLED=true
ise Products / SalesHistory tablolarından okur ve uyarı durumlarını
StockAlerts tablosuna yazar.

Kullanım:
    python demo.py
    LUBRISTOCK_BACKEND_ENABLED=true AWS_DEFAULT_REGION=us-west-2 python demo.py
"""

import logging

import env_loader  # noqa: F401
from data_layer.generators.generators import generate_all
from lubristock.config import EngineConfig
from lubristock.services import InMemoryFactsProvider, build_service
from lubristock.services.facts_provider import product_from_item, sale_from_item


def _local_provider() -> InMemoryFactsProvider:
    """Örnek veriyi bellek içi sağlayıcıya yükler."""
    data = generate_all(output_dir=None)
    return InMemoryFactsProvider(
        products=[product_from_item(p) for p in data["products"]],
        sales=[sale_from_item(s) for s in data["sales"]],
    )


def show_alerts(service):
    print("\n" + "=" * 60)
    print("🔔 STOK UYARILARI")
    print("=" * 60)

    result = service.refresh()
    if not result.success:
        print(f"❌ Yenileme başarısız: {result.error}")
        return
    print(f"   {result.created} yeni, {result.resolved} çözüldü, {result.visible} görünür")
    for warning in result.warnings:
        print(f"   ⚠️  {warning.product_id}: {warning.reason}")

    summary = service.notifications.summary()
    print(
        f"\n   Toplam: {summary.total} | critical={summary.critical} high={summary.high} "
        f"medium={summary.medium} low={summary.low} | yeni uyarı: {'evet' if summary.unseen else 'hayır'}"
    )

    alerts = service.notifications.open()
    for alert in alerts:
        print(
            f"   [{alert.urgency.value:>8}] {alert.product_name} ({alert.sku}): "
            f"{alert.current_stock}/{alert.min_stock} {alert.unit} - {alert.supplier}"
        )

    if alerts:
        first = alerts[0]
        service.notifications.inspect(first.id)
        resolved = service.mark_resolved(first.id)
        print(f"\n   ✓ {first.id} çözüldü (başarılı={resolved.success}), görünür: {service.notifications.badge_count()}")


def show_obsolescence(service):
    print("\n" + "=" * 60)
    print("📦 ATIL STOK")
    print("=" * 60)

    report = service.get_obsolescence_report()
    metrics = report.metrics
    print(
        f"   {metrics.count} ürün {report.idle_threshold_days}+ gündür satılmadı, "
        f"ortalama {metrics.avg_days} gün, etki ${metrics.impact:,.2f}"
    )
    for entry in report.entries:
        days = "hiç satılmadı" if entry.days_since_last_sale >= 9999 else f"{entry.days_since_last_sale} gün"
        print(f"   - {entry.name}: {days}, stok {entry.current_stock}")

    for point in service.get_obsolescence_history(months=6):
        print(f"   {point.period}: {point.obsolete_count} ürün, ${point.financial_impact:,}")


def show_classification(service):
    print("\n" + "=" * 60)
    print("🔄 ROTASYON VE MARJ")
    print("=" * 60)

    result = service.get_classification()
    print(f"   Yüksek rotasyon: {len(result.high_rotation)} | orta: {len(result.medium_rotation)} | düşük: {len(result.low_rotation)}")
    print(
        f"   Yüksek marj: {len(result.high_profit_margin)} | orta: {len(result.medium_profit_margin)} "
        f"| düşük: {len(result.low_profit_margin)}"
    )

    abc = service.get_abc_classification(window_days=365)
    counts = {"A": 0, "B": 0, "C": 0}
    for entry in abc:
        counts[entry.abc_class] += 1
    print(f"   ABC: A={counts['A']} B={counts['B']} C={counts['C']}")


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = EngineConfig.from_env()
    facts_provider = None if config.backend_enabled else _local_provider()
    service = build_service(config=config, facts_provider=facts_provider)

    print("🚀 Lubrikant Stok Analizi")
    print(f"   Backend: {'DynamoDB' if config.backend_enabled else 'bellek içi'} ({config.region_name})")

    show_alerts(service)
    show_obsolescence(service)
    show_classification(service)

    print("\n✅ Demo tamamlandı!")


if __name__ == "__main__":
    main()
