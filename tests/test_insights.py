"""Stok analiz servisi entegrasyon testleri."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from lubristock.config import EngineConfig
from lubristock.models.inventory import LifecycleStatus, Product, SaleRecord
from lubristock.services import InMemoryFactsProvider, StockInsightsService, build_service
from lubristock.services.alert_persistence import DynamoDBAlertPersistence, NullAlertPersistence
from lubristock.services.facts_provider import DynamoDBFactsProvider

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _product(pid, stock, min_stock=10, price=10.0, cost=5.0) -> Product:
    return Product(pid, f"Ürün {pid}", "Aceites", cost, price, stock, min_stock, 80, "Distribuidora Andina")


def _create_service(products=None, sales=None, config=None) -> StockInsightsService:
    products = products if products is not None else [_product("A", 0), _product("B", 30), _product("C", 5)]
    sales = sales if sales is not None else [
        SaleRecord("A", 10, NOW - timedelta(days=5), 10.0),
        SaleRecord("B", 3, NOW - timedelta(days=300), 10.0),
    ]
    return StockInsightsService(
        facts_provider=InMemoryFactsProvider(products, sales),
        config=config or EngineConfig(),
        clock=lambda: NOW,
    )


class TestServiceFlow:
    """Uçtan uca uyarı akışı."""

    def test_refresh_view_resolve(self):
        service = _create_service()
        result = service.refresh()
        assert result.success
        assert service.get_unseen_flag() is True
        assert [a.id for a in service.get_visible_alerts()] == ["alert-A", "alert-C"]

        service.clear_unseen_flag()
        assert service.mark_viewed("alert-A").changed
        assert service.mark_resolved("alert-A").success
        assert [a.id for a in service.get_visible_alerts()] == ["alert-C"]
        assert service.store.get_alert("alert-A").lifecycle_status == LifecycleStatus.RESOLVED
        assert service.notifications.badge_count() == 1


class TestAnalytics:
    def test_obsolescence_uses_config_defaults(self):
        service = _create_service()
        report = service.get_obsolescence_report()
        # B 300 gün önce, C hiç satılmadı
        assert [e.product_id for e in report.entries] == ["C", "B"]
        assert report.idle_threshold_days == 180

    def test_obsolete_products_tuple(self):
        service = _create_service()
        entries, metrics = service.get_obsolete_products(top_n=1)
        assert len(entries) == 1
        assert metrics.count == 2

    def test_obsolescence_override_threshold(self):
        service = _create_service()
        report = service.get_obsolescence_report(idle_threshold_days=3)
        assert report.metrics.count == 3

    def test_classification_window_from_config(self):
        service = _create_service(config=EngineConfig(rotation_window_days=30))
        result = service.get_classification()
        assert result.high_rotation == ["A"]
        assert "B" in result.low_rotation

    def test_abc_classification(self):
        service = _create_service()
        entries = service.get_abc_classification()
        assert entries[0].product_id == "A"
        assert entries[0].abc_class == "A"

    def test_obsolescence_history(self):
        service = _create_service()
        points = service.get_obsolescence_history()
        assert {p.period for p in points} == {"2025-05", "2024-08"}


class TestPolling:
    def test_start_and_stop_polling(self):
        service = _create_service()
        scheduler = service.start_polling(interval_seconds=60)
        try:
            assert scheduler.interval_seconds == 60
        finally:
            service.stop_polling()
        assert scheduler.is_running is False


class TestBuildService:
    """Konfigürasyona göre bağımlılık kurulumu."""

    def test_local_mode(self):
        provider = InMemoryFactsProvider([_product("A", 1)])
        service = build_service(config=EngineConfig(), facts_provider=provider)
        assert service.facts_provider is provider
        assert isinstance(service.store.persistence, NullAlertPersistence)
        assert service.store.event_log.remote_enabled is False

    def test_local_mode_default_provider(self):
        service = build_service(config=EngineConfig())
        assert isinstance(service.facts_provider, InMemoryFactsProvider)
        assert service.refresh().success

    def test_backend_mode(self):
        resource, s3 = MagicMock(), MagicMock()
        config = EngineConfig(backend_enabled=True, alerts_table="Alerts-test", log_bucket="logs")
        service = build_service(config=config, dynamodb_resource=resource, s3_client=s3)
        assert isinstance(service.facts_provider, DynamoDBFactsProvider)
        assert isinstance(service.store.persistence, DynamoDBAlertPersistence)
        assert service.store.event_log.remote_enabled is True
        resource.Table.assert_any_call("Alerts-test")

    def test_refresh_timeout_from_config(self):
        service = _create_service(config=EngineConfig(refresh_timeout_seconds=1.5))
        assert service.store.refresh_timeout == 1.5
