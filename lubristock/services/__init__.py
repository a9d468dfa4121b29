from lubristock.services.alert_store import AlertLifecycleStore, AlertNotFoundError
from lubristock.services.facts_provider import (
    DynamoDBFactsProvider,
    FactsProviderError,
    InMemoryFactsProvider,
    InventoryFactsProvider,
)
from lubristock.services.insights import StockInsightsService, build_service
from lubristock.services.notifications import NotificationSurface
from lubristock.services.scheduler import RefreshScheduler

__all__ = [
    "AlertLifecycleStore",
    "AlertNotFoundError",
    "DynamoDBFactsProvider",
    "FactsProviderError",
    "InMemoryFactsProvider",
    "InventoryFactsProvider",
    "NotificationSurface",
    "RefreshScheduler",
    "StockInsightsService",
    "build_service",
]
