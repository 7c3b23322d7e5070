# Services module
from tradeon.services.order_service import OrderService
from tradeon.services.crud_service import CrudService
from tradeon.services.customer_service import CustomerService
from tradeon.services.invoice_service import InvoiceService
from tradeon.services.shipment_stage_service import ShipmentStageService
from tradeon.services.settings_service import SettingsService, SettingsStore, get_settings_store

# Marketplace
from tradeon.services.marketplace_client import MarketplaceClient, get_marketplace_client
from tradeon.services.translation_service import TranslationService, get_translation_service
from tradeon.services.search_cache_service import SearchCacheService, BackgroundTranslator

__all__ = [
    "OrderService",
    "CrudService",
    "CustomerService",
    "InvoiceService",
    "ShipmentStageService",
    "SettingsService",
    "SettingsStore",
    "get_settings_store",
    # Marketplace
    "MarketplaceClient",
    "get_marketplace_client",
    "TranslationService",
    "get_translation_service",
    "SearchCacheService",
    "BackgroundTranslator",
]
