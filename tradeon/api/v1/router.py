from fastapi import APIRouter

from tradeon.api.v1.endpoints import (
    # Storefront
    search,
    products,
    sellers,
    catalog,
    currency,
    settings,
    # Orders & fulfilment
    orders,
    shipments,
    invoices,
    # Buyer dashboard
    me,
    # Back office
    admin,
)


api_router = APIRouter(prefix="/api/v1")

api_router.include_router(search.router, prefix="/search")
api_router.include_router(products.router, prefix="/products")
api_router.include_router(sellers.router, prefix="/sellers")
api_router.include_router(catalog.router, prefix="/catalog")
api_router.include_router(currency.router, prefix="/currency")
api_router.include_router(settings.router, prefix="/settings")
api_router.include_router(orders.router, prefix="/orders")
api_router.include_router(shipments.router, prefix="/shipments")
api_router.include_router(shipments.admin_router, prefix="/shipments", tags=["Shipments"])
api_router.include_router(invoices.router, prefix="/invoices")
api_router.include_router(me.router, prefix="/me")
api_router.include_router(admin.router, prefix="/admin")
