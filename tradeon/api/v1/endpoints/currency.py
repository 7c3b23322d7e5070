from decimal import Decimal

from fastapi import APIRouter, Query

from tradeon.schemas.settings import CurrencyConversionResponse
from tradeon.services.currency_service import convert_to_bdt, get_cny_to_bdt_rate
from tradeon.services.settings_service import get_settings_store

router = APIRouter(tags=["Currency"])


@router.get("/convert", response_model=CurrencyConversionResponse)
async def convert_cny(
    cny: Decimal = Query(..., ge=0, description="Price in CNY"),
):
    """Convert a CNY price to whole taka at the configured rate."""
    # Loading the settings map refreshes the cached rate
    await get_settings_store().get()
    rate = get_cny_to_bdt_rate()
    return CurrencyConversionResponse(cny=cny, rate=rate, bdt=convert_to_bdt(cny, rate))
