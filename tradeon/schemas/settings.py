"""Site settings and currency conversion schemas."""
from decimal import Decimal
from typing import Dict

from pydantic import BaseModel, Field


class SettingsUpdate(BaseModel):
    """Key/value overrides to upsert."""
    values: Dict[str, str] = Field(..., min_length=1)


class CurrencyConversionResponse(BaseModel):
    cny: Decimal
    rate: Decimal
    bdt: int
