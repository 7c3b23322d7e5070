"""CNY to BDT price conversion using the rate from site settings."""
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Optional

from tradeon.config import settings

logger = logging.getLogger(__name__)

RATE_SETTING_KEY = "cny_to_bdt_rate"

# Loaded from app settings and cached for the process
_cached_rate: Optional[Decimal] = None


def default_rate() -> Decimal:
    return Decimal(str(settings.DEFAULT_CNY_TO_BDT_RATE))


def set_cny_to_bdt_rate(rate: Optional[Decimal]) -> None:
    global _cached_rate
    _cached_rate = rate


def get_cny_to_bdt_rate() -> Decimal:
    return _cached_rate if _cached_rate is not None else default_rate()


def rate_from_settings(settings_map: Dict[str, str]) -> Decimal:
    """Parse the configured rate; unset or unusable values give the fallback."""
    raw = settings_map.get(RATE_SETTING_KEY)
    if not raw:
        return default_rate()
    try:
        rate = Decimal(str(raw).strip())
    except InvalidOperation:
        logger.warning(f"Invalid {RATE_SETTING_KEY} value '{raw}', using fallback")
        return default_rate()
    if not rate.is_finite() or rate <= 0:
        logger.warning(f"Non-positive {RATE_SETTING_KEY} value '{raw}', using fallback")
        return default_rate()
    return rate


def convert_to_bdt(cny: Any, rate: Optional[Decimal] = None) -> int:
    """Convert a CNY price to whole taka, rounding half up."""
    rate = rate if rate is not None else get_cny_to_bdt_rate()
    amount = Decimal(str(cny)) * rate
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
