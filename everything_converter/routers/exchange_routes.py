"""
Exchange Rate API Endpoints

Endpoints:
- GET /api/exchange-rates - Quote an amount between two currencies
- POST /api/exchange-rates - Dump the current rate table
"""

import logging
import math
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from everything_converter.services.fx_service import get_fx_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_amount(raw: Optional[str]) -> Optional[float]:
    if raw is None or raw == "":
        return 1.0
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


@router.get("")
async def get_exchange_rate(
    from_currency: Optional[str] = Query(default=None, alias="from"),
    to_currency: Optional[str] = Query(default=None, alias="to"),
    amount: Optional[str] = Query(default=None),
):
    """Convert ``amount`` (default 1) between two ISO currency codes."""
    if not from_currency or not to_currency:
        return JSONResponse(
            status_code=400,
            content={"error": "Missing required parameters: from and to"},
        )

    amount_value = _parse_amount(amount)
    if amount_value is None:
        return JSONResponse(status_code=400, content={"error": "Invalid amount"})

    try:
        fx_service = get_fx_service()
        quote = await fx_service.convert(amount_value, from_currency.upper(), to_currency.upper())
        return {**quote.to_dict(), "cacheAge": fx_service.cache_age()}
    except Exception as e:
        logger.error(f"Exchange rate lookup failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": str(e) or "Failed to fetch exchange rates"},
        )


@router.post("")
async def get_all_rates():
    """Return the full rate table relative to its base currency."""
    try:
        fx_service = get_fx_service()
        table = await fx_service.get_rates()
        return {**table.to_dict(), "cacheAge": fx_service.cache_age()}
    except Exception as e:
        logger.error(f"Exchange rate table fetch failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": str(e) or "Failed to fetch exchange rates"},
        )
