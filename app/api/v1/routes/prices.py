# app/api/v1/routes/prices.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_current_user, get_price_oracle
from app.core.auth import User
from app.core.config import settings
from app.schemas.price import CurrentPricesResponse
from app.utils.prices import PriceOracle
from app.utils.tokens import get_supported_symbols

router = APIRouter(prefix="/price", tags=["price"])


@router.get("/current", response_model=CurrentPricesResponse)
async def get_current_prices(
    coins: Optional[str] = Query(None, description="Comma-separated symbols, e.g. BTC,ETH. Defaults to all supported coins"),
    user: User = Depends(get_current_user),
    oracle: PriceOracle = Depends(get_price_oracle),
):
    requested = [c for c in (coins or "").split(",") if c.strip()] or get_supported_symbols()
    prices, fetched_at, stale = await oracle.get_prices(requested)
    return CurrentPricesResponse(
        currency=settings.REFERENCE_CURRENCY,
        prices=prices,
        fetched_at=fetched_at,
        stale=stale,
    )
