# app/utils/prices.py
"""
Price oracle.

Prices are quoted in USD by a source (fixed mock prices, or the Jupiter
price API over httpx), converted to the reference currency with a fixed FX
rate and cached per coin. When a refresh fails the last cached quote is
served with ``stale=True``; with nothing cached the call fails with
``PriceUnavailableError``.
"""
import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

import httpx

from app.core.cache import TTLStore
from app.core.config import settings
from app.core.errors import PriceUnavailableError, UnknownCoinError
from app.utils.tokens import get_supported_symbols, get_token_info, is_valid_coin, normalize_symbol

logger = logging.getLogger(__name__)

# Fixed USD prices used by the mock source
MOCK_PRICES_USD: Dict[str, float] = {
    "BTC": 60000.0,
    "ETH": 3000.0,
    "SOL": 145.0,
}


@dataclass(frozen=True)
class PriceQuote:
    coin: str
    price: float
    fetched_at: datetime
    stale: bool = False


class PriceSourceError(Exception):
    """Raised by a price source when an upstream answer is unusable."""


class MockPriceSource:
    def __init__(self, prices_usd: Optional[Dict[str, float]] = None):
        self.prices_usd = dict(prices_usd or MOCK_PRICES_USD)

    async def fetch_usd_price(self, coin: str) -> float:
        try:
            return self.prices_usd[coin]
        except KeyError:
            raise PriceSourceError(f"No mock price for {coin}")


class JupiterPriceSource:
    """Reads ``usdPrice`` for a token mint from the Jupiter price API."""

    def __init__(self, api_url: str, timeout: float = 10.0):
        self.api_url = api_url
        self.timeout = timeout

    async def fetch_usd_price(self, coin: str) -> float:
        token = get_token_info(coin)
        async with httpx.AsyncClient() as client:
            response = await client.get(self.api_url, params={"ids": token.mint}, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        if not isinstance(data, dict):
            raise PriceSourceError(f"Unexpected price response for {coin}: {type(data).__name__}")
        nested = data.get("data")
        entry = data.get(token.mint) or (nested.get(token.mint) if isinstance(nested, dict) else None)
        if not isinstance(entry, dict) or entry.get("usdPrice", entry.get("price")) is None:
            raise PriceSourceError(f"No price returned for {coin} ({token.mint})")
        return float(entry.get("usdPrice", entry.get("price")))


class PriceOracle:
    def __init__(
        self,
        source,
        cache: TTLStore,
        usd_to_reference_rate: float,
        timeout_seconds: float = 5.0,
    ):
        self.source = source
        self.cache = cache
        self.usd_to_reference_rate = usd_to_reference_rate
        self.timeout_seconds = timeout_seconds

    async def get_price(self, coin: str) -> PriceQuote:
        symbol = normalize_symbol(coin)
        if not is_valid_coin(symbol):
            raise UnknownCoinError(coin, get_supported_symbols())

        cached = self.cache.get(symbol)
        if cached is not None:
            return cached

        try:
            usd_price = await asyncio.wait_for(self.source.fetch_usd_price(symbol), timeout=self.timeout_seconds)
        except (asyncio.TimeoutError, httpx.HTTPError, PriceSourceError, ValueError) as e:
            held = self.cache.get_even_if_expired(symbol)
            if held is not None:
                logger.warning(f"Price refresh for {symbol} failed ({type(e).__name__}); serving stale quote")
                return replace(held[0], stale=True)
            logger.error(f"Price fetch for {symbol} failed with no cached quote: {type(e).__name__}: {e}")
            raise PriceUnavailableError(f"Price for {symbol} is unavailable") from e

        quote = PriceQuote(
            coin=symbol,
            price=usd_price * self.usd_to_reference_rate,
            fetched_at=datetime.now(timezone.utc),
        )
        self.cache.set(symbol, quote)
        return quote

    async def get_prices(self, coins: Iterable[str]) -> Tuple[Dict[str, float], datetime, bool]:
        """Quote several coins; returns prices, the oldest fetch time, and whether any were stale."""
        symbols: List[str] = sorted({normalize_symbol(c) for c in coins})
        quotes = [await self.get_price(symbol) for symbol in symbols]
        prices = {q.coin: q.price for q in quotes}
        fetched_at = min(q.fetched_at for q in quotes)
        stale = any(q.stale for q in quotes)
        return prices, fetched_at, stale


def build_price_oracle() -> PriceOracle:
    if settings.PRICE_SOURCE == "jupiter":
        source = JupiterPriceSource(settings.PRICE_API_URL, timeout=settings.PRICE_TIMEOUT_SECONDS)
    else:
        source = MockPriceSource()
    logger.info(f"Price oracle using {type(source).__name__}, TTL {settings.PRICE_CACHE_TTL_SECONDS}s")
    return PriceOracle(
        source,
        TTLStore(settings.PRICE_CACHE_TTL_SECONDS),
        settings.USD_TO_REFERENCE_RATE,
        timeout_seconds=settings.PRICE_TIMEOUT_SECONDS,
    )
