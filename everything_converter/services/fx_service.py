"""
Live foreign-exchange rates via Open Exchange Rates.

Keeps a single cached rate table (refreshed hourly) and computes cross-rate
quotes between any two currencies in it.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from everything_converter.config.settings import FX_CONFIG
from everything_converter.models.conversion import ConversionQuote, RateTable
from everything_converter.services.metrics import fx_cache_lookup_counter

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 3600  # Refresh rates hourly


class ExchangeRateError(Exception):
    """Base class for exchange-rate provider failures."""


class UpstreamAuthError(ExchangeRateError):
    """API key missing or rejected; retrying will not help."""


class UpstreamRateLimitError(ExchangeRateError):
    """Provider returned 429 and there is no cached table to fall back on."""


class UpstreamTransientError(ExchangeRateError):
    """Network or server failure with no cached table to fall back on."""


class UnknownCurrencyError(ExchangeRateError):
    """Currency code is neither the base nor present in the rate table."""


@dataclass(frozen=True)
class _CacheSlot:
    table: RateTable
    stored_at: float  # monotonic seconds


def format_amount(value: float) -> str:
    """Format a converted amount with precision that suits its magnitude."""
    magnitude = abs(value)
    if magnitude >= 1:
        return f"{value:.2f}"
    if magnitude >= 0.01:
        return f"{value:.4f}"
    return f"{value:.8f}"


class FXService:
    """Fetch and cache exchange rates using the Open Exchange Rates API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        url: str = "https://openexchangerates.org/api/latest.json",
        ttl_seconds: float = CACHE_TTL_SECONDS,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        self.api_key = api_key
        self.url = url
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout
        self._transport = transport
        self._clock = clock
        self._wall_clock = wall_clock
        # Replaced wholesale on refresh, never mutated in place
        self._slot: Optional[_CacheSlot] = None

    def _is_fresh(self, slot: _CacheSlot) -> bool:
        return self._clock() - slot.stored_at < self.ttl_seconds

    async def get_rates(self) -> RateTable:
        """
        Return the current rate table, refreshing it when older than the TTL.

        A stale table is preferred over no table: on 429 or any transient
        failure the previous table is returned. A rejected API key (401) is
        always raised.
        """
        if not self.api_key:
            raise UpstreamAuthError(
                "OPEN_EXCHANGE_RATES_API_KEY is not set. "
                "Get a free API key at https://openexchangerates.org/signup/free"
            )

        slot = self._slot
        if slot is not None and self._is_fresh(slot):
            fx_cache_lookup_counter.labels(outcome="hit").inc()
            return slot.table

        try:
            table = await self._fetch()
        except UpstreamAuthError:
            fx_cache_lookup_counter.labels(outcome="error").inc()
            raise
        except UpstreamRateLimitError:
            if slot is not None:
                fx_cache_lookup_counter.labels(outcome="stale").inc()
                logger.warning("⚠️  Exchange-rate rate limit exceeded, returning cached rates")
                return slot.table
            fx_cache_lookup_counter.labels(outcome="error").inc()
            raise
        except ExchangeRateError as exc:
            if slot is not None:
                fx_cache_lookup_counter.labels(outcome="stale").inc()
                logger.warning("⚠️  Failed to fetch rates, returning cached data: %s", exc)
                return slot.table
            fx_cache_lookup_counter.labels(outcome="error").inc()
            raise

        self._slot = _CacheSlot(table=table, stored_at=self._clock())
        fx_cache_lookup_counter.labels(outcome="refresh").inc()
        logger.info("💱 FX rates refreshed (base %s, %d currencies)", table.base, len(table.rates))
        return table

    async def _fetch(self) -> RateTable:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.url, params={"app_id": self.api_key})
        except httpx.HTTPError as exc:
            raise UpstreamTransientError(f"Open Exchange Rates request failed: {exc}") from exc

        if response.status_code == 401:
            raise UpstreamAuthError("Invalid Open Exchange Rates API key")
        if response.status_code == 429:
            raise UpstreamRateLimitError("Rate limit exceeded and no cached data available")
        if response.status_code >= 400:
            raise UpstreamTransientError(f"Open Exchange Rates API error: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamTransientError("Open Exchange Rates returned invalid JSON") from exc

        rates = payload.get("rates") if isinstance(payload, dict) else None
        base = payload.get("base") if isinstance(payload, dict) else None
        if not isinstance(rates, dict) or not isinstance(base, str):
            raise UpstreamTransientError(f"Unexpected exchange-rate payload: {payload!r:.200}")

        base = base.upper()
        clean_rates = {
            str(code).upper(): float(rate)
            for code, rate in rates.items()
            # bool is an int subclass; true/false are not rates
            if isinstance(rate, (int, float)) and not isinstance(rate, bool)
            and rate > 0 and str(code).upper() != base
        }
        return RateTable(
            base=base,
            rates=clean_rates,
            timestamp=int(self._wall_clock() * 1000),
        )

    async def convert(self, amount: float, from_currency: str, to_currency: str) -> ConversionQuote:
        """
        Convert ``amount`` between two currencies through the table's base.

        Raises:
            UnknownCurrencyError: If either code is not in the rate table
        """
        table = await self.get_rates()
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()

        from_rate = table.rate_of(from_currency)
        if from_rate is None:
            raise UnknownCurrencyError(f"Currency {from_currency} not found in exchange rates")
        to_rate = table.rate_of(to_currency)
        if to_rate is None:
            raise UnknownCurrencyError(f"Currency {to_currency} not found in exchange rates")

        rate = to_rate / from_rate
        return ConversionQuote(
            amount=amount,
            converted_amount=amount * rate,
            from_currency=from_currency,
            to_currency=to_currency,
            rate=rate,
            timestamp=table.timestamp,
            base=table.base,
        )

    def cache_age(self) -> Optional[str]:
        """Human-readable age of the cached table, or None if never fetched."""
        slot = self._slot
        if slot is None:
            return None

        age_minutes = int((self._clock() - slot.stored_at) // 60)
        if age_minutes < 1:
            return "just now"
        if age_minutes == 1:
            return "1 minute ago"
        if age_minutes < 60:
            return f"{age_minutes} minutes ago"

        age_hours = age_minutes // 60
        if age_hours == 1:
            return "1 hour ago"
        return f"{age_hours} hours ago"


_fx_service: Optional[FXService] = None


def get_fx_service() -> FXService:
    """Return FX service singleton."""
    global _fx_service
    if _fx_service is None:
        _fx_service = FXService(
            api_key=FX_CONFIG["api_key"],
            url=FX_CONFIG["url"],
            ttl_seconds=FX_CONFIG["ttl_seconds"],
            timeout=FX_CONFIG["timeout_seconds"],
        )
    return _fx_service
