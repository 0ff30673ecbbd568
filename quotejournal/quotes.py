# -*- coding: utf-8 -*-
"""Quote of the day: remote provider client and cache-first orchestration.

``QuoteService.fetch_quote`` serves today's cached quote when there is one,
otherwise asks the provider and caches the answer. If the provider fails it
falls back to a random quote from the 7-day window, and only raises
``QuoteUnavailableError`` when that window is empty.
"""
from __future__ import annotations

from datetime import date
from typing import Awaitable, Callable, Optional
import asyncio
import json
import logging

import aiohttp

from .cache import QuoteCache
from .models import Quote

logger = logging.getLogger("quotejournal")

DEFAULT_API_URL = "https://zenquotes.io/api/random"
DEFAULT_TIMEOUT = 10


class QuoteFetchError(RuntimeError):
    """The provider could not deliver a quote (timeout, status, bad body)."""


class QuoteUnavailableError(RuntimeError):
    """No quote could be fetched and no cached fallback exists."""


def parse_quote_response(body: str) -> Quote:
    """Parse the provider body: a JSON array whose first item is the quote."""
    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        raise QuoteFetchError(f"Malformed quote response: {exc}") from exc
    if not isinstance(data, list) or not data:
        raise QuoteFetchError("Quote response is not a non-empty array")
    if not isinstance(data[0], dict):
        raise QuoteFetchError("Quote response item is not an object")
    return Quote.from_api(data[0])


class ZenQuotesClient:
    """HTTP client for the random-quote endpoint."""

    def __init__(self, url: str = DEFAULT_API_URL, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.url = url
        self.timeout = timeout

    async def fetch(self) -> Quote:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        logger.debug("Fetching quote from %s (timeout=%ss)", self.url, self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(self.url, headers={"Accept": "application/json"}) as resp:
                    if resp.status != 200:
                        raise QuoteFetchError(f"API returned status {resp.status}")
                    raw = await resp.read()
        except aiohttp.ClientError as exc:
            raise QuoteFetchError(f"Network error: {exc}") from exc
        except asyncio.TimeoutError as exc:
            raise QuoteFetchError(f"Timed out after {self.timeout}s") from exc
        try:
            body = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise QuoteFetchError(f"Quote response is not valid UTF-8: {exc}") from exc
        return parse_quote_response(body)


def _today() -> str:
    return date.today().isoformat()


class QuoteService:
    """Decides between the cache and the provider.

    Args:
        cache: the quote cache to read from and write to.
        fetcher: coroutine function returning a fresh ``Quote``; defaults to
            ``ZenQuotesClient().fetch``. It must raise ``QuoteFetchError`` on
            failure; anything else propagates.
        timeout: upper bound in seconds for one fetch attempt.
        today: returns the current date as ``YYYY-MM-DD``.
    """

    def __init__(
        self,
        cache: QuoteCache,
        fetcher: Optional[Callable[[], Awaitable[Quote]]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        today: Callable[[], str] = _today,
    ) -> None:
        self.cache = cache
        self.timeout = timeout
        self._fetcher = fetcher or ZenQuotesClient(timeout=timeout).fetch
        self._today = today

    async def _fetch_remote(self) -> Quote:
        try:
            return await asyncio.wait_for(self._fetcher(), self.timeout)
        except asyncio.TimeoutError as exc:
            raise QuoteFetchError(f"Timed out after {self.timeout}s") from exc

    async def _with_favorite_flag(self, quote: Quote) -> Quote:
        return quote.with_favorite(await self.cache.is_favorited(quote))

    async def _cached_for_today(self, current_date: str) -> Optional[Quote]:
        if not await self.cache.is_from_today(current_date):
            return None
        return await self.cache.get_last_quote()

    async def fetch_quote(self) -> Quote:
        """Today's quote: cache hit, fresh fetch, or random fallback from the window."""
        current_date = self._today()
        cached = await self._cached_for_today(current_date)
        if cached is not None:
            logger.debug("Serving cached quote for %s", current_date)
            return await self._with_favorite_flag(cached)

        try:
            quote = await self._fetch_remote()
        except QuoteFetchError as exc:
            logger.warning("Quote fetch failed, trying the weekly cache: %s", exc)
            fallback = await self.cache.get_random_cached_quote()
            if fallback is None:
                raise QuoteUnavailableError("Failed to fetch quote and no cache available") from exc
            return await self._with_favorite_flag(fallback)

        await self.cache.save_quote(quote, current_date)
        await self.cache.save_last_open_date(current_date)
        logger.info("Fetched and cached a new quote for %s", current_date)
        return await self._with_favorite_flag(quote)

    async def refresh_quote(self) -> Quote:
        """Fetch a new quote regardless of the cache; fall back to the last quote."""
        try:
            quote = await self._fetch_remote()
        except QuoteFetchError as exc:
            logger.warning("Quote refresh failed, serving the last quote: %s", exc)
            last = await self.cache.get_last_quote()
            if last is None:
                raise QuoteUnavailableError(f"Failed to refresh quote: {exc}") from exc
            return await self._with_favorite_flag(last)

        await self.cache.save_quote(quote, self._today())
        return await self._with_favorite_flag(quote)

    async def get_quote_for_display(self) -> Quote:
        """Cached quote for today if present, otherwise ``fetch_quote()``."""
        cached = await self._cached_for_today(self._today())
        if cached is not None:
            return await self._with_favorite_flag(cached)
        return await self.fetch_quote()
