from __future__ import annotations

import math
from datetime import datetime, timezone

from quotehub.errors import ProviderNoDataError, ProviderRateLimitedError, UnparseableFieldError
from quotehub.integrations.numeric import parse_number
from quotehub.integrations.provider_base import QuoteProviderClient
from quotehub.schemas.quote import QuoteRecord
from quotehub.services.market_hours import iso_instant

# profile2 reports marketCapitalization in millions of USD
_MARKET_CAP_UNIT = 1e6


class FinnhubRestClient(QuoteProviderClient):
    """Finnhub ``/quote`` client with ``/stock/profile2`` market-cap enrichment."""

    name = "finnhub"
    base_url = "https://finnhub.io/api/v1"

    def _request(self, path: str, symbol: str) -> dict:
        payload = self._require_object(
            self._get_json(path, {"symbol": symbol, "token": self.api_key})
        )
        error = payload.get("error")
        if error:
            if "limit" in str(error).lower():
                raise ProviderRateLimitedError("API_LIMIT_ERROR")
            raise ProviderNoDataError("PROVIDER_ERROR")
        return payload

    def fetch_quote(self, symbol: str) -> QuoteRecord:
        payload = self._request("/quote", symbol)

        price = self._required_number(payload.get("c"), "price")
        prev_close = parse_number(payload.get("pc")) or 0.0
        if price == 0 and prev_close == 0:
            # unknown symbols come back as an all-zero quote
            raise ProviderNoDataError("EMPTY_QUOTE")

        # derive only when the field is absent; a present but garbled value rejects the symbol
        if payload.get("d") is None:
            change = price - prev_close
        else:
            change = self._required_number(payload.get("d"), "change")

        if payload.get("dp") is None:
            change_percent = (change / prev_close) * 100 if prev_close else 0.0
        else:
            change_percent = self._required_number(payload.get("dp"), "changePercent")

        if not (math.isfinite(change) and math.isfinite(change_percent)):
            raise UnparseableFieldError("change")

        last_updated = iso_instant(self._quote_time(payload.get("t")) or self._now())

        return QuoteRecord(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            market_cap=self.enrich_market_cap(symbol),
            volume=self._optional_volume(payload.get("v")),
            last_updated=last_updated,
            source=self.name,
        )

    @staticmethod
    def _quote_time(raw) -> datetime | None:
        ts = parse_number(raw)
        if ts is None or ts <= 0:
            return None
        try:
            return datetime.fromtimestamp(ts, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    def fetch_market_cap(self, symbol: str) -> float | None:
        profile = self._request("/stock/profile2", symbol)
        cap = parse_number(profile.get("marketCapitalization"))
        if cap is None:
            return None
        return cap * _MARKET_CAP_UNIT
