from __future__ import annotations

from quotehub.errors import ProviderNoDataError, ProviderRateLimitedError
from quotehub.integrations.numeric import parse_number
from quotehub.integrations.provider_base import QuoteProviderClient
from quotehub.schemas.quote import QuoteRecord
from quotehub.services.market_hours import iso_instant, trading_day_close


class AlphaVantageRestClient(QuoteProviderClient):
    """Alpha Vantage ``GLOBAL_QUOTE`` client with ``OVERVIEW`` market-cap enrichment."""

    name = "alphavantage"
    base_url = "https://www.alphavantage.co"

    def _query(self, function: str, symbol: str) -> dict:
        payload = self._require_object(
            self._get_json(
                "/query",
                {"function": function, "symbol": symbol, "apikey": self.api_key},
            )
        )
        # quota exhaustion is reported in-band with HTTP 200
        if payload.get("Note"):
            raise ProviderRateLimitedError("API_LIMIT_NOTE")
        if payload.get("Information"):
            raise ProviderRateLimitedError("API_LIMIT_INFORMATION")
        return payload

    def fetch_quote(self, symbol: str) -> QuoteRecord:
        payload = self._query("GLOBAL_QUOTE", symbol)

        quote = payload.get("Global Quote")
        if not isinstance(quote, dict) or not quote:
            raise ProviderNoDataError("EMPTY_QUOTE")

        price = self._required_number(quote.get("05. price"), "price")
        change = self._required_number(quote.get("09. change"), "change")
        change_percent = self._required_number(quote.get("10. change percent"), "changePercent")

        closed_at = trading_day_close(quote.get("07. latest trading day"))
        last_updated = iso_instant(closed_at or self._now())

        return QuoteRecord(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            market_cap=self.enrich_market_cap(symbol),
            volume=self._optional_volume(quote.get("06. volume")),
            last_updated=last_updated,
            source=self.name,
        )

    def fetch_market_cap(self, symbol: str) -> float | None:
        overview = self._query("OVERVIEW", symbol)
        return parse_number(overview.get("MarketCapitalization"))
