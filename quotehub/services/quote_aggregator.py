from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Sequence

from quotehub.config.settings import DEFAULT_SYMBOLS, Settings
from quotehub.integrations.alpha_vantage_rest import AlphaVantageRestClient
from quotehub.integrations.finnhub_rest import FinnhubRestClient
from quotehub.schemas.quote import ProviderFetch, QuoteRecord, QuoteResult
from quotehub.services.mock_quotes import build_mock_rows

_PROVIDER_CLASSES = {
    "finnhub": FinnhubRestClient,
    "alphavantage": AlphaVantageRestClient,
}

_PROVIDER_LABELS = {
    "finnhub": "Finnhub",
    "alphavantage": "Alpha Vantage",
}

NO_PROVIDER_MESSAGE = "No quote provider credentials configured. Showing mock data."
UNEXPECTED_ERROR_MESSAGE = "Quote lookup failed unexpectedly. Showing mock data."


def normalize_symbols(symbols: Iterable[Any] | None, default: Sequence[str] = DEFAULT_SYMBOLS) -> list[str]:
    unique_symbols: list[str] = []
    seen: set[str] = set()
    for symbol in symbols or []:
        value = str(symbol).strip().upper()
        if not value or value in seen:
            continue
        seen.add(value)
        unique_symbols.append(value)
    return unique_symbols or list(default)


def build_provider_chain(settings: Settings, *, session: Any | None = None) -> list:
    chain = []
    for name in dict.fromkeys(settings.QUOTE_PROVIDER_ORDER):
        api_key = settings.credential_for(name)
        if not api_key:
            continue
        chain.append(
            _PROVIDER_CLASSES[name](
                api_key=api_key,
                session=session,
                timeout_sec=settings.QUOTE_HTTP_TIMEOUT_SEC,
            )
        )
    return chain


def _label(provider_name: str) -> str:
    return _PROVIDER_LABELS.get(provider_name, provider_name)


def _describe_failures(failed: dict[str, ProviderFetch]) -> str:
    rate_limited = [s for s, f in failed.items() if f.status == "RATE_LIMITED"]
    no_data = [s for s, f in failed.items() if f.status != "RATE_LIMITED"]
    parts = []
    if rate_limited:
        parts.append(f"rate limited: {', '.join(rate_limited)}")
    if no_data:
        parts.append(f"no data: {', '.join(no_data)}")
    return "; ".join(parts)


class QuoteAggregatorService:
    """Provider fallback chain with deterministic mock fill.

    Providers are tried in order until one yields at least one usable row.
    Symbols that provider could not serve are filled with mock rows. Output
    always follows the normalized request order and ``get_quotes`` never raises.
    """

    def __init__(
        self,
        *,
        providers: Sequence | None = None,
        default_symbols: Sequence[str] = DEFAULT_SYMBOLS,
        call_delay_sec: float = 0.25,
        sleep: Callable[[float], None] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.providers = list(providers or [])
        self.default_symbols = list(default_symbols)
        self.call_delay_sec = call_delay_sec
        self.sleep = sleep or time.sleep
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_settings(cls, settings: Settings, *, session: Any | None = None, **kwargs) -> "QuoteAggregatorService":
        return cls(
            providers=build_provider_chain(settings, session=session),
            default_symbols=settings.QUOTE_DEFAULT_SYMBOLS,
            call_delay_sec=settings.QUOTE_CALL_DELAY_SEC,
            **kwargs,
        )

    def _fetch_symbol(self, provider, symbol: str) -> ProviderFetch:
        try:
            return provider.fetch_one(symbol)
        except Exception as exc:
            print(
                f"[QUOTE][provider_miss] provider={provider.name} symbol={symbol} "
                f"status=NO_DATA reason=UNEXPECTED:{type(exc).__name__} error={exc}",
                flush=True,
            )
            return ProviderFetch(
                symbol=symbol,
                provider=provider.name,
                status="NO_DATA",
                reason=f"UNEXPECTED:{type(exc).__name__}",
            )

    def _fetch_from(self, provider, symbols: list[str]) -> tuple[dict[str, QuoteRecord], dict[str, ProviderFetch]]:
        rows: dict[str, QuoteRecord] = {}
        failed: dict[str, ProviderFetch] = {}
        for i, symbol in enumerate(symbols):
            outcome = self._fetch_symbol(provider, symbol)
            if outcome.ok:
                # records are keyed by the requested symbol, never the echoed one
                rows[symbol] = outcome.record.model_copy(update={"symbol": symbol})
            else:
                failed[symbol] = outcome

            if self.call_delay_sec > 0 and i < len(symbols) - 1:
                self.sleep(self.call_delay_sec)
        return rows, failed

    def _full_mock(self, symbols: list[str], error: str) -> QuoteResult:
        return QuoteResult(stocks=build_mock_rows(symbols, now=self.clock()), error=error)

    def _resolve(self, symbols: list[str]) -> tuple[QuoteResult, str | None, int]:
        if not self.providers:
            return self._full_mock(symbols, NO_PROVIDER_MESSAGE), None, 0

        rows: dict[str, QuoteRecord] = {}
        failed: dict[str, ProviderFetch] = {}
        exhausted: list[str] = []
        used: str | None = None
        for provider in self.providers:
            rows, failed = self._fetch_from(provider, symbols)
            if rows:
                used = provider.name
                break
            detail = _describe_failures(failed)
            exhausted.append(f"{_label(provider.name)} unavailable ({detail})")
            print(
                f"[QUOTE][provider_exhausted] provider={provider.name} "
                f"target_count={len(symbols)} {detail}",
                flush=True,
            )

        if not rows:
            error = f"{'; '.join(exhausted)}. Showing mock data."
            return self._full_mock(symbols, error), None, 0

        if not failed:
            return QuoteResult(stocks=[rows[s] for s in symbols]), used, len(rows)

        positions = {symbol: i for i, symbol in enumerate(symbols)}
        missing = [s for s in symbols if s in failed]
        merged = {row.symbol: row for row in build_mock_rows(missing, positions=positions, now=self.clock())}
        merged.update(rows)
        print(
            f"[QUOTE][mock_fill] provider={used} mock_count={len(missing)} "
            f"{_describe_failures(failed)}",
            flush=True,
        )
        error = (
            f"Some symbols could not be refreshed from {_label(used)} "
            f"({_describe_failures(failed)}). Mock data shown for those entries."
        )
        return QuoteResult(stocks=[merged[s] for s in symbols], error=error), used, len(rows)

    def get_quotes(self, symbols: Iterable[Any] | None) -> QuoteResult:
        try:
            unique_symbols = normalize_symbols(symbols, self.default_symbols)
        except Exception as exc:
            print(f"[QUOTE][batch_error] stage=normalize error={exc}", flush=True)
            unique_symbols = list(self.default_symbols)

        try:
            result, used, provider_count = self._resolve(unique_symbols)
        except Exception as exc:
            print(f"[QUOTE][batch_error] stage=resolve error={exc}", flush=True)
            result, used, provider_count = self._full_mock(unique_symbols, UNEXPECTED_ERROR_MESSAGE), None, 0

        print(
            "[QUOTE][batch_resolve] "
            f"target_count={len(unique_symbols)} provider={used or 'none'} "
            f"provider_count={provider_count} mock_count={len(result.stocks) - provider_count} "
            f"final_count={len(result.stocks)} degraded={int(result.error is not None)}",
            flush=True,
        )
        return result
