from __future__ import annotations

import math
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from quotehub.errors import (
    ProviderNoDataError,
    ProviderRateLimitedError,
    ProviderTransportError,
    QuoteProviderError,
    UnparseableFieldError,
)
from quotehub.integrations.numeric import parse_number
from quotehub.schemas.quote import ProviderFetch, QuoteRecord


class QuoteProviderClient:
    """Shared HTTP + outcome handling for third-party quote providers.

    Subclasses implement ``fetch_quote`` (raise ``QuoteProviderError`` on any
    miss) and may override ``fetch_market_cap`` for best-effort enrichment.
    """

    name = "provider"
    base_url = ""

    def __init__(
        self,
        api_key: str,
        session: Optional[Any] = None,
        base_url: Optional[str] = None,
        timeout_sec: float = 5.0,
    ) -> None:
        if not api_key:
            raise ValueError(f"{self.name} api_key is required")
        self.api_key = api_key
        self.session = session or requests
        self.base_url = base_url or self.base_url
        self.timeout_sec = timeout_sec

    @staticmethod
    def _status_code_from_error(exc: Exception) -> int | None:
        response = getattr(exc, "response", None)
        code = getattr(response, "status_code", None)
        if isinstance(code, int):
            return code
        return None

    def _get_json(self, path: str, params: Dict[str, Any]) -> Any:
        try:
            response = self.session.get(
                f"{self.base_url}{path}",
                params=params,
                timeout=self.timeout_sec,
            )
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as exc:
            if self._status_code_from_error(exc) == 429:
                raise ProviderRateLimitedError("HTTP_429") from exc
            raise ProviderTransportError(
                f"HTTP_{self._status_code_from_error(exc) or 'ERROR'}"
            ) from exc
        except (requests.RequestException, ValueError, OSError) as exc:
            raise ProviderTransportError(f"TRANSPORT:{type(exc).__name__}") from exc

    @staticmethod
    def _require_object(payload: Any, reason: str = "MALFORMED_PAYLOAD") -> dict:
        if not isinstance(payload, dict):
            raise ProviderNoDataError(reason)
        return payload

    @staticmethod
    def _required_number(raw: Any, field_name: str) -> float:
        value = parse_number(raw)
        if value is None:
            raise UnparseableFieldError(field_name)
        return value

    @staticmethod
    def _optional_volume(raw: Any) -> int | None:
        value = parse_number(raw)
        if value is None or value < 0:
            return None
        return int(round(value))

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def fetch_quote(self, symbol: str) -> QuoteRecord:
        raise NotImplementedError

    def fetch_market_cap(self, symbol: str) -> float | None:
        return None

    def enrich_market_cap(self, symbol: str) -> float | None:
        try:
            cap = self.fetch_market_cap(symbol)
        except QuoteProviderError as exc:
            print(
                f"[QUOTE][enrich_skip] provider={self.name} symbol={symbol} reason={exc}",
                flush=True,
            )
            return None
        except Exception as exc:
            print(
                f"[QUOTE][enrich_skip] provider={self.name} symbol={symbol} "
                f"reason=UNEXPECTED:{type(exc).__name__} error={exc}",
                flush=True,
            )
            return None
        if cap is None or not math.isfinite(cap) or cap < 0:
            return None
        return cap

    def fetch_one(self, symbol: str) -> ProviderFetch:
        started = time.monotonic()
        try:
            record = self.fetch_quote(symbol)
        except QuoteProviderError as exc:
            status = exc.status
            reason = str(exc) or type(exc).__name__
            print(
                f"[QUOTE][provider_miss] provider={self.name} symbol={symbol} "
                f"status={status} reason={reason} "
                f"elapsed_ms={int((time.monotonic() - started) * 1000)}",
                flush=True,
            )
            return ProviderFetch(symbol=symbol, provider=self.name, status=status, reason=reason)

        return ProviderFetch(symbol=symbol, provider=self.name, status="OK", record=record)
