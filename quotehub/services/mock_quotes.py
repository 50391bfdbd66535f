from __future__ import annotations

import math
from datetime import datetime, timezone

from quotehub.schemas.quote import QuoteRecord
from quotehub.services.market_hours import iso_instant

MOCK_PRESETS: dict[str, dict[str, float]] = {
    "AAPL": {"price": 230.12, "cap": 3.55e12, "vol": 58_000_000},
    "MSFT": {"price": 430.34, "cap": 3.2e12, "vol": 29_000_000},
    "GOOGL": {"price": 168.77, "cap": 2.1e12, "vol": 26_000_000},
    "AMZN": {"price": 178.45, "cap": 1.85e12, "vol": 41_200_000},
    "NVDA": {"price": 121.65, "cap": 2.9e12, "vol": 52_400_000},
    "TSLA": {"price": 249.02, "cap": 0.77e12, "vol": 95_000_000},
    "META": {"price": 512.22, "cap": 1.3e12, "vol": 19_000_000},
}

MAX_MOCK_PCT = 3.0


def minute_bucket(moment: datetime) -> int:
    return math.floor(moment.timestamp() / 60)


def mock_baseline(symbol: str, index: int) -> dict[str, float]:
    preset = MOCK_PRESETS.get(symbol)
    if preset is not None:
        return preset
    return {
        "price": 100 + (index % 8) * 9,
        "cap": 1e11 + index * 7e9,
        "vol": 5_000_000 + index * 250_000,
    }


def mock_seed(symbol: str, index: int, bucket: int) -> float:
    """Repeatable fraction in [0, 1) for a symbol/position within one minute.

    x = sin((index + sum(ord(ch))) * 997 + bucket) * 10000, r = frac(x)
    """
    seed = index + sum(ord(ch) for ch in symbol)
    x = math.sin(seed * 997 + bucket) * 10000
    r = x - math.floor(x)
    # float rounding can land exactly on 1.0 for tiny negative x
    return r if r < 1.0 else 0.0


def mock_row(symbol: str, index: int, *, now: datetime | None = None) -> QuoteRecord:
    moment = now or datetime.now(timezone.utc)
    base = mock_baseline(symbol, index)
    r = mock_seed(symbol, index, minute_bucket(moment))

    pct = r * (2 * MAX_MOCK_PCT) - MAX_MOCK_PCT
    price = round(base["price"] * (1 + pct / 100), 2)
    change_percent = round(pct, 2)
    change = round(price * change_percent / 100, 2)
    volume = max(1, round(base["vol"] * (0.8 + r * 0.4)))

    return QuoteRecord(
        symbol=symbol,
        price=price,
        change=change,
        change_percent=change_percent,
        market_cap=round(base["cap"]),
        volume=volume,
        last_updated=iso_instant(moment),
        source="mock",
    )


def build_mock_rows(
    symbols: list[str],
    *,
    positions: dict[str, int] | None = None,
    now: datetime | None = None,
) -> list[QuoteRecord]:
    """Mock every symbol; ``positions`` pins each symbol to its request index."""
    moment = now or datetime.now(timezone.utc)
    rows: list[QuoteRecord] = []
    for i, symbol in enumerate(symbols):
        index = positions.get(symbol, i) if positions else i
        rows.append(mock_row(symbol, index, now=moment))
    return rows
