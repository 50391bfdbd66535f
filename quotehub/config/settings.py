import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator

ProviderName = Literal["finnhub", "alphavantage"]

DEFAULT_SYMBOLS = ["AAPL", "MSFT", "GOOGL", "AMZN", "NVDA"]
DEFAULT_PROVIDER_ORDER: list[ProviderName] = ["finnhub", "alphavantage"]


def _split_csv(raw: str | None) -> list[str]:
    if raw is None:
        return []
    return [s.strip() for s in raw.split(",") if s.strip()]


class Settings(BaseModel):
    FINNHUB_KEY: str | None = None
    ALPHA_VANTAGE_KEY: str | None = None
    QUOTE_PROVIDER_ORDER: list[ProviderName] = Field(
        default_factory=lambda: list(DEFAULT_PROVIDER_ORDER)
    )
    QUOTE_DEFAULT_SYMBOLS: list[str] = Field(default_factory=lambda: list(DEFAULT_SYMBOLS))
    QUOTE_CALL_DELAY_SEC: float = Field(default=0.25, ge=0)
    QUOTE_HTTP_TIMEOUT_SEC: float = Field(default=5.0, gt=0)

    @field_validator("FINNHUB_KEY", "ALPHA_VANTAGE_KEY")
    @classmethod
    def blank_key_is_absent(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("QUOTE_PROVIDER_ORDER", mode="before")
    @classmethod
    def normalize_provider_order(cls, value):
        if isinstance(value, list):
            return [str(v).strip().lower() for v in value]
        return value

    @field_validator("QUOTE_DEFAULT_SYMBOLS")
    @classmethod
    def normalize_default_symbols(cls, value: list[str]) -> list[str]:
        symbols = [s.strip().upper() for s in value if s.strip()]
        return symbols or list(DEFAULT_SYMBOLS)

    def credential_for(self, provider: str) -> str | None:
        if provider == "finnhub":
            return self.FINNHUB_KEY
        if provider == "alphavantage":
            return self.ALPHA_VANTAGE_KEY
        return None

    @classmethod
    def from_env(cls) -> "Settings":
        data: dict = {
            "FINNHUB_KEY": os.getenv("FINNHUB_KEY"),
            "ALPHA_VANTAGE_KEY": os.getenv("ALPHA_VANTAGE_KEY"),
        }

        provider_order = _split_csv(os.getenv("QUOTE_PROVIDER_ORDER"))
        if provider_order:
            data["QUOTE_PROVIDER_ORDER"] = provider_order

        default_symbols = _split_csv(os.getenv("QUOTE_DEFAULT_SYMBOLS"))
        if default_symbols:
            data["QUOTE_DEFAULT_SYMBOLS"] = default_symbols

        for name in ("QUOTE_CALL_DELAY_SEC", "QUOTE_HTTP_TIMEOUT_SEC"):
            raw = os.getenv(name)
            if raw is not None and raw.strip():
                data[name] = raw.strip()

        return cls.model_validate(data)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
