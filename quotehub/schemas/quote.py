from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class QuoteRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    symbol: str
    price: float
    change: float
    change_percent: float
    market_cap: float | None = None
    volume: int | None = None
    last_updated: str
    source: str = Field(default="mock", exclude=True)


class QuoteResult(BaseModel):
    stocks: list[QuoteRecord] = Field(default_factory=list)
    error: str | None = None

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ProviderFetch(BaseModel):
    symbol: str
    provider: str
    status: Literal["OK", "NO_DATA", "RATE_LIMITED"]
    record: QuoteRecord | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "OK" and self.record is not None
