from __future__ import annotations


class QuoteProviderError(Exception):
    """Base for provider-side failures; ``str(exc)`` is a short reason code."""

    status = "NO_DATA"


class ProviderNoDataError(QuoteProviderError):
    pass


class UnparseableFieldError(QuoteProviderError):
    def __init__(self, field_name: str) -> None:
        super().__init__(f"UNPARSEABLE_FIELD:{field_name}")
        self.field_name = field_name


class ProviderRateLimitedError(QuoteProviderError):
    status = "RATE_LIMITED"


class ProviderTransportError(QuoteProviderError):
    pass
