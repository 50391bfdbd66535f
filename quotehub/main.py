from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quotehub.api.routes import router
from quotehub.config.settings import get_settings
from quotehub.services.quote_aggregator import QuoteAggregatorService


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "quote_service", None) is None:
        try:
            settings = app.state.get_settings()
            app.state.quote_service = QuoteAggregatorService.from_settings(settings)
        except Exception as exc:
            # keep serving mock rows when the quote env is misconfigured
            print(f"[QUOTE][service_start] settings_error={exc!r}", flush=True)
            app.state.quote_service = QuoteAggregatorService(providers=[])
        providers = ",".join(p.name for p in app.state.quote_service.providers) or "none"
        print(f"[QUOTE][service_start] providers={providers}", flush=True)
    yield


app = FastAPI(title="Quote Hub", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.include_router(router, prefix="/v1")

# NOTE: lazy-loaded so app import does not require env during tests.
app.state.get_settings = get_settings
app.state.quote_service = None
