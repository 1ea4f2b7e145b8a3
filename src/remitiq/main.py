"""Entry point for the RemitIQ rate intelligence API.

Wires settings, logging, the rate store, rate sources, and the intelligence
service into a FastAPI app and serves it with uvicorn's programmatic API.

Component wiring order (in lifespan):
1. RateDatabase + RateStore (when STORE_ENABLED)
2. WiseRateSource, then FrankfurterRateSource (live sources, in order)
3. SyntheticRateSource (fallback)
4. IntelligenceService (cache, fallback chain, persistence)
"""

import asyncio
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from remitiq.api.app import create_app
from remitiq.config import AppSettings
from remitiq.data.database import RateDatabase
from remitiq.data.store import RateStore
from remitiq.logging import get_logger, setup_logging
from remitiq.service import IntelligenceService
from remitiq.sources.frankfurter import FrankfurterRateSource
from remitiq.sources.synthetic import SyntheticRateSource
from remitiq.sources.wise import WiseRateSource


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build components on startup and release them on shutdown."""
    logger = get_logger("remitiq.main")
    settings: AppSettings = app.state.settings

    database: RateDatabase | None = None
    store: RateStore | None = None
    if settings.store.enabled:
        database = RateDatabase(settings.store.db_path)
        await database.connect()
        store = RateStore(database)

    service = IntelligenceService(
        settings=settings,
        live_sources=[
            WiseRateSource(settings.rates),
            FrankfurterRateSource(settings.rates),
        ],
        store=store,
        fallback_source=SyntheticRateSource(seed=settings.rates.synthetic_seed),
    )
    app.state.service = service

    logger.info(
        "lifespan_started",
        rate_mode=settings.rates.mode,
        store_enabled=settings.store.enabled,
        cache_ttl=settings.cache.ttl_seconds,
    )

    yield

    await service.close()
    if database is not None:
        await database.close()
    logger.info("remitiq_stopped")


async def run() -> None:
    """Load settings, configure logging, and serve the API."""
    settings = AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("remitiq.main")

    app = create_app(lifespan=lifespan)
    app.state.settings = settings

    logger.info(
        "starting_api",
        host=settings.api.host,
        port=settings.api.port,
    )

    config = uvicorn.Config(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
