"""
app/main.py  — Daily Horoscope & Panchangam API
Startup: builds the cache + refresh pipeline, launches the daily scheduler
(which warms today's keys immediately). Endpoints never wait on a source.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from types import SimpleNamespace

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.cache import CacheStore
from app.core.clock import Clock
from app.core.config import refresh_deadline_s
from app.core.fetcher import Fetcher
from app.core.http_client import close_all
from app.core.orchestrator import RefreshOrchestrator
from app.core.scheduler import DailyScheduler
from app.core.sources import DailySources
from app.routers import horoscopes, panchangam

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("main")

VERSION = "1.0.0"


def build_services(clock: Clock | None = None, fetcher: Fetcher | None = None) -> SimpleNamespace:
    """One cache, one orchestrator, one scheduler per process."""
    clock   = clock or Clock()
    store   = CacheStore(clock)
    sources = DailySources(fetcher or Fetcher())
    orchestrator = RefreshOrchestrator(store, sources.load, sources.related)
    scheduler    = DailyScheduler(orchestrator, clock)
    return SimpleNamespace(
        clock=clock, store=store, sources=sources,
        orchestrator=orchestrator, scheduler=scheduler,
    )


def install_services(app: FastAPI, services: SimpleNamespace) -> None:
    app.state.clock        = services.clock
    app.state.store        = services.store
    app.state.orchestrator = services.orchestrator
    app.state.scheduler    = services.scheduler


async def shutdown_services(state, deadline_s: float | None = None) -> None:
    """
    Stop the scheduler, give in-flight refreshes up to one refresh deadline to
    settle, cancel whatever is left, and only then close the shared client.
    """
    if deadline_s is None:
        deadline_s = refresh_deadline_s()
    await state.scheduler.stop()
    try:
        await asyncio.wait_for(state.orchestrator.drain(), timeout=deadline_s)
    except asyncio.TimeoutError:
        cancelled = await state.orchestrator.cancel_all()
        log.warning(f"Cancelled {cancelled} refreshes still running at shutdown")
    await close_all()


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info(f"🚀 Horoscope & Panchangam API v{VERSION} starting...")
    if not hasattr(app.state, "orchestrator"):
        install_services(app, build_services())
    app.state.scheduler.start()
    yield
    log.info("🛑 Shutting down...")
    await shutdown_services(app.state)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Daily Horoscope & Panchangam API",
        description=(
            "Refresh-ahead cache over astrosage.com daily horoscopes and "
            "telugu.panchangam.org daily panchangam. Responses never block on "
            "the sources: stale or missing data is refreshed in the background."
        ),
        version=VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(horoscopes.router)
    app.include_router(panchangam.router)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, ex: Exception):
        log.exception(f"Unhandled error on {request.url.path}: {ex}")
        return JSONResponse(
            status_code=500,
            content={
                "error":   str(ex) or "Something went wrong on the server. Please try again later.",
                "details": type(ex).__name__,
            },
        )

    @app.get("/", tags=["meta"])
    async def root():
        return {
            "status":  "online",
            "version": VERSION,
            "sources": {
                "horoscopes": "astrosage.com (daily, one page per sign)",
                "panchangam": "telugu.panchangam.org (daily, one page per date)",
            },
            "endpoints": {
                "horoscopes": "/api/daily-horoscopes",
                "horoscope":  "/api/daily-horoscopes/{sign}",
                "panchangam": "/api/daily-panchangam?date=YYYY-MM-DD",
                "health":     "/health",
                "docs":       "/docs",
            },
        }

    @app.get("/health", tags=["meta"])
    async def health(request: Request):
        """Lightweight health check — cache metadata only."""
        state   = request.app.state
        summary = state.store.summary()
        return {
            "status":     "healthy" if summary else "warming_up",
            "today":      state.clock.today(),
            "scheduler":  "running" if state.scheduler.running else "stopped",
            "in_flight":  state.orchestrator.in_flight,
            "cache_keys": summary,
        }

    return app


app = create_app()
