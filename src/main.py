"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.ps_account.infrastructure.persistence import SqlPortfolioStore
from src.ps_common.database import create_engine, create_session_factory
from src.ps_common.errors import AppError
from src.ps_common.response import error_response
from src.ps_gateway.api.ws import router as ws_router
from src.ps_gateway.auth.jwt_handler import verify_token
from src.ps_gateway.middleware.request_log import RequestLogMiddleware
from src.ps_runtime.api.router import router as market_router
from src.ps_runtime.application.runtime import MarketRuntime

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: build the runtime (and DB store if configured). Shutdown: stop timers, dispose."""
    engine = create_engine(settings.DATABASE_URL, echo=settings.DEBUG) if settings.DATABASE_URL else None
    store = SqlPortfolioStore(create_session_factory(engine)) if engine is not None else None
    if store is None:
        logger.info("DATABASE_URL not set, running in-memory only")

    runtime = MarketRuntime(settings, store=store, resolver=verify_token)
    app.state.runtime = runtime
    if settings.AUTOSTART_SIMULATION:
        await runtime.start()
    yield
    await runtime.stop()
    if engine is not None:
        await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, getattr(request.state, "request_id", None))
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(market_router, prefix="/api/v1")
app.include_router(ws_router)


@app.get("/health")
async def health(request: Request) -> dict[str, str]:
    runtime: MarketRuntime | None = getattr(request.app.state, "runtime", None)
    simulation = "running" if runtime is not None and runtime.is_running else "stopped"
    return {"status": "ok", "version": "0.1.0", "simulation": simulation}
