"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8080
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from config.settings import settings
from src.lm_account.api.router import router as account_router
from src.lm_accrual.application.reconciler import ReconciliationLoop
from src.lm_accrual.infrastructure.client import AccrualClient
from src.lm_accrual.infrastructure.persistence import LedgerRepository
from src.lm_common.database import async_session_factory, check_connection, engine
from src.lm_common.errors import AppError
from src.lm_common.response import error_response
from src.lm_gateway.api.router import router as auth_router
from src.lm_gateway.middleware.gzip_request import GzipRequestMiddleware
from src.lm_gateway.middleware.request_log import RequestLogMiddleware
from src.lm_order.api.router import router as order_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB, start reconciliation. Shutdown: stop loop, dispose."""
    await check_connection()

    async with AccrualClient(
        settings.ACCRUAL_SYSTEM_ADDRESS,
        timeout=settings.ACCRUAL_REQUEST_TIMEOUT_SECONDS,
        max_retries=settings.ACCRUAL_MAX_RETRIES,
    ) as client:
        reconciler = ReconciliationLoop(
            client,
            LedgerRepository(),
            async_session_factory,
            interval=settings.ACCRUAL_POLL_INTERVAL_SECONDS,
            db_timeout=settings.DB_OPERATION_TIMEOUT_SECONDS,
        )
        if settings.ACCRUAL_POLLER_ENABLED:
            reconciler.start()
        else:
            logger.warning("Accrual reconciliation disabled by ACCRUAL_POLLER_ENABLED")
        app.state.reconciler = reconciler
        try:
            yield
        finally:
            await reconciler.stop(grace=settings.ACCRUAL_REQUEST_TIMEOUT_SECONDS)

    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# Added innermost first: requests are inflated before routing, responses
# compressed before the request log sees them.
app.add_middleware(GzipRequestMiddleware, max_body_size=settings.MAX_REQUEST_BODY_BYTES)
app.add_middleware(
    GZipMiddleware,
    minimum_size=settings.GZIP_MINIMUM_SIZE,
    compresslevel=settings.GZIP_COMPRESS_LEVEL,
)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(auth_router, prefix="/api/user")
app.include_router(order_router, prefix="/api/user")
app.include_router(account_router, prefix="/api/user")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
