from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request

from placement_api.api.errors import register_error_handlers
from placement_api.api.router import api_router
from placement_api.core.config import get_settings
from placement_api.core.telemetry import configure_api_logging, setup_api_telemetry, shutdown_api_telemetry
from placement_api.services.database import get_database

settings = get_settings()
configure_api_logging(settings.log_level, settings.otel_log_correlation)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info("starting %s version=%s environment=%s", settings.app_name, settings.app_version, settings.environment)
    try:
        yield
    finally:
        if tracer_provider is not None:
            shutdown_api_telemetry(app, tracer_provider)
        await get_database().close()
        get_database.cache_clear()
        logger.info("stopped %s", settings.app_name)


app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
tracer_provider = setup_api_telemetry(app, settings)
register_error_handlers(app)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    started_at = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        elapsed_ms = (time.perf_counter() - started_at) * 1000.0
        level = logging.WARNING if elapsed_ms > settings.slow_request_threshold_ms else logging.INFO
        logger.log(
            level,
            "http request method=%s path=%s status=%s duration_ms=%.2f",
            request.method,
            request.url.path,
            status_code,
            elapsed_ms,
        )


app.include_router(api_router, prefix="/api")
