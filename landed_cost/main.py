from __future__ import annotations

import uuid
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from landed_cost.core.config import get_settings
from landed_cost.core.logging import configure_logging, get_logger
from landed_cost.routers import calculation, companies, cost_settings, factories, presets, rate_types, rates

settings = get_settings()

configure_logging()
logger = get_logger()

app = FastAPI(
    title=settings.app_name,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(companies.router, prefix=settings.api_prefix)
app.include_router(companies.warehouse_router, prefix=settings.api_prefix)
app.include_router(rate_types.router, prefix=settings.api_prefix)
app.include_router(factories.router, prefix=settings.api_prefix)
app.include_router(presets.router, prefix=settings.api_prefix)
app.include_router(cost_settings.router, prefix=settings.api_prefix)
app.include_router(rates.router, prefix=settings.api_prefix)
app.include_router(calculation.router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {"service": settings.app_name}


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    structlog.contextvars.bind_contextvars(request_id=request_id)
    try:
        response = await call_next(request)
    finally:
        structlog.contextvars.unbind_contextvars("request_id")
    logger.info("request", path=str(request.url.path), method=request.method, status=response.status_code)
    response.headers["X-Request-ID"] = request_id
    return response
