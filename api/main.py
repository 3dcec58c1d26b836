"""FastAPI application for the Episode Billing API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from episode_billing.config import get_settings
from episode_billing.models import (
    BillingError,
    ClientNotFoundError,
    InvoiceNotFoundError,
    PaymentError,
    RateNotFoundError,
    StrictValidationError,
)

from api.routes import pay_router, router

settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not get_settings().API_KEY:
        logger.warning("API_KEY is not set: write endpoints are open (local mode)")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Time tracking, billing and invoices for podcast editing.",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# CORS: ALLOWED_ORIGINS="*" allows any origin
_origins = settings.allowed_origins
_allow_all = "*" in _origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if _allow_all else _origins,
    allow_credentials=not _allow_all,  # credentials not allowed with wildcard
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    if isinstance(exc, (ClientNotFoundError, RateNotFoundError, InvoiceNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, PaymentError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    logger.warning("%s %s -> %d: %s", request.method, request.url.path, code, exc)
    return JSONResponse(status_code=code, content={"detail": str(exc)})


@app.exception_handler(StrictValidationError)
async def validation_error_handler(request: Request, exc: StrictValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": "validation_error", "errors": exc.errors},
    )


app.include_router(router)
app.include_router(pay_router)


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/api/v1/health",
    }
