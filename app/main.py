"""Donation Payments - FastAPI main application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import get_settings
from app.database import dispose_engine, init_models, is_store_configured
from app.routers import payments, webhooks
from app.services.donation_config import InvalidUrlWarnings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: create tables on startup when a store is configured."""
    logger.info("Starting Donation Payments API")
    if is_store_configured():
        try:
            await init_models()
        except Exception as exc:
            # Intent creation still works untracked; webhooks report 503 until the store is back
            logger.error("Payment store initialisation failed: %s", exc)
    else:
        logger.warning("DATABASE_URL is not set; donation tracking is disabled")
    yield
    await dispose_engine()
    logger.info("Donation Payments API shutdown complete")


class NoStoreMiddleware(BaseHTTPMiddleware):
    """Payment responses must never be cached by browsers or proxies."""

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
        response.headers["Pragma"] = "no-cache"
        return response


app = FastAPI(
    title="Donation Payments",
    description="Donation intents and payment webhook reconciliation",
    version="1.0.0",
    lifespan=lifespan,
)
app.state.url_warnings = InvalidUrlWarnings()

app.add_middleware(NoStoreMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions and return stable 500 response."""
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred. Please try again."},
        headers={"Cache-Control": "no-store, no-cache, must-revalidate", "Pragma": "no-cache"},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(_: Request, exc: HTTPException):
    """Preserve explicit HTTP exceptions with their original status/detail."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError):
    """Malformed payment payloads are plain 400s."""
    errors = exc.errors()
    first_error = errors[0] if errors else {}
    loc = first_error.get("loc", [])
    loc_path = ".".join(str(p) for p in loc if p not in {"body", "query", "path"})
    msg = first_error.get("msg", "Validation failed")
    detail = f"{loc_path}: {msg}" if loc_path else msg
    return JSONResponse(status_code=400, content={"detail": detail})


app.include_router(payments.router, prefix="/api")
app.include_router(webhooks.router, prefix="/api")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "Donation Payments API", "status": "ok"}
