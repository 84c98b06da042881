"""
VCNotebook - Backend proxy
Forwards provider configuration to clients and brokers the premium checkout
"""

import time
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from starlette.middleware.base import BaseHTTPMiddleware

from vcnotebook import __version__
from vcnotebook.api.router import api_router
from vcnotebook.core.config import settings
from vcnotebook.core.database import engine
from vcnotebook.core.errors import ProxyError
from vcnotebook.core.logging import get_logger, setup_logging
from vcnotebook.core.rate_limit import limiter
from vcnotebook.models import Base

setup_logging()
logger = get_logger(__name__)

QUIET_PATHS = {"/health", "/healthz"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests with timing."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        log_data = {
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round(duration_ms, 2),
            "client_ip": request.client.host if request.client else "unknown",
        }

        if request.url.path not in QUIET_PATHS:
            if response.status_code >= 500:
                logger.error("Request failed", extra=log_data)
            elif response.status_code >= 400:
                logger.warning("Request error", extra=log_data)
            elif duration_ms > 1000:
                logger.warning("Slow request", extra=log_data)
            else:
                logger.debug("Request completed", extra=log_data)

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(f"Starting {settings.APP_NAME} (env={settings.APP_ENV}, debug={settings.DEBUG})")
    if not settings.payments_enabled:
        logger.warning("Payments not configured - checkout will return 500")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    logger.info(f"Shutting down {settings.APP_NAME}")
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Configuration proxy and premium checkout for VCNotebook",
    version=__version__,
    openapi_url=f"{settings.API_PREFIX}/openapi.json" if settings.DEBUG else None,
    docs_url=f"{settings.API_PREFIX}/docs" if settings.DEBUG else None,
    redoc_url=None,
    lifespan=lifespan,
)


@app.exception_handler(ProxyError)
async def proxy_error_handler(request: Request, exc: ProxyError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them."""
    logger.error(f"Unhandled exception: {type(exc).__name__}: {exc}")
    logger.error(f"Traceback:\n{traceback.format_exc()}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)},
    )


# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=settings.CORS_ALLOWED_METHODS,
    allow_headers=settings.CORS_ALLOWED_HEADERS,
    max_age=600,
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/healthz", response_class=PlainTextResponse)
async def liveness() -> str:
    return "ok"


@app.get("/health")
async def health_check():
    """Health check endpoint with DB connectivity."""
    status = {"app": settings.APP_NAME, "status": "healthy"}

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        status["database"] = "ok"
    except Exception:
        status["database"] = "error"
        status["status"] = "degraded"

    return status


PAYMENT_SUCCESS_PAGE = """<!DOCTYPE html>
<html>
<head>
  <title>Payment Successful</title>
  <style>
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; text-align: center; padding: 50px; background: #f5f5f7; }
    .success-card { background: white; padding: 40px; border-radius: 12px; box-shadow: 0 4px 20px rgba(0,0,0,0.1); max-width: 400px; margin: 0 auto; }
    h1 { color: #1d1d1f; margin-bottom: 10px; }
    p { color: #86868b; margin-bottom: 30px; }
    .btn { background: #007aff; color: white; padding: 12px 24px; border-radius: 8px; text-decoration: none; display: inline-block; }
  </style>
</head>
<body>
  <div class="success-card">
    <h1>Payment Successful!</h1>
    <p>Welcome to Premium! You now have access to all premium features.</p>
    <a href="/" class="btn">Return to Notes</a>
  </div>
</body>
</html>
"""


@app.get("/payment-success", response_class=HTMLResponse)
async def payment_success() -> str:
    return PAYMENT_SUCCESS_PAGE


def run() -> None:
    """Console entry point: serve the proxy with uvicorn."""
    import uvicorn

    uvicorn.run("vcnotebook.main:app", host="0.0.0.0", port=settings.PORT)
