"""
Smart Paste — Main Application

FastAPI application entry point.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import structlog
from datetime import datetime, timezone

from config import settings, check_connection

# stdlib logging carries the level filter for structlog's stdlib processors
logging.basicConfig(format="%(message)s", level=getattr(logging, settings.log_level))

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: Check the community alias store
    Shutdown: Log only (OCR sessions are scoped per request)
    """
    # Startup
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug,
        ocr_enabled=settings.enable_ocr,
        page_proxy=bool(settings.product_page_proxy_url)
    )

    db_status = check_connection()
    if db_status["status"] == "healthy":
        logger.info(
            "alias_store_connected",
            aliases=db_status["aliases_count"]
        )
    elif db_status["status"] == "disabled":
        logger.info("alias_store_disabled")
    else:
        logger.error(
            "alias_store_connection_failed",
            error=db_status.get("error")
        )

    yield

    # Shutdown
    logger.info("application_shutting_down")


# Create FastAPI app
app = FastAPI(
    title="Smart Paste",
    description="Extract product specifications from pasted text and map them onto spec fields",
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns:
        Basic health status and alias store state. A disabled store is healthy.
    """
    db_status = check_connection()

    return {
        "status": "degraded" if db_status["status"] == "unhealthy" else "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "alias_store": db_status
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "Smart Paste API",
        "version": APP_VERSION,
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "parse": "/api/smart-paste/parse",
            "parse_batch": "/api/smart-paste/parse/batch",
            "boundaries": "/api/smart-paste/boundaries",
            "apply": "/api/smart-paste/apply",
            "diff": "/api/smart-paste/diff",
            "normalize_units": "/api/smart-paste/normalize-units",
            "coerce": "/api/smart-paste/coerce",
            "extract": "/api/smart-paste/extract",
            "fetch_page": "/api/smart-paste/fetch-page",
            "aliases": "/api/smart-paste/aliases"
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.smart_paste import router as smart_paste_router

app.include_router(smart_paste_router, prefix="/api/smart-paste", tags=["Smart Paste"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
