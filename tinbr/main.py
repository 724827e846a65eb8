"""
tinbr - Main Application Entry Point
Multi-tenant document CRUD API
"""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import structlog

from tinbr.core.config import get_settings
from tinbr.core.database import init_db
from tinbr.core.errors import TinbrError
from tinbr.api import auth, owners, quotes
from tinbr.api.collections import build_collection_router
from tinbr.services.collections import COLLECTIONS

settings = get_settings()

# Configure structured logging
logging.basicConfig(format="%(message)s", level=settings.LOG_LEVEL)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Initializing tinbr backend", environment=settings.ENVIRONMENT)
    init_db()

    yield

    # Shutdown
    logger.info("Shutting down tinbr backend")


# Create FastAPI application
app = FastAPI(
    title="tinbr API",
    description="Multi-tenant CRUD over clientes, users, proprietarios, propriedades and related collections",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure middleware stack
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TinbrError)
async def tinbr_error_handler(request: Request, exc: TinbrError):
    """Render domain errors as {"error", "code"} without internals"""
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, code=exc.code)
    else:
        logger.info("Request rejected", path=request.url.path, code=exc.code, status=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies answer 400 like the other validation errors"""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid request",
            "code": "VALIDATION_ERROR",
            "details": jsonable_encoder(exc.errors()),
        },
    )


# Include routers
app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["auth"])
app.include_router(owners.router, prefix=f"{settings.API_PREFIX}/proprietarios", tags=["proprietarios"])
app.include_router(quotes.router, prefix=f"{settings.API_PREFIX}/cotacoes", tags=["cotacoes"])
for name, config in COLLECTIONS.items():
    app.include_router(
        build_collection_router(config),
        prefix=f"{settings.API_PREFIX}/{name}",
        tags=[name],
    )


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "tinbr-api"}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "tinbr API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "tinbr.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
