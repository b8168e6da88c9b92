"""
FastAPI application entry point for the pizza dashboard auth service.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog
import uvicorn

from .core.config import settings
from .core.exceptions import CredentialError
from .api.auth import router as auth_router
from .container.container import initialize_container, cleanup_container


# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.ConsoleRenderer() if settings.DEBUG else structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.DEBUG if settings.DEBUG else logging.INFO
    ),
    logger_factory=structlog.WriteLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.
    Builds the service container on startup and drops all state on shutdown.
    """
    logger.info("Starting auth service", version=settings.VERSION, environment=settings.ENVIRONMENT)

    try:
        await initialize_container()
        logger.info("Service container initialized")

        yield

    finally:
        logger.info("Shutting down auth service")
        await cleanup_container()
        logger.info("Auth service shutdown complete")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Credential and token lifecycle service for the pizza order dashboard",
    version=settings.VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors."""
    logger.warning("Validation error", path=request.url.path, error_count=len(exc.errors()))

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Validation error",
            "errors": jsonable_encoder(exc.errors()),
            "error_code": "VALIDATION_ERROR"
        }
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "error_code": f"HTTP_{exc.status_code}"
        },
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(CredentialError)
async def credential_exception_handler(request: Request, exc: CredentialError):
    """Credential failures that escaped a route become a plain 400."""
    logger.warning("Unhandled credential error", path=request.url.path, error_code=exc.error_code)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "error_code": exc.error_code}
    )


@app.get("/health", tags=["health"])
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "auth-service", "version": settings.VERSION}


app.include_router(auth_router, prefix=settings.API_V1_STR)


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with service information."""
    return {
        "service": settings.APP_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "health_check": "/health"
    }


def run_dev():
    """Run development server."""
    uvicorn.run(
        "pizza_auth.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="debug" if settings.DEBUG else "info"
    )


if __name__ == "__main__":
    run_dev()
