# Standard library imports
from contextlib import asynccontextmanager

# Third-party imports
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

# Local imports
from app.api.v1.routes.router import router as api_v1_router
from app.core.config import settings
from app.core.logging_config import get_logger
from app.core.response import error_response, validation_error_response
from app.db.deps import engine

# Initialize centralized logger
logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown operations."""
    logger.info(f"Starting FlashGen API using model {settings.AI_MODEL}")
    yield
    # Shutdown: release pooled database connections
    await engine.dispose()


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with logging"""
    # exc.detail might be a dict or str
    msg = exc.detail if isinstance(exc.detail, str) else str(exc.detail)

    # Log the error with context
    logger.warning(
        f"HTTP Exception: {exc.status_code} - {msg}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "client_ip": request.client.host if request.client else None
        }
    )

    response = error_response(msg, status_code=exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


# Pydantic validation errors
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Validation error handler with structured field details and logging"""
    error_count = len(exc.errors())
    logger.warning(
        f"Validation Error: {error_count} field(s) failed validation",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": error_count,
        }
    )

    return validation_error_response(exc.errors(), status_code=400)


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last line of defence: never leak internal errors to the client"""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response("Internal server error", status_code=500, include_debug=True)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


# Initialize FastAPI
app = FastAPI(
    title="FlashGen API",
    description="API for AI-assisted flashcard generation and review",
    version="1.0.0",
    openapi_url="/api/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

# Include the router with prefix
app.include_router(
    api_v1_router,
    prefix="/api/v1",
)
register_exception_handlers(app)


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}


# Add CORS middleware
logger.info(f"Configuring CORS middleware with origins: {settings.ALLOWED_ORIGINS}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=settings.ALLOW_CREDENTIALS,
    allow_methods=settings.ALLOWED_METHODS,
    allow_headers=settings.ALLOWED_HEADERS,
)
logger.info("CORS middleware configured successfully")


# Run the app
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
