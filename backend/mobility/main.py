"""City Mobility FastAPI Application.

Main entry point for the backend API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from mobility.api import router
from mobility.api.routes import get_settings
from mobility.errors import ConfigurationError
from mobility.models import ErrorCode, RouteOptimizationState
from mobility.services.route_optimizer import INVALID_INPUT_MESSAGE

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    try:
        settings = get_settings()
        for backend, description in settings.describe().items():
            logger.info(f"[CONFIG] {backend}: {description}")
    except ConfigurationError as e:
        logger.error(f"[CONFIG] {e}")
        logger.error("[CONFIG] Route optimization will fail until configuration is fixed.")
    yield
    # Shutdown - services hold no open resources


app = FastAPI(
    title="City Mobility API",
    description="AI-powered multi-modal route optimization and parking prediction",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:9002",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _request_field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    """Group body errors by form field; body-level problems go under ``_form``."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = error.get("loc", ())
        field = str(loc[1]) if len(loc) > 1 and loc[0] == "body" else "_form"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return errors


# Global exception handlers
@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies.

    The route optimizer form answers with its usual state and field errors;
    other endpoints use the error envelope.
    """
    if request.url.path.endswith("/route/optimize"):
        state = RouteOptimizationState(
            message=INVALID_INPUT_MESSAGE, errors=_request_field_errors(exc)
        )
        return JSONResponse(
            status_code=422, content=state.model_dump(mode="json", by_alias=True)
        )
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": {
                "code": ErrorCode.VALIDATION_ERROR.value,
                "message": f"{len(exc.errors())} validation error(s)",
                "user_message": "Invalid request format. Please check your input.",
            },
        },
    )


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    """Handle Pydantic validation errors."""
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": {
                "code": ErrorCode.VALIDATION_ERROR.value,
                "message": f"{exc.error_count()} validation error(s)",
                "user_message": "Invalid request format. Please check your input.",
            },
        },
    )


@app.exception_handler(ConfigurationError)
async def configuration_exception_handler(request: Request, exc: ConfigurationError):
    """Handle missing backend configuration."""
    logger.error(f"[CONFIG] {exc}")
    return JSONResponse(
        status_code=503,
        content={
            "success": False,
            "error": {
                "code": ErrorCode.API_ERROR.value,
                "message": "Service is not configured",
                "user_message": "This service is temporarily unavailable. Please try again later.",
            },
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.exception("Unhandled error")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "code": ErrorCode.API_ERROR.value,
                "message": type(exc).__name__,
                "user_message": "Something went wrong. Please try again.",
            },
        },
    )


# Include API routes
app.include_router(router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
