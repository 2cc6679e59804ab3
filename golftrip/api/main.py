"""
Golf Trip API Server

FastAPI server for the golf trip: roster, foursomes, standings, champions
and the photo gallery.
"""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
import logging
import os
import uvicorn
from slowapi import _rate_limit_exceeded_handler  # type: ignore
from slowapi.errors import RateLimitExceeded  # type: ignore
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from golftrip.api.routes import router, limiter as routes_limiter
from golftrip.database import db
from golftrip.database.init_defaults import init_defaults
from golftrip.utils.errors import AuthenticationRequired, FormError, GolfTripError

# Set up logging
# Allow log level to be configured via environment variable (default: INFO)
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
numeric_level = getattr(logging, log_level, logging.INFO)
logging.basicConfig(
    level=numeric_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def login_url() -> str:
    return os.getenv("LOGIN_URL", "/login")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup and shutdown events."""
    logger.info("Starting up Golf Trip API...")

    engine: Optional[AsyncEngine] = app.state.engine
    if engine is not None:
        # Initialize database (create tables if they don't exist)
        try:
            await db.init_database(engine)
            logger.info("Database initialized")
        except Exception as e:
            logger.error(f"Database initialization failed: {e}", exc_info=True)

    try:
        await init_defaults(app.state.session_factory)
    except Exception as e:
        logger.error(f"Failed to initialize defaults: {e}", exc_info=True)

    yield  # App is running

    logger.info("Shutting down Golf Trip API...")
    if engine is not None and app.state.owns_engine:
        await engine.dispose()


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


async def authentication_required_handler(request: Request, exc: AuthenticationRequired):
    """Unauthenticated requests are sent to the login page, not shown an error."""
    return RedirectResponse(url=login_url(), status_code=303)


async def form_error_handler(request: Request, exc: FormError):
    """Validation and conflict errors carry field messages and the submitted values."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "errors": exc.field_errors,
            "values": jsonable_encoder(exc.values),
        },
    )


async def golftrip_error_handler(request: Request, exc: GolfTripError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def _field_name(loc) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "form")]
    return ".".join(parts) or "__root__"


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Pydantic/FastAPI input errors in the same shape as FormError."""
    field_errors = {}
    for error in exc.errors():
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        field_errors.setdefault(_field_name(error.get("loc", ())), []).append(message)

    values = exc.body if isinstance(exc.body, dict) else {}
    # Never echo secrets back
    values = {k: v for k, v in values.items() if "password" not in k}
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Please correct the errors below",
            "errors": field_errors,
            "values": jsonable_encoder(values),
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Something went wrong. Please try again."})


def create_app(
    session_factory: Optional[async_sessionmaker] = None,
    engine: Optional[AsyncEngine] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        session_factory: Session factory for request handlers; built from
            ``engine`` (or ``DATABASE_URL``) when omitted
        engine: Engine whose tables are created at startup

    Returns:
        FastAPI app
    """
    owns_engine = False
    if session_factory is None:
        if engine is None:
            engine = db.create_engine()
            owns_engine = True
        session_factory = db.create_session_factory(engine)

    app = FastAPI(
        title="Golf Trip API",
        description="Roster, foursomes, standings, champions and photos for the golf trip",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.owns_engine = owns_engine
    app.state.session_factory = session_factory

    # Setup rate limiter
    app.state.limiter = routes_limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(AuthenticationRequired, authentication_required_handler)
    app.add_exception_handler(FormError, form_error_handler)
    app.add_exception_handler(GolfTripError, golftrip_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Add CORS middleware, origins configured via ALLOWED_ORIGINS env var
    allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
