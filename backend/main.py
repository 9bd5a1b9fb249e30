import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from config import CORS_ORIGINS
from database import init_db
from errors import AppError, ErrorCode, InternalError, ValidationError, status_for
from logging_setup import configure_logging
from rate_limit import limiter
from routers import applications, artifacts, auth, files, health, projects, releases


logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = InternalError.default_message


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    configure_logging()
    # Startup: Initialize the database
    init_db()
    yield


app = FastAPI(
    title="AppShare API",
    description="Backend API for AppShare application distribution",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_body(status_code: int, code: ErrorCode, message: str, field=None) -> dict:
    return {"status": status_code, "code": code.value, "message": message, "field": field}


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    status_code = status_for(exc)
    if isinstance(exc, InternalError):
        # Internal details stay in the logs
        logger.error(
            "Internal error",
            exc_info=exc,
            extra={"path": request.url.path, "error": exc.message},
        )
        message = GENERIC_ERROR_MESSAGE
    else:
        message = exc.message
    field = exc.field if isinstance(exc, ValidationError) else None
    return JSONResponse(
        status_code=status_code,
        content=error_body(status_code, exc.code, message, field),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error", exc_info=exc, extra={"path": request.url.path})
    return JSONResponse(
        status_code=500,
        content=error_body(500, ErrorCode.INTERNAL_ERROR, GENERIC_ERROR_MESSAGE),
    )


# Include routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(projects.router, prefix="/api/v1", tags=["projects"])
app.include_router(applications.router, prefix="/api/v1", tags=["applications"])
app.include_router(releases.router, prefix="/api/v1", tags=["releases"])
app.include_router(artifacts.router, prefix="/api/v1", tags=["artifacts"])
app.include_router(files.router, prefix="/api/v1", tags=["files"])


@app.get("/")
async def root():
    return {"message": "Welcome to AppShare API"}
