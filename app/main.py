"""
CareMatch - FastAPI Application Entry Point
Deterministic, explainable matching of nurses to care-facility assignments.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from app.config import get_settings
from app.database import Base, engine
from app.routers import health, matching

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Runs startup and shutdown logic.
    """
    # Startup
    logger.info("Starting %s v%s (%s)", settings.app_name, settings.app_version, settings.app_env)
    Base.metadata.create_all(bind=engine)
    yield
    # Shutdown
    logger.info("Shutting down %s", settings.app_name)


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="""
## CareMatch API

Staffing marketplace matching engine: ranks nurses ("candidates") for
care-facility job postings ("assignments").

### Properties

- Deterministic: identical inputs always give identical rankings
- Explainable: every point awarded comes with a human-readable factor
- Configurable: facilities tune thresholds and per-factor weights
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware for cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed criteria or payloads are client errors (400), never clamped."""
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "error": "Invalid matching criteria",
                "code": "INVALID_CRITERIA",
                "details": jsonable_encoder(exc.errors()),
            }
        },
    )


# Register API routers
app.include_router(health.router, tags=["Health"])
app.include_router(
    matching.router,
    prefix=settings.api_prefix,
    tags=["Matching Engine"]
)


@app.get("/", tags=["Root"])
async def root():
    """
    Welcome endpoint with API information.
    """
    return {
        "message": "Welcome to CareMatch API",
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/health"
    }
