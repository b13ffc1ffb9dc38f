import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import models to ensure they're registered with SQLAlchemy Base
from . import models  # noqa: F401
from .config import ALLOWED_ORIGINS, ENVIRONMENT, SECURITY_HEADERS_ENABLED
from .database import Base, engine
from .domain.assignments import public_router as assignments_public_router
from .domain.assignments import router as assignments_router
from .domain.bookings import public_router as bookings_public_router
from .domain.bookings import router as bookings_router
from .domain.catalog import public_router as catalog_public_router
from .domain.catalog import router as catalog_router
from .domain.commissions import payments_router
from .domain.commissions import router as commissions_router
from .domain.events import public_router as events_public_router
from .domain.events import router as events_router
from .domain.scheduling import router as slots_router
from .domain.stats import router as stats_router
from .exceptions import BookingEngineError
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Salon Booking API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(BookingEngineError)
async def booking_engine_exception_handler(request: Request, exc: BookingEngineError):
    """Render engine errors as {"detail", "code"} with their mapped status"""
    logger.info(f"{request.method} {request.url.path} → {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(
        SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"]
    )
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes - public first so /assignments/accept never meets the staff guard
app.include_router(catalog_public_router)
app.include_router(slots_router)
app.include_router(bookings_public_router)
app.include_router(assignments_public_router)
app.include_router(events_public_router)

app.include_router(catalog_router)
app.include_router(bookings_router)
app.include_router(assignments_router)
app.include_router(commissions_router)
app.include_router(payments_router)
app.include_router(stats_router)
app.include_router(events_router)


@app.get("/")
def root():
    return {"message": "Salon Booking API is running"}


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "environment": ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
