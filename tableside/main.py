"""
Tableside - online table reservations API
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import structlog

from tableside import __version__
from tableside.config import settings
from tableside.api import public_reservations
from tableside.booking.errors import BookingFailed
from tableside.log import configure_logging

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info(
        "Starting Tableside API",
        version=__version__,
        email_enabled=bool(settings.resend_api_key),
    )
    yield
    from tableside.database import engine

    await engine.dispose()
    logger.info("Shutting down Tableside API")


app = FastAPI(
    title="Tableside",
    description="Online table reservations for restaurants",
    version=__version__,
    lifespan=lifespan,
)

# Booking pages are served from the restaurant's own site
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Storage errors that escaped the booking flow; never echo driver messages"""
    logger.error("Unhandled database error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"detail": BookingFailed().to_detail()})


@app.get("/health")
async def health():
    """Liveness probe"""
    return {"status": "healthy", "service": "tableside", "version": __version__}


@app.get("/health/ready")
async def ready():
    """Readiness probe: database, confirmation code function and job broker"""
    from tableside.database import SessionLocal

    checks = {}

    try:
        async with SessionLocal() as db:
            await db.execute(text("SELECT 1"))
            if db.bind.dialect.name == "postgresql":
                result = await db.execute(text("SELECT to_regproc('generate_confirmation_code')"))
                # Bookings still work without it, on locally generated codes
                checks["confirmation_codes"] = "database" if result.scalar() else "fallback"
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"failed: {str(e)}"

    try:
        from tableside.jobs.celery_app import celery_app
        celery_app.control.ping(timeout=1)
        checks["broker"] = "ok"
    except Exception as e:
        # Bookings are still accepted; follow-up jobs are dropped
        checks["broker"] = f"failed: {str(e)}"

    return {
        "status": "ready" if checks["database"] == "ok" else "not_ready",
        "checks": checks,
    }


app.include_router(
    public_reservations.router,
    prefix="/public-reservation",
    tags=["Public Reservations"],
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tableside.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
