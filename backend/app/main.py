import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException

from app.config import settings
from app.exceptions import TourPricingError, UpstreamUnavailable

# ─── Logging setup (file + console) ───
_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_LOG_DIR.mkdir(exist_ok=True)

_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[
        logging.StreamHandler(),
        RotatingFileHandler(
            _LOG_DIR / "tourpricer.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ),
    ],
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("apscheduler").setLevel(logging.WARNING)

from app.routers import auth, calculator, catalog, currency, wizard
from app.services.booking_wizard import wizard_registry
from app.services.cache_service import cache_service
from app.services.currency_converter import rate_cache

logger = logging.getLogger(__name__)


async def evict_idle_wizards():
    wizard_registry.evict_idle()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Seed users and catalog if the database is empty (dev convenience)
    if settings.auto_seed:
        try:
            from app.seed import seed
            await seed()
        except Exception as e:
            logger.warning(f"Auto-seed skipped: {e}")

    # Warm the rate table; refresh() degrades to fallback rates on its own
    await rate_cache.refresh()

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            rate_cache.refresh,
            IntervalTrigger(minutes=settings.exchange_rate_refresh_minutes),
            id="exchange_rates",
        )
        scheduler.add_job(
            evict_idle_wizards,
            IntervalTrigger(minutes=settings.wizard_sweep_minutes),
            id="wizard_eviction",
        )
        scheduler.start()
        logger.info(
            f"Background scheduler started (exchange rates every {settings.exchange_rate_refresh_minutes} min, "
            f"idle wizard sweep every {settings.wizard_sweep_minutes} min)"
        )

    yield

    # Shutdown
    if scheduler:
        scheduler.shutdown(wait=False)
        logger.info("Background scheduler stopped")
    await rate_cache.close()
    await cache_service.close()


app = FastAPI(
    title="TourPricer",
    description="Japan tour price calculator",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Error responses: always {"message": ...} ───

@app.exception_handler(TourPricingError)
async def pricing_error_handler(request: Request, exc: TourPricingError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        err = errors[0]
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        message = f"{loc}: {err['msg']}" if loc else err["msg"]
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"message": message})


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(OperationalError)
async def database_error_handler(request: Request, exc: OperationalError):
    logger.error(f"Database unavailable during {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=UpstreamUnavailable.status_code,
        content={"message": UpstreamUnavailable.default_message},
    )


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(catalog.router, prefix="/api", tags=["catalog"])
app.include_router(currency.router, prefix="/api/currency", tags=["currency"])
app.include_router(calculator.router, prefix="/api/calculator", tags=["calculator"])
app.include_router(wizard.router, prefix="/api/wizard", tags=["wizard"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "service": "tourpricer"}
