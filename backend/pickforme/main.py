import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pickforme.config import settings

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
            _LOG_DIR / "pickforme.log",
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

from pickforme.routers import booking, decision, venues
from pickforme.services.booking_orchestrator import build_orchestrator
from pickforme.services.decision_engine import DecisionEngine
from pickforme.services.yelp_client import YelpClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yelp = YelpClient(settings)
    app.state.venue_provider = yelp
    app.state.decision_engine = DecisionEngine()
    app.state.orchestrator = build_orchestrator(yelp, settings)
    if settings.use_mock_provider:
        logger.info("No Yelp API key configured, serving mock venue inventory")

    yield

    # Shutdown
    await yelp.close()
    logger.info("Yelp client closed")


app = FastAPI(
    title="Pick For Me",
    description="Venue decision and booking service",
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

app.include_router(decision.router, prefix="/api", tags=["decision"])
app.include_router(booking.router, prefix="/api", tags=["booking"])
app.include_router(venues.router, prefix="/api/venues", tags=["venues"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "service": "pickforme", "mock_provider": settings.use_mock_provider}
