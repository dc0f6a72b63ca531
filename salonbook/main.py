import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import salonbook.models.registry  # noqa: F401  registers every mapper
from salonbook.api.v1.router import api_router
from salonbook.core.config import settings
from salonbook.core.exceptions import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("salonbook-api starting (%s)", settings.APP_ENV)
    yield


app = FastAPI(
    title="Salonbook API",
    description="Appointment scheduling for salons: availability, conflicts, recurrence and waiting lists",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "ok", "service": "salonbook-api", "version": "0.1.0"}
