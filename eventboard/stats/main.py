"""Stats service FastAPI application."""
import logging
from fastapi import FastAPI

from eventboard.config import settings
from eventboard.stats.database import StatsBase, engine
from eventboard.stats.models import EndpointHit  # noqa: F401
from eventboard.stats.router import router

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(
    title="Eventboard Stats",
    description="Endpoint hit collection and view statistics",
    version="0.1.0",
)

app.include_router(router, tags=["Stats"])


@app.on_event("startup")
def on_startup():
    """Create tables on startup (for SQLite dev mode)."""
    if settings.STATS_DATABASE_URL.startswith("sqlite"):
        StatsBase.metadata.create_all(bind=engine)


@app.get("/health")
def health_check():
    return {"status": "ok"}
