"""FastAPI application entry point."""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from eventboard.config import settings
from eventboard.database import Base, engine

# Import routers
from eventboard.routers import users, categories, compilations, events, requests, comments

# Import all models so Base.metadata knows about them
from eventboard.models.user import User                                    # noqa: F401
from eventboard.models.category import Category                            # noqa: F401
from eventboard.models.event import Event                                  # noqa: F401
from eventboard.models.participation_request import ParticipationRequest   # noqa: F401
from eventboard.models.compilation import Compilation                      # noqa: F401
from eventboard.models.comment import Comment                              # noqa: F401

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(
    title="Eventboard",
    description="Event publication, moderation and capacity-aware participation requests",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users.router, prefix="/admin/users", tags=["Users"])
app.include_router(categories.admin_router, prefix="/admin/categories", tags=["Categories"])
app.include_router(categories.public_router, prefix="/categories", tags=["Categories"])
app.include_router(compilations.admin_router, prefix="/admin/compilations", tags=["Compilations"])
app.include_router(compilations.public_router, prefix="/compilations", tags=["Compilations"])
app.include_router(events.private_router, prefix="/users", tags=["Events"])
app.include_router(events.admin_router, prefix="/admin/events", tags=["Events"])
app.include_router(events.public_router, prefix="/events", tags=["Events"])
app.include_router(requests.router, prefix="/users", tags=["Requests"])
app.include_router(comments.private_router, prefix="/users", tags=["Comments"])
app.include_router(comments.admin_router, prefix="/admin/comments", tags=["Comments"])
app.include_router(comments.public_router, prefix="/events", tags=["Comments"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
