"""Compilation routes: admin curation and public listing."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from eventboard.clock import get_clock
from eventboard.database import get_db
from eventboard.errors import NotFoundError
from eventboard.models.compilation import Compilation
from eventboard.models.event import Event
from eventboard.schemas.compilation import CompilationCreate, CompilationOut, CompilationUpdate
from eventboard.schemas.event import to_short
from eventboard.services import availability_service
from eventboard.services.event_service import ensure_pagination
from eventboard.services.stats_client import get_stats_client

logger = logging.getLogger(__name__)
admin_router = APIRouter()
public_router = APIRouter()


def _get_compilation(db: Session, compilation_id: int) -> Compilation:
    compilation = db.query(Compilation).filter(Compilation.id == compilation_id).first()
    if not compilation:
        raise NotFoundError(f"Compilation with id={compilation_id} was not found")
    return compilation


def _load_events(db: Session, event_ids: list[int]) -> list[Event]:
    events = db.query(Event).filter(Event.id.in_(event_ids)).all() if event_ids else []
    missing = set(event_ids) - {event.id for event in events}
    if missing:
        raise NotFoundError(f"Events not found: {sorted(missing)}")
    return events


def _to_out(db: Session, stats, clock, compilation: Compilation) -> CompilationOut:
    """Shape a compilation, decorating its events in one batch."""
    views = availability_service.event_views(db, stats, clock, list(compilation.events))
    return CompilationOut(
        id=compilation.id,
        title=compilation.title,
        pinned=compilation.pinned,
        events=[to_short(v.event, v.confirmed_requests, v.views) for v in views],
    )


@admin_router.post("/", response_model=CompilationOut, status_code=status.HTTP_201_CREATED)
def create_compilation(
    payload: CompilationCreate,
    db: Session = Depends(get_db),
    stats=Depends(get_stats_client),
    clock=Depends(get_clock),
):
    compilation = Compilation(title=payload.title, pinned=payload.pinned)
    compilation.events = _load_events(db, payload.events)
    db.add(compilation)
    db.commit()
    db.refresh(compilation)
    logger.info("Created compilation %s with %d events", compilation.id, len(payload.events))
    return _to_out(db, stats, clock, compilation)


@admin_router.patch("/{compilation_id}", response_model=CompilationOut)
def update_compilation(
    compilation_id: int,
    payload: CompilationUpdate,
    db: Session = Depends(get_db),
    stats=Depends(get_stats_client),
    clock=Depends(get_clock),
):
    compilation = _get_compilation(db, compilation_id)
    if payload.title is not None:
        compilation.title = payload.title
    if payload.pinned is not None:
        compilation.pinned = payload.pinned
    if payload.events is not None:
        compilation.events = _load_events(db, payload.events)
    db.commit()
    db.refresh(compilation)
    return _to_out(db, stats, clock, compilation)


@admin_router.delete("/{compilation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_compilation(compilation_id: int, db: Session = Depends(get_db)):
    compilation = _get_compilation(db, compilation_id)
    db.delete(compilation)
    db.commit()
    logger.info("Deleted compilation %s", compilation_id)


@public_router.get("/", response_model=list[CompilationOut])
def list_compilations(
    pinned: Optional[bool] = Query(None),
    from_: int = Query(0, alias="from"),
    size: int = Query(10),
    db: Session = Depends(get_db),
    stats=Depends(get_stats_client),
    clock=Depends(get_clock),
):
    ensure_pagination(from_, size)
    query = db.query(Compilation)
    if pinned is not None:
        query = query.filter(Compilation.pinned == pinned)
    compilations = query.order_by(Compilation.id).offset(from_).limit(size).all()
    return [_to_out(db, stats, clock, c) for c in compilations]


@public_router.get("/{compilation_id}", response_model=CompilationOut)
def get_compilation(
    compilation_id: int,
    db: Session = Depends(get_db),
    stats=Depends(get_stats_client),
    clock=Depends(get_clock),
):
    return _to_out(db, stats, clock, _get_compilation(db, compilation_id))
