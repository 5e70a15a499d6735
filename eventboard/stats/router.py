"""Stats API routes."""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from eventboard.stats import service
from eventboard.stats.database import get_stats_db
from eventboard.stats.schemas import EndpointHitIn, ViewStatsOut

router = APIRouter()


@router.post("/hit", status_code=status.HTTP_201_CREATED)
def record_hit(payload: EndpointHitIn, db: Session = Depends(get_stats_db)):
    """Store one endpoint hit."""
    service.add_hit(db, payload.app, payload.uri, payload.ip, service.parse_timestamp(payload.timestamp))
    return {"status": "recorded"}


@router.get("/stats", response_model=list[ViewStatsOut])
def get_stats(
    start: str = Query(...),
    end: str = Query(...),
    uris: Optional[list[str]] = Query(None),
    unique: bool = Query(False),
    db: Session = Depends(get_stats_db),
):
    """Aggregate hits per uri over a time window."""
    return service.get_stats(
        db,
        service.parse_timestamp(start),
        service.parse_timestamp(end),
        uris=uris,
        unique=unique,
    )
