"""Availability ledger: confirmed-participant and view counts per event.

Pure read side. Both lookups are batched: one GROUP BY query for confirmed
counts and one stats-service call for views, whatever the number of events.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from eventboard.models.event import Event
from eventboard.models.participation_request import ParticipationRequest, RequestStatus
from eventboard.services.stats_client import EPOCH, StatsServiceError

logger = logging.getLogger(__name__)


@dataclass
class EventView:
    """An event together with its read-side aggregates."""

    event: Event
    confirmed_requests: int
    views: int


def event_uri(event_id: int) -> str:
    return f"/events/{event_id}"


def count_confirmed(db: Session, event_id: int) -> int:
    """Confirmed requests for a single event, read from the authoritative store."""
    return db.query(func.count(ParticipationRequest.id)).filter(
        ParticipationRequest.event_id == event_id,
        ParticipationRequest.status == RequestStatus.confirmed,
    ).scalar() or 0


def confirmed_counts(db: Session, event_ids: Iterable[int]) -> dict[int, int]:
    """Map every requested event id to its confirmed-request count (0 if none)."""
    ids = set(event_ids)
    if not ids:
        return {}

    rows = (
        db.query(ParticipationRequest.event_id, func.count(ParticipationRequest.id))
        .filter(
            ParticipationRequest.event_id.in_(ids),
            ParticipationRequest.status == RequestStatus.confirmed,
        )
        .group_by(ParticipationRequest.event_id)
        .all()
    )
    counts = {event_id: 0 for event_id in ids}
    for event_id, total in rows:
        counts[event_id] = total
    return counts


def view_counts(stats, event_ids: Iterable[int], as_of: datetime) -> dict[int, int]:
    """Map every requested event id to its unique-view count (0 if unknown).

    Views are best-effort: when the stats service fails or times out every
    event reports 0 rather than failing the read.
    """
    ids = set(event_ids)
    if not ids:
        return {}

    uris = [event_uri(event_id) for event_id in sorted(ids)]
    try:
        stats_rows = stats.query_views(EPOCH, as_of, uris, unique_only=True)
    except StatsServiceError as exc:
        logger.warning("View counts unavailable for %d events, defaulting to 0: %s", len(ids), exc)
        return {event_id: 0 for event_id in ids}

    hits_by_uri: dict[str, int] = {}
    for row in stats_rows:
        hits_by_uri[row.uri] = hits_by_uri.get(row.uri, 0) + row.hits
    return {event_id: hits_by_uri.get(event_uri(event_id), 0) for event_id in ids}


def event_views(db: Session, stats, clock, events: list[Event]) -> list[EventView]:
    """Attach confirmed counts and views to ``events``, preserving order."""
    ids = [event.id for event in events]
    confirmed = confirmed_counts(db, ids)
    views = view_counts(stats, ids, clock.now())
    return [
        EventView(event=event, confirmed_requests=confirmed.get(event.id, 0), views=views.get(event.id, 0))
        for event in events
    ]
