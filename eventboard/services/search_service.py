"""Event search for admins and the public catalogue.

Plain predicate composition over the events table; the availability ledger
supplies confirmed counts (for "only available") and views (for view sort)
in one batch per page.
"""
import enum
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from eventboard.errors import ValidationError
from eventboard.models.event import Event, EventState
from eventboard.services import availability_service
from eventboard.services.availability_service import EventView
from eventboard.services.event_service import ensure_pagination
from eventboard.services.stats_client import DATE_FORMAT

logger = logging.getLogger(__name__)


class EventSort(str, enum.Enum):
    event_date = "EVENT_DATE"
    views = "VIEWS"


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a ``yyyy-MM-dd HH:mm:ss`` query value; blank means no bound."""
    if value is None or not value.strip():
        return None
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT)
    except ValueError:
        raise ValidationError(f"Invalid date '{value}', expected yyyy-MM-dd HH:mm:ss")


def _check_range(start: Optional[datetime], end: Optional[datetime]) -> None:
    if start is not None and end is not None and start > end:
        raise ValidationError("Range start must not be after range end")


def _date_range(query: Query, start: Optional[datetime], end: Optional[datetime]) -> Query:
    if start is not None:
        query = query.filter(Event.event_date >= start)
    if end is not None:
        query = query.filter(Event.event_date <= end)
    return query


def search_admin(
    db: Session,
    stats,
    clock,
    users: Optional[list[int]] = None,
    states: Optional[list[EventState]] = None,
    categories: Optional[list[int]] = None,
    range_start: Optional[str] = None,
    range_end: Optional[str] = None,
    from_: int = 0,
    size: int = 10,
) -> list[EventView]:
    """Any-state search by initiator, state, category and date range, ordered by id."""
    ensure_pagination(from_, size)
    start, end = parse_date(range_start), parse_date(range_end)
    _check_range(start, end)

    query = db.query(Event)
    if users:
        query = query.filter(Event.initiator_id.in_(users))
    if states:
        query = query.filter(Event.state.in_(states))
    if categories:
        query = query.filter(Event.category_id.in_(categories))
    query = _date_range(query, start, end)

    events = query.order_by(Event.id).offset(from_).limit(size).all()
    return availability_service.event_views(db, stats, clock, events)


def search_public(
    db: Session,
    stats,
    clock,
    text: Optional[str] = None,
    categories: Optional[list[int]] = None,
    paid: Optional[bool] = None,
    range_start: Optional[str] = None,
    range_end: Optional[str] = None,
    only_available: bool = False,
    sort: EventSort = EventSort.event_date,
    from_: int = 0,
    size: int = 10,
) -> list[EventView]:
    """Search published events.

    Without a date range only future events are listed. Sorting by views
    needs counts that live in the stats service, so the whole filtered set is
    materialized, decorated in one batch, sorted and sliced in memory; date
    sorting pages in SQL. "Only available" drops events whose limit is
    reached, also via a single batched count.
    """
    ensure_pagination(from_, size)
    start, end = parse_date(range_start), parse_date(range_end)
    _check_range(start, end)
    if start is None and end is None:
        start = clock.now()

    query = db.query(Event).filter(Event.state == EventState.published)
    if text and text.strip():
        pattern = f"%{text.strip().lower()}%"
        query = query.filter(or_(Event.annotation.ilike(pattern), Event.description.ilike(pattern)))
    if categories:
        query = query.filter(Event.category_id.in_(categories))
    if paid is not None:
        query = query.filter(Event.paid == paid)
    query = _date_range(query, start, end)

    paged_in_sql = sort != EventSort.views and not only_available
    if paged_in_sql:
        events = query.order_by(Event.event_date, Event.id).offset(from_).limit(size).all()
        return availability_service.event_views(db, stats, clock, events)

    events = query.order_by(Event.event_date, Event.id).all()
    if only_available:
        confirmed = availability_service.confirmed_counts(db, [event.id for event in events])
        events = [
            event for event in events
            if not event.is_limited or confirmed.get(event.id, 0) < event.participant_limit
        ]

    if sort != EventSort.views:
        return availability_service.event_views(db, stats, clock, events[from_:from_ + size])

    decorated = availability_service.event_views(db, stats, clock, events)
    decorated.sort(key=lambda item: item.views, reverse=True)
    logger.debug("Sorted %d events by views for public search", len(decorated))
    return decorated[from_:from_ + size]
