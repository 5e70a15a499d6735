"""Event API routes: delegates to the lifecycle, approval and search services.

Three routers share this module: initiator routes under
``/users/{user_id}/events``, moderation routes under ``/admin/events`` and
the public catalogue under ``/events``.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from eventboard.clock import get_clock
from eventboard.config import settings
from eventboard.database import get_db
from eventboard.models.event import EventState
from eventboard.schemas.event import EventAdminUpdate, EventCreate, EventFullOut, EventShortOut, EventUserUpdate, to_full, to_short
from eventboard.schemas.participation_request import ParticipationRequestOut, StatusUpdateIn, StatusUpdateOut
from eventboard.services import availability_service, event_service, request_service, search_service
from eventboard.services.search_service import EventSort
from eventboard.services.stats_client import get_stats_client, record_hit_quietly

logger = logging.getLogger(__name__)
private_router = APIRouter()
admin_router = APIRouter()
public_router = APIRouter()


def _full(db, stats, clock, event) -> EventFullOut:
    view = availability_service.event_views(db, stats, clock, [event])[0]
    return to_full(view.event, view.confirmed_requests, view.views)


# ---------------------------------------------------------------------------
# Initiator routes
# ---------------------------------------------------------------------------
@private_router.post("/{user_id}/events", response_model=EventFullOut, status_code=status.HTTP_201_CREATED)
def create_event(user_id: int, payload: EventCreate, db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Create a PENDING event owned by ``user_id``."""
    event = event_service.create_event(
        db=db,
        clock=clock,
        initiator_id=user_id,
        title=payload.title,
        annotation=payload.annotation,
        description=payload.description,
        category_id=payload.category,
        event_date=payload.event_date,
        location_lat=payload.location.lat,
        location_lon=payload.location.lon,
        paid=payload.paid,
        participant_limit=payload.participant_limit,
        request_moderation=payload.request_moderation,
    )
    return to_full(event)


@private_router.get("/{user_id}/events", response_model=list[EventShortOut])
def list_user_events(
    user_id: int,
    from_: int = Query(0, alias="from"),
    size: int = Query(10),
    db: Session = Depends(get_db),
    stats=Depends(get_stats_client),
    clock=Depends(get_clock),
):
    events = event_service.get_user_events(db, user_id, from_, size)
    views = availability_service.event_views(db, stats, clock, events)
    return [to_short(v.event, v.confirmed_requests, v.views) for v in views]


@private_router.get("/{user_id}/events/{event_id}", response_model=EventFullOut)
def get_user_event(
    user_id: int,
    event_id: int,
    db: Session = Depends(get_db),
    stats=Depends(get_stats_client),
    clock=Depends(get_clock),
):
    event = event_service.get_user_event(db, user_id, event_id)
    return _full(db, stats, clock, event)


@private_router.patch("/{user_id}/events/{event_id}", response_model=EventFullOut)
def update_user_event(
    user_id: int,
    event_id: int,
    payload: EventUserUpdate,
    db: Session = Depends(get_db),
    stats=Depends(get_stats_client),
    clock=Depends(get_clock),
):
    """Initiator edit (not allowed once published)."""
    event = event_service.update_user_event(
        db=db,
        clock=clock,
        actor_id=user_id,
        event_id=event_id,
        updates=payload.to_updates(),
        state_action=payload.state_action,
    )
    return _full(db, stats, clock, event)


@private_router.get("/{user_id}/events/{event_id}/requests", response_model=list[ParticipationRequestOut])
def list_event_requests(user_id: int, event_id: int, db: Session = Depends(get_db)):
    return request_service.get_event_participants(db, user_id, event_id)


@private_router.patch("/{user_id}/events/{event_id}/requests", response_model=StatusUpdateOut)
def update_request_statuses(user_id: int, event_id: int, payload: StatusUpdateIn, db: Session = Depends(get_db)):
    """Confirm or reject pending requests in the given order."""
    confirmed, rejected = request_service.update_request_statuses(
        db=db,
        organizer_id=user_id,
        event_id=event_id,
        request_ids=payload.request_ids,
        decision=payload.status,
    )
    return StatusUpdateOut(
        confirmed_requests=[ParticipationRequestOut.model_validate(r) for r in confirmed],
        rejected_requests=[ParticipationRequestOut.model_validate(r) for r in rejected],
    )


# ---------------------------------------------------------------------------
# Admin routes
# ---------------------------------------------------------------------------
@admin_router.get("/", response_model=list[EventFullOut])
def search_admin_events(
    users: Optional[list[int]] = Query(None),
    states: Optional[list[EventState]] = Query(None),
    categories: Optional[list[int]] = Query(None),
    range_start: Optional[str] = Query(None, alias="rangeStart"),
    range_end: Optional[str] = Query(None, alias="rangeEnd"),
    from_: int = Query(0, alias="from"),
    size: int = Query(10),
    db: Session = Depends(get_db),
    stats=Depends(get_stats_client),
    clock=Depends(get_clock),
):
    views = search_service.search_admin(
        db, stats, clock,
        users=users,
        states=states,
        categories=categories,
        range_start=range_start,
        range_end=range_end,
        from_=from_,
        size=size,
    )
    return [to_full(v.event, v.confirmed_requests, v.views) for v in views]


@admin_router.patch("/{event_id}", response_model=EventFullOut)
def update_admin_event(
    event_id: int,
    payload: EventAdminUpdate,
    db: Session = Depends(get_db),
    stats=Depends(get_stats_client),
    clock=Depends(get_clock),
):
    """Moderation edit: publish, reject or amend an event."""
    event = event_service.update_admin_event(
        db=db,
        clock=clock,
        event_id=event_id,
        updates=payload.to_updates(),
        state_action=payload.state_action,
    )
    return _full(db, stats, clock, event)


# ---------------------------------------------------------------------------
# Public routes
# ---------------------------------------------------------------------------
@public_router.get("/", response_model=list[EventShortOut])
def search_public_events(
    request: Request,
    text: Optional[str] = Query(None),
    categories: Optional[list[int]] = Query(None),
    paid: Optional[bool] = Query(None),
    range_start: Optional[str] = Query(None, alias="rangeStart"),
    range_end: Optional[str] = Query(None, alias="rangeEnd"),
    only_available: bool = Query(False, alias="onlyAvailable"),
    sort: EventSort = Query(EventSort.event_date),
    from_: int = Query(0, alias="from"),
    size: int = Query(10),
    db: Session = Depends(get_db),
    stats=Depends(get_stats_client),
    clock=Depends(get_clock),
):
    views = search_service.search_public(
        db, stats, clock,
        text=text,
        categories=categories,
        paid=paid,
        range_start=range_start,
        range_end=range_end,
        only_available=only_available,
        sort=sort,
        from_=from_,
        size=size,
    )
    record_hit_quietly(stats, settings.APP_NAME, request.url.path.rstrip("/") or "/", _client_ip(request), clock.now())
    return [to_short(v.event, v.confirmed_requests, v.views) for v in views]


@public_router.get("/{event_id}", response_model=EventFullOut)
def get_public_event(
    event_id: int,
    request: Request,
    db: Session = Depends(get_db),
    stats=Depends(get_stats_client),
    clock=Depends(get_clock),
):
    event = event_service.get_public_event(db, event_id)
    record_hit_quietly(stats, settings.APP_NAME, f"/events/{event_id}", _client_ip(request), clock.now())
    return _full(db, stats, clock, event)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "0.0.0.0"
