"""Event lifecycle: creation, edits and moderation state transitions.

Responsibilities:
- Lead-time rule: event_date must be far enough ahead of "now" (2h for
  initiators, 1h for admins)
- Ownership: only the initiator edits through the user path
- Moderation state machine:
    PENDING   --user cancel-->     CANCELED
    PENDING   --user resubmit-->   PENDING
    CANCELED  --user resubmit-->   PENDING
    PENDING   --admin publish-->   PUBLISHED (published_on = now)
    PENDING   --admin reject-->    CANCELED
    PUBLISHED --admin reject-->    ConflictError
  PUBLISHED is terminal for user edits.
- Every write goes through the per-event guard so capacity decisions never
  run against a stale participant limit.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy.orm import Session

from eventboard.config import settings
from eventboard.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from eventboard.models.category import Category
from eventboard.models.event import AdminStateAction, Event, EventState, UserStateAction
from eventboard.models.user import User
from eventboard.services import request_service
from eventboard.services.availability_service import count_confirmed
from eventboard.services.guard import run_guarded

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "title",
    "annotation",
    "description",
    "category_id",
    "event_date",
    "location_lat",
    "location_lon",
    "paid",
    "participant_limit",
    "request_moderation",
)


def ensure_pagination(from_: int, size: int) -> None:
    if from_ < 0 or size <= 0:
        raise ValidationError("Paging requires from >= 0 and size > 0")


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id={user_id} was not found")
    return user


def get_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError(f"Category with id={category_id} was not found")
    return category


def get_event(db: Session, event_id: int) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundError(f"Event with id={event_id} was not found")
    return event


def _check_lead_time(event_date: datetime, now: datetime, hours: int) -> None:
    if event_date < now + timedelta(hours=hours):
        raise ValidationError(
            f"Event date must be at least {hours} hour(s) ahead of now, got {event_date}"
        )


def _check_participant_limit(limit: int) -> None:
    if limit < 0:
        raise ValidationError(f"Participant limit must not be negative, got {limit}")


def _apply_updates(db: Session, event: Event, updates: dict[str, Any]) -> None:
    """Copy non-null editable fields onto the event."""
    for field, value in updates.items():
        if field not in EDITABLE_FIELDS or value is None:
            continue
        if field == "category_id":
            get_category(db, value)
        if field == "participant_limit":
            _check_participant_limit(value)
        setattr(event, field, value)


def create_event(
    db: Session,
    clock,
    initiator_id: int,
    title: str,
    annotation: str,
    description: str,
    category_id: int,
    event_date: datetime,
    location_lat: float,
    location_lon: float,
    paid: bool = False,
    participant_limit: int = 0,
    request_moderation: bool = True,
) -> Event:
    """Create a PENDING event owned by ``initiator_id``."""
    now = clock.now()
    get_user(db, initiator_id)
    get_category(db, category_id)
    _check_lead_time(event_date, now, settings.EVENT_LEAD_HOURS)
    _check_participant_limit(participant_limit)

    event = Event(
        title=title,
        annotation=annotation,
        description=description,
        category_id=category_id,
        initiator_id=initiator_id,
        location_lat=location_lat,
        location_lon=location_lon,
        paid=paid,
        participant_limit=participant_limit,
        request_moderation=request_moderation,
        created_on=now,
        event_date=event_date,
        state=EventState.pending,
        version=1,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) by initiator %s", title, event.id, initiator_id)
    return event


def update_user_event(
    db: Session,
    clock,
    actor_id: int,
    event_id: int,
    updates: dict[str, Any],
    state_action: Optional[UserStateAction] = None,
) -> Event:
    """Initiator edit: partial update plus optional resubmit/cancel."""
    get_user(db, actor_id)

    def work(event: Event) -> Event:
        if event.initiator_id != actor_id:
            raise AuthorizationError(f"User {actor_id} is not the initiator of event {event_id}")
        if event.state == EventState.published:
            raise ConflictError("Published events cannot be changed")

        _apply_updates(db, event, updates)
        if state_action == UserStateAction.send_to_review:
            event.state = EventState.pending
        elif state_action == UserStateAction.cancel_review:
            event.state = EventState.canceled
        _check_lead_time(event.event_date, clock.now(), settings.EVENT_LEAD_HOURS)
        return event

    event = run_guarded(db, event_id, work)
    db.refresh(event)
    logger.info("Initiator %s updated event %s (state %s)", actor_id, event_id, event.state.value)
    return event


def update_admin_event(
    db: Session,
    clock,
    event_id: int,
    updates: dict[str, Any],
    state_action: Optional[AdminStateAction] = None,
) -> Event:
    """Admin edit: partial update plus optional publish/reject.

    Lowering the limit of a published event to its confirmed count or below
    closes the waitlist in the same commit; confirmed requests are kept.
    """

    def work(event: Event) -> Event:
        now = clock.now()
        _apply_updates(db, event, updates)
        if state_action == AdminStateAction.publish_event:
            if event.state != EventState.pending:
                raise ConflictError(
                    f"Cannot publish the event because it is not awaiting publication: {event.state.value}"
                )
            event.state = EventState.published
            event.published_on = now
        elif state_action == AdminStateAction.reject_event:
            if event.state == EventState.published:
                raise ConflictError("Cannot reject a published event")
            event.state = EventState.canceled
        _check_lead_time(event.event_date, now, settings.ADMIN_EVENT_LEAD_HOURS)
        if event.state == EventState.published and event.is_limited:
            if count_confirmed(db, event.id) >= event.participant_limit:
                request_service.close_waitlist(db, event)
        return event

    event = run_guarded(db, event_id, work)
    db.refresh(event)
    logger.info("Admin updated event %s (state %s)", event_id, event.state.value)
    return event


def get_user_events(db: Session, user_id: int, from_: int = 0, size: int = 10) -> list[Event]:
    """Events created by ``user_id``, ordered by id."""
    ensure_pagination(from_, size)
    get_user(db, user_id)
    return (
        db.query(Event)
        .filter(Event.initiator_id == user_id)
        .order_by(Event.id)
        .offset(from_)
        .limit(size)
        .all()
    )


def get_user_event(db: Session, user_id: int, event_id: int) -> Event:
    """Owner-scoped read; other users' events look missing."""
    event = get_event(db, event_id)
    if event.initiator_id != user_id:
        raise NotFoundError(f"Event with id={event_id} was not found")
    return event


def get_public_event(db: Session, event_id: int) -> Event:
    event = get_event(db, event_id)
    if event.state != EventState.published:
        raise NotFoundError(f"Event with id={event_id} was not found")
    return event
