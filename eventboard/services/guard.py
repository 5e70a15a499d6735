"""Per-event serialization for read-decide-write units of work.

Two mechanisms close the capacity race together:

- the event row is loaded ``SELECT ... FOR UPDATE`` so that on PostgreSQL a
  second unit of work for the same event blocks until the first commits;
- the commit is gated by a compare-and-swap on ``events.version``. On
  backends without row locks (SQLite) a concurrent commit makes the swap
  miss, the unit of work is rolled back and replayed from a fresh snapshot.
"""
import logging
from typing import Callable, TypeVar

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventboard.config import settings
from eventboard.errors import ConflictError, NotFoundError
from eventboard.models.event import Event

logger = logging.getLogger(__name__)

T = TypeVar("T")


def lock_event(db: Session, event_id: int) -> Event:
    """Load the event row for update, always refreshing any cached copy."""
    event = (
        db.query(Event)
        .filter(Event.id == event_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if not event:
        raise NotFoundError(f"Event with id={event_id} was not found")
    return event


def _claim_version(db: Session, event_id: int, seen_version: int) -> bool:
    result = db.execute(
        update(Event)
        .where(Event.id == event_id, Event.version == seen_version)
        .values(version=Event.version + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def run_guarded(db: Session, event_id: int, work: Callable[[Event], T]) -> T:
    """Run ``work(event)`` as one serialized, all-or-nothing unit for the event.

    ``work`` reads, validates and stages its writes on the session but never
    commits. Any exception rolls everything back. A lost version swap replays
    ``work`` up to ``CAPACITY_RETRY_LIMIT`` times before giving up with
    ``ConflictError``.
    """
    for attempt in range(1, settings.CAPACITY_RETRY_LIMIT + 1):
        try:
            event = lock_event(db, event_id)
            seen_version = event.version
            result = work(event)
            if _claim_version(db, event_id, seen_version):
                db.commit()
                return result
        except IntegrityError as exc:
            db.rollback()
            logger.info("Integrity violation on event %s: %s", event_id, exc.orig)
            raise ConflictError("The write conflicts with an existing record") from exc
        except Exception:
            db.rollback()
            raise

        db.rollback()
        logger.warning(
            "Event %s changed concurrently (attempt %d/%d), replaying",
            event_id, attempt, settings.CAPACITY_RETRY_LIMIT,
        )

    raise ConflictError(f"Event with id={event_id} is being modified concurrently, retry later")
