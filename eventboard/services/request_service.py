"""Request approval engine: participation requests against event capacity.

Responsibilities:
- Submission rules: no self-requests, PUBLISHED events only, one request per
  (requester, event), capacity checked against the confirmed count
- Organizer batch decisions, applied in caller order, all-or-nothing
- Capacity cascade: once the confirmed count reaches the participant limit
  every request still PENDING for the event is rejected in the same commit
- Requester cancellation (idempotent)

Every unit of work runs through ``run_guarded`` so the confirmed count it
decides on cannot go stale before the commit.
"""
import logging
from typing import Sequence

from sqlalchemy.orm import Session

from eventboard.errors import AuthorizationError, ConflictError, NotFoundError
from eventboard.models.event import Event, EventState
from eventboard.models.participation_request import ParticipationRequest, RequestDecision, RequestStatus
from eventboard.services.availability_service import count_confirmed
from eventboard.services import event_service
from eventboard.services.guard import run_guarded

logger = logging.getLogger(__name__)


def _pending_requests(db: Session, event_id: int, exclude_ids: Sequence[int] = ()) -> list[ParticipationRequest]:
    query = db.query(ParticipationRequest).filter(
        ParticipationRequest.event_id == event_id,
        ParticipationRequest.status == RequestStatus.pending,
    )
    if exclude_ids:
        query = query.filter(ParticipationRequest.id.notin_(list(exclude_ids)))
    return query.order_by(ParticipationRequest.id).populate_existing().all()


def _is_full(event: Event, confirmed: int) -> bool:
    return event.is_limited and confirmed >= event.participant_limit


def close_waitlist(db: Session, event: Event) -> list[ParticipationRequest]:
    """Reject every request still PENDING for a full event.

    Stages the changes only; callers run inside ``run_guarded`` which commits
    them together with whatever filled the event.
    """
    waiting = _pending_requests(db, event.id)
    for request in waiting:
        request.status = RequestStatus.rejected
    if waiting:
        logger.info("Event %s is full, rejected %d pending requests", event.id, len(waiting))
    return waiting


def get_user_requests(db: Session, user_id: int) -> list[ParticipationRequest]:
    """All requests submitted by ``user_id``, oldest first."""
    event_service.get_user(db, user_id)
    return (
        db.query(ParticipationRequest)
        .filter(ParticipationRequest.requester_id == user_id)
        .order_by(ParticipationRequest.id)
        .all()
    )


def get_event_participants(db: Session, user_id: int, event_id: int) -> list[ParticipationRequest]:
    """Requests for an event, visible to its initiator only."""
    event = event_service.get_event(db, event_id)
    if event.initiator_id != user_id:
        raise NotFoundError(f"Event with id={event_id} was not found")
    return (
        db.query(ParticipationRequest)
        .filter(ParticipationRequest.event_id == event_id)
        .order_by(ParticipationRequest.id)
        .all()
    )


def submit_request(db: Session, clock, requester_id: int, event_id: int) -> ParticipationRequest:
    """Create a participation request.

    The request is CONFIRMED straight away when the event needs no moderation
    or has no participant limit, PENDING otherwise. An auto-confirmation that
    fills the event closes the waitlist just like an organizer approval does.
    """
    event_service.get_user(db, requester_id)

    def work(event: Event) -> ParticipationRequest:
        if event.initiator_id == requester_id:
            raise ConflictError("The initiator cannot request participation in their own event")
        if event.state != EventState.published:
            raise ConflictError("Cannot participate in an unpublished event")
        duplicate = db.query(ParticipationRequest.id).filter(
            ParticipationRequest.requester_id == requester_id,
            ParticipationRequest.event_id == event.id,
        ).first()
        if duplicate:
            raise ConflictError(f"User {requester_id} already has a request for event {event.id}")

        confirmed = count_confirmed(db, event.id)
        if _is_full(event, confirmed):
            raise ConflictError("The participant limit has been reached")

        auto_confirm = not event.request_moderation or not event.is_limited
        request = ParticipationRequest(
            requester_id=requester_id,
            event_id=event.id,
            created=clock.now(),
            status=RequestStatus.confirmed if auto_confirm else RequestStatus.pending,
        )
        db.add(request)

        if auto_confirm and _is_full(event, confirmed + 1):
            close_waitlist(db, event)
        return request

    request = run_guarded(db, event_id, work)
    db.refresh(request)
    logger.info(
        "Request %s by user %s for event %s is %s",
        request.id, requester_id, event_id, request.status.value,
    )
    return request


def cancel_own_request(db: Session, requester_id: int, request_id: int) -> ParticipationRequest:
    """Cancel the requester's own request. Cancelling twice is a no-op."""
    request = db.query(ParticipationRequest).filter(
        ParticipationRequest.id == request_id,
        ParticipationRequest.requester_id == requester_id,
    ).first()
    if not request:
        raise NotFoundError(f"Request with id={request_id} was not found")
    if request.status == RequestStatus.canceled:
        return request

    def work(event: Event) -> ParticipationRequest:
        current = db.query(ParticipationRequest).filter(
            ParticipationRequest.id == request_id,
        ).populate_existing().one()
        current.status = RequestStatus.canceled
        return current

    request = run_guarded(db, request.event_id, work)
    db.refresh(request)
    logger.info("Request %s canceled by requester %s", request_id, requester_id)
    return request


def update_request_statuses(
    db: Session,
    organizer_id: int,
    event_id: int,
    request_ids: Sequence[int],
    decision: RequestDecision,
) -> tuple[list[ParticipationRequest], list[ParticipationRequest]]:
    """Apply an organizer decision to pending requests of one event.

    Requests are processed in the order given; with a CONFIRM decision the
    first listed requests take the remaining slots. Listed requests that no
    longer fit are rejected by the capacity cascade together with every other
    pending request of the event. A CONFIRM batch against an event that is
    already full fails as a whole. Nothing is written unless the whole batch,
    cascade included, commits.

    Returns the ``(confirmed, rejected)`` partition.
    """
    event_service.get_user(db, organizer_id)
    ordered_ids = list(dict.fromkeys(request_ids))

    def work(event: Event) -> tuple[list[ParticipationRequest], list[ParticipationRequest]]:
        if event.initiator_id != organizer_id:
            raise AuthorizationError(f"User {organizer_id} is not the initiator of event {event_id}")
        if not ordered_ids:
            return [], []

        loaded = {
            request.id: request
            for request in db.query(ParticipationRequest)
            .filter(ParticipationRequest.id.in_(ordered_ids))
            .populate_existing()
            .all()
        }
        missing = [request_id for request_id in ordered_ids if request_id not in loaded]
        if missing:
            raise NotFoundError(f"Requests not found: {missing}")
        requests = [loaded[request_id] for request_id in ordered_ids]
        for request in requests:
            if request.event_id != event.id:
                raise ConflictError(f"Request {request.id} does not belong to event {event.id}")
            if request.status != RequestStatus.pending:
                raise ConflictError(
                    f"Request {request.id} must be PENDING to change its status, it is {request.status.value}"
                )

        # Phase 1: plan every transition against one snapshot.
        running = count_confirmed(db, event.id)
        confirmed: list[ParticipationRequest] = []
        rejected: list[ParticipationRequest] = []
        overflow: list[ParticipationRequest] = []
        if decision == RequestDecision.rejected:
            rejected.extend(requests)
        else:
            if _is_full(event, running):
                raise ConflictError("The participant limit has been reached")
            for request in requests:
                if _is_full(event, running):
                    overflow.append(request)
                    continue
                confirmed.append(request)
                running += 1

        if _is_full(event, running):
            cascade = _pending_requests(db, event.id, exclude_ids=ordered_ids)
            rejected.extend(overflow)
            rejected.extend(cascade)
            if rejected:
                logger.info(
                    "Event %s reached its limit of %d, rejecting %d pending requests",
                    event.id, event.participant_limit, len(overflow) + len(cascade),
                )

        # Phase 2: stage the writes; run_guarded commits them as one unit.
        for request in confirmed:
            request.status = RequestStatus.confirmed
        for request in rejected:
            request.status = RequestStatus.rejected
        return confirmed, rejected

    confirmed, rejected = run_guarded(db, event_id, work)
    logger.info(
        "Organizer %s decided %s on event %s: %d confirmed, %d rejected",
        organizer_id, decision.value, event_id, len(confirmed), len(rejected),
    )
    return confirmed, rejected
