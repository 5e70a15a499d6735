"""Tests for the event lifecycle: creation, initiator edits and moderation."""
from datetime import timedelta

import pytest

from eventboard.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from eventboard.models.event import AdminStateAction, EventState, UserStateAction
from eventboard.models.participation_request import ParticipationRequest, RequestStatus
from eventboard.services import event_service
from tests.conftest import NOW, make_category, make_event, make_request, make_user


def _create(db, clock, user, category, **overrides):
    fields = dict(
        title="Jazz night",
        annotation="Live jazz in the park",
        description="Three bands, one evening",
        category_id=category.id,
        event_date=NOW + timedelta(days=2),
        location_lat=55.7,
        location_lon=37.6,
    )
    fields.update(overrides)
    return event_service.create_event(db, clock, user.id, **fields)


class TestCreateEvent:
    def test_created_pending_with_defaults(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)

        event = _create(db, clock, user, category)

        assert event.state == EventState.pending
        assert event.created_on == NOW
        assert event.published_on is None
        assert event.participant_limit == 0
        assert event.paid is False
        assert event.request_moderation is True
        assert event.version == 1

    def test_lead_time_of_two_hours(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)

        with pytest.raises(ValidationError):
            _create(db, clock, user, category, event_date=NOW + timedelta(hours=1, minutes=59))
        assert _create(db, clock, user, category, event_date=NOW + timedelta(hours=2)).id

    def test_unknown_category_or_initiator(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)

        with pytest.raises(NotFoundError):
            _create(db, clock, user, category, category_id=999)
        with pytest.raises(NotFoundError):
            event_service.create_event(
                db, clock, 999, "t", "a", "d", category.id, NOW + timedelta(days=1), 0.0, 0.0,
            )

    def test_negative_limit_rejected(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)

        with pytest.raises(ValidationError):
            _create(db, clock, user, category, participant_limit=-1)


class TestUserEdit:
    def test_partial_update_keeps_unset_fields(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)
        event = make_event(db, user, category, state=EventState.pending, title="Old")

        updated = event_service.update_user_event(db, clock, user.id, event.id, {"title": "New", "paid": None})

        assert updated.title == "New"
        assert updated.paid is False
        assert updated.version == 2

    def test_published_event_is_immutable(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)
        event = make_event(db, user, category, state=EventState.published)

        with pytest.raises(ConflictError):
            event_service.update_user_event(db, clock, user.id, event.id, {"title": "New"})

    def test_only_initiator_edits(self, db, clock):
        user, other, category = make_user(db, "Ann"), make_user(db, "Bob"), make_category(db)
        event = make_event(db, user, category, state=EventState.pending)

        with pytest.raises(AuthorizationError):
            event_service.update_user_event(db, clock, other.id, event.id, {"title": "Mine now"})

    def test_new_date_revalidated(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)
        event = make_event(db, user, category, state=EventState.pending, title="Old")

        with pytest.raises(ValidationError):
            event_service.update_user_event(
                db, clock, user.id, event.id, {"title": "New", "event_date": NOW + timedelta(minutes=30)},
            )
        db.refresh(event)
        assert event.title == "Old"

    def test_cancel_and_resubmit(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)
        event = make_event(db, user, category, state=EventState.pending)

        canceled = event_service.update_user_event(db, clock, user.id, event.id, {}, UserStateAction.cancel_review)
        assert canceled.state == EventState.canceled

        resubmitted = event_service.update_user_event(db, clock, user.id, event.id, {}, UserStateAction.send_to_review)
        assert resubmitted.state == EventState.pending

    def test_category_change_must_exist(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)
        event = make_event(db, user, category, state=EventState.pending)

        with pytest.raises(NotFoundError):
            event_service.update_user_event(db, clock, user.id, event.id, {"category_id": 404})


class TestAdminEdit:
    def test_publish_sets_published_on(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)
        event = make_event(db, user, category, state=EventState.pending)

        published = event_service.update_admin_event(db, clock, event.id, {}, AdminStateAction.publish_event)

        assert published.state == EventState.published
        assert published.published_on == NOW

    @pytest.mark.parametrize("state", [EventState.published, EventState.canceled])
    def test_publish_requires_pending(self, db, clock, state):
        user, category = make_user(db, "Ann"), make_category(db)
        event = make_event(db, user, category, state=state)

        with pytest.raises(ConflictError, match="awaiting publication"):
            event_service.update_admin_event(db, clock, event.id, {}, AdminStateAction.publish_event)

    def test_reject_pending(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)
        event = make_event(db, user, category, state=EventState.pending)

        rejected = event_service.update_admin_event(db, clock, event.id, {}, AdminStateAction.reject_event)

        assert rejected.state == EventState.canceled
        assert rejected.published_on is None

    def test_reject_published_is_a_conflict(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)
        event = make_event(db, user, category, state=EventState.published)

        with pytest.raises(ConflictError, match="published"):
            event_service.update_admin_event(db, clock, event.id, {}, AdminStateAction.reject_event)

    def test_admin_lead_time_is_one_hour(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)
        event = make_event(db, user, category, state=EventState.pending)

        moved = event_service.update_admin_event(db, clock, event.id, {"event_date": NOW + timedelta(minutes=90)})
        assert moved.event_date == NOW + timedelta(minutes=90)

        with pytest.raises(ValidationError):
            event_service.update_admin_event(db, clock, event.id, {"event_date": NOW + timedelta(minutes=59)})

    def test_lowering_limit_to_confirmed_count_closes_waitlist(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)
        guests = [make_user(db, f"Guest {i}") for i in range(3)]
        event = make_event(db, user, category, participant_limit=5)
        r1 = make_request(db, guests[0], event, RequestStatus.confirmed)
        r2 = make_request(db, guests[1], event, RequestStatus.confirmed)
        r3 = make_request(db, guests[2], event)

        event_service.update_admin_event(db, clock, event.id, {"participant_limit": 2})

        db.expire_all()
        assert [db.get(ParticipationRequest, r.id).status for r in (r1, r2, r3)] == [
            RequestStatus.confirmed, RequestStatus.confirmed, RequestStatus.rejected,
        ]

    def test_limit_above_confirmed_count_keeps_waitlist(self, db, clock):
        user, category = make_user(db, "Ann"), make_category(db)
        guests = [make_user(db, f"Guest {i}") for i in range(2)]
        event = make_event(db, user, category, participant_limit=5)
        make_request(db, guests[0], event, RequestStatus.confirmed)
        waiting = make_request(db, guests[1], event)

        event_service.update_admin_event(db, clock, event.id, {"participant_limit": 2})

        db.expire_all()
        assert db.get(ParticipationRequest, waiting.id).status == RequestStatus.pending

    def test_unknown_event(self, db, clock):
        with pytest.raises(NotFoundError):
            event_service.update_admin_event(db, clock, 12345, {}, AdminStateAction.publish_event)


class TestReads:
    def test_user_event_hidden_from_others(self, db):
        user, other, category = make_user(db, "Ann"), make_user(db, "Bob"), make_category(db)
        event = make_event(db, user, category)

        assert event_service.get_user_event(db, user.id, event.id).id == event.id
        with pytest.raises(NotFoundError):
            event_service.get_user_event(db, other.id, event.id)

    def test_public_read_requires_published(self, db):
        user, category = make_user(db, "Ann"), make_category(db)
        pending = make_event(db, user, category, state=EventState.pending)

        with pytest.raises(NotFoundError):
            event_service.get_public_event(db, pending.id)

    def test_user_events_paged(self, db):
        user, category = make_user(db, "Ann"), make_category(db)
        events = [make_event(db, user, category, title=f"E{i}") for i in range(3)]

        page = event_service.get_user_events(db, user.id, from_=1, size=1)

        assert [e.id for e in page] == [events[1].id]
        with pytest.raises(ValidationError):
            event_service.get_user_events(db, user.id, from_=0, size=0)
