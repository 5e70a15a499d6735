"""Tests for event comments: authoring, moderation and public listing."""
from datetime import timedelta

import pytest

from eventboard.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from eventboard.models.comment import CommentDecision, CommentStatus
from eventboard.models.event import EventState
from eventboard.services import comment_service
from tests.conftest import NOW, make_category, make_event, make_user


@pytest.fixture
def scene(db):
    """An initiator's published event and a commenting guest."""
    ann, guest = make_user(db, "Ann"), make_user(db, "Guest")
    event = make_event(db, ann, make_category(db))
    return ann, guest, event


class TestAuthoring:
    def test_new_comment_awaits_moderation(self, db, clock, scene):
        _, guest, event = scene

        comment = comment_service.add_comment(db, clock, guest.id, event.id, "  Great line-up!  ")

        assert comment.status == CommentStatus.pending
        assert comment.text == "Great line-up!"
        assert comment.created_on == NOW
        assert comment.updated_on is None

    def test_unpublished_event_cannot_be_commented(self, db, clock, scene):
        ann, guest, _ = scene
        draft = make_event(db, ann, make_category(db, "Drafts"), state=EventState.pending)

        with pytest.raises(ConflictError):
            comment_service.add_comment(db, clock, guest.id, draft.id, "Hello")

    def test_blank_text_is_invalid(self, db, clock, scene):
        _, guest, event = scene

        with pytest.raises(ValidationError):
            comment_service.add_comment(db, clock, guest.id, event.id, "   ")

    def test_unknown_event_or_author(self, db, clock, scene):
        _, guest, event = scene

        with pytest.raises(NotFoundError):
            comment_service.add_comment(db, clock, guest.id, 999, "Hello")
        with pytest.raises(NotFoundError):
            comment_service.add_comment(db, clock, 999, event.id, "Hello")

    def test_edit_returns_comment_to_moderation(self, db, clock, scene):
        _, guest, event = scene
        comment = comment_service.add_comment(db, clock, guest.id, event.id, "First take")
        comment_service.moderate_comment(db, comment.id, CommentDecision.published)
        clock.advance(timedelta(minutes=5))

        edited = comment_service.edit_comment(db, clock, guest.id, comment.id, "Second take")

        assert edited.text == "Second take"
        assert edited.updated_on == NOW + timedelta(minutes=5)
        assert edited.status == CommentStatus.pending

    def test_only_the_author_edits_or_deletes(self, db, clock, scene):
        ann, guest, event = scene
        comment = comment_service.add_comment(db, clock, guest.id, event.id, "Mine")

        with pytest.raises(AuthorizationError):
            comment_service.edit_comment(db, clock, ann.id, comment.id, "Hijacked")
        with pytest.raises(AuthorizationError):
            comment_service.delete_own_comment(db, ann.id, comment.id)

    def test_delete_own_comment(self, db, clock, scene):
        _, guest, event = scene
        comment = comment_service.add_comment(db, clock, guest.id, event.id, "Oops")

        comment_service.delete_own_comment(db, guest.id, comment.id)

        assert comment_service.get_user_comments(db, guest.id) == []


class TestModeration:
    def test_publish_and_reject(self, db, clock, scene):
        _, guest, event = scene
        kept = comment_service.add_comment(db, clock, guest.id, event.id, "Nice")
        dropped = comment_service.add_comment(db, clock, guest.id, event.id, "Spam")

        assert comment_service.moderate_comment(db, kept.id, CommentDecision.published).status == CommentStatus.published
        assert comment_service.moderate_comment(db, dropped.id, CommentDecision.rejected).status == CommentStatus.rejected

    def test_decided_comment_cannot_be_moderated_again(self, db, clock, scene):
        _, guest, event = scene
        comment = comment_service.add_comment(db, clock, guest.id, event.id, "Nice")
        comment_service.moderate_comment(db, comment.id, CommentDecision.rejected)

        with pytest.raises(ConflictError, match="PENDING"):
            comment_service.moderate_comment(db, comment.id, CommentDecision.published)

    def test_moderation_queue_filters_by_status(self, db, clock, scene):
        _, guest, event = scene
        first = comment_service.add_comment(db, clock, guest.id, event.id, "One")
        second = comment_service.add_comment(db, clock, guest.id, event.id, "Two")
        comment_service.moderate_comment(db, first.id, CommentDecision.published)

        queue = comment_service.get_comments_for_moderation(db, CommentStatus.pending)

        assert [c.id for c in queue] == [second.id]


class TestPublicListing:
    def test_only_published_comments_are_listed(self, db, clock, scene):
        _, guest, event = scene
        shown = comment_service.add_comment(db, clock, guest.id, event.id, "Shown")
        comment_service.add_comment(db, clock, guest.id, event.id, "Waiting")
        comment_service.moderate_comment(db, shown.id, CommentDecision.published)

        assert [c.text for c in comment_service.get_event_comments(db, event.id)] == ["Shown"]

    def test_unpublished_event_has_no_public_comments(self, db, scene):
        ann, _, _ = scene
        draft = make_event(db, ann, make_category(db, "Drafts"), state=EventState.pending)

        with pytest.raises(NotFoundError):
            comment_service.get_event_comments(db, draft.id)


class TestCommentApi:
    def test_comment_lifecycle_over_http(self, client, db):
        ann, guest = make_user(db, "Ann"), make_user(db, "Guest")
        event = make_event(db, ann, make_category(db))

        created = client.post(f"/users/{guest.id}/comments", params={"eventId": event.id}, json={"text": "See you there"})
        assert created.status_code == 201
        comment = created.json()
        assert comment["status"] == "PENDING"
        assert client.get(f"/events/{event.id}/comments").json() == []

        moderated = client.patch(f"/admin/comments/{comment['id']}", json={"status": "PUBLISHED"})
        assert moderated.json()["status"] == "PUBLISHED"
        assert [c["id"] for c in client.get(f"/events/{event.id}/comments").json()] == [comment["id"]]

        assert client.patch(f"/users/{ann.id}/comments/{comment['id']}", json={"text": "x"}).status_code == 403
        assert client.delete(f"/users/{guest.id}/comments/{comment['id']}").status_code == 204
        assert client.get(f"/users/{guest.id}/comments").json() == []

    def test_moderation_queue_and_validation(self, client, db):
        ann, guest = make_user(db, "Ann"), make_user(db, "Guest")
        event = make_event(db, ann, make_category(db))
        client.post(f"/users/{guest.id}/comments", params={"eventId": event.id}, json={"text": "Hi"})

        queue = client.get("/admin/comments/", params={"status": "PENDING"})

        assert [c["text"] for c in queue.json()] == ["Hi"]
        assert client.post(f"/users/{guest.id}/comments", params={"eventId": event.id}, json={"text": ""}).status_code == 422
        assert client.patch("/admin/comments/999", json={"status": "REJECTED"}).status_code == 404
