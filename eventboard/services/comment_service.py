"""Event comments: authoring by users, moderation by admins, public listing.

Moderation state machine:
    PENDING   --admin publish-->  PUBLISHED
    PENDING   --admin reject-->   REJECTED
    any       --author edit-->    PENDING (updated_on = now)
Only PUBLISHED comments of PUBLISHED events are shown publicly.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from eventboard.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from eventboard.models.comment import Comment, CommentDecision, CommentStatus
from eventboard.models.event import EventState
from eventboard.services import event_service

logger = logging.getLogger(__name__)


def _get_comment(db: Session, comment_id: int) -> Comment:
    comment = db.query(Comment).filter(Comment.id == comment_id).first()
    if not comment:
        raise NotFoundError(f"Comment with id={comment_id} was not found")
    return comment


def _own_comment(db: Session, author_id: int, comment_id: int) -> Comment:
    event_service.get_user(db, author_id)
    comment = _get_comment(db, comment_id)
    if comment.author_id != author_id:
        raise AuthorizationError(f"User {author_id} is not the author of comment {comment_id}")
    return comment


def _clean_text(text: str) -> str:
    cleaned = text.strip() if text else ""
    if not cleaned:
        raise ValidationError("Comment text must not be blank")
    return cleaned


def add_comment(db: Session, clock, author_id: int, event_id: int, text: str) -> Comment:
    """Leave a comment on a published event; it awaits moderation."""
    event_service.get_user(db, author_id)
    event = event_service.get_event(db, event_id)
    if event.state != EventState.published:
        raise ConflictError("Only published events can be commented")

    comment = Comment(
        text=_clean_text(text),
        author_id=author_id,
        event_id=event_id,
        created_on=clock.now(),
        status=CommentStatus.pending,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    logger.info("User %s commented on event %s (comment %s)", author_id, event_id, comment.id)
    return comment


def edit_comment(db: Session, clock, author_id: int, comment_id: int, text: str) -> Comment:
    """Replace the text of the author's own comment and send it back to moderation."""
    comment = _own_comment(db, author_id, comment_id)
    comment.text = _clean_text(text)
    comment.updated_on = clock.now()
    comment.status = CommentStatus.pending
    db.commit()
    db.refresh(comment)
    logger.info("User %s edited comment %s", author_id, comment_id)
    return comment


def delete_own_comment(db: Session, author_id: int, comment_id: int) -> None:
    comment = _own_comment(db, author_id, comment_id)
    db.delete(comment)
    db.commit()
    logger.info("User %s deleted comment %s", author_id, comment_id)


def get_user_comments(db: Session, user_id: int) -> list[Comment]:
    event_service.get_user(db, user_id)
    return db.query(Comment).filter(Comment.author_id == user_id).order_by(Comment.id).all()


def moderate_comment(db: Session, comment_id: int, decision: CommentDecision) -> Comment:
    """Publish or reject a comment that is awaiting moderation."""
    comment = _get_comment(db, comment_id)
    if comment.status != CommentStatus.pending:
        raise ConflictError(
            f"Comment {comment_id} must be PENDING to be moderated, it is {comment.status.value}"
        )
    comment.status = CommentStatus(decision.value)
    db.commit()
    db.refresh(comment)
    logger.info("Comment %s moderated to %s", comment_id, comment.status.value)
    return comment


def get_comments_for_moderation(
    db: Session,
    status: Optional[CommentStatus] = None,
    from_: int = 0,
    size: int = 10,
) -> list[Comment]:
    event_service.ensure_pagination(from_, size)
    query = db.query(Comment)
    if status is not None:
        query = query.filter(Comment.status == status)
    return query.order_by(Comment.id).offset(from_).limit(size).all()


def get_event_comments(db: Session, event_id: int, from_: int = 0, size: int = 10) -> list[Comment]:
    """Published comments of a published event, oldest first."""
    event_service.ensure_pagination(from_, size)
    event_service.get_public_event(db, event_id)
    return (
        db.query(Comment)
        .filter(Comment.event_id == event_id, Comment.status == CommentStatus.published)
        .order_by(Comment.created_on, Comment.id)
        .offset(from_)
        .limit(size)
        .all()
    )
