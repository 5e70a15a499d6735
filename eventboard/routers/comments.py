"""Comment routes: authors under /users, moderation under /admin/comments, public listing per event."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from eventboard.clock import get_clock
from eventboard.database import get_db
from eventboard.models.comment import CommentStatus
from eventboard.schemas.comment import CommentIn, CommentModerationIn, CommentOut
from eventboard.services import comment_service

logger = logging.getLogger(__name__)
private_router = APIRouter()
admin_router = APIRouter()
public_router = APIRouter()


@private_router.post("/{user_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def add_comment(
    user_id: int,
    payload: CommentIn,
    event_id: int = Query(..., alias="eventId"),
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
):
    return comment_service.add_comment(db, clock, author_id=user_id, event_id=event_id, text=payload.text)


@private_router.get("/{user_id}/comments", response_model=list[CommentOut])
def list_user_comments(user_id: int, db: Session = Depends(get_db)):
    return comment_service.get_user_comments(db, user_id)


@private_router.patch("/{user_id}/comments/{comment_id}", response_model=CommentOut)
def edit_comment(
    user_id: int,
    comment_id: int,
    payload: CommentIn,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
):
    return comment_service.edit_comment(db, clock, author_id=user_id, comment_id=comment_id, text=payload.text)


@private_router.delete("/{user_id}/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(user_id: int, comment_id: int, db: Session = Depends(get_db)):
    comment_service.delete_own_comment(db, author_id=user_id, comment_id=comment_id)


@admin_router.get("/", response_model=list[CommentOut])
def list_comments_for_moderation(
    status_filter: Optional[CommentStatus] = Query(None, alias="status"),
    from_: int = Query(0, alias="from"),
    size: int = Query(10),
    db: Session = Depends(get_db),
):
    return comment_service.get_comments_for_moderation(db, status_filter, from_, size)


@admin_router.patch("/{comment_id}", response_model=CommentOut)
def moderate_comment(comment_id: int, payload: CommentModerationIn, db: Session = Depends(get_db)):
    return comment_service.moderate_comment(db, comment_id, payload.status)


@public_router.get("/{event_id}/comments", response_model=list[CommentOut])
def list_event_comments(
    event_id: int,
    from_: int = Query(0, alias="from"),
    size: int = Query(10),
    db: Session = Depends(get_db),
):
    return comment_service.get_event_comments(db, event_id, from_, size)
