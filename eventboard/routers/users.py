"""Admin user management routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from eventboard.database import get_db
from eventboard.errors import ConflictError, NotFoundError
from eventboard.models.event import Event
from eventboard.models.user import User
from eventboard.schemas.user import UserCreate, UserOut
from eventboard.services.event_service import ensure_pagination

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Register a user; emails are unique."""
    if db.query(User).filter(User.email == payload.email).first():
        raise ConflictError(f"Email {payload.email} is already registered")
    user = User(**payload.model_dump())
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s)", user.id, user.email)
    return user


@router.get("/", response_model=list[UserOut])
def list_users(
    ids: Optional[list[int]] = Query(None),
    from_: int = Query(0, alias="from"),
    size: int = Query(10),
    db: Session = Depends(get_db),
):
    """List users, optionally restricted to ``ids``."""
    ensure_pagination(from_, size)
    query = db.query(User)
    if ids:
        query = query.filter(User.id.in_(ids))
    return query.order_by(User.id).offset(from_).limit(size).all()


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id={user_id} was not found")
    if db.query(Event.id).filter(Event.initiator_id == user_id).first():
        raise ConflictError(f"User {user_id} still initiates events")
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s", user_id)
