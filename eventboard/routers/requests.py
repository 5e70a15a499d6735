"""Participation request routes for the requesting user."""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from eventboard.clock import get_clock
from eventboard.database import get_db
from eventboard.schemas.participation_request import ParticipationRequestOut
from eventboard.services import request_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{user_id}/requests", response_model=list[ParticipationRequestOut])
def list_user_requests(user_id: int, db: Session = Depends(get_db)):
    return request_service.get_user_requests(db, user_id)


@router.post("/{user_id}/requests", response_model=ParticipationRequestOut, status_code=status.HTTP_201_CREATED)
def submit_request(
    user_id: int,
    event_id: int = Query(..., alias="eventId"),
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
):
    """Ask to participate in a published event."""
    return request_service.submit_request(db, clock, requester_id=user_id, event_id=event_id)


@router.patch("/{user_id}/requests/{request_id}/cancel", response_model=ParticipationRequestOut)
def cancel_request(user_id: int, request_id: int, db: Session = Depends(get_db)):
    return request_service.cancel_own_request(db, requester_id=user_id, request_id=request_id)
