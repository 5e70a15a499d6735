"""Pydantic schemas for participation requests and organizer decisions."""
from datetime import datetime
from pydantic import BaseModel

from eventboard.models.participation_request import RequestDecision, RequestStatus


class ParticipationRequestOut(BaseModel):
    id: int
    event_id: int
    requester_id: int
    created: datetime
    status: RequestStatus

    model_config = {"from_attributes": True}


class StatusUpdateIn(BaseModel):
    request_ids: list[int]
    status: RequestDecision


class StatusUpdateOut(BaseModel):
    confirmed_requests: list[ParticipationRequestOut] = []
    rejected_requests: list[ParticipationRequestOut] = []
