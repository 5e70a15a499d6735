"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field

from eventboard.models.event import AdminStateAction, EventState, UserStateAction
from eventboard.schemas.category import CategoryOut
from eventboard.schemas.user import UserShortOut


class Location(BaseModel):
    lat: float
    lon: float


class EventCreate(BaseModel):
    title: str
    annotation: str
    description: str
    category: int
    event_date: datetime
    location: Location
    paid: bool = False
    participant_limit: int = Field(0, ge=0)
    request_moderation: bool = True


class _EventPatch(BaseModel):
    title: Optional[str] = None
    annotation: Optional[str] = None
    description: Optional[str] = None
    category: Optional[int] = None
    event_date: Optional[datetime] = None
    location: Optional[Location] = None
    paid: Optional[bool] = None
    participant_limit: Optional[int] = Field(None, ge=0)
    request_moderation: Optional[bool] = None

    def to_updates(self) -> dict[str, Any]:
        """Flatten into event column names, dropping unset fields."""
        updates = self.model_dump(exclude_none=True, exclude={"state_action", "location", "category"})
        if self.category is not None:
            updates["category_id"] = self.category
        if self.location is not None:
            updates["location_lat"] = self.location.lat
            updates["location_lon"] = self.location.lon
        return updates


class EventUserUpdate(_EventPatch):
    state_action: Optional[UserStateAction] = None


class EventAdminUpdate(_EventPatch):
    state_action: Optional[AdminStateAction] = None


class EventShortOut(BaseModel):
    id: int
    title: str
    annotation: str
    category: CategoryOut
    initiator: UserShortOut
    event_date: datetime
    paid: bool
    confirmed_requests: int = 0
    views: int = 0


class EventFullOut(EventShortOut):
    description: str
    location: Location
    participant_limit: int
    request_moderation: bool
    created_on: datetime
    published_on: Optional[datetime] = None
    state: EventState


def _base_fields(event, confirmed_requests: int, views: int) -> dict[str, Any]:
    return {
        "id": event.id,
        "title": event.title,
        "annotation": event.annotation,
        "category": CategoryOut.model_validate(event.category),
        "initiator": UserShortOut.model_validate(event.initiator),
        "event_date": event.event_date,
        "paid": event.paid,
        "confirmed_requests": confirmed_requests,
        "views": views,
    }


def to_short(event, confirmed_requests: int = 0, views: int = 0) -> EventShortOut:
    return EventShortOut(**_base_fields(event, confirmed_requests, views))


def to_full(event, confirmed_requests: int = 0, views: int = 0) -> EventFullOut:
    return EventFullOut(
        **_base_fields(event, confirmed_requests, views),
        description=event.description,
        location=Location(lat=event.location_lat, lon=event.location_lon),
        participant_limit=event.participant_limit,
        request_moderation=event.request_moderation,
        created_on=event.created_on,
        published_on=event.published_on,
        state=event.state,
    )
