"""Pydantic schemas for Comments."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from eventboard.models.comment import CommentDecision, CommentStatus


class CommentIn(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000)


class CommentModerationIn(BaseModel):
    status: CommentDecision


class CommentOut(BaseModel):
    id: int
    text: str
    author_id: int
    event_id: int
    created_on: datetime
    updated_on: Optional[datetime] = None
    status: CommentStatus

    model_config = {"from_attributes": True}
