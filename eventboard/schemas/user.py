"""Pydantic schemas for Users."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class UserCreate(BaseModel):
    name: str
    email: str


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserShortOut(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}
