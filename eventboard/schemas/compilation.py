"""Pydantic schemas for Compilations."""
from typing import Optional
from pydantic import BaseModel

from eventboard.schemas.event import EventShortOut


class CompilationCreate(BaseModel):
    title: str
    pinned: bool = False
    events: list[int] = []


class CompilationUpdate(BaseModel):
    title: Optional[str] = None
    pinned: Optional[bool] = None
    events: Optional[list[int]] = None


class CompilationOut(BaseModel):
    id: int
    title: str
    pinned: bool
    events: list[EventShortOut] = []
