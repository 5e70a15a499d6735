"""Pydantic schemas for the stats API."""
from pydantic import BaseModel


class EndpointHitIn(BaseModel):
    app: str
    uri: str
    ip: str
    timestamp: str  # yyyy-MM-dd HH:mm:ss


class ViewStatsOut(BaseModel):
    app: str
    uri: str
    hits: int
