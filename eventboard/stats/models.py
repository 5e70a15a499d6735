"""EndpointHit ORM model."""
from sqlalchemy import Column, DateTime, Integer, String
from eventboard.stats.database import StatsBase


class EndpointHit(StatsBase):
    __tablename__ = "endpoint_hits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    app = Column(String(255), nullable=False)
    uri = Column(String(512), nullable=False, index=True)
    ip = Column(String(64), nullable=False)
    timestamp = Column(DateTime, nullable=False, index=True)
