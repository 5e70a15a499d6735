"""Compilation ORM model: a curated, optionally pinned set of events."""
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Table
from sqlalchemy.orm import relationship
from eventboard.database import Base


compilation_events = Table(
    "compilation_events",
    Base.metadata,
    Column("compilation_id", Integer, ForeignKey("compilations.id", ondelete="CASCADE"), primary_key=True),
    Column("event_id", Integer, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True),
)


class Compilation(Base):
    __tablename__ = "compilations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(50), nullable=False)
    pinned = Column(Boolean, nullable=False, default=False)

    events = relationship("Event", secondary=compilation_events, order_by="Event.id")
