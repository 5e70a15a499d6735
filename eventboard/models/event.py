"""Event ORM model.

``version`` is bumped by every committed unit of work that writes the event
or decides requests against its capacity; services use it as a
compare-and-swap guard (see ``services/guard.py``).
"""
import enum
from sqlalchemy import Column, String, DateTime, Integer, Float, Boolean, Text, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship
from eventboard.database import Base


class EventState(str, enum.Enum):
    pending = "PENDING"
    published = "PUBLISHED"
    canceled = "CANCELED"


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(120), nullable=False)
    annotation = Column(String(2000), nullable=False)
    description = Column(Text, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    initiator_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    location_lat = Column(Float, nullable=False)
    location_lon = Column(Float, nullable=False)
    paid = Column(Boolean, nullable=False, default=False)
    participant_limit = Column(Integer, nullable=False, default=0)  # 0 = unlimited
    request_moderation = Column(Boolean, nullable=False, default=True)
    created_on = Column(DateTime, nullable=False)
    event_date = Column(DateTime, nullable=False)
    published_on = Column(DateTime, nullable=True)
    state = Column(SAEnum(EventState), nullable=False, default=EventState.pending)
    version = Column(Integer, nullable=False, default=1)

    category = relationship("Category")
    initiator = relationship("User")

    @property
    def is_limited(self) -> bool:
        return self.participant_limit > 0


class UserStateAction(str, enum.Enum):
    send_to_review = "SEND_TO_REVIEW"
    cancel_review = "CANCEL_REVIEW"


class AdminStateAction(str, enum.Enum):
    publish_event = "PUBLISH_EVENT"
    reject_event = "REJECT_EVENT"
