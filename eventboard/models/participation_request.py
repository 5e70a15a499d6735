"""ParticipationRequest ORM model."""
import enum
from sqlalchemy import Column, DateTime, Integer, ForeignKey, UniqueConstraint, Enum as SAEnum
from eventboard.database import Base


class RequestStatus(str, enum.Enum):
    pending = "PENDING"
    confirmed = "CONFIRMED"
    rejected = "REJECTED"
    canceled = "CANCELED"


class ParticipationRequest(Base):
    __tablename__ = "participation_requests"
    __table_args__ = (
        UniqueConstraint("requester_id", "event_id", name="uq_request_requester_event"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    requester_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    created = Column(DateTime, nullable=False)
    status = Column(SAEnum(RequestStatus), nullable=False, default=RequestStatus.pending)


class RequestDecision(str, enum.Enum):
    """Organizer decision applied to a batch of pending requests."""

    confirmed = "CONFIRMED"
    rejected = "REJECTED"
