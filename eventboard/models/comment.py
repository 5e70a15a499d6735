"""Comment ORM model."""
import enum
from sqlalchemy import Column, DateTime, Integer, Text, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship
from eventboard.database import Base


class CommentStatus(str, enum.Enum):
    pending = "PENDING"
    published = "PUBLISHED"
    rejected = "REJECTED"


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    text = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    created_on = Column(DateTime, nullable=False)
    updated_on = Column(DateTime, nullable=True)
    status = Column(SAEnum(CommentStatus), nullable=False, default=CommentStatus.pending)

    author = relationship("User")


class CommentDecision(str, enum.Enum):
    """Moderator verdict on a comment awaiting review."""

    published = "PUBLISHED"
    rejected = "REJECTED"
