"""User ORM model."""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from eventboard.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(250), nullable=False)
    email = Column(String(254), nullable=False, unique=True)
    created_at = Column(DateTime, server_default=func.now())
