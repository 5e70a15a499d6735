"""Category ORM model."""
from sqlalchemy import Column, Integer, String
from eventboard.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True)
