"""Stats store: its own engine and declarative base, separate from the main store."""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from eventboard.config import settings

connect_args = {"check_same_thread": False} if settings.STATS_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.STATS_DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
StatsBase = declarative_base()


def get_stats_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
