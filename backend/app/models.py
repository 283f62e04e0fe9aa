"""SQLAlchemy models: food records (index input) and rebuild job history."""
from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func
from .database import Base


class Food(Base):
    __tablename__ = "foods"
    id = Column(Integer, primary_key=True, autoincrement=True)
    food_id = Column(String(64), nullable=False, index=True)
    locale_id = Column(String(16), nullable=False, index=True)
    description = Column(String(512), nullable=False)
    alt_names_json = Column(Text, nullable=True)  # JSON array of alternative descriptions
    popularity_rank = Column(Float, nullable=False, default=0.0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class RebuildJob(Base):
    __tablename__ = "rebuild_jobs"
    id = Column(Integer, primary_key=True, autoincrement=True)
    locale_id = Column(String(16), nullable=False, index=True)
    status = Column(String(16), nullable=False)  # started | succeeded | failed
    attempt = Column(Integer, nullable=False, default=1)
    version = Column(Integer, nullable=True)
    indexed_records = Column(Integer, nullable=True)
    skipped_records = Column(Integer, nullable=True)
    degraded = Column(Boolean, nullable=False, default=False)
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
