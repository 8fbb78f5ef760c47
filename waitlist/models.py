"""SQLAlchemy ORM models for database tables."""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from .db import Base
from .normalizer import MAX_EMAIL_LENGTH


class User(Base):
    """Waitlist signup mapped to 'users' table."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(MAX_EMAIL_LENGTH), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
