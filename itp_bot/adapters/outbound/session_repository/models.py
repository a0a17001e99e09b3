"""SQLAlchemy ORM models for conversation sessions."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ConversationSessionModel(Base):
    """SQLAlchemy model for conversation_sessions table."""

    __tablename__ = "conversation_sessions"

    session_id = Column(String, primary_key=True, index=True)
    session_json = Column(JSON, nullable=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

