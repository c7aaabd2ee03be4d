from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from app.core.database import Base


class WebhookEvent(Base):
    """Processed gateway events; the unique keys make redelivery a no-op"""
    __tablename__ = "webhook_events"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(String(255), nullable=False, unique=True)
    event_type = Column(String(100), nullable=False)
    session_id = Column(String(255), nullable=True, unique=True)

    processed_at = Column(DateTime(timezone=True), server_default=func.now())
