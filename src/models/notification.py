"""Notification database model."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from .base import Base


class NotificationModel(Base):
    """A notification; a NULL user_id means it is broadcast to everyone."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String, nullable=False)
    user_id = Column(String, index=True, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
