"""Display (signage) message model."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, Text

from app.database import Base


class DisplayMessage(Base):
    """Text entry rotated on the signage screen."""

    __tablename__ = "display_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    message_text = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
