"""Voice message model."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from app.database import Base

STATUS_PENDING = "pending"
STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"

VOICE_MESSAGE_STATUSES = (STATUS_PENDING, STATUS_PROCESSING, STATUS_COMPLETED, STATUS_ERROR)
OPEN_STATUSES = (STATUS_PENDING, STATUS_PROCESSING)


class VoiceMessage(Base):
    """A recorded visitor message and its moderation state."""

    __tablename__ = "voice_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    stored_filename = Column(String(255), nullable=False, unique=True)
    original_filename = Column(String(255), nullable=True)
    file_url = Column(Text, nullable=False)
    mime_type = Column(String(128), nullable=True)
    file_size_bytes = Column(Integer, nullable=True)
    transcription = Column(Text, nullable=True)
    moderated_text = Column(Text, nullable=True)
    status = Column(String(50), nullable=False, default=STATUS_PENDING, index=True)
    is_approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_final(self) -> bool:
        return self.status not in OPEN_STATUSES
