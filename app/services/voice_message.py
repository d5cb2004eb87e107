"""Voice message service: upload validation, record lifecycle, and admin CRUD."""

import logging
from datetime import datetime
from pathlib import Path

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.config import get_settings
from app.exceptions import NotFound, ValidationError
from app.models.voice_message import (
    STATUS_COMPLETED,
    STATUS_ERROR,
    STATUS_PROCESSING,
    VOICE_MESSAGE_STATUSES,
    VoiceMessage,
)

logger = logging.getLogger("voice_signage")

ALLOWED_EXTENSIONS = {".mp3", ".m4a", ".mp4", ".wav", ".webm", ".ogg", ".opus", ".flac"}
ALLOWED_MIME_TYPES = {
    "audio/mpeg",
    "audio/mp4",
    "audio/x-m4a",
    "audio/wav",
    "audio/x-wav",
    "audio/webm",
    "audio/ogg",
    "audio/flac",
    "audio/x-flac",
    "video/webm",  # some browsers label MediaRecorder audio-only output as video
}
DEFAULT_EXTENSION = ".webm"


class VoiceMessageService:
    """Handles voice message validation, storage records, and management."""

    def validate_upload_metadata(self, filename: str, content_type: str | None) -> str | None:
        """Validate upload file metadata (extension + MIME). Returns error message or None if valid."""
        ext = Path(filename).suffix.lower()
        if ext and ext not in ALLOWED_EXTENSIONS:
            return f"Unsupported file type '{ext}'. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"

        # Codec parameters ("audio/webm;codecs=opus") are ignored.
        base_type = (content_type or "").split(";")[0].strip().lower()
        if base_type and base_type not in ALLOWED_MIME_TYPES and not base_type.startswith("audio/"):
            return f"Invalid content type '{content_type}'. Must be an audio file."

        return None

    async def read_upload(self, upload: UploadFile) -> bytes:
        """Read an uploaded file in chunks, enforcing the size limit.

        Raises ValidationError if the file exceeds the max upload size.
        """
        settings = get_settings()
        max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
        chunk_size = 1024 * 64
        chunks = []
        size = 0

        while True:
            chunk = await upload.read(chunk_size)
            if not chunk:
                break
            size += len(chunk)
            if size > max_bytes:
                raise ValidationError(
                    f"File too large ({size // (1024 * 1024)}MB). Maximum: {settings.MAX_UPLOAD_SIZE_MB}MB"
                )
            chunks.append(chunk)

        return b"".join(chunks)

    def storage_extension(self, filename: str | None) -> str:
        ext = Path(filename or "").suffix.lower()
        return ext if ext in ALLOWED_EXTENSIONS else DEFAULT_EXTENSION

    def create_processing(
        self,
        db: Session,
        stored_filename: str,
        original_filename: str | None,
        file_url: str,
        mime_type: str | None,
        file_size_bytes: int,
    ) -> VoiceMessage:
        """Insert the record for a freshly stored upload, already in processing state."""
        message = VoiceMessage(
            stored_filename=stored_filename,
            original_filename=original_filename,
            file_url=file_url,
            mime_type=mime_type,
            file_size_bytes=file_size_bytes,
            status=STATUS_PROCESSING,
            is_approved=False,
        )
        db.add(message)
        db.commit()
        db.refresh(message)
        return message

    def list_messages(
        self, db: Session, page: int = 1, limit: int = 10, status: str | None = None
    ) -> tuple[list[VoiceMessage], int]:
        """List messages newest first with optional status filter. Returns (items, total_count)."""
        if status and status not in VOICE_MESSAGE_STATUSES:
            raise ValidationError(f"Unknown status '{status}'. Allowed: {', '.join(VOICE_MESSAGE_STATUSES)}")

        query = db.query(VoiceMessage)
        if status:
            query = query.filter(VoiceMessage.status == status)

        total = query.count()
        items = (
            query.order_by(VoiceMessage.created_at.desc(), VoiceMessage.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def get_message(self, db: Session, message_id: int) -> VoiceMessage:
        message = db.get(VoiceMessage, message_id)
        if message is None:
            raise NotFound()
        return message

    def update_message(self, db: Session, message_id: int, moderated_text: str | None, is_approved: bool) -> VoiceMessage:
        """Administrator override of the moderated text."""
        if not moderated_text:
            raise ValidationError("Edited text is required.")

        message = self.get_message(db, message_id)
        message.moderated_text = moderated_text
        message.is_approved = is_approved
        message.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(message)
        return message

    def delete_message(self, db: Session, message_id: int) -> None:
        """Delete the record. The stored audio object is kept."""
        message = self.get_message(db, message_id)
        db.delete(message)
        db.commit()

    def mark_completed(
        self, db: Session, message_id: int, transcription: str, moderated_text: str, is_approved: bool
    ) -> VoiceMessage | None:
        """Finalize a processed message. Records that already reached a final status are left alone."""
        message = db.get(VoiceMessage, message_id)
        if message is None:
            logger.warning("Message %d disappeared before processing finished", message_id)
            return None
        if message.is_final:
            logger.warning("Message %d is already %s, not marking completed", message_id, message.status)
            return message

        message.transcription = transcription
        message.moderated_text = moderated_text
        message.is_approved = is_approved
        message.status = STATUS_COMPLETED
        message.updated_at = datetime.utcnow()
        db.commit()
        return message

    def mark_error(self, db: Session, message_id: int) -> VoiceMessage | None:
        """Move a message to the terminal error status."""
        message = db.get(VoiceMessage, message_id)
        if message is None:
            logger.warning("Message %d disappeared before it could be marked as failed", message_id)
            return None
        if message.is_final:
            logger.warning("Message %d is already %s, not marking error", message_id, message.status)
            return message

        message.status = STATUS_ERROR
        message.updated_at = datetime.utcnow()
        db.commit()
        return message


_voice_message_service: VoiceMessageService | None = None


def get_voice_message_service() -> VoiceMessageService:
    """Get singleton voice message service instance."""
    global _voice_message_service
    if _voice_message_service is None:
        _voice_message_service = VoiceMessageService()
    return _voice_message_service
