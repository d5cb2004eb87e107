"""Publication pipeline: upload → transcribe → moderate → persist, and publishing to the display."""

import logging
import uuid

from sqlalchemy.orm import Session

from app import database
from app.exceptions import UploadError, ValidationError
from app.models.display_message import DisplayMessage
from app.models.voice_message import VoiceMessage
from app.services.display_message import get_display_message_service
from app.services.moderation import get_moderation_filter
from app.services.storage import get_object_store
from app.services.transcription import get_transcriber
from app.services.voice_message import get_voice_message_service

logger = logging.getLogger("voice_signage")

STORAGE_PREFIX = "voice-messages"


class PublicationPipeline:
    """Orchestrates object store, transcription, moderation and the two message stores."""

    def submit(
        self, db: Session, data: bytes, original_filename: str | None, content_type: str | None
    ) -> tuple[VoiceMessage, str]:
        """Store the audio and create a processing record. Returns (message, storage_uri).

        The caller is responsible for scheduling finish() with the returned values.
        """
        if not data:
            raise UploadError("No audio file was provided.", status_code=400)

        vm_service = get_voice_message_service()
        key = f"{STORAGE_PREFIX}/{uuid.uuid4()}{vm_service.storage_extension(original_filename)}"

        try:
            stored = get_object_store().save(key, data, content_type)
        except Exception as e:
            raise UploadError() from e

        message = vm_service.create_processing(
            db,
            stored_filename=stored.key,
            original_filename=original_filename,
            file_url=stored.url,
            mime_type=content_type,
            file_size_bytes=len(data),
        )
        logger.info("Message %d stored as %s, transcription scheduled", message.id, stored.key)
        return message, stored.uri

    def finish(self, message_id: int, storage_uri: str) -> None:
        """Transcribe, moderate and finalize a message. Failures end in the error status; never raises."""
        vm_service = get_voice_message_service()

        with database.open_session() as db:
            try:
                transcription = get_transcriber().transcribe(storage_uri)
                result = get_moderation_filter().moderate(transcription)
                vm_service.mark_completed(
                    db,
                    message_id,
                    transcription=transcription,
                    moderated_text=result.moderated_text,
                    is_approved=result.is_approved,
                )
                logger.info(
                    "Message %d processed: %s", message_id, "approved" if result.is_approved else "moderated"
                )
            except Exception:
                logger.exception("Message %d processing failed", message_id)
                try:
                    db.rollback()
                    vm_service.mark_error(db, message_id)
                except Exception:
                    logger.exception("Could not record error status for message %d", message_id)

    def push_to_display(self, db: Session, text: str | None, display_order: int = 0) -> DisplayMessage:
        """Publish text as a new signage entry."""
        return get_display_message_service().create_message(db, text, display_order)

    def send_to_display(self, db: Session, message_id: int, display_order: int = 0) -> DisplayMessage:
        """Copy a voice message's text into a new, independent signage entry."""
        message = get_voice_message_service().get_message(db, message_id)
        text = message.moderated_text or message.transcription
        if not text:
            raise ValidationError("This message has no text to send.")
        return self.push_to_display(db, text, display_order)


_pipeline: PublicationPipeline | None = None


def get_pipeline() -> PublicationPipeline:
    """Get singleton pipeline instance."""
    global _pipeline
    if _pipeline is None:
        _pipeline = PublicationPipeline()
    return _pipeline
