"""Display message service: signage list management."""

from datetime import datetime

from sqlalchemy.orm import Session

from app.exceptions import NotFound, ValidationError
from app.models.display_message import DisplayMessage

UPDATABLE_FIELDS = ("message_text", "is_active", "display_order")


class DisplayMessageService:
    """Handles CRUD over signage entries."""

    def list_messages(self, db: Session, active_only: bool = False) -> list[DisplayMessage]:
        """List entries by display_order, newest first within the same order."""
        query = db.query(DisplayMessage)
        if active_only:
            query = query.filter(DisplayMessage.is_active.is_(True))
        return query.order_by(
            DisplayMessage.display_order.asc(),
            DisplayMessage.created_at.desc(),
            DisplayMessage.id.desc(),
        ).all()

    def get_message(self, db: Session, message_id: int) -> DisplayMessage:
        message = db.get(DisplayMessage, message_id)
        if message is None:
            raise NotFound()
        return message

    def create_message(self, db: Session, message_text: str | None, display_order: int = 0) -> DisplayMessage:
        if not message_text or not message_text.strip():
            raise ValidationError("Message text is required.")

        message = DisplayMessage(message_text=message_text, display_order=display_order, is_active=True)
        db.add(message)
        db.commit()
        db.refresh(message)
        return message

    def update_message(self, db: Session, message_id: int, changes: dict) -> DisplayMessage:
        """Apply a partial update. Keys absent from changes are left untouched."""
        changes = {name: value for name, value in changes.items() if name in UPDATABLE_FIELDS}
        if not changes:
            raise ValidationError("Nothing to update.")
        for name, value in changes.items():
            if value is None:
                raise ValidationError(f"{name} cannot be null.")
        if "message_text" in changes and not changes["message_text"].strip():
            raise ValidationError("Message text is required.")

        message = self.get_message(db, message_id)
        for name, value in changes.items():
            setattr(message, name, value)
        message.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(message)
        return message

    def toggle_active(self, db: Session, message_id: int) -> DisplayMessage:
        message = self.get_message(db, message_id)
        return self.update_message(db, message_id, {"is_active": not message.is_active})

    def delete_message(self, db: Session, message_id: int) -> None:
        message = self.get_message(db, message_id)
        db.delete(message)
        db.commit()

    def active_texts(self, db: Session) -> list[str]:
        """Texts of the active entries in rotation order."""
        return [message.message_text for message in self.list_messages(db, active_only=True)]


_display_message_service: DisplayMessageService | None = None


def get_display_message_service() -> DisplayMessageService:
    """Get singleton display message service instance."""
    global _display_message_service
    if _display_message_service is None:
        _display_message_service = DisplayMessageService()
    return _display_message_service
