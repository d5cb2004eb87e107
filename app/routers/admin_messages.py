"""Admin endpoints for reviewing voice messages."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.display_message import DisplayMessageResponse, DisplayMessageResult
from app.schemas.voice_message import (
    Pagination,
    SendToDisplayRequest,
    VoiceMessageDetailResponse,
    VoiceMessageListResponse,
    VoiceMessageResponse,
    VoiceMessageUpdateRequest,
    VoiceMessageUpdateResponse,
)
from app.services.pipeline import get_pipeline
from app.services.voice_message import get_voice_message_service

router = APIRouter(prefix="/admin/messages", tags=["Admin"])


@router.get("", response_model=VoiceMessageListResponse)
def list_messages(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: str | None = None,
    db: Session = Depends(get_db),
) -> VoiceMessageListResponse:
    """List voice messages newest first, optionally filtered by status."""
    service = get_voice_message_service()
    items, total = service.list_messages(db, page=page, limit=limit, status=status or None)
    return VoiceMessageListResponse(
        messages=[VoiceMessageResponse.model_validate(m) for m in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{message_id}", response_model=VoiceMessageDetailResponse)
def get_message(message_id: int, db: Session = Depends(get_db)) -> VoiceMessageDetailResponse:
    """Get a single voice message."""
    message = get_voice_message_service().get_message(db, message_id)
    return VoiceMessageDetailResponse(message=VoiceMessageResponse.model_validate(message))


@router.put("/{message_id}", response_model=VoiceMessageUpdateResponse)
def update_message(
    message_id: int,
    body: VoiceMessageUpdateRequest,
    db: Session = Depends(get_db),
) -> VoiceMessageUpdateResponse:
    """Edit the moderated text of a message."""
    message = get_voice_message_service().update_message(db, message_id, body.moderatedText, body.isApproved)
    return VoiceMessageUpdateResponse(
        message=VoiceMessageResponse.model_validate(message),
        info="Message updated.",
    )


@router.delete("/{message_id}")
def delete_message(message_id: int, db: Session = Depends(get_db)) -> dict:
    """Delete a voice message record. The audio object stays in storage."""
    get_voice_message_service().delete_message(db, message_id)
    return {"success": True, "info": "Message deleted."}


@router.post("/{message_id}/send-to-display", response_model=DisplayMessageResult)
def send_to_display(
    message_id: int,
    body: SendToDisplayRequest | None = None,
    db: Session = Depends(get_db),
) -> DisplayMessageResult:
    """Copy a message's text onto the signage as a new entry."""
    display_order = body.display_order if body else 0
    entry = get_pipeline().send_to_display(db, message_id, display_order)
    return DisplayMessageResult(
        message="Message added to the display.",
        data=DisplayMessageResponse.model_validate(entry),
    )
