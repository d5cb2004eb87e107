"""Signage message endpoints and the rotation stream."""

import json
from contextlib import aclosing

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.config import get_settings
from app.database import get_db, open_session
from app.schemas.display_message import (
    DisplayMessageCreateRequest,
    DisplayMessageDeleteResponse,
    DisplayMessageListResponse,
    DisplayMessageResponse,
    DisplayMessageResult,
    DisplayMessageUpdateRequest,
)
from app.services.display_message import get_display_message_service
from app.services.pipeline import get_pipeline
from app.services.rotation import RotationScheduler

router = APIRouter(prefix="/display", tags=["Display"])


@router.get("/messages", response_model=DisplayMessageListResponse)
def list_display_messages(active: bool = False, db: Session = Depends(get_db)) -> DisplayMessageListResponse:
    """List signage entries in display order."""
    messages = get_display_message_service().list_messages(db, active_only=active)
    return DisplayMessageListResponse(
        messages=[DisplayMessageResponse.model_validate(m) for m in messages],
        count=len(messages),
    )


@router.post("/messages", response_model=DisplayMessageResult)
def create_display_message(
    body: DisplayMessageCreateRequest,
    db: Session = Depends(get_db),
) -> DisplayMessageResult:
    """Add a signage entry."""
    entry = get_pipeline().push_to_display(db, body.message_text, body.display_order)
    return DisplayMessageResult(message="Message added.", data=DisplayMessageResponse.model_validate(entry))


@router.put("/messages/{message_id}", response_model=DisplayMessageResult)
def update_display_message(
    message_id: int,
    body: DisplayMessageUpdateRequest,
    db: Session = Depends(get_db),
) -> DisplayMessageResult:
    """Partially update a signage entry."""
    entry = get_display_message_service().update_message(db, message_id, body.changes())
    return DisplayMessageResult(message="Message updated.", data=DisplayMessageResponse.model_validate(entry))


@router.post("/messages/{message_id}/toggle", response_model=DisplayMessageResult)
def toggle_display_message(message_id: int, db: Session = Depends(get_db)) -> DisplayMessageResult:
    """Flip whether an entry is in rotation."""
    entry = get_display_message_service().toggle_active(db, message_id)
    state = "activated" if entry.is_active else "deactivated"
    return DisplayMessageResult(message=f"Message {state}.", data=DisplayMessageResponse.model_validate(entry))


@router.delete("/messages/{message_id}", response_model=DisplayMessageDeleteResponse)
def delete_display_message(message_id: int, db: Session = Depends(get_db)) -> DisplayMessageDeleteResponse:
    """Delete a signage entry."""
    get_display_message_service().delete_message(db, message_id)
    return DisplayMessageDeleteResponse(message="Message deleted.")


def _load_active_texts() -> list[str]:
    with open_session() as db:
        return get_display_message_service().active_texts(db)


async def fetch_active_texts() -> list[str]:
    return await run_in_threadpool(_load_active_texts)


@router.get("/stream")
async def display_stream(request: Request) -> StreamingResponse:
    """Server-Sent Events feed of rotation frames for one viewer."""
    settings = get_settings()
    scheduler = RotationScheduler(
        fetch_active_texts,
        interval=settings.ROTATION_INTERVAL_SECONDS,
        refresh_interval=settings.ROTATION_REFRESH_SECONDS,
    )

    async def event_stream():
        async with aclosing(scheduler.frames()) as frames:
            async for frame in frames:
                if await request.is_disconnected():
                    break
                yield f"data: {json.dumps(frame.to_dict(), ensure_ascii=False)}\n\n"

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
