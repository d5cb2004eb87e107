"""Audio upload endpoint."""

from fastapi import APIRouter, BackgroundTasks, Depends, File, Request, UploadFile
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.config import get_settings
from app.database import get_db
from app.exceptions import UploadError, ValidationError
from app.rate_limit import limiter
from app.schemas.voice_message import UploadResponse
from app.services.pipeline import get_pipeline
from app.services.voice_message import get_voice_message_service

router = APIRouter(tags=["Upload"])


@router.post("/upload-audio", response_model=UploadResponse)
@limiter.limit(get_settings().UPLOAD_RATE_LIMIT)
async def upload_audio(
    request: Request,
    background_tasks: BackgroundTasks,
    audio: UploadFile | None = File(None),
    db: Session = Depends(get_db),
) -> UploadResponse:
    """Store a recording and start transcription in the background."""
    if audio is None:
        raise UploadError("No audio file was provided.", status_code=400)

    service = get_voice_message_service()

    # Validate extension + MIME type before reading the body
    error = service.validate_upload_metadata(audio.filename or "", audio.content_type)
    if error:
        raise ValidationError(error)

    data = await service.read_upload(audio)

    pipeline = get_pipeline()
    # Blocking store and database calls run off the event loop
    message, storage_uri = await run_in_threadpool(pipeline.submit, db, data, audio.filename, audio.content_type)
    background_tasks.add_task(pipeline.finish, message.id, storage_uri)

    return UploadResponse(
        messageId=message.id,
        message="Your voice message was uploaded. Converting it to text.",
    )
