"""Pydantic schemas for upload and admin voice message endpoints."""

import math
from datetime import datetime

from pydantic import BaseModel, Field


class VoiceMessageResponse(BaseModel):
    id: int
    stored_filename: str
    original_filename: str | None
    file_url: str
    mime_type: str | None = None
    file_size_bytes: int | None = None
    transcription: str | None
    moderated_text: str | None
    status: str
    is_approved: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class Pagination(BaseModel):
    currentPage: int
    totalPages: int
    totalCount: int
    hasNext: bool
    hasPrev: bool

    @classmethod
    def build(cls, page: int, limit: int, total_count: int) -> "Pagination":
        total_pages = math.ceil(total_count / limit)
        return cls(
            currentPage=page,
            totalPages=total_pages,
            totalCount=total_count,
            hasNext=page < total_pages,
            hasPrev=page > 1,
        )


class VoiceMessageListResponse(BaseModel):
    messages: list[VoiceMessageResponse]
    pagination: Pagination


class VoiceMessageDetailResponse(BaseModel):
    message: VoiceMessageResponse


class VoiceMessageUpdateRequest(BaseModel):
    moderatedText: str | None = None
    isApproved: bool = True


class VoiceMessageUpdateResponse(BaseModel):
    success: bool = True
    message: VoiceMessageResponse
    info: str


class UploadResponse(BaseModel):
    success: bool = True
    messageId: int
    message: str


class SendToDisplayRequest(BaseModel):
    display_order: int = Field(default=0)
