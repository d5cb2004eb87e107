"""Pydantic schemas for signage message endpoints."""

from datetime import datetime

from pydantic import BaseModel


class DisplayMessageResponse(BaseModel):
    id: int
    message_text: str
    is_active: bool
    display_order: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DisplayMessageListResponse(BaseModel):
    success: bool = True
    messages: list[DisplayMessageResponse]
    count: int


class DisplayMessageCreateRequest(BaseModel):
    message_text: str | None = None
    display_order: int = 0


class DisplayMessageUpdateRequest(BaseModel):
    """Partial update. Only fields present in the request body are applied."""

    message_text: str | None = None
    is_active: bool | None = None
    display_order: int | None = None

    def changes(self) -> dict:
        """Fields explicitly sent by the client, including explicit nulls."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class DisplayMessageResult(BaseModel):
    success: bool = True
    message: str
    data: DisplayMessageResponse


class DisplayMessageDeleteResponse(BaseModel):
    success: bool = True
    message: str
