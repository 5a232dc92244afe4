"""Pydantic schemas for prompt CRUD."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.prompts import normalize_tags


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


class PromptCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    tags: list[str] = Field(default_factory=list)
    folder_id: UUID | None = None

    @field_validator("title", "content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return _require_text(value)

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: list[str]) -> list[str]:
        return normalize_tags(value)


class PromptUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    title: str | None = Field(None, min_length=1, max_length=500)
    content: str | None = Field(None, min_length=1)
    tags: list[str] | None = None
    folder_id: UUID | None = None

    @field_validator("title", "content")
    @classmethod
    def _not_blank(cls, value: str | None) -> str | None:
        if value is None:
            raise ValueError("must not be null")
        return _require_text(value)

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: list[str] | None) -> list[str]:
        return normalize_tags(value)


class PromptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    folder_id: UUID | None
    title: str
    content: str
    tags: list[str]
    is_favorite: bool
    created_at: datetime
    updated_at: datetime
