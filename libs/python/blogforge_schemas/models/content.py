"""Content job models: the persisted "content item" and its partial updates."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from ..enums import ContentStatus
from ..utils.validators import clean_string_list


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentOutline(BaseModel):
    """Requested (or resolved) body headings for an article."""

    h2_list: list[str] = Field(default_factory=list)
    h3_list: list[str] = Field(default_factory=list)

    @field_validator("h2_list", "h3_list", mode="before")
    @classmethod
    def clean_headings(cls, value: Optional[list[str]]) -> list[str]:
        return clean_string_list(value)


class ContentJob(BaseModel):
    """One article generation request together with its output and progress."""

    id: UUID = Field(default_factory=uuid4)
    owner_id: UUID

    # Input
    main_keyword: str = Field(..., min_length=1, max_length=200)
    secondary_keywords: list[str] = Field(default_factory=list)
    target_word_count: int = Field(1000, ge=0)
    tone: str = Field("professional", min_length=1, max_length=80)
    target_country: str = Field("Global", max_length=120)
    outline: ContentOutline = Field(default_factory=ContentOutline)
    custom_details: Optional[str] = Field(None, max_length=2000)
    internal_links: list[str] = Field(default_factory=list)

    # Output
    generated_title: Optional[str] = None
    meta_description: Optional[str] = None
    generated_content: str = ""
    featured_image_url: Optional[str] = None

    # Progress
    status: ContentStatus = ContentStatus.DRAFT
    total_sections: int = Field(0, ge=0)
    sections_completed: int = Field(0, ge=0)
    current_section_label: Optional[str] = None
    error_message: Optional[str] = None

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("secondary_keywords", "internal_links", mode="before")
    @classmethod
    def clean_lists(cls, value: Optional[list[str]]) -> list[str]:
        return clean_string_list(value)

    @field_validator("main_keyword")
    @classmethod
    def strip_keyword(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("main_keyword cannot be blank")
        return cleaned


class ContentJobUpdate(BaseModel):
    """Partial, field-level update applied by a job store.

    Only fields that were explicitly set are written; see
    :meth:`changes`.
    """

    outline: Optional[ContentOutline] = None
    generated_title: Optional[str] = None
    meta_description: Optional[str] = None
    generated_content: Optional[str] = None
    featured_image_url: Optional[str] = None
    status: Optional[ContentStatus] = None
    total_sections: Optional[int] = Field(None, ge=0)
    sections_completed: Optional[int] = Field(None, ge=0)
    current_section_label: Optional[str] = None
    error_message: Optional[str] = None

    def changes(self) -> dict:
        """Return the explicitly set fields, keeping explicit ``None`` values."""

        return {name: getattr(self, name) for name in self.model_fields_set}

    def apply_to(self, job: ContentJob) -> ContentJob:
        return job.model_copy(update={**self.changes(), "updated_at": _utcnow()})
