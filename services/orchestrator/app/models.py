"""Pydantic models for the orchestrator HTTP API."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from blogforge_schemas import ContentJob, ContentOutline, ContentStatus, CreditAccount


class CreateContentRequest(BaseModel):
    main_keyword: str = Field(..., min_length=1, max_length=200)
    secondary_keywords: List[str] = Field(default_factory=list)
    target_word_count: int = Field(1000, ge=0, le=10000)
    tone: str = Field("professional", min_length=1, max_length=80)
    target_country: str = Field("Global", max_length=120)
    h2_list: List[str] = Field(default_factory=list)
    h3_list: List[str] = Field(default_factory=list)
    custom_details: Optional[str] = Field(None, max_length=2000)
    internal_links: List[str] = Field(default_factory=list)

    def to_job(self, owner_id: UUID) -> ContentJob:
        return ContentJob(
            owner_id=owner_id,
            main_keyword=self.main_keyword,
            secondary_keywords=self.secondary_keywords,
            target_word_count=self.target_word_count,
            tone=self.tone,
            target_country=self.target_country,
            outline=ContentOutline(h2_list=self.h2_list, h3_list=self.h3_list),
            custom_details=self.custom_details,
            internal_links=self.internal_links,
        )


class GenerationAccepted(BaseModel):
    job_id: UUID
    accepted: bool = True


class ProgressView(BaseModel):
    job_id: UUID
    status: ContentStatus
    total_sections: int
    sections_completed: int
    current_section_label: Optional[str] = None
    error_message: Optional[str] = None
    percent_complete: int = Field(0, ge=0, le=100)

    @classmethod
    def from_job(cls, job: ContentJob) -> "ProgressView":
        percent = 100 if job.status is ContentStatus.COMPLETED else 0
        if job.total_sections and percent < 100:
            percent = min(100, round(job.sections_completed * 100 / job.total_sections))
        return cls(
            job_id=job.id,
            status=job.status,
            total_sections=job.total_sections,
            sections_completed=job.sections_completed,
            current_section_label=job.current_section_label,
            error_message=job.error_message,
            percent_complete=percent,
        )


class CreditBalance(BaseModel):
    user_id: UUID
    total_credits: int
    used_credits: int
    locked_credits: int
    available_credits: int

    @classmethod
    def from_account(cls, account: CreditAccount) -> "CreditBalance":
        return cls(
            user_id=account.user_id,
            total_credits=account.total_credits,
            used_credits=account.used_credits,
            locked_credits=account.locked_credits,
            available_credits=account.available_credits,
        )


class TitleSuggestionRequest(BaseModel):
    keyword: str = Field(..., min_length=1, max_length=200)


class TitleSuggestionResponse(BaseModel):
    title: str


class RefineRequest(BaseModel):
    instruction: str = Field(..., min_length=1, max_length=2000)
