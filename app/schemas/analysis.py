from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.extraction.models import ExtractionResult

AnalysisSource = Literal["remote", "local_fallback"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BulletPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw_text: str
    cleaned_text: str


class StarRewrite(CamelModel):
    original: str
    improved: str
    feedback: str


class CoverLetterAnalysis(CamelModel):
    tone: str
    relevance: int = Field(ge=0, le=100)
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    company_insights: list[str] | None = None
    key_requirements: list[str] | None = None
    suggested_phrases: list[str] | None = None


class AnalysisResult(CamelModel):
    alignment_score: int = Field(ge=0, le=100)
    verdict: bool
    strengths: list[str] = Field(min_length=3, max_length=5)
    weaknesses: list[str] = Field(min_length=3, max_length=5)
    recommendations: list[str] = Field(min_length=3, max_length=5)
    star_analysis: list[StarRewrite] = Field(max_length=8)
    cover_letter_analysis: CoverLetterAnalysis | None = None
    missing_skills: list[str] = Field(default_factory=list)
    source: AnalysisSource = "remote"
    request_token: str | None = None


class AnalysisRequest(CamelModel):
    resume_text: str = Field(min_length=1, max_length=100000)
    job_description: str = Field(min_length=1, max_length=50000)
    cover_letter_text: str | None = Field(default=None, max_length=50000)
    company_name: str | None = Field(default=None, max_length=200)
    options: dict[str, Any] = Field(default_factory=dict)
    request_token: str | None = Field(default=None, max_length=200)


class ImprovedResumeRequest(CamelModel):
    resume_text: str = Field(min_length=1, max_length=100000)
    alignment_score: int = Field(ge=0, le=100)
    star_analysis: list[StarRewrite] = Field(default_factory=list, max_length=20)


class ImprovedResume(CamelModel):
    improved_text: str
    updated_alignment_score: int = Field(ge=0, le=100)


class ExtractTextResponse(CamelModel):
    filename: str
    media_type: str
    characters: int = Field(ge=0)
    result: ExtractionResult
    warning: str | None = None
