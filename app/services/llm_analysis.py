from __future__ import annotations

import json
import logging
import os
import time
from functools import lru_cache
from typing import Any

from openai import OpenAI

logger = logging.getLogger(__name__)

_REQUIRED_LISTS = ("strengths", "weaknesses", "recommendations", "starAnalysis")


class LLMAnalysisError(RuntimeError):
    def __init__(self, message: str, *, code: str = "llm_unavailable", status_code: int = 500):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def llm_analysis_enabled() -> bool:
    if not _env_bool("LLM_ANALYSIS_ENABLED", True):
        return False
    api_key = (os.getenv("OPENAI_API_KEY") or "").strip()
    return bool(api_key) and not _looks_like_placeholder(api_key)


@lru_cache(maxsize=1)
def _client() -> OpenAI:
    return OpenAI(
        api_key=(os.getenv("OPENAI_API_KEY") or "").strip(),
        base_url=(os.getenv("OPENAI_BASE_URL") or None),
        timeout=float(os.getenv("LLM_ANALYSIS_TIMEOUT_S", "60")),
        max_retries=int(os.getenv("OPENAI_MAX_RETRIES", "2")),
    )


def _model() -> str:
    return (os.getenv("AI_MODEL") or os.getenv("OPENAI_MODEL") or "gpt-4o").strip()


def build_system_prompt(*, company_name: str | None, with_cover_letter: bool) -> str:
    company_line = (
        f"The candidate is applying to {company_name}. Consider company culture, values and expectations in your analysis.\n"
        if company_name
        else ""
    )
    cover_line = (
        "Also analyze the cover letter for tone, relevance, and provide suggested improvements.\n"
        if with_cover_letter
        else ""
    )
    cover_shape = (
        ',\n  "coverLetterAnalysis": {"tone": string, "relevance": number from 1-100, '
        '"strengths": [strings], "weaknesses": [strings], "recommendations": [strings]}'
        if with_cover_letter
        else ""
    )
    return (
        "You are an expert ATS (Applicant Tracking System) analyst and career coach.\n"
        "Analyze the resume against the job description in detailed depth, focusing on:\n"
        "1. Match percentage between resume and job requirements (ATS perspective)\n"
        "2. Key strengths (min 3, max 5) found in the resume relative to the position\n"
        "3. Areas for improvement (min 3, max 5) in the resume\n"
        "4. Specific recommendations (min 3, max 5) for improving the resume\n"
        "5. STAR analysis of 3 bullet points from the resume, with improved versions\n"
        f"{company_line}{cover_line}"
        "Return a JSON object in this exact format:\n"
        "{\n"
        '  "alignmentScore": number from 1-100,\n'
        '  "verdict": boolean,\n'
        '  "strengths": [min 3, max 5 strings],\n'
        '  "weaknesses": [min 3, max 5 strings],\n'
        '  "recommendations": [min 3, max 5 strings],\n'
        '  "starAnalysis": [{"original": "bullet copied verbatim from the resume", '
        '"improved": "STAR rewrite", "feedback": "explanation"}] (exactly 3 items)'
        f"{cover_shape}\n"
        "}"
    )


def build_user_prompt(
    *,
    resume_text: str,
    job_description: str,
    cover_letter_text: str | None,
    company_name: str | None,
) -> str:
    parts = [f"Job description:\n{job_description}", f"Resume:\n{resume_text}"]
    if cover_letter_text:
        parts.append(f"Cover Letter:\n{cover_letter_text}")
    if company_name:
        parts.append(f"Company: {company_name}")
    return "\n\n".join(parts)


def run_resume_analysis(
    *,
    resume_text: str,
    job_description: str,
    cover_letter_text: str | None = None,
    company_name: str | None = None,
    options: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Ask the LLM for the full analysis JSON; raises ``LLMAnalysisError`` on any failure."""
    if not resume_text.strip() or not job_description.strip():
        raise LLMAnalysisError(
            "Resume text and job description are required",
            code="invalid_request",
            status_code=400,
        )
    if not llm_analysis_enabled():
        raise LLMAnalysisError("OpenAI API key is not configured", code="llm_disabled")

    cover_letter = (cover_letter_text or "").strip() or None
    started = time.perf_counter()
    try:
        response = _client().chat.completions.create(
            model=_model(),
            messages=[
                {
                    "role": "system",
                    "content": build_system_prompt(company_name=company_name, with_cover_letter=bool(cover_letter)),
                },
                {
                    "role": "user",
                    "content": build_user_prompt(
                        resume_text=resume_text,
                        job_description=job_description,
                        cover_letter_text=cover_letter,
                        company_name=company_name,
                    ),
                },
            ],
            temperature=0.3,
            response_format={"type": "json_object"},
            max_tokens=4000,
        )
    except Exception as exc:  # noqa: BLE001 - the caller falls back to local analysis
        logger.warning("llm_analysis_failed model=%s resume_len=%s: %s", _model(), len(resume_text), exc)
        raise LLMAnalysisError(f"OpenAI request failed: {exc}", code="llm_exception") from exc

    content = response.choices[0].message.content if response.choices else ""
    latency_ms = int((time.perf_counter() - started) * 1000)
    if not content:
        logger.warning("llm_analysis_empty model=%s latency_ms=%s", _model(), latency_ms)
        raise LLMAnalysisError("Analysis service returned an empty response", code="empty_response")

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as exc:
        raise LLMAnalysisError(f"Failed to parse analysis results: {exc}", code="invalid_schema") from exc

    if (
        not isinstance(parsed, dict)
        or not parsed.get("alignmentScore")
        or any(not isinstance(parsed.get(key), list) for key in _REQUIRED_LISTS)
    ):
        raise LLMAnalysisError("Invalid response structure from OpenAI", code="invalid_schema")

    logger.info(
        "llm_analysis_succeeded model=%s latency_ms=%s options=%s",
        _model(),
        latency_ms,
        sorted((options or {}).keys()),
    )
    return parsed
