from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Literal

from app.core.config import Settings
from app.features.alignment_scorer import score_alignment, verdict_for
from app.features.bullet_parser import extract_simple_bullets
from app.features.cover_letter import analyze_cover_letter
from app.features.report_lists import pad_items
from app.features.skill_matcher import find_missing_skills
from app.features.star_rewriter import REMOTE_STAR_COUNT, StarRewriteGenerator
from app.schemas.analysis import AnalysisResult, CoverLetterAnalysis, StarRewrite
from app.taxonomy import SkillCatalog

from .analysis_client import RemoteAnalysisClient, RemoteAnalysisError
from .fallback_report import build_fallback_report, generic_star_item

logger = logging.getLogger(__name__)

AnalysisState = Literal["idle", "remote_attempt", "success", "remote_failure", "local_fallback", "complete"]

TRIM_MARKER = "... [trimmed for processing]"

DEFAULT_STRENGTHS = (
    "Professional experience in the field",
    "Relevant educational background",
    "Technical expertise aligned with role requirements",
    "Clear and organized resume structure",
    "Demonstrated progression in career path",
)
DEFAULT_WEAKNESSES = (
    "Resume could be more tailored to the job description",
    "Missing quantifiable achievements and metrics",
    "Could better highlight relevant skills and experiences",
    "Some key job requirements not addressed",
    "Professional summary could be more impactful",
)
DEFAULT_RECOMMENDATIONS = (
    "Tailor your resume to match key job requirements",
    "Add metrics and quantifiable achievements to your bullet points",
    "Use more industry-specific keywords from the job description",
    "Highlight projects most relevant to this position",
    "Create a stronger professional summary focused on your value proposition",
)
BACKFILL_SUFFIX = " (with measurable results and context)"
BACKFILL_FEEDBACK = "Add specific metrics and context to demonstrate impact"

_REQUIRED_LISTS = ("strengths", "weaknesses", "recommendations", "starAnalysis")
_COVER_LETTER_OPTIONAL_LISTS = ("companyInsights", "keyRequirements", "suggestedPhrases")
_COVER_LETTER_LISTS = ("strengths", "weaknesses", "recommendations", *_COVER_LETTER_OPTIONAL_LISTS)


@dataclass(frozen=True)
class TruncationLimits:
    resume: int
    job: int
    cover_letter: int


DEFAULT_LIMITS = TruncationLimits(resume=15000, job=5000, cover_letter=10000)
REDUCED_LIMITS = TruncationLimits(resume=3000, job=1500, cover_letter=1500)


def truncate_for_processing(text: str | None, max_chars: int) -> str | None:
    if text is None or len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}{TRIM_MARKER}"


def _strip_trim_marker(text: str | None) -> str:
    return (text or "").removesuffix(TRIM_MARKER)


def _string_list(value: Any) -> list[str]:
    return [str(item).strip() for item in value if isinstance(item, (str, int, float)) and str(item).strip()]


def _coerce_score(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    return max(0, min(100, int(round(value))))


def _star_items(value: list[Any]) -> list[StarRewrite]:
    items: list[StarRewrite] = []
    for entry in value:
        if not isinstance(entry, dict):
            continue
        original = str(entry.get("original") or "").strip()
        improved = str(entry.get("improved") or "").strip()
        if not original or not improved:
            continue
        items.append(
            StarRewrite(original=original, improved=improved, feedback=str(entry.get("feedback") or "").strip())
        )
    return items


def backfill_star_analysis(items: list[StarRewrite], resume_text: str) -> list[StarRewrite]:
    """Bring remote STAR analysis to exactly the expected count."""
    output = list(items[:REMOTE_STAR_COUNT])
    seen = {item.original.lower() for item in output}
    for bullet in extract_simple_bullets(resume_text):
        if len(output) >= REMOTE_STAR_COUNT:
            break
        if bullet.lower() in seen:
            continue
        seen.add(bullet.lower())
        output.append(StarRewrite(original=bullet, improved=f"{bullet}{BACKFILL_SUFFIX}", feedback=BACKFILL_FEEDBACK))
    while len(output) < REMOTE_STAR_COUNT:
        output.append(generic_star_item())
    return output


def _cover_letter_list(value: dict[str, Any], key: str) -> list[str] | None:
    entry = value.get(key)
    if entry is None:
        return None
    if not isinstance(entry, list):
        raise RemoteAnalysisError(
            f"Invalid cover letter analysis from analysis service: '{key}' must be a list.",
            kind="malformed_response",
        )
    return _string_list(entry)


def _cover_letter_analysis(value: Any) -> CoverLetterAnalysis | None:
    if not isinstance(value, dict):
        return None
    lists = {key: _cover_letter_list(value, key) for key in _COVER_LETTER_LISTS}
    optional = {key: lists[key] for key in _COVER_LETTER_OPTIONAL_LISTS if lists[key] is not None}
    return CoverLetterAnalysis(
        tone=str(value.get("tone") or "Professional"),
        relevance=_coerce_score(value.get("relevance")) or 0,
        strengths=lists["strengths"] or [],
        weaknesses=lists["weaknesses"] or [],
        recommendations=lists["recommendations"] or [],
        **optional,
    )


def normalize_remote_result(payload: dict[str, Any], resume_text: str, job_text: str) -> AnalysisResult:
    """Validate a remote payload and enforce the result shape contract.

    Raises ``RemoteAnalysisError(kind="malformed_response")`` when a required
    list is missing or is not a list.
    """
    for key in _REQUIRED_LISTS:
        if not isinstance(payload.get(key), list):
            raise RemoteAnalysisError(
                f"Invalid response structure from analysis service: '{key}' must be a list.",
                kind="malformed_response",
            )

    score = _coerce_score(payload.get("alignmentScore"))
    if score is None:
        score = score_alignment(resume_text, job_text).alignment_score
    verdict = payload.get("verdict")
    if not isinstance(verdict, bool):
        verdict = verdict_for(score)

    try:
        cover_letter_analysis = _cover_letter_analysis(payload.get("coverLetterAnalysis"))
    except ValueError as exc:
        raise RemoteAnalysisError(
            f"Invalid cover letter analysis from analysis service: {exc}",
            kind="malformed_response",
        ) from exc

    return AnalysisResult(
        alignment_score=score,
        verdict=verdict,
        strengths=pad_items(_string_list(payload["strengths"]), DEFAULT_STRENGTHS),
        weaknesses=pad_items(_string_list(payload["weaknesses"]), DEFAULT_WEAKNESSES),
        recommendations=pad_items(_string_list(payload["recommendations"]), DEFAULT_RECOMMENDATIONS),
        star_analysis=backfill_star_analysis(_star_items(payload["starAnalysis"]), resume_text),
        cover_letter_analysis=cover_letter_analysis,
        source="remote",
    )


class AnalysisOrchestrator:
    """Runs one analysis request: remote first, local heuristics on failure.

    The orchestrator holds configuration only. ``analyze`` never raises for
    remote problems; an exception from the local pipeline is a bug and
    propagates.
    """

    def __init__(
        self,
        client: RemoteAnalysisClient | None = None,
        *,
        limits: TruncationLimits = DEFAULT_LIMITS,
        reduced_limits: TruncationLimits = REDUCED_LIMITS,
        reduced_retry: bool = True,
        rewriter: StarRewriteGenerator | None = None,
        catalog: SkillCatalog | None = None,
    ) -> None:
        self.client = client
        self.limits = limits
        self.reduced_limits = reduced_limits
        self.reduced_retry = reduced_retry
        self.rewriter = rewriter or StarRewriteGenerator()
        self.catalog = catalog

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "AnalysisOrchestrator":
        client = None
        if settings.analysis_remote_url:
            client = RemoteAnalysisClient(
                settings.analysis_remote_url,
                api_key=settings.analysis_remote_api_key,
                timeout_s=settings.analysis_timeout_s,
            )
        return cls(
            client,
            limits=TruncationLimits(
                resume=settings.resume_max_chars,
                job=settings.job_max_chars,
                cover_letter=settings.cover_letter_max_chars,
            ),
            reduced_limits=TruncationLimits(
                resume=settings.reduced_resume_max_chars,
                job=settings.reduced_job_max_chars,
                cover_letter=settings.reduced_cover_letter_max_chars,
            ),
            reduced_retry=settings.analysis_reduced_retry,
            **kwargs,
        )

    def _transition(self, current: AnalysisState, target: AnalysisState, request_token: str | None) -> AnalysisState:
        logger.info("analysis_state from=%s to=%s token=%s", current, target, request_token)
        return target

    def _request_body(
        self,
        limits: TruncationLimits,
        resume_text: str,
        job_text: str,
        cover_letter_text: str | None,
        company_name: str | None,
        options: dict[str, Any] | None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "resumeText": truncate_for_processing(resume_text, limits.resume),
            "jobDescription": truncate_for_processing(job_text, limits.job),
        }
        if cover_letter_text:
            body["coverLetterText"] = truncate_for_processing(cover_letter_text, limits.cover_letter)
        if company_name:
            body["companyName"] = company_name
        if options:
            body["options"] = options
        return body

    @staticmethod
    def _should_retry(error: RemoteAnalysisError) -> bool:
        if error.kind in {"timeout", "malformed_response"}:
            return True
        return error.status_code is None or error.status_code in {413, 429} or error.status_code >= 500

    def _remote(
        self,
        resume_text: str,
        job_text: str,
        cover_letter_text: str | None,
        company_name: str | None,
        options: dict[str, Any] | None,
        request_token: str | None,
    ) -> AnalysisResult | None:
        attempts = [self.limits]
        if self.reduced_retry:
            attempts.append(self.reduced_limits)

        state: AnalysisState = "idle"
        for attempt, limits in enumerate(attempts, start=1):
            state = self._transition(state, "remote_attempt", request_token)
            body = self._request_body(limits, resume_text, job_text, cover_letter_text, company_name, options)
            try:
                payload = self.client.analyze(body)
                result = normalize_remote_result(payload, resume_text, job_text)
            except RemoteAnalysisError as exc:
                state = self._transition(state, "remote_failure", request_token)
                logger.warning(
                    "analysis_remote_failed attempt=%s kind=%s status=%s: %s",
                    attempt,
                    exc.kind,
                    exc.status_code,
                    exc,
                )
                if exc.fallback_analysis:
                    try:
                        logger.info("analysis_remote_fallback_payload_used attempt=%s", attempt)
                        return normalize_remote_result(exc.fallback_analysis, resume_text, job_text)
                    except RemoteAnalysisError as fallback_exc:
                        logger.warning("analysis_remote_fallback_payload_invalid: %s", fallback_exc)
                if not self._should_retry(exc):
                    return None
                continue

            self._transition(state, "success", request_token)
            return result
        return None

    def analyze(
        self,
        resume_text: str,
        job_text: str,
        cover_letter_text: str | None = None,
        *,
        company_name: str | None = None,
        options: dict[str, Any] | None = None,
        request_token: str | None = None,
    ) -> AnalysisResult:
        resume_text = resume_text or ""
        job_text = job_text or ""
        logger.info(
            "analysis_started resume_chars=%s job_chars=%s cover_letter_chars=%s token=%s",
            len(resume_text),
            len(job_text),
            len(cover_letter_text or ""),
            request_token,
        )

        result = None
        if self.client is None:
            logger.info("analysis_remote_skipped reason=not_configured token=%s", request_token)
        else:
            result = self._remote(resume_text, job_text, cover_letter_text, company_name, options, request_token)

        if result is None:
            self._transition("idle" if self.client is None else "remote_failure", "local_fallback", request_token)
            local_resume = _strip_trim_marker(truncate_for_processing(resume_text, self.limits.resume))
            local_job = _strip_trim_marker(truncate_for_processing(job_text, self.limits.job))
            local_cover = None
            if cover_letter_text:
                local_cover = _strip_trim_marker(
                    truncate_for_processing(cover_letter_text, self.limits.cover_letter)
                )
            result = build_fallback_report(
                local_resume,
                local_job,
                local_cover,
                company_name=company_name,
                rewriter=self.rewriter,
                catalog=self.catalog,
            )
        elif cover_letter_text and result.cover_letter_analysis is None:
            result.cover_letter_analysis = analyze_cover_letter(
                cover_letter_text,
                job_text,
                company_name,
                rewriter=self.rewriter,
            )

        result.missing_skills = find_missing_skills(resume_text, job_text, result.weaknesses, catalog=self.catalog)
        result.request_token = request_token
        self._transition("local_fallback" if result.source == "local_fallback" else "success", "complete", request_token)
        logger.info(
            "analysis_completed source=%s score=%s star_items=%s token=%s",
            result.source,
            result.alignment_score,
            len(result.star_analysis),
            request_token,
        )
        return result
