from __future__ import annotations

import logging

from app.core.config.scoring import get_scoring_int
from app.features.alignment_scorer import score_alignment, verdict_for
from app.features.bullet_parser import extract_bullets, extract_simple_bullets
from app.features.cover_letter import analyze_cover_letter
from app.features.report_lists import MAX_ITEMS, MIN_ITEMS, pad_items
from app.features.skill_matcher import INTERNAL_SKILL_LIMIT, find_missing_skills
from app.features.star_rewriter import LOCAL_STAR_MAX, StarRewriteGenerator
from app.schemas.analysis import AnalysisResult, StarRewrite
from app.taxonomy import SkillCatalog

logger = logging.getLogger(__name__)

LOW_SCORE_BELOW = get_scoring_int("report.low_score_recommendations_below", 70)
MIN_STAR_ITEMS = get_scoring_int("star.remote_count", 3)

GENERIC_STRENGTHS = (
    "Clear and concise communication style",
    "Well-structured resume format",
    "Relevant educational background",
    "Demonstrated progression in career path",
    "Technical expertise in relevant areas",
)
GENERIC_WEAKNESSES = (
    "Achievements could be more quantified with metrics",
    "Professional summary could be more tailored to the role",
    "Some experiences may appear less relevant to this specific position",
    "Skills section could better highlight technical proficiencies",
    "Education section could be structured more effectively",
)
BASE_RECOMMENDATIONS = (
    "Tailor your professional summary to specifically address the job requirements",
    "Begin each bullet point with a strong action verb (e.g., Developed, Led, Created)",
    "Quantify your achievements with specific metrics (e.g., increased sales by 20%)",
)
LOW_SCORE_RECOMMENDATIONS = (
    "Add more keywords from the job description throughout your resume",
    "Remove experiences that aren't relevant to this specific position",
    "Reorganize your resume to highlight most relevant skills first",
)
HIGH_SCORE_RECOMMENDATIONS = (
    "Consider adding a brief section highlighting your most relevant project",
    "Prepare examples of your listed skills for potential interview questions",
    "Ensure your cover letter expands on the strengths in your resume",
)

GENERIC_STAR_ORIGINAL = "Generic experience bullet point"
GENERIC_STAR_IMPROVED = (
    "Led cross-functional project that improved efficiency by 25% and reduced costs by $50K annually"
)
GENERIC_STAR_FEEDBACK = "Add specific metrics, context, and results to demonstrate impact"


def generic_star_item() -> StarRewrite:
    return StarRewrite(
        original=GENERIC_STAR_ORIGINAL,
        improved=GENERIC_STAR_IMPROVED,
        feedback=GENERIC_STAR_FEEDBACK,
    )


def recommendations_for(alignment_score: int) -> list[str]:
    tail = LOW_SCORE_RECOMMENDATIONS if alignment_score < LOW_SCORE_BELOW else HIGH_SCORE_RECOMMENDATIONS
    return [*BASE_RECOMMENDATIONS, *tail][:MAX_ITEMS]


def _star_analysis(resume_text: str, job_text: str, rewriter: StarRewriteGenerator) -> list[StarRewrite]:
    rewrites = rewriter.rewrite_all(extract_bullets(resume_text), job_text, cap=LOCAL_STAR_MAX)
    if len(rewrites) < MIN_STAR_ITEMS:
        seen = {item.original.lower() for item in rewrites}
        extra = [bullet for bullet in extract_simple_bullets(resume_text) if bullet.lower() not in seen]
        rewrites.extend(rewriter.rewrite_all(extra, job_text, cap=MIN_STAR_ITEMS - len(rewrites)))
    while len(rewrites) < MIN_STAR_ITEMS:
        rewrites.append(generic_star_item())
    return rewrites


def build_fallback_report(
    resume_text: str,
    job_text: str,
    cover_letter_text: str | None = None,
    *,
    company_name: str | None = None,
    rewriter: StarRewriteGenerator | None = None,
    catalog: SkillCatalog | None = None,
) -> AnalysisResult:
    """Build a complete report from local heuristics only.

    Deterministic for fixed inputs: skill matching, scoring, bullet
    extraction and STAR rewriting all run on rule tables.
    """
    rewriter = rewriter or StarRewriteGenerator()
    missing = find_missing_skills(resume_text, job_text, limit=INTERNAL_SKILL_LIMIT, catalog=catalog)
    alignment = score_alignment(resume_text, job_text)
    score = alignment.alignment_score

    strengths = [
        f"Strong {skill} experience that aligns with job requirements" for skill in alignment.matching_skills[:MAX_ITEMS]
    ]
    weaknesses = [f"Missing {skill} keyword that appears in the job description" for skill in missing[:MIN_ITEMS]]
    star_analysis = _star_analysis(resume_text, job_text, rewriter)

    cover_letter_analysis = None
    if cover_letter_text and cover_letter_text.strip():
        cover_letter_analysis = analyze_cover_letter(
            cover_letter_text,
            job_text,
            company_name,
            rewriter=rewriter,
        )

    logger.info(
        "analysis_fallback_built score=%s matching=%s missing=%s star_items=%s",
        score,
        len(alignment.matching_skills),
        len(missing),
        len(star_analysis),
    )
    return AnalysisResult(
        alignment_score=score,
        verdict=verdict_for(score),
        strengths=pad_items(strengths, GENERIC_STRENGTHS),
        weaknesses=pad_items(weaknesses, GENERIC_WEAKNESSES),
        recommendations=recommendations_for(score),
        star_analysis=star_analysis,
        cover_letter_analysis=cover_letter_analysis,
        source="local_fallback",
    )
