from __future__ import annotations

import math
import re

from app.schemas.analysis import CoverLetterAnalysis

from .alignment_scorer import extract_skills, score_alignment, skills_match
from .report_lists import MAX_ITEMS, pad_items
from .skill_matcher import find_missing_skills
from .star_rewriter import RECOGNIZED_ACTION_VERBS, StarRewriteGenerator, has_metric


_TONE_MARKERS: dict[str, tuple[str, ...]] = {
    "Enthusiastic": ("excited", "thrilled", "passionate", "eager", "delighted", "love"),
    "Confident": ("confident", "proven", "successfully", "track record", "achieved", "delivered"),
}
_GREETING_RE = re.compile(r"^\s*(?:dear|to whom|hello|hi)\b", re.IGNORECASE)
_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")
_STAR_RESULT_RE = re.compile(r"\d+%|\d+ percent|by \d+")
_STAR_RESULT_WORDS = ("resulting in", "leading to", "achieved", "increased", "reduced", "improved")

GENERIC_STRENGTHS = (
    "Clear statement of interest in the position",
    "Professional and courteous writing style",
    "Connects prior experience to the role",
)
GENERIC_WEAKNESSES = (
    "Could reference more requirements from the job description",
    "Achievements could be quantified with specific metrics",
    "Closing paragraph could include a clearer call to action",
)
GENERIC_RECOMMENDATIONS = (
    "Apply the STAR method (Situation, Task, Action, Result) to your key accomplishments",
    "Mirror the most important keywords from the job description",
    "End with a confident call to action requesting an interview",
)

_WEAKNESS_RECOMMENDATIONS = {
    "greeting": "Open with a personalized greeting such as 'Dear Hiring Manager'",
    "company": "Name the company and explain why its mission appeals to you",
    "metrics": "Quantify at least one achievement with a number or percentage",
    "length": "Keep the letter between 250 and 450 words",
    "keywords": "Reference the top skills from the job description by name",
}
_MIN_WORDS = 250
_MAX_WORDS = 450
_MIN_SHARED_SKILLS = 3
_SUGGESTED_PHRASES = 3


def detect_tone(text: str) -> str:
    lowered = (text or "").lower()
    best, best_count = "Professional", 0
    for tone, markers in _TONE_MARKERS.items():
        count = sum(lowered.count(marker) for marker in markers)
        if count > best_count:
            best, best_count = tone, count
    return best


def _shared_skills(cover_letter_text: str, job_text: str) -> list[str]:
    letter_skills = extract_skills(cover_letter_text, limit=None)
    return [
        skill
        for skill in extract_skills(job_text)
        if any(skills_match(skill, candidate) for candidate in letter_skills)
    ]


def _suggested_phrases(cover_letter_text: str, job_text: str, rewriter: StarRewriteGenerator) -> list[str]:
    sentences = [
        sentence.strip()
        for sentence in _SENTENCE_RE.split(cover_letter_text)
        if 6 <= len(sentence.split()) <= 40 and not _GREETING_RE.match(sentence)
    ]
    rewrites = rewriter.rewrite_all(sentences, job_text, cap=_SUGGESTED_PHRASES)
    return [rewrite.improved for rewrite in rewrites]


def analyze_cover_letter(
    cover_letter_text: str,
    job_text: str,
    company_name: str | None = None,
    *,
    rewriter: StarRewriteGenerator | None = None,
) -> CoverLetterAnalysis:
    text = (cover_letter_text or "").strip()
    lowered = text.lower()
    company = (company_name or "").strip()
    word_count = len(text.split())
    shared = _shared_skills(text, job_text or "")

    checks = {
        "greeting": bool(_GREETING_RE.match(text)),
        "company": bool(company) and company.lower() in lowered,
        "metrics": has_metric(text),
        "length": _MIN_WORDS <= word_count <= _MAX_WORDS,
        "keywords": len(shared) >= _MIN_SHARED_SKILLS,
    }
    passed = {
        "greeting": "Opens with a proper greeting",
        "company": f"Mentions {company} directly, showing targeted interest",
        "metrics": "Backs up claims with quantifiable results",
        "length": "Appropriate length for a cover letter",
        "keywords": f"References skills from the job description: {', '.join(shared[:3])}",
    }
    failed = {
        "greeting": "Missing a professional greeting",
        "company": "Does not mention the company by name",
        "metrics": "Lacks quantifiable achievements",
        "length": f"Length ({word_count} words) is outside the recommended 250-450 words",
        "keywords": "Few skills from the job description are referenced",
    }
    if not company:
        checks.pop("company")

    strengths = [passed[name] for name, ok in checks.items() if ok]
    weaknesses = [failed[name] for name, ok in checks.items() if not ok]
    recommendations = [_WEAKNESS_RECOMMENDATIONS[name] for name, ok in checks.items() if not ok]

    key_requirements = find_missing_skills(text, job_text or "", limit=MAX_ITEMS)
    company_insights = None
    if company:
        company_insights = [
            f"Reference {company}'s mission statement in the opening paragraph",
            f"Mention a recent {company} achievement or product to show research",
            f"Explain how your values align with {company}'s culture",
        ]

    return CoverLetterAnalysis(
        tone=detect_tone(text),
        relevance=score_alignment(text, job_text or "").alignment_score,
        strengths=pad_items(strengths, GENERIC_STRENGTHS),
        weaknesses=pad_items(weaknesses, GENERIC_WEAKNESSES),
        recommendations=pad_items(recommendations, GENERIC_RECOMMENDATIONS),
        company_insights=company_insights,
        key_requirements=key_requirements or None,
        suggested_phrases=_suggested_phrases(text, job_text or "", rewriter or StarRewriteGenerator()) or None,
    )


def calculate_updated_relevance(analysis: CoverLetterAnalysis) -> int:
    """Estimate relevance after the suggestions are applied, capped at a 40% lift."""
    factor = min(len(analysis.recommendations) * 2, 10) / 100
    if analysis.company_insights:
        factor += 0.03 * min(len(analysis.company_insights), 5)
    if analysis.key_requirements:
        factor += 0.03 * min(len(analysis.key_requirements), 5)

    phrases = analysis.suggested_phrases or []
    factor += 0.02 * sum(
        1 for phrase in phrases if phrase.split(maxsplit=1) and phrase.split()[0].lower() in RECOGNIZED_ACTION_VERBS
    )
    factor += 0.03 * sum(
        1
        for phrase in phrases
        if any(word in phrase for word in _STAR_RESULT_WORDS) and _STAR_RESULT_RE.search(phrase)
    )
    factor = min(factor, 0.40)
    return min(math.floor(analysis.relevance * (1 + factor) + 0.5), 100)
