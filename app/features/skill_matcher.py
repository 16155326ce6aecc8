from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from app.core.config.scoring import get_scoring_int
from app.taxonomy import SkillCatalog, get_default_skill_catalog

UI_SKILL_LIMIT = get_scoring_int("skills.ui_limit", 7)
INTERNAL_SKILL_LIMIT = get_scoring_int("skills.internal_limit", 15)

_SKILL_WEAKNESS_MARKERS = ("skill", "experience", "knowledge")

_WEAKNESS_NOISE_RULES = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"lacks (?:specific )?(?:mention of |experience in |knowledge of )?",
        r"which (?:could|would|might|may) be ",
        r"important for this role\.?",
        r"beneficial for this position\.?",
        r"according to the job description\.?",
        r"as mentioned in the job requirements\.?",
        r"is not mentioned in your resume\.?",
        r"not highlighted in your experience\.?",
        r"\.$",
    )
)
_SKILL_SPLIT_RE = re.compile(r"(?:,|\sand\s)+")

_REQUIRED_SECTION_RE = re.compile(
    r"(?:requirements|required skills|required experience|qualifications|what you'll need)"
    r"[\s\S]*?"
    r"(?=preferred|desired|nice to have|\bplus\b|\bbonus\b|about us|benefits|what we offer|"
    r"why join|company description|\bapply\b|application process|$)",
    re.IGNORECASE,
)

_SKILL_PHRASE_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"experience (?:with|in) ([\w ,]+)",
        r"proficient (?:with|in) ([\w ,]+)",
        r"knowledge of ([\w ,]+)",
        r"familiar with ([\w ,]+)",
        r"background in ([\w ,]+)",
        r"expertise in ([\w ,]+)",
    )
)
_PATTERN_MIN_FOUND = 3
_PATTERN_TARGET = 5
_PATTERN_MAX_WORDS = 4

_GENERIC_IMPORTANT_SKILLS = ("stakeholder management", "communication skills", "data analysis")


def _capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def clean_skill_name(text: str) -> str:
    """Strip reviewer phrasing from a weakness sentence so only the skill names remain."""
    cleaned = text or ""
    for rule in _WEAKNESS_NOISE_RULES:
        cleaned = rule.sub("", cleaned)
    return cleaned.strip()


def extract_skills_from_weaknesses(weaknesses: Iterable[str] | None) -> list[str]:
    skills: list[str] = []
    for weakness in weaknesses or ():
        lowered = (weakness or "").lower()
        if not any(marker in lowered for marker in _SKILL_WEAKNESS_MARKERS):
            continue
        for part in _SKILL_SPLIT_RE.split(clean_skill_name(weakness)):
            value = part.strip()
            if len(value) > 2:
                skills.append(_capitalize_first(value))
    return skills


def _required_section(job_lower: str) -> str:
    match = _REQUIRED_SECTION_RE.search(job_lower)
    return match.group(0) if match else job_lower


def _catalog_missing(resume_lower: str, job_lower: str, catalog: SkillCatalog) -> list[str]:
    required_text = _required_section(job_lower)
    required: list[str] = []
    elsewhere: list[str] = []
    for requirement in catalog.requirements():
        if requirement.matches(resume_lower):
            continue
        if requirement.matches(required_text):
            required.append(requirement.canonical_term)
        elif requirement.matches(job_lower):
            elsewhere.append(requirement.canonical_term)
    return required + elsewhere


def _pattern_missing(resume_lower: str, job_text: str, already: Sequence[str]) -> list[str]:
    found: list[str] = []
    seen = {item.lower() for item in already}
    for pattern in _SKILL_PHRASE_PATTERNS:
        for match in pattern.finditer(job_text):
            candidate = _SKILL_SPLIT_RE.split(match.group(1).strip())[0].strip()
            candidate = " ".join(candidate.split()[:_PATTERN_MAX_WORDS])
            if len(candidate) <= 3 or candidate.lower() in resume_lower:
                continue
            if candidate.lower() in seen:
                continue
            seen.add(candidate.lower())
            found.append(_capitalize_first(candidate))
            if len(already) + len(found) >= _PATTERN_TARGET:
                return found
    return found


def _present_terms(resume_lower: str, catalog: SkillCatalog) -> set[str]:
    terms: set[str] = set()
    for requirement in catalog.requirements():
        if requirement.matches(resume_lower):
            terms.add(requirement.canonical_term)
            terms.update(requirement.aliases)
    return terms


def _dedupe(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    output: list[str] = []
    for value in values:
        key = value.strip().lower()
        if not key or key in seen:
            continue
        seen.add(key)
        output.append(value.strip())
    return output


def find_missing_skills(
    resume_text: str,
    job_text: str,
    prior_weaknesses: Sequence[str] | None = None,
    *,
    limit: int = UI_SKILL_LIMIT,
    catalog: SkillCatalog | None = None,
) -> list[str]:
    """List skills the job asks for that the resume does not show.

    Weakness-derived names come first, then catalog terms (requirements
    section before the rest of the posting), then phrases lifted from
    "experience with ..." style patterns when the catalog finds little.
    """
    resume_lower = (resume_text or "").lower()
    job_lower = (job_text or "").lower()
    if not job_lower.strip():
        return []

    catalog = catalog or get_default_skill_catalog()
    from_weaknesses = extract_skills_from_weaknesses(prior_weaknesses)
    from_catalog = _catalog_missing(resume_lower, job_lower, catalog)

    from_patterns: list[str] = []
    if len(from_catalog) < _PATTERN_MIN_FOUND:
        from_patterns = _pattern_missing(resume_lower, job_text, from_catalog)

    present_terms = _present_terms(resume_lower, catalog)
    combined = [
        skill
        for skill in _dedupe([*from_weaknesses, *from_catalog, *from_patterns])
        if skill.lower() not in present_terms
    ]
    if len(combined) < 3:
        for skill in _GENERIC_IMPORTANT_SKILLS:
            if skill in resume_lower or skill in present_terms:
                continue
            if skill in job_lower or skill.replace(" ", "") in job_lower:
                combined.append(skill)
        combined = _dedupe(combined)

    return combined[: max(0, limit)]
