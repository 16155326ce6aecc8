from __future__ import annotations

import math
import re
from dataclasses import dataclass, field

from app.core.config.scoring import get_scoring_int

from .bullet_parser import is_bullet_line

KEYWORD_SCORE_CAP = get_scoring_int("alignment.keyword_cap", 70)
FORMATTING_SCORE_WITH_HEADERS = get_scoring_int("alignment.formatting.with_headers", 15)
FORMATTING_SCORE_WITHOUT_HEADERS = get_scoring_int("alignment.formatting.without_headers", 5)
CONTACT_SCORE_COMPLETE = get_scoring_int("alignment.contact.complete", 10)
CONTACT_SCORE_PARTIAL = get_scoring_int("alignment.contact.partial", 5)
VERDICT_THRESHOLD = get_scoring_int("alignment.verdict_threshold", 60)
MAX_SKILLS_PER_TEXT = get_scoring_int("alignment.max_skills_per_text", 25)

BUILTIN_SKILL_TERMS = (
    "python",
    "javascript",
    "typescript",
    "java",
    "react",
    "angular",
    "vue",
    "node.js",
    "sql",
    "nosql",
    "aws",
    "azure",
    "gcp",
    "docker",
    "kubernetes",
    "git",
    "linux",
    "html",
    "css",
    "rest",
    "graphql",
    "api",
    "machine learning",
    "data analysis",
    "data science",
    "excel",
    "tableau",
    "power bi",
    "salesforce",
    "jira",
    "agile",
    "scrum",
    "ci/cd",
    "testing",
    "devops",
    "project management",
    "product management",
    "leadership",
    "management",
    "communication",
    "teamwork",
    "problem solving",
    "stakeholder management",
    "customer service",
    "marketing",
    "sales",
    "budgeting",
    "forecasting",
    "negotiation",
    "strategy",
    "research",
    "design",
    "analytics",
)

RELATED_SKILLS: dict[str, tuple[str, ...]] = {
    "python": ("programming", "coding", "scripting", "development"),
    "javascript": ("programming", "web development", "frontend", "front-end"),
    "typescript": ("javascript", "programming", "frontend"),
    "java": ("programming", "backend", "object-oriented"),
    "sql": ("database", "queries", "data analysis"),
    "leadership": ("management", "team lead", "mentoring", "supervision"),
    "management": ("leadership", "supervision", "oversight"),
    "communication": ("presentation", "writing", "interpersonal"),
    "project management": ("agile", "scrum", "planning", "coordination"),
    "data analysis": ("analytics", "statistics", "excel", "reporting"),
    "machine learning": ("ai", "data science", "modeling"),
    "aws": ("cloud", "devops"),
    "azure": ("cloud", "devops"),
    "docker": ("containers", "kubernetes", "devops"),
    "customer service": ("client relations", "support", "customer success"),
    "sales": ("business development", "account management"),
}

_STOP_CAPITALIZED = frozenset(
    {
        "i", "me", "my", "we", "our", "you", "your", "he", "she", "they", "them", "their", "it", "its",
        "the", "a", "an", "and", "or", "but", "for", "to", "of", "in", "on", "at", "by", "with", "as",
        "this", "that", "these", "those", "is", "are", "was", "were", "be", "will", "can", "if", "all",
        "january", "february", "march", "april", "may", "june", "july", "august", "september",
        "october", "november", "december", "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep",
        "sept", "oct", "nov", "dec", "monday", "tuesday", "wednesday", "thursday", "friday",
        "saturday", "sunday", "present", "current",
    }
)
_PHRASE_LEAD_STOPWORDS = frozenset({"the", "a", "an", "our", "your", "their", "my", "order", "this", "that", "which"})

_PHRASE_RE = re.compile(
    r"\b(?:using|with|in|through|via)[ \t]+([A-Za-z][\w+#./-]*(?:[ \t]+[A-Za-z][\w+#./-]*)?)",
    re.IGNORECASE,
)
_CAPITALIZED_RE = re.compile(r"\b[A-Z][A-Za-z+#.]*[A-Za-z+#]")
_SINGLE_CAPITALIZED_RE = re.compile(r"^[A-Z][a-z]+$")
_HEADER_RE = re.compile(r"\b(?:RESUME|EXPERIENCE|EDUCATION)\b", re.IGNORECASE)
_PHONE_RE = re.compile(r"\+?\d[\d\s().-]{7,}\d")
_PHONE_WORD_RE = re.compile(r"\b(?:phone|tel)\b", re.IGNORECASE)


@dataclass(frozen=True)
class AlignmentScore:
    alignment_score: int
    matching_skills: list[str] = field(default_factory=list)
    missing_skills: list[str] = field(default_factory=list)


def verdict_for(alignment_score: int) -> bool:
    return alignment_score >= VERDICT_THRESHOLD


def _contains_term(lowered_text: str, term: str) -> bool:
    return re.search(rf"(?<![a-z0-9]){re.escape(term)}(?![a-z0-9])", lowered_text) is not None


def _phrase_skills(text: str) -> list[str]:
    skills: list[str] = []
    for match in _PHRASE_RE.finditer(text):
        words = match.group(1).lower().split()
        if words[0] in _PHRASE_LEAD_STOPWORDS:
            continue
        if len(words) > 1 and words[1] in _STOP_CAPITALIZED:
            words = words[:1]
        phrase = " ".join(words).strip(".,;:")
        if len(phrase) >= 3:
            skills.append(phrase)
    return skills


def _capitalized_skills(text: str) -> list[str]:
    skills: list[str] = []
    for token in _CAPITALIZED_RE.findall(text):
        lowered = token.lower()
        if len(lowered) >= 3 and lowered not in _STOP_CAPITALIZED:
            skills.append(lowered)
    return skills


def _bullet_line_skills(text: str) -> list[str]:
    skills: list[str] = []
    for line in text.splitlines():
        if not is_bullet_line(line):
            continue
        for word in line.split():
            word = word.strip(".,;:()")
            if _SINGLE_CAPITALIZED_RE.match(word) and word.lower() not in _STOP_CAPITALIZED:
                skills.append(word.lower())
    return skills


def extract_skills(text: str, *, limit: int | None = MAX_SKILLS_PER_TEXT) -> list[str]:
    """Collect skill-like terms from free text, in discovery order."""
    if not text:
        return []
    lowered = text.lower()
    found = [term for term in BUILTIN_SKILL_TERMS if _contains_term(lowered, term)]
    found.extend(_phrase_skills(text))
    found.extend(_capitalized_skills(text))
    found.extend(_bullet_line_skills(text))

    unique = list(dict.fromkeys(found))
    if limit is None:
        return unique
    return unique[:limit]


def _related(skill: str, other: str) -> bool:
    return any(term in other for term in RELATED_SKILLS.get(skill, ()))


def skills_match(first: str, second: str) -> bool:
    a = first.strip().lower()
    b = second.strip().lower()
    if not a or not b:
        return False
    if a in b or b in a:
        return True
    return _related(a, b) or _related(b, a)


def _formatting_score(resume_text: str) -> int:
    if _HEADER_RE.search(resume_text):
        return FORMATTING_SCORE_WITH_HEADERS
    return FORMATTING_SCORE_WITHOUT_HEADERS


def _contact_score(resume_text: str) -> int:
    has_phone = bool(_PHONE_RE.search(resume_text) or _PHONE_WORD_RE.search(resume_text))
    if "@" in resume_text and has_phone:
        return CONTACT_SCORE_COMPLETE
    return CONTACT_SCORE_PARTIAL


def score_alignment(resume_text: str, job_text: str) -> AlignmentScore:
    """Score how well a resume covers the skills a job posting mentions (0-100)."""
    resume_text = resume_text or ""
    job_skills = extract_skills(job_text or "")
    # Uncapped so that adding text to a resume can only add matches.
    resume_skills = extract_skills(resume_text, limit=None)

    matching: list[str] = []
    missing: list[str] = []
    for skill in job_skills:
        if any(skills_match(skill, candidate) for candidate in resume_skills):
            matching.append(skill)
        else:
            missing.append(skill)

    ratio = 100 * len(matching) / max(1, len(job_skills))
    keyword_score = min(KEYWORD_SCORE_CAP, math.floor(ratio + 0.5))
    total = keyword_score + _formatting_score(resume_text) + _contact_score(resume_text)
    return AlignmentScore(
        alignment_score=max(0, min(100, total)),
        matching_skills=matching,
        missing_skills=missing,
    )
