from __future__ import annotations

import re
import zlib
from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Protocol

from app.core.config.scoring import get_scoring_float, get_scoring_int
from app.schemas.analysis import BulletPoint, StarRewrite

from .bullet_parser import ACTION_VERBS

REMOTE_STAR_COUNT = get_scoring_int("star.remote_count", 3)
LOCAL_STAR_MAX = get_scoring_int("star.local_max", 8)
LOW_ALIGNMENT_RATIO = get_scoring_float("star.low_alignment_ratio", 0.2)

VERB_CATEGORIES: dict[str, tuple[str, ...]] = {
    "technical": ("Engineered", "Developed", "Implemented", "Architected", "Automated", "Optimized"),
    "leadership": ("Led", "Directed", "Spearheaded", "Managed", "Mentored", "Oversaw"),
    "analytical": ("Analyzed", "Evaluated", "Assessed", "Quantified", "Investigated", "Forecasted"),
    "creative": ("Designed", "Created", "Conceptualized", "Pioneered", "Launched", "Crafted"),
    "communication": ("Presented", "Negotiated", "Collaborated", "Authored", "Facilitated", "Communicated"),
    "achievement": ("Achieved", "Delivered", "Exceeded", "Accelerated", "Improved", "Drove"),
}

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "technical": (
        "software", "system", "code", "api", "cloud", "technical", "engineer", "platform",
        "database", "application", "python", "java", "infrastructure", "automation",
    ),
    "leadership": ("team", "lead", "manag", "staff", "mentor", "supervis", "department", "stakeholder"),
    "analytical": ("analy", "research", "data", "report", "metric", "insight", "evaluat", "assess"),
    "creative": ("design", "creat", "brand", "content", "campaign", "visual", "concept"),
    "communication": ("present", "communicat", "client", "customer", "writ", "negotiat", "partner"),
}

RECOGNIZED_ACTION_VERBS = frozenset(
    [verb.lower() for verbs in VERB_CATEGORIES.values() for verb in verbs]
    + list(ACTION_VERBS)
    + [
        "spearheaded", "orchestrated", "oversaw", "supervised", "trained", "organized", "owned",
        "drove", "boosted", "expanded", "accelerated", "negotiated", "optimized", "scaled",
        "automated", "analyzed", "conducted", "produced", "secured", "transformed", "won",
    ]
)

_METRIC_RE = re.compile(
    r"%|\$|\b\d+(?:\.\d+)?x\b|\b\d[\d,.]*\s*(?:percent|dollars|users|customers|clients|hours|days)\b",
    re.IGNORECASE,
)
_PRONOUN_SUBJECT_RE = re.compile(r"^(?:I|We|My team|Our team)\s+", re.IGNORECASE)
_WORD_RE = re.compile(r"[a-z][a-z'-]*")

_IMPROVEMENT_MARKERS = ("improv", "increas", "reduc", "optimi", "enhanc", "streamlin", "boost", "grow", "decreas")
_PROJECT_MARKERS = ("project", "launch", "implement", "develop", "built", "build", "deliver", "system", "initiative")
_TEAM_MARKERS = ("team", "led ", "manag", "collaborat", "coordinat", "cross-functional", "department", "staff")

METRIC_CLAUSES = {
    "improvement": "by 25%, exceeding team targets",
    "project": "resulting in $100K annual savings",
    "team": "across 3 departments, improving efficiency by 15%",
    "generic": "resulting in measurable improvements to key performance metrics",
}

VERB_FEEDBACK = "Started with the strong action verb '{verb}' so the contribution leads the bullet."
METRIC_FEEDBACK = "Added a quantifiable result to show the scale of the impact."
KEYWORD_FEEDBACK = "Worked in '{keyword}' from the job description to strengthen keyword alignment."
PRONOUN_FEEDBACK = "Dropped the personal pronoun so the action verb leads the bullet."
NO_CHANGE_FEEDBACK = (
    "Enhanced for ATS performance: this bullet already leads with an action verb, "
    "quantifies its result and mirrors the job description."
)

_STOP_WORDS = frozenset(
    {
        "about", "above", "after", "again", "also", "being", "below", "between", "both", "candidate",
        "company", "could", "does", "doing", "during", "each", "from", "have", "having", "including",
        "into", "itself", "join", "just", "like", "looking", "more", "most", "must", "other", "over",
        "position", "preferred", "required", "requirements", "requires", "responsibilities", "role",
        "should", "some", "such", "than", "that", "their", "them", "then", "there", "these", "they",
        "this", "those", "through", "under", "until", "very", "what", "when", "where", "which",
        "while", "will", "with", "within", "would", "years", "your", "work", "working", "team",
        "strong", "ability", "able", "skills", "experience", "knowledge", "plus", "well", "across",
    }
)


class VerbChooser(Protocol):
    def __call__(self, verbs: Sequence[str], text: str) -> str:
        """Pick one verb for ``text``; must be deterministic for equal inputs."""


def crc32_verb_chooser(verbs: Sequence[str], text: str) -> str:
    return verbs[zlib.crc32(text.encode("utf-8")) % len(verbs)]


def starts_with_action_verb(text: str) -> bool:
    words = (text or "").split(maxsplit=1)
    if not words:
        return False
    return re.sub(r"[^a-z]", "", words[0].lower()) in RECOGNIZED_ACTION_VERBS


def has_metric(text: str) -> bool:
    return bool(_METRIC_RE.search(text or ""))


def _words(text: str) -> list[str]:
    return _WORD_RE.findall((text or "").lower())


def _verb_category(bullet_lower: str, job_lower: str) -> str:
    best = "achievement"
    best_score = (0, 0)
    for category, keywords in CATEGORY_KEYWORDS.items():
        shared = sum(1 for keyword in keywords if keyword in bullet_lower and keyword in job_lower)
        in_bullet = sum(1 for keyword in keywords if keyword in bullet_lower)
        if (shared, in_bullet) > best_score:
            best, best_score = category, (shared, in_bullet)
    return best


def _metric_category(bullet_lower: str) -> str:
    if any(marker in bullet_lower for marker in _IMPROVEMENT_MARKERS):
        return "improvement"
    if any(marker in bullet_lower for marker in _PROJECT_MARKERS):
        return "project"
    if any(marker in f"{bullet_lower} " for marker in _TEAM_MARKERS):
        return "team"
    return "generic"


def keyword_overlap(bullet: str, job_text: str) -> float:
    bullet_words = set(_words(bullet))
    if not bullet_words:
        return 0.0
    return len(bullet_words & set(_words(job_text))) / len(bullet_words)


def top_job_keyword(job_text: str, exclude_text: str = "") -> str | None:
    excluded = set(_words(exclude_text))
    counts = Counter(
        word for word in _words(job_text) if len(word) >= 4 and word not in _STOP_WORDS and word not in excluded
    )
    if not counts:
        return None
    return counts.most_common(1)[0][0]


def _append_clause(text: str, clause: str, *, separator: str = " ") -> str:
    body = text.rstrip().rstrip(".;,")
    suffix = "." if text.rstrip().endswith(".") else ""
    return f"{body}{separator}{clause}{suffix}"


class StarRewriteGenerator:
    """Rewrites resume bullets toward the STAR shape with rule-based edits.

    Three rules fire independently and in a fixed order: prepend an action
    verb, append a quantified result, and append the job's most frequent
    keyword when the bullet barely overlaps the posting.
    """

    def __init__(self, verb_chooser: VerbChooser | None = None) -> None:
        self.verb_chooser = verb_chooser or crc32_verb_chooser

    def rewrite(self, bullet: str | BulletPoint, job_text: str) -> StarRewrite:
        original = bullet.cleaned_text if isinstance(bullet, BulletPoint) else (bullet or "")
        original = original.strip()
        job_lower = (job_text or "").lower()
        improved = original
        feedback: list[str] = []

        body = _PRONOUN_SUBJECT_RE.sub("", original).strip() or original
        if body != original and starts_with_action_verb(body):
            improved = f"{body[:1].upper()}{body[1:]}"
            feedback.append(PRONOUN_FEEDBACK)
        elif not starts_with_action_verb(original):
            category = _verb_category(body.lower(), job_lower)
            verb = self.verb_chooser(VERB_CATEGORIES[category], original)
            improved = f"{verb} {body[:1].lower()}{body[1:]}"
            feedback.append(VERB_FEEDBACK.format(verb=verb))

        if not has_metric(improved):
            clause = METRIC_CLAUSES[_metric_category(improved.lower())]
            improved = _append_clause(improved, clause)
            feedback.append(METRIC_FEEDBACK)

        if keyword_overlap(original, job_text) < LOW_ALIGNMENT_RATIO:
            keyword = top_job_keyword(job_text, exclude_text=improved)
            if keyword:
                improved = _append_clause(improved, f"leveraging {keyword} expertise", separator=", ")
                feedback.append(KEYWORD_FEEDBACK.format(keyword=keyword))

        return StarRewrite(
            original=original,
            improved=improved,
            feedback=" ".join(feedback) if feedback else NO_CHANGE_FEEDBACK,
        )

    def rewrite_all(
        self,
        bullets: Iterable[str | BulletPoint],
        job_text: str,
        cap: int = LOCAL_STAR_MAX,
    ) -> list[StarRewrite]:
        rewrites = [self.rewrite(bullet, job_text) for bullet in bullets]
        return rewrites[: max(0, cap)]


def index_rewrites(rewrites: Iterable[StarRewrite]) -> dict[str, StarRewrite]:
    return {rewrite.original.strip(): rewrite for rewrite in rewrites}
