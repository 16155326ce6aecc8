from __future__ import annotations

import re

from app.core.config.scoring import get_scoring_int
from app.schemas.analysis import BulletPoint

MAX_BULLETS = get_scoring_int("bullets.max_bullets", 8)
MIN_BULLET_CHARS = get_scoring_int("bullets.min_chars", 10)
MIN_BULLET_WORDS = get_scoring_int("bullets.min_words", 4)
SIMPLE_BULLET_LIMIT = 10

BULLET_GLYPHS = "•-*✓✔→♦◆o◦■▪▫+"

ACTION_VERBS = (
    "developed",
    "created",
    "managed",
    "led",
    "implemented",
    "designed",
    "increased",
    "decreased",
    "improved",
    "built",
    "delivered",
    "achieved",
    "coordinated",
    "established",
    "executed",
    "generated",
    "launched",
    "maintained",
    "performed",
    "reduced",
    "resolved",
    "streamlined",
)
_ACTION_VERB_SET = frozenset(ACTION_VERBS)

# "o" only counts as a glyph when followed by whitespace, otherwise it is a word.
_BULLET_LINE_RE = re.compile(r"^(?:[•\-*✓✔→♦◆◦■▪▫+]|o\s|\d+\.)")
_LEADING_MARKER_RE = re.compile(r"^(?:(?:[•\-*✓✔→♦◆◦■▪▫+]|o(?=\s)|\d+\.)\s*)+")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n[ \t]*\n")
_EXPERIENCE_HEADER_RE = re.compile(
    r"^[ \t]*(?:WORK EXPERIENCE|PROFESSIONAL EXPERIENCE|EMPLOYMENT HISTORY|EXPERIENCE)[ \t]*:?[ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)
_CAPS_HEADER_RE = re.compile(r"^[A-Z][A-Z &/]{2,}:?$")
_JOB_LINE_RE = re.compile(
    r"^[^\n]{2,80}?[ \t](?:—|–|-|\|)[ \t][^\n]{2,80}?[ \t](?:—|–|-|\|)[ \t][^\n]*\b(?:19|20)\d{2}\b[^\n]*$",
    re.MULTILINE,
)
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+|\n+")
_SIMPLE_BULLET_LINE_RE = re.compile(r"^(?:[•\-*]|\d+\.)")
_PAST_TENSE_START_RE = re.compile(r"^[A-Z][a-z]+ed")
_SIMPLE_MARKER_RE = re.compile(r"^[\s•\-*\d.]+")
_SIMPLE_SENTENCE_SPLIT_RE = re.compile(r"[.!?]")


def strip_bullet_marker(line: str) -> str:
    return _LEADING_MARKER_RE.sub("", (line or "").strip()).strip()


def is_bullet_line(line: str) -> bool:
    return bool(_BULLET_LINE_RE.match((line or "").strip()))


def _is_substantial(text: str) -> bool:
    return len(text) > MIN_BULLET_CHARS and len(text.split()) >= MIN_BULLET_WORDS


def _first_word(text: str) -> str:
    words = text.split(maxsplit=1)
    if not words:
        return ""
    return re.sub(r"[^a-z]", "", words[0].lower())


def find_experience_section(text: str) -> str:
    """Return the resume block most likely to hold work experience.

    An explicit experience header wins (its block plus the following one,
    unless that one opens a new ALL-CAPS section). Without a header the block
    after a "Title - Company - Dates" line is used, and the whole text as a
    last resort.
    """
    blocks = [block for block in _PARAGRAPH_SPLIT_RE.split(text) if block.strip()]
    for index, block in enumerate(blocks):
        match = _EXPERIENCE_HEADER_RE.search(block)
        if not match:
            continue
        section = block[match.end():]
        if index + 1 < len(blocks):
            following = blocks[index + 1]
            first_line = following.strip().splitlines()[0].strip()
            if not _CAPS_HEADER_RE.match(first_line):
                section = f"{section}\n\n{following}"
        return section

    job_line = _JOB_LINE_RE.search(text)
    if job_line:
        rest = text[job_line.end():].lstrip("\n")
        return _PARAGRAPH_SPLIT_RE.split(rest, maxsplit=1)[0]
    return text


def _action_sentences(section: str) -> list[tuple[str, str]]:
    sentences: list[tuple[str, str]] = []
    for raw in _SENTENCE_SPLIT_RE.split(section):
        cleaned = strip_bullet_marker(raw)
        if _first_word(cleaned) in _ACTION_VERB_SET:
            sentences.append((raw, cleaned))
    return sentences


def extract_bullet_points(resume_text: str, *, limit: int = MAX_BULLETS) -> list[BulletPoint]:
    """Split resume text into experience bullets, in document order."""
    text = (resume_text or "").replace("\r\n", "\n").replace("\r", "\n")
    if not text.strip():
        return []

    points: list[BulletPoint] = []
    seen: set[str] = set()

    def add(raw: str, cleaned: str) -> None:
        key = cleaned.lower()
        if key in seen or not _is_substantial(cleaned):
            return
        seen.add(key)
        points.append(BulletPoint(raw_text=raw.strip(), cleaned_text=cleaned))

    for line in text.split("\n"):
        if is_bullet_line(line):
            add(line, strip_bullet_marker(line))

    if len(points) < limit:
        covered = [point.cleaned_text.lower() for point in points]
        for raw, cleaned in _action_sentences(find_experience_section(text)):
            if any(cleaned.lower() in existing for existing in covered):
                continue
            add(raw, cleaned)

    return points[: max(0, limit)]


def extract_bullets(resume_text: str, *, limit: int = MAX_BULLETS) -> list[str]:
    return [point.cleaned_text for point in extract_bullet_points(resume_text, limit=limit)]


def extract_simple_bullets(text: str, *, limit: int = SIMPLE_BULLET_LIMIT) -> list[str]:
    """Cheap bullet pass used to backfill STAR items returned by the remote service."""
    if not text:
        return []

    bullets: list[str] = []
    for line in re.split(r"[\n\r]+", text):
        trimmed = line.strip()
        if _SIMPLE_BULLET_LINE_RE.match(trimmed) or (len(trimmed) > 20 and _PAST_TENSE_START_RE.match(trimmed)):
            cleaned = _SIMPLE_MARKER_RE.sub("", trimmed).strip()
            if len(cleaned) > 10:
                bullets.append(cleaned)
    if bullets:
        return bullets[:limit]

    sentences = [part.strip() for part in _SIMPLE_SENTENCE_SPLIT_RE.split(text)]
    return [sentence for sentence in sentences if 20 < len(sentence) < 200][:limit]
