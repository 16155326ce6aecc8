from __future__ import annotations

import re
from typing import Literal

DocumentKind = Literal["resume", "cover_letter", "job_description"]

_MIN_CHARS: dict[str, int] = {"resume": 200, "cover_letter": 100}

_EXTRACTION_ERROR_MARKERS = (
    "error extracting",
    "binary file",
    "unable to parse",
    "invalid format",
    "scanned document",
)

_PAGE_NOISE_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"log\s*in",
        r"sign\s*in",
        r"sign\s*up",
        r"create\s*account",
        r"password",
        r"\b404\b",
        r"page\s*not\s*found",
        r"access\s*denied",
        r"website\s*uses\s*cookies",
        r"privacy\s*policy",
        r"terms\s*of\s*service",
        r"javascript\s*is\s*disabled",
        r"please\s*enable\s*javascript",
        r"browser\s*is\s*out\s*of\s*date",
    )
)

_JOB_TERM_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"responsibilities",
        r"requirements",
        r"qualifications",
        r"experience",
        r"skills",
        r"\brole\b",
        r"position",
        r"job\s*description",
        r"we\s*are\s*looking",
        r"about\s*the\s*(?:role|position)",
        r"what\s*you(?:'|\s)?ll\s*do",
        r"what\s*you\s*will\s*do",
        r"day\s*to\s*day",
        r"what\s*you\s*bring",
        r"your\s*(?:background|experience)",
    )
)

_ERROR_MESSAGES: dict[str, str] = {
    "resume": (
        "Could not properly read your resume. Please try uploading a text-based PDF "
        "or a .txt file instead."
    ),
    "cover_letter": (
        "Could not properly read your cover letter. Please try uploading a text-based PDF "
        "or a .txt file instead."
    ),
    "job_description": "The job description content appears to be invalid. Please enter it manually.",
}


def _looks_like_page_chrome(text: str) -> bool:
    cutoff = len(text) * 0.2
    for pattern in _PAGE_NOISE_PATTERNS:
        match = pattern.search(text)
        if match and match.start() < cutoff:
            return True
    return False


def validate_document_text(text: str | None, kind: DocumentKind) -> str | None:
    """Return a user-facing error when ``text`` is unusable for ``kind``."""
    value = (text or "").strip()
    message = _ERROR_MESSAGES[kind]
    if not value:
        return message

    lowered = value.lower()
    if any(marker in lowered for marker in _EXTRACTION_ERROR_MARKERS):
        return message

    min_chars = _MIN_CHARS.get(kind)
    if min_chars is not None and len(value) < min_chars:
        return message

    if kind != "job_description":
        return None

    if _looks_like_page_chrome(value):
        return message

    job_terms = sum(1 for pattern in _JOB_TERM_PATTERNS if pattern.search(value))
    if job_terms < 2 and len(value) < 300:
        return message

    paragraphs = [block for block in re.split(r"\n\s*\n", value) if block.strip()]
    if len(paragraphs) < 2 and len(value) < 400:
        return message
    return None
