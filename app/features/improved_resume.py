from __future__ import annotations

import math
import re
from collections.abc import Sequence

from app.schemas.analysis import ImprovedResume, StarRewrite

_MARKER_PREFIX = r"[ \t]*(?:(?:[•\-*✓✔→♦◆◦■▪▫+]|o(?=\s)|\d+\.)[ \t]*)?"
_MAX_BOOST_PERCENT = 20


def _replace_bullet(text: str, original: str, improved: str) -> str:
    pattern = re.compile(rf"^({_MARKER_PREFIX}){re.escape(original)}[ \t]*$", re.MULTILINE)
    updated, count = pattern.subn(lambda match: f"{match.group(1)}{improved}", text)
    if count:
        return updated
    return text.replace(original, improved, 1)


def build_improved_resume(
    resume_text: str,
    star_analysis: Sequence[StarRewrite],
    alignment_score: int,
) -> ImprovedResume:
    """Swap each analysed bullet for its rewrite and estimate the resulting score.

    Bullets are matched on their own line first (keeping any bullet glyph);
    sentence-level originals fall back to a single in-place substitution.
    """
    text = resume_text or ""
    applied = 0
    for item in star_analysis:
        original = (item.original or "").strip()
        if not original or not item.improved:
            continue
        text = _replace_bullet(text, original, item.improved)
        applied += 1

    boost = min(2 * applied, _MAX_BOOST_PERCENT) / 100
    updated = min(100, math.floor(alignment_score * (1 + boost) + 0.5))
    return ImprovedResume(improved_text=text, updated_alignment_score=updated)
