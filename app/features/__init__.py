from .alignment_scorer import AlignmentScore, extract_skills, score_alignment, skills_match, verdict_for
from .bullet_parser import extract_bullet_points, extract_bullets, extract_simple_bullets
from .cover_letter import analyze_cover_letter, calculate_updated_relevance
from .improved_resume import build_improved_resume
from .skill_matcher import INTERNAL_SKILL_LIMIT, UI_SKILL_LIMIT, find_missing_skills
from .star_rewriter import StarRewriteGenerator, VerbChooser, crc32_verb_chooser, index_rewrites

__all__ = [
    "AlignmentScore",
    "extract_skills",
    "score_alignment",
    "skills_match",
    "verdict_for",
    "extract_bullet_points",
    "extract_bullets",
    "extract_simple_bullets",
    "analyze_cover_letter",
    "calculate_updated_relevance",
    "build_improved_resume",
    "INTERNAL_SKILL_LIMIT",
    "UI_SKILL_LIMIT",
    "find_missing_skills",
    "StarRewriteGenerator",
    "VerbChooser",
    "crc32_verb_chooser",
    "index_rewrites",
]
