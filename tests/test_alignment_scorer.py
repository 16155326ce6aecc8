import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.features.alignment_scorer import (  # noqa: E402
    extract_skills,
    score_alignment,
    skills_match,
    verdict_for,
)


class AlignmentScorerTests(unittest.TestCase):
    def test_unrelated_resume_scores_low_but_not_zero(self):
        result = score_alignment(
            "Managed a team of 5 engineers.",
            "The role requires leadership and Python experience.",
        )

        self.assertGreater(result.alignment_score, 0)
        self.assertLess(result.alignment_score, 60)
        self.assertFalse(verdict_for(result.alignment_score))
        self.assertIn("python", result.missing_skills)

    def test_formatting_and_contact_points_without_job_skills(self):
        resume = "RESUME\njane@example.com\nphone 555 123 4567"

        self.assertEqual(score_alignment(resume, "").alignment_score, 25)

    def test_keyword_points_are_capped(self):
        resume = "EXPERIENCE\nPython and SQL developer. jane@example.com +1 555 010 2000"

        result = score_alignment(resume, "Python and SQL")

        self.assertEqual(result.matching_skills, ["python", "sql"])
        self.assertEqual(result.alignment_score, 95)

    def test_adding_matching_text_never_lowers_score(self):
        job = "Requirements: Python, Docker, Kubernetes and AWS. Experience with Terraform."
        resume = "EXPERIENCE\nBuilt data pipelines in Python for the finance team."

        before = score_alignment(resume, job).alignment_score
        after = score_alignment(resume + "\nDeployed services with Docker and Kubernetes on AWS.", job).alignment_score

        self.assertGreaterEqual(after, before)
        self.assertGreater(after, before)

    def test_verdict_threshold(self):
        self.assertTrue(verdict_for(60))
        self.assertFalse(verdict_for(59))

    def test_skills_match_uses_substrings_and_related_terms(self):
        self.assertTrue(skills_match("react", "React Native"))
        self.assertTrue(skills_match("leadership", "team mentoring"))
        self.assertTrue(skills_match("team mentoring", "leadership"))
        self.assertFalse(skills_match("python", "marketing"))
        self.assertFalse(skills_match("", "python"))

    def test_extract_skills_reads_phrases_and_capitalized_terms(self):
        skills = extract_skills("Built dashboards using Tableau and Looker")

        self.assertIn("tableau", skills)
        self.assertIn("looker", skills)
        self.assertNotIn("and", skills)

    def test_extract_skills_respects_limit(self):
        text = " ".join(f"Tool{chr(65 + index)}x" for index in range(26))

        self.assertEqual(len(extract_skills(text)), 25)
        self.assertEqual(len(extract_skills(text, limit=None)), 26)


if __name__ == "__main__":
    unittest.main()
