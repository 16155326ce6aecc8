import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.features.bullet_parser import (  # noqa: E402
    extract_bullet_points,
    extract_bullets,
    extract_simple_bullets,
    is_bullet_line,
    strip_bullet_marker,
)


class BulletParserTests(unittest.TestCase):
    def test_glyph_and_numbered_bullets_are_extracted(self):
        resume = (
            "Jane Doe\n"
            "EXPERIENCE\n"
            "• Developed payment APIs serving two million users\n"
            "- Led a team of six engineers\n"
            "* Ok\n"
            "1. Reduced cloud spend by 30 percent"
        )

        points = extract_bullet_points(resume)

        self.assertEqual(
            [point.cleaned_text for point in points],
            [
                "Developed payment APIs serving two million users",
                "Led a team of six engineers",
                "Reduced cloud spend by 30 percent",
            ],
        )
        self.assertEqual(points[0].raw_text, "• Developed payment APIs serving two million users")

    def test_letter_o_is_only_a_glyph_before_whitespace(self):
        self.assertTrue(is_bullet_line("o Designed the onboarding flow for new merchants"))
        self.assertFalse(is_bullet_line("orchestrated nightly pipelines with airflow"))
        self.assertEqual(strip_bullet_marker("  ◦ Shipped the new search page"), "Shipped the new search page")

    def test_short_lines_are_not_bullets(self):
        resume = "• Led team\n• Python, SQL\n• Automated the invoice reconciliation workflow end to end"

        self.assertEqual(extract_bullets(resume), ["Automated the invoice reconciliation workflow end to end"])

    def test_action_sentences_come_from_experience_section(self):
        resume = (
            "Jane Doe\n\n"
            "WORK EXPERIENCE\n"
            "Senior Engineer at Acme. Developed a fraud scoring service in Python. "
            "Improved checkout latency by 40 percent.\n\n"
            "EDUCATION\n"
            "BSc Computer Science. Managed the student robotics club budget."
        )

        self.assertEqual(
            extract_bullets(resume),
            ["Developed a fraud scoring service in Python.", "Improved checkout latency by 40 percent."],
        )

    def test_job_line_marks_experience_without_header(self):
        resume = (
            "Jane Doe\n"
            "Senior Engineer — Acme Corp — 2019 - 2023\n"
            "Built internal tooling for the data platform team.\n"
            "Launched a self-service analytics portal for sales.\n\n"
            "Hobbies: Created a cooking blog with weekly recipes."
        )

        self.assertEqual(
            extract_bullets(resume),
            [
                "Built internal tooling for the data platform team.",
                "Launched a self-service analytics portal for sales.",
            ],
        )

    def test_whole_text_is_searched_as_last_resort(self):
        resume = "Developed a cache layer for the pricing engine. Enjoys hiking on weekends."

        self.assertEqual(extract_bullets(resume), ["Developed a cache layer for the pricing engine."])

    def test_single_sentence_resume(self):
        self.assertEqual(extract_bullets("Managed a team of 5 engineers."), ["Managed a team of 5 engineers."])

    def test_output_is_capped_and_deterministic(self):
        resume = "\n".join(f"• Delivered feature number {index} for the mobile app" for index in range(12))

        first = extract_bullets(resume)

        self.assertEqual(len(first), 8)
        self.assertEqual(first, extract_bullets(resume))
        self.assertEqual(first[0], "Delivered feature number 0 for the mobile app")

    def test_empty_text_has_no_bullets(self):
        self.assertEqual(extract_bullet_points("   \n "), [])


class SimpleBulletTests(unittest.TestCase):
    def test_marker_and_past_tense_lines(self):
        text = (
            "Summary line here\n"
            "• Built a reporting pipeline for finance\n"
            "Organized quarterly planning offsites for leadership\n"
            "- short"
        )

        self.assertEqual(
            extract_simple_bullets(text),
            ["Built a reporting pipeline for finance", "Organized quarterly planning offsites for leadership"],
        )

    def test_sentence_fallback(self):
        text = "No bullets here at all in this text. Another sentence that is long enough."

        self.assertEqual(
            extract_simple_bullets(text),
            ["No bullets here at all in this text", "Another sentence that is long enough"],
        )


if __name__ == "__main__":
    unittest.main()
