import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.taxonomy import LocalSkillCatalog, SkillRequirement, get_default_skill_catalog  # noqa: E402


class TaxonomyTests(unittest.TestCase):
    def test_catalog_entries_carry_aliases_and_category(self):
        catalog = LocalSkillCatalog()
        entries = {entry.canonical_term: entry for entry in catalog.requirements()}

        self.assertIn("stakeholder management", entries)
        self.assertIn("relationship management", entries["stakeholder management"].aliases)
        self.assertEqual(entries["stakeholder management"].category, "business")
        self.assertEqual(entries["python"].category, "technical")

    def test_default_catalog_is_shared(self):
        self.assertIs(get_default_skill_catalog(), get_default_skill_catalog())

    def test_alias_match_counts_as_term_match(self):
        requirement = SkillRequirement(canonical_term="agile methodology", aliases=frozenset({"scrum", "kanban"}))

        self.assertTrue(requirement.matches("Ran daily SCRUM ceremonies"))
        self.assertFalse(requirement.matches("waterfall delivery"))

    def test_terms_match_as_substrings(self):
        java = SkillRequirement(canonical_term="java")

        self.assertTrue(java.matches("Built JavaScript front ends"))
        self.assertTrue(java.matches("java, spring and kafka"))
        self.assertFalse(java.matches("python and go"))


if __name__ == "__main__":
    unittest.main()
