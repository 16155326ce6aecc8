from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, ConfigDict


class SkillRequirement(BaseModel):
    model_config = ConfigDict(frozen=True)

    canonical_term: str
    aliases: frozenset[str] = frozenset()
    category: str = "technical"

    def terms(self) -> tuple[str, ...]:
        return (self.canonical_term, *sorted(self.aliases))

    def matches(self, text: str) -> bool:
        """True when the canonical term or any alias is a case-insensitive substring of ``text``."""
        lowered = (text or "").lower()
        return any(term in lowered for term in self.terms())


class SkillCatalog(Protocol):
    def requirements(self) -> tuple[SkillRequirement, ...]:
        """Return catalog entries in their declared order."""
