from __future__ import annotations

import json
from pathlib import Path

from .provider import SkillCatalog, SkillRequirement


class LocalSkillCatalog(SkillCatalog):
    def __init__(self, catalog_path: str | Path | None = None) -> None:
        path = Path(catalog_path) if catalog_path else Path(__file__).with_name("skill_catalog.json")
        self._requirements = self._load_catalog(path)

    @staticmethod
    def _load_catalog(path: Path) -> tuple[SkillRequirement, ...]:
        with path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)

        entries: list[SkillRequirement] = []
        for category, items in raw.items():
            for item in items:
                term = str(item["term"]).strip().lower()
                aliases = frozenset(
                    str(alias).strip().lower() for alias in item.get("aliases", []) if str(alias).strip()
                )
                entries.append(SkillRequirement(canonical_term=term, aliases=aliases, category=category))
        return tuple(entries)

    def requirements(self) -> tuple[SkillRequirement, ...]:
        return self._requirements
