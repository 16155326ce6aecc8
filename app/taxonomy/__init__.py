from functools import lru_cache

from .local_taxonomy import LocalSkillCatalog
from .provider import SkillCatalog, SkillRequirement


@lru_cache(maxsize=1)
def get_default_skill_catalog() -> SkillCatalog:
    return LocalSkillCatalog()


__all__ = ["SkillCatalog", "SkillRequirement", "LocalSkillCatalog", "get_default_skill_catalog"]
