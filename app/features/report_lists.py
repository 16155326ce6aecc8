from __future__ import annotations

from app.core.config.scoring import get_scoring_int

MIN_ITEMS = get_scoring_int("report.min_items", 3)
MAX_ITEMS = get_scoring_int("report.max_items", 5)


def pad_items(items: list[str], filler: tuple[str, ...]) -> list[str]:
    """Top a list up to the minimum with filler entries, never beyond the maximum."""
    output = [item for item in dict.fromkeys(item.strip() for item in items) if item]
    for entry in filler:
        if len(output) >= MIN_ITEMS:
            break
        if entry not in output:
            output.append(entry)
    return output[:MAX_ITEMS]
