"""Score and urgency rankings over resolved attribute/priority views.

  score   = attribute x priority          (ascending = most urgent first)
  urgency = (1 - attribute) x priority    (descending = most urgent first)

Items are enumerated over the union of paths, facets and keys from both
mappings in lexicographic order; a side missing a value contributes 0.0.
Both rankings use a stable sort over that enumeration, so equal scores keep
the same relative order on every run.

Pure functions -- no I/O.
"""

from __future__ import annotations

from typing import Any

from .models import RankingItem, TreeData

HIGH_URGENCY = 0.8
MEDIUM_URGENCY = 0.5


def iter_items(attributes: TreeData, priorities: TreeData) -> list[RankingItem]:
    """One RankingItem per (path, facet, key) in either mapping."""
    items: list[RankingItem] = []
    for path in sorted(set(attributes) | set(priorities)):
        path_attributes = attributes.get(path, {})
        path_priorities = priorities.get(path, {})
        for facet in sorted(set(path_attributes) | set(path_priorities)):
            facet_attributes = path_attributes.get(facet, {})
            facet_priorities = path_priorities.get(facet, {})
            for key in sorted(set(facet_attributes) | set(facet_priorities)):
                items.append(RankingItem(
                    path=path,
                    facet=facet,
                    attribute=key,
                    attribute_value=float(facet_attributes.get(key, 0.0)),
                    priority_value=float(facet_priorities.get(key, 0.0)),
                ))
    return items


def calculate_scores(attributes: TreeData, priorities: TreeData) -> list[RankingItem]:
    """All items ranked by score ascending (lowest score = most urgent)."""
    return sorted(iter_items(attributes, priorities), key=lambda item: item.score)


def calculate_urgency(attributes: TreeData, priorities: TreeData) -> list[RankingItem]:
    """All items ranked by urgency descending (highest urgency first)."""
    return sorted(iter_items(attributes, priorities), key=lambda item: -item.urgency)


def classify_urgency(urgency: float) -> str:
    """Classify an urgency into a severity bucket."""
    if urgency > HIGH_URGENCY:
        return "high"
    if urgency > MEDIUM_URGENCY:
        return "medium"
    return "low"


def summarize_urgency(items: list[RankingItem]) -> dict[str, Any]:
    """Aggregate figures for an urgency ranking.

    Used by report and export collaborators.
    """
    counts = {"high": 0, "medium": 0, "low": 0}
    for item in items:
        counts[classify_urgency(item.urgency)] += 1

    if not items:
        average_completion = 0.0
        average_urgency = 0.0
    else:
        average_completion = round(
            sum(i.attribute_value for i in items) / len(items) * 100, 1)
        average_urgency = round(sum(i.urgency for i in items) / len(items), 4)

    return {
        "total_items": len(items),
        "high_urgency": counts["high"],
        "medium_urgency": counts["medium"],
        "low_urgency": counts["low"],
        "average_completion": average_completion,
        "average_urgency": average_urgency,
    }
