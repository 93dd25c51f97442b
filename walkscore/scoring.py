"""
Walkability scoring.

Pure fold over a list of points: no I/O, no randomness. Identical input in
identical order always yields an identical ScoreResult, including the
artifacts of rounding after every addition.

Invariant:
The overall score is weighted by category importance; a category's own score
is weighted by proximity only.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterable

from .catalog import DEFAULT_CATALOG, Catalog
from .models import CategoryScoreRecord, Point, ScoreResult


def round2(value: float) -> float:
    """Round half up to 2 decimals."""
    return math.floor(value * 100.0 + 0.5) / 100.0


def distance_penalty(distance: float, max_search_radius: float) -> float:
    return round2(math.exp(-distance / max_search_radius))


@dataclass
class _Tally:
    score: float = 0.0
    close: int = 0
    medium: int = 0
    far: int = 0

    def add(self, amount: float):
        self.score = round2(self.score + amount)

    def freeze(self, category: str) -> CategoryScoreRecord:
        return CategoryScoreRecord(
            category=category,
            score=self.score,
            close_count=self.close,
            medium_count=self.medium,
            far_count=self.far,
        )


def score(points: Iterable[Point], catalog: Catalog = DEFAULT_CATALOG) -> ScoreResult:
    """Fold verified points into an overall score and per-category records.

    Points without a walking distance (from a degraded verification batch)
    score as distance 0.
    """
    bands = catalog.bands
    tallies: Dict = {category: _Tally() for category in catalog}
    overall = _Tally()

    for point in points:
        distance = point.walking_distance if point.walking_distance is not None else 0.0
        for tag in point.categories:
            category = catalog.lookup(tag)
            if category is None:
                continue

            penalty = distance_penalty(distance, bands.max_search_radius)
            overall.add(catalog.weight(category) * penalty)

            tally = tallies[category]
            tally.add(penalty)
            band = bands.classify(distance)
            if band == "close":
                tally.close += 1
            elif band == "medium":
                tally.medium += 1
            elif band == "far":
                tally.far += 1

    return ScoreResult(
        overall_score=overall.score,
        category_scores=tuple(tallies[c].freeze(c.value) for c in catalog),
    )
