"""
Data types passed between providers, the engine and the scorer.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from .catalog import DistanceBands


@dataclass(frozen=True)
class Point:
    """A place discovered near an origin.

    Created unverified by a candidate provider. Verification returns a copy
    with ``walking_distance`` attached; the original is never mutated.
    """

    name: str
    address: str
    categories: Tuple[str, ...] = ()
    straight_line_distance: Optional[float] = None
    walking_distance: Optional[float] = None
    place_id: Optional[str] = None

    def __post_init__(self):
        # Accept any sequence of tags but store a tuple
        if not isinstance(self.categories, tuple):
            object.__setattr__(self, "categories", tuple(self.categories))

    @property
    def is_verified(self) -> bool:
        return self.walking_distance is not None

    def is_eligible(self, bands: DistanceBands) -> bool:
        """Verified and within the search radius."""
        return self.walking_distance is not None and bands.within_radius(self.walking_distance)

    def with_walking_distance(self, distance: float) -> "Point":
        return replace(self, walking_distance=distance)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address,
            "categories": list(self.categories),
            "straight_line_distance": self.straight_line_distance,
            "walking_distance": self.walking_distance,
            "place_id": self.place_id,
        }


@dataclass(frozen=True)
class CategoryScoreRecord:
    """Score and distance-band counts for one category."""

    category: str
    score: float = 0.0
    close_count: int = 0
    medium_count: int = 0
    far_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "score": self.score,
            "close_count": self.close_count,
            "medium_count": self.medium_count,
            "far_count": self.far_count,
        }


@dataclass(frozen=True)
class ScoreResult:
    overall_score: float
    category_scores: Tuple[CategoryScoreRecord, ...] = field(default_factory=tuple)

    def get(self, category: str) -> Optional[CategoryScoreRecord]:
        for record in self.category_scores:
            if record.category == str(category):
                return record
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall_score": self.overall_score,
            "category_scores": [r.to_dict() for r in self.category_scores],
        }


def addresses(points: List[Point]) -> List[str]:
    """Addresses in list order, as sent to a distance provider."""
    return [p.address for p in points]
