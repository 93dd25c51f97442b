"""
Category catalog: the fixed set of place categories, their importance
weights, the distance bands and the verification batch size.

A Catalog is built once at process start and handed to the engine; it is
never mutated afterwards.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from .errors import ConfigError
from .normalize import normalize_tag


class Category(str, Enum):
    """Place categories searched around an origin."""

    GROCERY_OR_SUPERMARKET = "grocery_or_supermarket"
    RESTAURANT = "restaurant"
    PARK = "park"
    SCHOOL = "school"
    PHARMACY = "pharmacy"
    GYM = "gym"
    LIBRARY = "library"
    SHOPPING_MALL = "shopping_mall"
    MOVIE_THEATER = "movie_theater"
    MUSEUM = "museum"

    @classmethod
    def from_tag(cls, tag: str) -> Optional["Category"]:
        """Map a provider tag to a category, or None if it is not one of ours."""
        try:
            return cls(normalize_tag(tag))
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


DEFAULT_WEIGHTS = {
    Category.GROCERY_OR_SUPERMARKET: 1.5,  # essential for daily living
    Category.RESTAURANT: 1.2,
    Category.PARK: 1.1,
    Category.SCHOOL: 1.3,
    Category.PHARMACY: 1.4,
    Category.GYM: 1.0,
    Category.LIBRARY: 0.9,
    Category.SHOPPING_MALL: 0.8,
    Category.MOVIE_THEATER: 0.7,
    Category.MUSEUM: 0.6,
}

DEFAULT_BATCH_SIZE = 25  # Distance Matrix destination limit per request


@dataclass(frozen=True)
class DistanceBands:
    """Close/medium/far thresholds and the search radius, in kilometres."""

    close: float = 0.5
    medium: float = 1.0
    far: float = 2.0
    max_search_radius: float = 2.0

    def __post_init__(self):
        if self.close <= 0:
            raise ConfigError("Distance bands must be positive")
        if not (self.close <= self.medium <= self.far <= self.max_search_radius):
            raise ConfigError(
                "Distance bands must satisfy close <= medium <= far <= max_search_radius "
                f"(got {self.close}, {self.medium}, {self.far}, {self.max_search_radius})"
            )

    def within_radius(self, distance: float) -> bool:
        return distance <= self.max_search_radius

    def classify(self, distance: float) -> Optional[str]:
        """Return "close", "medium", "far" or None when beyond the far band."""
        if distance <= self.close:
            return "close"
        if distance <= self.medium:
            return "medium"
        if distance <= self.far:
            return "far"
        return None


@dataclass(frozen=True)
class Catalog:
    """Immutable scoring configuration shared by every engine call."""

    weights: Mapping[Category, float] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_WEIGHTS))
    )
    bands: DistanceBands = field(default_factory=DistanceBands)
    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self):
        if not self.weights:
            raise ConfigError("Catalog needs at least one category")
        for category, weight in self.weights.items():
            if not isinstance(category, Category):
                raise ConfigError(f"Unknown category in catalog: {category!r}")
            if weight <= 0:
                raise ConfigError(f"Weight for {category} must be positive (got {weight})")
        if self.batch_size < 1:
            raise ConfigError(f"Batch size must be at least 1 (got {self.batch_size})")
        if not isinstance(self.weights, MappingProxyType):
            object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))

    def __iter__(self) -> Iterator[Category]:
        return iter(self.weights)

    def __len__(self) -> int:
        return len(self.weights)

    @property
    def categories(self) -> tuple:
        return tuple(self.weights)

    def weight(self, category: Category) -> float:
        return self.weights[category]

    def lookup(self, tag: str) -> Optional[Category]:
        """Resolve a tag to a category present in this catalog."""
        category = Category.from_tag(tag)
        if category is None or category not in self.weights:
            return None
        return category

    def with_batch_size(self, batch_size: int) -> "Catalog":
        return replace(self, batch_size=batch_size)


DEFAULT_CATALOG = Catalog()
