"""
Interfaces the aggregation engine consumes.

Any object with these methods works; the Google Maps adapter and the offline
sample provider implement both.
"""

from typing import List, Protocol, Sequence, runtime_checkable

from ..models import Point


@runtime_checkable
class CandidateProvider(Protocol):
    def find(self, origin: str, category: str) -> List[Point]:
        """Places of one category near the origin, unverified."""
        ...

    def exists(self, origin: str) -> bool:
        """Whether the origin resolves to coordinates. Never raises for a bad origin."""
        ...


@runtime_checkable
class DistanceProvider(Protocol):
    def walking_distances(self, origin: str, destinations: Sequence[str]) -> List[str]:
        """One distance string per destination, same length and order.

        Unreachable destinations come back as UNAVAILABLE_DISTANCE.
        """
        ...
