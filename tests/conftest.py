"""
Pytest configuration and shared fixtures.
"""

import threading
from typing import Dict, List, Optional, Sequence

import pytest

from walkscore.catalog import DEFAULT_CATALOG
from walkscore.engine import AggregationEngine
from walkscore.logger import get_logger, reset_logger
from walkscore.models import Point


class FakeCandidateProvider:
    """Candidate provider returning canned points per category.

    ``failures`` maps a category to the exception its lookup raises.
    ``barrier`` (optional) makes every lookup wait for all the others,
    which only completes if the lookups really run concurrently.
    """

    def __init__(
        self,
        points_by_category: Optional[Dict[str, List[Point]]] = None,
        failures: Optional[Dict[str, Exception]] = None,
        known: bool = True,
        barrier: Optional[threading.Barrier] = None,
    ):
        self.points_by_category = points_by_category or {}
        self.failures = failures or {}
        self.known = known
        self.barrier = barrier
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def exists(self, origin: str) -> bool:
        return self.known

    def find(self, origin: str, category: str) -> List[Point]:
        with self._lock:
            self.calls.append(category)
        if self.barrier is not None:
            self.barrier.wait()
        if category in self.failures:
            raise self.failures[category]
        return list(self.points_by_category.get(category, []))


class FakeDistanceProvider:
    """Distance provider answering from an address -> distance map.

    ``fail_when`` lists addresses whose presence in a batch makes the whole
    batch call fail.
    """

    def __init__(
        self,
        distances: Optional[Dict[str, str]] = None,
        fail_when: Sequence[str] = (),
        default: str = "0.1",
        barrier: Optional[threading.Barrier] = None,
    ):
        self.distances = distances or {}
        self.fail_when = set(fail_when)
        self.default = default
        self.barrier = barrier
        self.batches: List[List[str]] = []
        self._lock = threading.Lock()

    def walking_distances(self, origin: str, destinations: Sequence[str]) -> List[str]:
        with self._lock:
            self.batches.append(list(destinations))
        if self.barrier is not None:
            self.barrier.wait()
        if self.fail_when.intersection(destinations):
            raise ConnectionError("distance service unavailable")
        return [self.distances.get(d, self.default) for d in destinations]


def make_points(category: str, count: int, prefix: str = "Place") -> List[Point]:
    return [
        Point(name=f"{prefix} {i}", address=f"{i} {category.title()} Street", categories=(category,))
        for i in range(count)
    ]


@pytest.fixture(autouse=True)
def isolated_logger(tmp_path):
    """Point the global logger at the test's tmp dir and keep the console quiet."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def restaurant_points() -> List[Point]:
    """Four restaurants, two of them beyond the 2 km search radius."""
    return [
        Point(name="Place 1", address="Address 1", categories=("restaurant",)),
        Point(name="Place 2", address="Address 2", categories=("restaurant",)),
        Point(name="Place 3", address="Address 3", categories=("restaurant",)),
        Point(name="Place 4", address="Address 4", categories=("restaurant",)),
    ]


@pytest.fixture
def restaurant_distances() -> Dict[str, str]:
    return {
        "Address 1": "0.4",
        "Address 2": "0.6",
        "Address 3": "3.4",
        "Address 4": "3.6",
    }


@pytest.fixture
def valid_place_result() -> dict:
    """One nearby-search result as the Places API returns it."""
    return {
        "name": "The Green Park",
        "place_id": "ChIJgreenpark",
        "vicinity": "456 Oak Avenue, Example City",
        "business_status": "OPERATIONAL",
        "types": ["park", "point_of_interest", "establishment"],
        "geometry": {"location": {"lat": 40.7128, "lng": -74.0060}},
    }


@pytest.fixture
def build_engine():
    """Factory for an engine over fake providers."""

    def _build(candidates, distances, catalog=DEFAULT_CATALOG):
        return AggregationEngine(candidates, distances, catalog=catalog)

    return _build
