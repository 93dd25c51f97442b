"""Offline provider with canned places, for demos and runs without an API key."""

import random
import threading
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import Point
from ..normalize import normalize_origin

SAMPLE_ADDRESSES = (
    "456 Oak Avenue, Example City, 12345",
    "789 Maple Street, Example City, 12345",
    "123 Pine Road, Example City, 12345",
)

SAMPLE_NAMES: Dict[str, Tuple[str, str, str]] = {
    "grocery_or_supermarket": ("The Fresh Market", "The Local Market", "The Organic Market"),
    "restaurant": ("The Green Leaf Diner", "The Red Tomato", "The Blue Ocean"),
    "park": ("The Green Park", "The Red Park", "The Blue Park"),
    "school": ("The Elementary School", "The Middle School", "The High School"),
    "pharmacy": ("The Local Pharmacy", "The National Pharmacy", "The International Pharmacy"),
    "gym": ("The Local Gym", "The National Gym", "The International Gym"),
    "library": ("The Local Library", "The National Library", "The International Library"),
    "shopping_mall": ("The Local Mall", "The National Mall", "The International Mall"),
    "movie_theater": ("The Local Theater", "The National Theater", "The International Theater"),
    "museum": ("The Local Museum", "The National Museum", "The International Museum"),
}

MIN_DISTANCE = 0.1
MAX_DISTANCE = 2.0


class SampleProvider:
    """Candidate and distance provider that never touches the network.

    Distances are drawn uniformly from [0.1, 2.0). With a ``seed`` each
    (origin, destination) pair always gets the same distance, whatever the
    batch layout or thread timing.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random()
        self._lock = threading.Lock()

    def exists(self, origin: str) -> bool:
        return bool(normalize_origin(origin))

    def find(self, origin: str, category: str) -> List[Point]:
        names = SAMPLE_NAMES.get(category, ())
        return [
            Point(name=name, address=address, categories=(category,))
            for name, address in zip(names, SAMPLE_ADDRESSES)
        ]

    def walking_distances(self, origin: str, destinations: Sequence[str]) -> List[str]:
        return [f"{self._draw(origin, d):.2f}" for d in destinations]

    def _draw(self, origin: str, destination: str) -> float:
        if self.seed is not None:
            rng = random.Random(f"{self.seed}|{origin}|{destination}")
            return rng.uniform(MIN_DISTANCE, MAX_DISTANCE)
        # Batches run on worker threads; the shared generator is not thread-safe
        with self._lock:
            return self._random.uniform(MIN_DISTANCE, MAX_DISTANCE)
