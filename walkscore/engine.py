"""
Aggregation engine: finds places around an origin, verifies their walking
distance and hands the survivors to the scorer.

Responsibilities:
- Fan out one candidate lookup per catalog category and join on all of them.
- Verify walking distances in fixed-size batches, concurrently.
- Drop verified points beyond the search radius.

Non-Responsibilities:
- No retries (provider adapters own retry/backoff).
- No caching between calls.
- No HTTP request/response handling.

Failure policy:
A failed category lookup aborts the whole call with ProviderError, since a
missing category would silently under-report walkability. A failed distance
batch does not: its points are passed through unverified and unfiltered so
one bad batch does not lose every result.
"""

from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import List, Optional

from .catalog import DEFAULT_CATALOG, Catalog, Category
from .distance import parse_distance
from .errors import InvalidOriginError, ProviderError
from .logger import StructuredLogger, get_logger
from .models import Point, ScoreResult, addresses
from .normalize import normalize_origin
from .providers.base import CandidateProvider, DistanceProvider
from .scoring import score


class AggregationEngine:
    """Computes places and walkability scores for origin addresses.

    Each call owns its own worker pools, so one engine can serve concurrent
    callers without shared mutable state.
    """

    def __init__(
        self,
        candidate_provider: CandidateProvider,
        distance_provider: DistanceProvider,
        catalog: Catalog = DEFAULT_CATALOG,
        logger: Optional[StructuredLogger] = None,
    ):
        self.candidate_provider = candidate_provider
        self.distance_provider = distance_provider
        self.catalog = catalog
        self.logger = logger or get_logger()

    def location_exists(self, origin: str) -> bool:
        origin = normalize_origin(origin)
        if not origin:
            return False
        return self.candidate_provider.exists(origin)

    def get_places(self, origin: str) -> List[Point]:
        """Verified places within the search radius of ``origin``.

        Raises:
            InvalidOriginError: origin is empty or does not resolve
            ProviderError: a category lookup failed
        """
        return self.retrieve_places(origin)

    def get_score(self, origin: str) -> ScoreResult:
        """Walkability score for ``origin``; raises like get_places."""
        places = self.retrieve_places(origin)
        result = score(places, self.catalog)
        self.logger.info(
            "Scored origin",
            origin=normalize_origin(origin),
            places=len(places),
            overall_score=result.overall_score,
        )
        return result

    def retrieve_places(self, origin: str) -> List[Point]:
        origin = normalize_origin(origin)
        if not origin:
            raise InvalidOriginError(origin, "empty address")
        if not self.candidate_provider.exists(origin):
            raise InvalidOriginError(origin, self._origin_error(origin))

        candidates = self._fetch_candidates(origin)
        places = self._verify_walking_distances(origin, candidates)
        self.logger.info(
            "Retrieved places",
            origin=origin,
            candidates=len(candidates),
            places=len(places),
        )
        return places

    def _origin_error(self, origin: str) -> Optional[str]:
        # Optional provider hook explaining a failed exists()
        explain = getattr(self.candidate_provider, "origin_error", None)
        return explain(origin) if explain is not None else None

    # Candidate lookup

    def _fetch_candidates(self, origin: str) -> List[Point]:
        categories = self.catalog.categories
        with ThreadPoolExecutor(
            max_workers=len(categories), thread_name_prefix="walkscore-category"
        ) as pool:
            futures = {
                pool.submit(self._find, origin, category): category
                for category in categories
            }
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)

            # Report the first failure in catalog order, not completion order
            failed = [f for f in futures if f in done and f.exception() is not None]
            if failed:
                for future in pending:
                    future.cancel()
                future = failed[0]
                raise self._lookup_failure(origin, futures[future], future.exception())

        merged: List[Point] = []
        for future in futures:
            merged.extend(future.result())
        return merged

    def _find(self, origin: str, category: Category) -> List[Point]:
        self.logger.record_lookup_attempt(category.value)
        try:
            points = self.candidate_provider.find(origin, category.value)
        except Exception as e:
            self.logger.record_lookup_failure(category.value, type(e).__name__)
            raise
        self.logger.record_lookup_success(category.value)
        return list(points or [])

    def _lookup_failure(self, origin: str, category: Category, exc: BaseException) -> Exception:
        if isinstance(exc, InvalidOriginError):
            return exc

        self.logger.error(
            "Category lookup failed, aborting retrieval",
            origin=origin,
            category=category.value,
            error=str(exc),
        )
        if isinstance(exc, ProviderError):
            err = ProviderError(
                f"Category lookup failed: {exc.message}",
                origin=origin,
                category=category.value,
                status=exc.status,
            )
        else:
            err = ProviderError(
                f"Category lookup failed: {type(exc).__name__}: {exc}",
                origin=origin,
                category=category.value,
            )
        err.__cause__ = exc
        return err

    # Walking distance verification

    def _verify_walking_distances(self, origin: str, candidates: List[Point]) -> List[Point]:
        if not candidates:
            return []

        size = self.catalog.batch_size
        batches = [candidates[i:i + size] for i in range(0, len(candidates), size)]

        verified: List[Point] = []
        with ThreadPoolExecutor(
            max_workers=len(batches), thread_name_prefix="walkscore-batch"
        ) as pool:
            futures = [
                pool.submit(self._verify_batch, origin, batch, index)
                for index, batch in enumerate(batches)
            ]
            for index, (future, batch) in enumerate(zip(futures, batches)):
                try:
                    kept = future.result()
                except Exception as e:
                    self.logger.warning(
                        "Distance batch failed, passing points through unverified",
                        origin=origin,
                        batch=index,
                        size=len(batch),
                        error=str(e),
                    )
                    self.logger.record_batch(verified=False, error_type=type(e).__name__)
                    verified.extend(batch)
                else:
                    self.logger.record_batch(verified=True)
                    verified.extend(kept)
        return verified

    def _verify_batch(self, origin: str, batch: List[Point], index: int) -> List[Point]:
        distances = self.distance_provider.walking_distances(origin, addresses(batch))
        if distances is None or len(distances) != len(batch):
            got = 0 if distances is None else len(distances)
            raise ProviderError(
                f"Distance provider returned {got} results for {len(batch)} destinations",
                origin=origin,
                batch_index=index,
            )

        bands = self.catalog.bands
        kept = []
        for point, text in zip(batch, distances):
            verified = point.with_walking_distance(parse_distance(text))
            if verified.is_eligible(bands):
                kept.append(verified)
        self.logger.debug(
            "Verified distance batch",
            origin=origin,
            batch=index,
            size=len(batch),
            kept=len(kept),
        )
        return kept
