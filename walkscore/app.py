import argparse
import json
from typing import List, Optional

from . import __version__
from .config import Settings, load_settings
from .engine import AggregationEngine
from .env import load_env
from .errors import ConfigError, InvalidOriginError, ProviderError
from .logger import get_logger, reset_logger
from .models import Point, ScoreResult
from .providers import GoogleMapsProvider, SampleProvider


def configure_logging(settings: Settings):
    reset_logger()
    return get_logger(
        level=settings.log_level,
        log_dir=settings.log_dir,
        enable_file=settings.log_to_file,
    )


def build_engine(args: argparse.Namespace, settings: Settings) -> AggregationEngine:
    catalog = settings.catalog()
    if args.batch_size is not None:
        if args.batch_size < 1:
            raise ConfigError("--batch-size must be at least 1")
        catalog = catalog.with_batch_size(args.batch_size)

    if args.sample:
        provider = SampleProvider(seed=args.seed)
    else:
        api_key = args.api_key or settings.require_api_key()
        provider = GoogleMapsProvider(
            api_key,
            search_radius_m=settings.search_radius_m,
            timeout=settings.request_timeout,
        )
    return AggregationEngine(provider, provider, catalog=catalog)


def resolve_origin(args: argparse.Namespace, settings: Settings) -> str:
    origin = args.origin or settings.test_address
    if not origin:
        raise SystemExit("No origin given. Pass --origin or set WALKSCORE_TEST_ADDRESS.")
    return origin


def print_places(places: List[Point]) -> None:
    if not places:
        print("No places found within walking distance.")
        return
    print(f"Found {len(places)} places:\n")
    for place in places:
        distance = place.walking_distance
        print(f"{place.name}")
        print(f"  Address: {place.address}")
        print(f"  Categories: {', '.join(place.categories)}")
        print(f"  Walking distance: {'unverified' if distance is None else f'{distance:.2f} km'}")
        print()


def print_score(origin: str, result: ScoreResult) -> None:
    print(f"Walkability score for {origin}: {result.overall_score:.2f}\n")
    print(f"{'category':<24}{'score':>8}{'close':>8}{'medium':>8}{'far':>8}")
    for record in result.category_scores:
        print(
            f"{record.category:<24}{record.score:>8.2f}"
            f"{record.close_count:>8}{record.medium_count:>8}{record.far_count:>8}"
        )


def cmd_check(args: argparse.Namespace, settings: Settings) -> None:
    origin = resolve_origin(args, settings)
    engine = build_engine(args, settings)
    if engine.location_exists(origin):
        print(f"Valid: {origin}")
        return
    print(f"Invalid: {origin}")
    raise SystemExit(2)


def cmd_places(args: argparse.Namespace, settings: Settings) -> None:
    origin = resolve_origin(args, settings)
    engine = build_engine(args, settings)
    places = engine.get_places(origin)
    if args.json:
        print(json.dumps([p.to_dict() for p in places], indent=2, ensure_ascii=False))
        return
    print_places(places)


def cmd_score(args: argparse.Namespace, settings: Settings) -> None:
    origin = resolve_origin(args, settings)
    engine = build_engine(args, settings)
    result = engine.get_score(origin)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return
    print_score(origin, result)


def add_common_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--origin", help="Origin street address (default: WALKSCORE_TEST_ADDRESS)")
    p.add_argument("--sample", action="store_true", help="Use offline sample data instead of Google Maps")
    p.add_argument("--seed", type=int, help="Seed for sample walking distances (with --sample)")
    p.add_argument("--batch-size", type=int, help="Destinations per Distance Matrix request (default 25)")
    p.add_argument("--api-key", help="Google Maps API key (or set WALKSCORE_API_KEY)")
    p.add_argument("--metrics", action="store_true", help="Log provider metrics when done")


def main(argv: Optional[List[str]] = None):
    # Load .env if present (WALKSCORE_API_KEY, WALKSCORE_TEST_ADDRESS, etc.)
    load_env()
    parser = argparse.ArgumentParser(prog="walkscore", description="Walkability score for a street address")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    chk = subparsers.add_parser("check", help="Check that an origin address resolves")
    add_common_options(chk)
    chk.set_defaults(func=cmd_check)

    plc = subparsers.add_parser("places", help="List places within walking distance of an origin")
    add_common_options(plc)
    plc.add_argument("--json", action="store_true", help="Print JSON instead of text")
    plc.set_defaults(func=cmd_places)

    scr = subparsers.add_parser("score", help="Compute the walkability score of an origin")
    add_common_options(scr)
    scr.add_argument("--json", action="store_true", help="Print JSON instead of text")
    scr.set_defaults(func=cmd_score)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        settings = load_settings()
    except ConfigError as e:
        raise SystemExit(f"Configuration error: {e}")
    logger = configure_logging(settings)

    try:
        args.func(args, settings)
    except ConfigError as e:
        raise SystemExit(f"Configuration error: {e}")
    except InvalidOriginError as e:
        raise SystemExit(f"Invalid origin: {e}")
    except ProviderError as e:
        raise SystemExit(f"Provider error: {e}")
    finally:
        if args.metrics:
            logger.log_metrics_summary()


if __name__ == "__main__":
    main()
