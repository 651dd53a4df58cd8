#!/usr/bin/env python3
"""
Demo Runner Script

Builds a router from a route definition file and reports routing accuracy
over the file's labelled query samples.

This script:
1. Loads routes and samples using RouteLoader
2. Builds a Router with the configured encoder, store and scoring metrics
3. Routes each sample (or a single ad-hoc query)
4. Tracks routing accuracy and latency per expected route
5. Generates a summary report

Usage:
    python scripts/run_demo.py                          # Run all samples
    python scripts/run_demo.py --query "is it raining"  # Route one query
    python scripts/run_demo.py --route billing          # Filter by route
    python scripts/run_demo.py --verbose                # Show each sample result
    python scripts/run_demo.py --dry-run                # Validate route file only
"""

import argparse
import asyncio
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from semroute.data.loader import RouteLoader, Sample
from semroute.errors import NoRouteFoundError, RouterError

# Lazy imports for router components (only needed when actually routing)
Router = None
get_settings = None


def _import_router_components():
    """Import router components on demand."""
    global Router, get_settings
    if Router is None:
        from semroute.router.engine import Router as _Router
        from semroute.config import get_settings as _get_settings
        Router = _Router
        get_settings = _get_settings


@dataclass
class SampleResult:
    """Result of routing a single sample."""

    sample: Sample
    actual_route: str | None
    score: float
    latency_ms: float
    error: str | None = None

    @property
    def is_correct(self) -> bool:
        return self.actual_route == self.sample.expected_route


@dataclass
class RouteStats:
    """Statistics for a single expected route."""

    correct: int = 0
    total: int = 0
    total_latency_ms: float = 0.0

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total > 0 else 0.0

    @property
    def avg_latency_ms(self) -> float:
        return self.total_latency_ms / self.total if self.total > 0 else 0.0


@dataclass
class DemoResults:
    """Aggregate results from demo run."""

    total_samples: int = 0
    correct_routes: int = 0
    incorrect_routes: int = 0
    total_latency_ms: float = 0.0
    by_route: dict[str, RouteStats] = field(default_factory=dict)
    mismatches: list[SampleResult] = field(default_factory=list)
    build_latency_ms: float = 0.0
    elapsed_seconds: float = 0.0

    @property
    def accuracy(self) -> float:
        return self.correct_routes / self.total_samples if self.total_samples > 0 else 0.0

    @property
    def avg_latency_ms(self) -> float:
        return self.total_latency_ms / self.total_samples if self.total_samples > 0 else 0.0


async def build_router(loader: RouteLoader):
    """Build a router over the loader's routes using the configured backends."""
    _import_router_components()
    from semroute.encoders import create_encoder
    from semroute.router.options import options_from_coefficients
    from semroute.stores import create_store

    settings = get_settings()
    encoder = create_encoder(settings)
    store = create_store(settings)
    options = options_from_coefficients(settings.metric_coefficients())

    try:
        return await Router.build(loader.load(), encoder, store, *options)
    except Exception:
        await encoder.close()
        await store.close()
        raise


async def route_sample(router, sample: Sample) -> SampleResult:
    """Route one sample, turning router errors into a result."""
    start = time.perf_counter()
    try:
        match = await router.match(sample.query)
    except NoRouteFoundError:
        return SampleResult(
            sample=sample,
            actual_route=None,
            score=0.0,
            latency_ms=(time.perf_counter() - start) * 1000,
        )
    except RouterError as e:
        return SampleResult(
            sample=sample,
            actual_route=None,
            score=0.0,
            latency_ms=(time.perf_counter() - start) * 1000,
            error=str(e),
        )
    return SampleResult(
        sample=sample,
        actual_route=match.route_name,
        score=match.score,
        latency_ms=match.latency_ms,
    )


async def run_demo(
    loader: RouteLoader,
    samples: list[Sample],
    verbose: bool = False
) -> DemoResults:
    """
    Run the labelled samples through a freshly built router.

    Args:
        loader: Route file loader
        samples: List of samples to process
        verbose: Whether to print each sample result

    Returns:
        DemoResults with accuracy and timing statistics
    """
    print("\nBuilding router...")
    router = await build_router(loader)
    print(f"Router built in {router.build_latency_ms:.0f}ms")

    results = DemoResults(
        total_samples=len(samples), build_latency_ms=router.build_latency_ms
    )
    start_time = time.time()

    print(f"\nProcessing {len(samples)} samples...")
    print("-" * 60)

    try:
        for i, sample in enumerate(samples, 1):
            sample_result = await route_sample(router, sample)

            if sample_result.is_correct:
                results.correct_routes += 1
            else:
                results.incorrect_routes += 1
                results.mismatches.append(sample_result)

            results.total_latency_ms += sample_result.latency_ms

            route = sample.expected_route or "none"
            if route not in results.by_route:
                results.by_route[route] = RouteStats()
            results.by_route[route].total += 1
            results.by_route[route].total_latency_ms += sample_result.latency_ms
            if sample_result.is_correct:
                results.by_route[route].correct += 1

            if verbose:
                status = "OK" if sample_result.is_correct else "MISMATCH"
                print(
                    f"[{i:3d}/{len(samples)}] {status:8s} | "
                    f"Expected: {route:15s} | "
                    f"Got: {sample_result.actual_route or 'none':15s} | "
                    f"Score: {sample_result.score:.3f} | "
                    f"{sample_result.latency_ms:.1f}ms"
                )

            if not verbose and i % 10 == 0:
                print(f"  Processed {i}/{len(samples)} samples...")
    finally:
        await router.encoder.close()
        await router.store.close()

    results.elapsed_seconds = time.time() - start_time

    return results


async def route_query(loader: RouteLoader, query: str) -> int:
    """Route a single query and print the outcome. Returns an exit code."""
    router = await build_router(loader)
    try:
        match = await router.match(query)
    except RouterError as e:
        print(f"\n{type(e).__name__}: {e}")
        return 1
    finally:
        await router.encoder.close()
        await router.store.close()

    print(f"\nRoute:   {match.route_name}")
    print(f"Score:   {match.score:.4f}")
    print(f"Latency: {match.latency_ms:.1f}ms")
    return 0


def print_report(results: DemoResults, show_mismatches: bool = True) -> None:
    """Print a formatted report of demo results."""

    print("\n" + "=" * 60)
    print("SEMROUTE DEMO RESULTS")
    print("=" * 60)

    print(f"\nRouting Accuracy: {results.accuracy:.1%}")
    print(f"  Correct:   {results.correct_routes}")
    print(f"  Incorrect: {results.incorrect_routes}")

    print("\nTiming:")
    print(f"  Router build:    {results.build_latency_ms:.0f}ms")
    print(f"  Total time:      {results.elapsed_seconds:.2f}s")
    print(f"  Avg per sample:  {results.avg_latency_ms:.1f}ms")

    print("\nBy Expected Route:")
    print(f"  {'Route':<18} {'Accuracy':>10} {'Correct':>8} {'Total':>6} {'Avg ms':>8}")
    print(f"  {'-'*18} {'-'*10} {'-'*8} {'-'*6} {'-'*8}")

    for route in sorted(results.by_route.keys()):
        stats = results.by_route[route]
        print(
            f"  {route:<18} {stats.accuracy:>9.1%} "
            f"{stats.correct:>8} {stats.total:>6} "
            f"{stats.avg_latency_ms:>7.1f}"
        )

    if show_mismatches and results.mismatches:
        print(f"\nMismatches ({len(results.mismatches)}):")
        for m in results.mismatches[:10]:
            query = m.sample.query
            print(f"\n    Query:    \"{query[:60]}{'...' if len(query) > 60 else ''}\"")
            print(f"    Expected: {m.sample.expected_route or 'none'}")
            print(f"    Got:      {m.actual_route or 'none'} (score: {m.score:.3f})")
            if m.error:
                print(f"    Error:    {m.error}")

        if len(results.mismatches) > 10:
            print(f"\n  ... and {len(results.mismatches) - 10} more mismatches")

    print("\n" + "=" * 60)


def main():
    """Main entry point for the demo runner."""

    parser = argparse.ArgumentParser(
        description="Run labelled queries through the semantic router",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_demo.py                          Run all samples
  python scripts/run_demo.py --query "is it raining"  Route one query
  python scripts/run_demo.py --route billing          Filter by route
  python scripts/run_demo.py --verbose                Show each result
  python scripts/run_demo.py --dry-run                Validate only
        """
    )

    parser.add_argument(
        "--routes-file",
        default=str(PROJECT_ROOT / "data" / "routes.json"),
        help="Path to route definition file (default: data/routes.json)"
    )
    parser.add_argument(
        "--query", "-q",
        help="Route a single query instead of the labelled samples"
    )
    parser.add_argument(
        "--route",
        help="Filter samples by expected route"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show each sample result"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate route file without routing"
    )
    parser.add_argument(
        "--no-mismatches",
        action="store_true",
        help="Don't show mismatch details in report"
    )

    args = parser.parse_args()

    print("=" * 60)
    print("semroute Demo Runner")
    print("=" * 60)

    print(f"\nLoading routes from {args.routes_file}...")
    loader = RouteLoader(args.routes_file)

    try:
        routes = loader.load()
        samples = loader.load_samples()
    except FileNotFoundError:
        print(f"ERROR: Route file not found: {args.routes_file}")
        sys.exit(1)
    except Exception as e:
        print(f"ERROR: Failed to load route file: {e}")
        sys.exit(1)

    print(f"Loaded {len(routes)} routes and {len(samples)} samples")

    validation = loader.validate()
    if not validation.is_valid:
        print("\nRoute file validation FAILED:")
        for error in validation.errors:
            print(f"  - {error}")
        if not args.dry_run:
            print("\nFix validation errors before running demo.")
            sys.exit(1)

    if validation.warnings:
        print("\nRoute file warnings:")
        for warning in validation.warnings:
            print(f"  - {warning}")

    print("\nRoutes:")
    for route in routes:
        print(f"  {route.name:<18} {len(route.utterances):>3} utterances")

    if args.dry_run:
        print("\n--dry-run specified, skipping routing.")
        if validation.is_valid:
            print("Route file validation PASSED")
            sys.exit(0)
        else:
            sys.exit(1)

    _import_router_components()

    if args.query:
        sys.exit(asyncio.run(route_query(loader, args.query)))

    filtered_samples = list(samples)
    if args.route:
        filtered_samples = [s for s in filtered_samples if s.expected_route == args.route]
        print(f"\nFiltered to route '{args.route}': {len(filtered_samples)} samples")

    if not filtered_samples:
        print("\nNo samples to run.")
        sys.exit(1)

    results = asyncio.run(run_demo(loader, filtered_samples, verbose=args.verbose))

    print_report(results, show_mismatches=not args.no_mismatches)

    if results.accuracy < 0.80:
        print("\nWARNING: Routing accuracy below 80% threshold")
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
