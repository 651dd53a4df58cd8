"""
Router Engine - construction and matching.

This module implements the semantic routing decision layer that:
1. Embeds every route utterance once at construction and persists it
2. Embeds each incoming query
3. Scores the query against every stored utterance embedding with the
   configured weighted metrics
4. Returns the best matching route with its score

Matching is a full linear scan with no index. Candidates whose embedding
length differs from the query's are skipped. Ties keep the first route
scanned, so results are reproducible for a fixed route order.

Performance Requirements:
    - Construction: one encode + one store write per utterance, run once
    - Matching: one encode call + one store read per utterance
"""

import asyncio
import logging
import time
from typing import Iterable, Sequence

import numpy as np

from semroute.config import Settings, get_settings
from semroute.encoders.base import Encoder
from semroute.encoders.factory import create_encoder
from semroute.errors import (
    EncodingError,
    MatchTimeoutError,
    NoRouteFoundError,
    RetrievalError,
    RouterConfigurationError,
    RouterError,
    StoreError,
)
from semroute.router.models import Route, RouteMatch, WeightedMetric
from semroute.router.options import Option, options_from_coefficients
from semroute.router.routes import create_routes
from semroute.stores.base import VectorStore
from semroute.stores.factory import create_store

logger = logging.getLogger(__name__)


def _validate_routes(routes: Sequence[Route]) -> None:
    """
    Check route names and utterance texts are unique.

    Utterance texts are the store keys, so uniqueness is required across
    the whole corpus, not just within a route.

    Raises:
        RouterConfigurationError: On the first duplicate found
    """
    route_names: set[str] = set()
    owners: dict[str, str] = {}  # utterance text -> route name

    for route in routes:
        if route.name in route_names:
            raise RouterConfigurationError(f"duplicate route name: {route.name!r}")
        route_names.add(route.name)

        for utterance in route.utterances:
            if utterance.text in owners:
                raise RouterConfigurationError(
                    f"duplicate utterance {utterance.text!r} in routes "
                    f"{owners[utterance.text]!r} and {route.name!r}"
                )
            owners[utterance.text] = route.name


class Router:
    """
    Semantic router over a fixed set of routes.

    Build with ``await Router.build(...)``; the constructor itself does no
    I/O and leaves utterances un-embedded. After construction the routes
    are read-only. Scoring options may still be added with configure()
    until the first match.

    Usage:
        router = await Router.build(
            routes, encoder, store, with_dot_product_similarity(1.0)
        )
        result = await router.match("hello there")
        print(result.route_name, result.score)

    The encoder and store are shared with the caller; the router never
    closes them.
    """

    def __init__(
        self,
        routes: Sequence[Route],
        encoder: Encoder,
        store: VectorStore,
    ) -> None:
        self._routes: tuple[Route, ...] = tuple(routes)
        self._encoder = encoder
        self._store = store
        self._weighted_metrics: list[WeightedMetric] = []
        self._matching_started = False
        self._build_latency_ms: float = 0.0

    @classmethod
    async def build(
        cls,
        routes: Iterable[Route],
        encoder: Encoder,
        store: VectorStore,
        *options: Option,
    ) -> "Router":
        """
        Embed and store every utterance, then return the ready router.

        Utterances are processed sequentially in route order, then
        utterance order. The first failure aborts construction; nothing
        after the failing utterance is encoded or stored.

        Args:
            routes: Route definitions (copied, never mutated)
            encoder: Embedding backend
            store: Vector store backend
            *options: Scoring options, applied in order

        Returns:
            The constructed Router

        Raises:
            RouterConfigurationError: If route names or utterances repeat
            EncodingError: If an utterance could not be embedded
            StoreError: If an embedding could not be persisted
        """
        owned = [route.copy() for route in routes]
        _validate_routes(owned)

        router = cls(owned, encoder, store)
        router.configure(*options)

        total = sum(len(route.utterances) for route in owned)
        logger.info(
            f"Building router: {len(owned)} routes, {total} utterances, "
            f"encoder={getattr(encoder, 'name', type(encoder).__name__)}"
        )
        start_time = time.perf_counter()

        for route in owned:
            logger.debug(f"  - {route.name}: {len(route.utterances)} utterances")
            for utterance in route.utterances:
                try:
                    vector = await encoder.encode(utterance.text)
                except Exception as e:
                    logger.error(f"Failed to encode utterance {utterance.text!r}: {e}")
                    raise EncodingError(utterance.text) from e
                if not len(vector):
                    raise EncodingError(
                        utterance.text,
                        f"encoder returned an empty embedding for: {utterance.text!r}",
                    )
                utterance.set_embedding(vector)

                try:
                    await store.put(utterance.text, utterance.embedding)
                except Exception as e:
                    logger.error(f"Failed to store utterance {utterance.text!r}: {e}")
                    raise StoreError(utterance.text) from e

        router._build_latency_ms = (time.perf_counter() - start_time) * 1000
        logger.info(f"Router built in {router._build_latency_ms:.2f}ms")
        return router

    def configure(self, *options: Option) -> None:
        """
        Apply scoring options, each appending one weighted metric.

        Raises:
            RouterConfigurationError: If matching has already started
        """
        if self._matching_started:
            raise RouterConfigurationError(
                "scoring options must be configured before the first match"
            )
        for option in options:
            option(self)

    def compute_score(self, query_vec: np.ndarray, candidate_vec: np.ndarray) -> float:
        """
        Weighted sum of every configured metric.

        Returns 0.0 when no metrics are configured.
        """
        score = 0.0
        for metric in self._weighted_metrics:
            score += metric(query_vec, candidate_vec)
        return score

    async def _evaluate(self, query: str) -> tuple[str, float]:
        """Encode the query and scan every stored utterance embedding."""
        try:
            encoding = await self._encoder.encode(query)
        except Exception as e:
            logger.error(f"Failed to encode query: {e}")
            raise EncodingError(query) from e
        if not len(encoding):
            raise EncodingError(query, f"encoder returned an empty embedding for: {query!r}")

        query_vec = np.asarray(encoding, dtype=np.float64)
        best_score = 0.0
        best_route_name: str | None = None

        for route in self._routes:
            for utterance in route.utterances:
                try:
                    stored = await self._store.get(utterance.text)
                except Exception as e:
                    logger.error(f"Failed to read embedding for {utterance.text!r}: {e}")
                    raise RetrievalError(utterance.text) from e

                if len(stored) != query_vec.size:
                    logger.debug(
                        f"Skipping {utterance.text!r}: dimension {len(stored)} "
                        f"!= query dimension {query_vec.size}"
                    )
                    continue

                score = self.compute_score(
                    query_vec, np.asarray(stored, dtype=np.float64)
                )
                if score > best_score:
                    best_score = score
                    best_route_name = route.name

        if best_route_name is None:
            raise NoRouteFoundError(query)
        return best_route_name, best_score

    async def match(self, query: str, timeout: float | None = None) -> RouteMatch:
        """
        Find the route whose utterances best match the query.

        Cancelling the calling task propagates asyncio.CancelledError from
        whichever encode or store call is in flight.

        Args:
            query: The text to classify
            timeout: Optional limit in seconds for the whole match

        Returns:
            RouteMatch with the winning route name, score and latency

        Raises:
            EncodingError: If the query could not be embedded
            RetrievalError: If a stored utterance embedding could not be read
            NoRouteFoundError: If no candidate scored above 0.0
            MatchTimeoutError: If the timeout elapsed
        """
        self._matching_started = True
        start_time = time.perf_counter()

        try:
            try:
                route_name, score = await asyncio.wait_for(
                    self._evaluate(query), timeout
                )
            except asyncio.TimeoutError as e:
                logger.warning(f"Match timed out after {timeout}s")
                raise MatchTimeoutError(query, timeout) from e
        except RouterError as e:
            e.latency_ms = (time.perf_counter() - start_time) * 1000
            raise

        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            f"Routed to '{route_name}' with score {score:.4f}. "
            f"Latency: {latency_ms:.2f}ms"
        )
        return RouteMatch(route_name=route_name, score=score, latency_ms=latency_ms)

    async def match_batch(
        self,
        queries: Sequence[str],
        timeout: float | None = None,
    ) -> list[RouteMatch | RouterError]:
        """
        Match several queries sequentially.

        Returns:
            One entry per query, in order: the RouteMatch, or the
            RouterError raised for that query
        """
        results: list[RouteMatch | RouterError] = []
        for query in queries:
            try:
                results.append(await self.match(query, timeout=timeout))
            except RouterError as e:
                results.append(e)
        return results

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._routes

    @property
    def metrics(self) -> tuple[WeightedMetric, ...]:
        return tuple(self._weighted_metrics)

    @property
    def encoder(self) -> Encoder:
        return self._encoder

    @property
    def store(self) -> VectorStore:
        return self._store

    @property
    def build_latency_ms(self) -> float:
        """Return the time taken to build the router."""
        return self._build_latency_ms

    def get_routes_info(self) -> dict:
        """
        Return information about configured routes.

        Returns:
            Dictionary with route configuration details including:
            - num_routes: Total number of routes
            - routes: List of route info (name, description, utterance count)
            - encoder: Embedding model name
            - metrics: Configured (metric, coefficient) pairs
        """
        return {
            "num_routes": len(self._routes),
            "routes": [
                {
                    "name": r.name,
                    "description": r.description,
                    "num_utterances": len(r.utterances),
                }
                for r in self._routes
            ],
            "encoder": getattr(self._encoder, "name", type(self._encoder).__name__),
            "metrics": [
                {"metric": m.name, "coefficient": m.coefficient}
                for m in self._weighted_metrics
            ],
            "build_latency_ms": round(self._build_latency_ms, 2),
        }


async def create_router_from_settings(settings: Settings | None = None) -> Router:
    """
    Build a Router entirely from settings.

    Routes come from ``settings.routes_file`` when set, otherwise the
    built-in routes. The encoder and store are closed again if
    construction fails.
    """
    settings = settings or get_settings()

    if settings.routes_file:
        from semroute.data.loader import RouteLoader

        routes = RouteLoader(settings.routes_file).load()
    else:
        routes = create_routes()

    options = options_from_coefficients(settings.metric_coefficients())
    encoder = create_encoder(settings)
    store = create_store(settings)

    try:
        return await Router.build(routes, encoder, store, *options)
    except Exception:
        await encoder.close()
        await store.close()
        raise


_router_instance: Router | None = None


async def get_router() -> Router:
    """
    Get the global router instance.

    Creates and builds the router on first call.
    Subsequent calls return the same instance.

    Returns:
        The built Router singleton
    """
    global _router_instance

    if _router_instance is None:
        _router_instance = await create_router_from_settings()

    return _router_instance


async def ensure_router_initialized() -> None:
    """
    Ensure the router is built.

    Call this at application startup to pre-warm the router rather than
    building it on the first request.
    """
    await get_router()


async def close_router() -> None:
    """Close the global router's encoder and store and drop the instance."""
    global _router_instance

    if _router_instance is not None:
        await _router_instance.encoder.close()
        await _router_instance.store.close()
    _router_instance = None


def reset_router() -> None:
    """
    Reset the global router instance.

    This is primarily useful for testing to ensure a fresh
    router is created between test runs.
    """
    global _router_instance
    _router_instance = None
