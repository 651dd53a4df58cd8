"""
Scoring Options

Composable options that each append one (similarity function, coefficient)
pair to a Router's metric list. Contributions are summed linearly:

    score = sum(coefficient * metric(query, candidate))

Distance metrics (Euclidean, Manhattan) are not inverted. To reward
closeness, give them a negative coefficient.

Usage:
    router = await Router.build(
        routes, encoder, store,
        with_dot_product_similarity(1.0),
        with_euclidean_distance(-0.5),
    )
"""

from typing import TYPE_CHECKING, Callable, Mapping

from semroute.errors import RouterConfigurationError
from semroute.router.models import WeightedMetric
from semroute.similarity import (
    SIMILARITY_FUNCTIONS,
    SimilarityFunction,
    dot_product_similarity,
    euclidean_distance,
    jaccard_similarity,
    manhattan_distance,
    pearson_correlation,
)

if TYPE_CHECKING:
    from semroute.router.engine import Router

Option = Callable[["Router"], None]


def with_metric(function: SimilarityFunction, coefficient: float) -> Option:
    """Append an arbitrary similarity function with a coefficient."""
    metric = WeightedMetric(function=function, coefficient=float(coefficient))

    def _apply(router: "Router") -> None:
        router._weighted_metrics.append(metric)

    return _apply


def with_dot_product_similarity(coefficient: float) -> Option:
    return with_metric(dot_product_similarity, coefficient)


def with_euclidean_distance(coefficient: float) -> Option:
    return with_metric(euclidean_distance, coefficient)


def with_manhattan_distance(coefficient: float) -> Option:
    return with_metric(manhattan_distance, coefficient)


def with_jaccard_similarity(coefficient: float) -> Option:
    return with_metric(jaccard_similarity, coefficient)


def with_pearson_correlation(coefficient: float) -> Option:
    return with_metric(pearson_correlation, coefficient)


def options_from_coefficients(coefficients: Mapping[str, float | None]) -> list[Option]:
    """
    Build options from a {metric_name: coefficient} mapping.

    Entries with a None coefficient are skipped. Order follows the mapping.

    Raises:
        RouterConfigurationError: If a metric name is unknown
    """
    options: list[Option] = []
    for name, coefficient in coefficients.items():
        if coefficient is None:
            continue
        function = SIMILARITY_FUNCTIONS.get(name)
        if function is None:
            raise RouterConfigurationError(
                f"unknown similarity metric {name!r}, "
                f"expected one of {sorted(SIMILARITY_FUNCTIONS)}"
            )
        options.append(with_metric(function, coefficient))
    return options
