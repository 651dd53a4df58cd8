"""
Router module: data model, scoring options and the matching engine.

This module contains:
- models.py: Route, Utterance, WeightedMetric, RouteMatch
- options.py: Composable scoring options (metric + coefficient)
- routes.py: Built-in route definitions
- engine.py: Router construction and matching

Public API:
- Router: Build with Router.build(), query with Router.match()
- with_*(): Scoring options
- create_routes(): Built-in routes
- get_router(): Get the settings-driven singleton router
- ensure_router_initialized(): Pre-warm router at startup
"""

from semroute.router.models import (
    Route,
    RouteMatch,
    Utterance,
    WeightedMetric,
)

from semroute.router.options import (
    Option,
    options_from_coefficients,
    with_dot_product_similarity,
    with_euclidean_distance,
    with_jaccard_similarity,
    with_manhattan_distance,
    with_metric,
    with_pearson_correlation,
)

from semroute.router.routes import create_routes, get_route_names

from semroute.router.engine import (
    Router,
    close_router,
    create_router_from_settings,
    ensure_router_initialized,
    get_router,
    reset_router,
)

__all__ = [
    # Data model
    "Route",
    "RouteMatch",
    "Utterance",
    "WeightedMetric",
    # Scoring options
    "Option",
    "options_from_coefficients",
    "with_dot_product_similarity",
    "with_euclidean_distance",
    "with_jaccard_similarity",
    "with_manhattan_distance",
    "with_metric",
    "with_pearson_correlation",
    # Built-in routes
    "create_routes",
    "get_route_names",
    # Router engine
    "Router",
    "close_router",
    "create_router_from_settings",
    "ensure_router_initialized",
    "get_router",
    "reset_router",
]
