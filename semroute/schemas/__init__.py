"""
Schemas module: Pydantic request/response models.

This module provides validated data models for the semroute API:
- Request/response models for /route and /route/batch
- Error response models for consistent error handling
- Metrics and health check response models

Example usage:
    from semroute.schemas import RouteRequest, RouteResponse

    request = RouteRequest(query="Hello world")
"""

from semroute.schemas.routing import (
    # Limits
    MAX_BATCH_SIZE,
    MAX_QUERY_LENGTH,
    # Request models
    RouteRequest,
    BatchRouteRequest,
    # Response models
    RouteResponse,
    BatchRouteItem,
    BatchRouteResponse,
    # Error models
    ErrorCodes,
    ErrorDetail,
    ErrorResponse,
    # Metrics and health
    RouteMetrics,
    MetricsResponse,
    ComponentHealth,
    HealthResponse,
    build_metrics_response,
)

__all__ = [
    "MAX_BATCH_SIZE",
    "MAX_QUERY_LENGTH",
    "RouteRequest",
    "BatchRouteRequest",
    "RouteResponse",
    "BatchRouteItem",
    "BatchRouteResponse",
    "ErrorCodes",
    "ErrorDetail",
    "ErrorResponse",
    "RouteMetrics",
    "MetricsResponse",
    "ComponentHealth",
    "HealthResponse",
    "build_metrics_response",
]
