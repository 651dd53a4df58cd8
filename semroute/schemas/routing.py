"""
Pydantic Schemas for the Routing API

This module defines the request and response models for the semroute API:
- RouteRequest / RouteResponse: single query matching
- BatchRouteRequest / BatchRouteResponse: several queries at once
- Error responses, metrics, and health check schemas

All schemas follow Pydantic v2 patterns with validation, field
descriptions, and OpenAPI documentation support.
"""

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from semroute.metrics.store import AggregatedMetrics


MAX_QUERY_LENGTH = 10000
MAX_BATCH_SIZE = 100


# =============================================================================
# REQUEST MODELS
# =============================================================================


class RouteRequest(BaseModel):
    """
    Request body for the /route endpoint.

    Example:
        {"query": "will it rain tomorrow?"}
    """

    query: str = Field(
        ...,
        min_length=1,
        max_length=MAX_QUERY_LENGTH,
        description="The text to route",
    )

    @field_validator("query")
    @classmethod
    def validate_query_not_whitespace(cls, v: str) -> str:
        """Ensure query is not empty or whitespace only."""
        if not v.strip():
            raise ValueError("Query cannot be empty or whitespace only")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"query": "hello, how are you?"},
                {"query": "I was charged twice for my order"},
            ]
        }
    )


class BatchRouteRequest(BaseModel):
    """Request body for the /route/batch endpoint."""

    queries: list[str] = Field(
        ...,
        min_length=1,
        max_length=MAX_BATCH_SIZE,
        description="Texts to route, matched in order",
    )

    @field_validator("queries")
    @classmethod
    def validate_queries(cls, v: list[str]) -> list[str]:
        """Apply the single-query rules to every entry."""
        for query in v:
            if not query.strip():
                raise ValueError("Queries cannot be empty or whitespace only")
            if len(query) > MAX_QUERY_LENGTH:
                raise ValueError(f"Queries cannot exceed {MAX_QUERY_LENGTH} characters")
        return v


# =============================================================================
# RESPONSE MODELS
# =============================================================================


class RouteResponse(BaseModel):
    """
    Response from the /route endpoint.

    Example:
        {"route": "weather", "score": 0.8731, "latency_ms": 18.42}
    """

    route: str = Field(..., description="Name of the winning route")

    score: float = Field(..., description="Weighted similarity score of the match")

    latency_ms: float = Field(
        ..., ge=0.0, description="Time taken for the match in milliseconds"
    )


class ErrorCodes:
    """
    Standard error codes for API responses.

    These codes enable programmatic error handling by clients
    without parsing human-readable messages.
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NO_ROUTE_FOUND = "NO_ROUTE_FOUND"
    ENCODING_ERROR = "ENCODING_ERROR"
    RETRIEVAL_ERROR = "RETRIEVAL_ERROR"
    MATCH_TIMEOUT = "MATCH_TIMEOUT"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorDetail(BaseModel):
    """
    Detailed error information for API error responses.

    Provides machine-readable error codes, human-readable messages,
    and optional field information for validation errors.
    """

    code: str = Field(
        ...,
        description="Machine-readable error code for programmatic handling",
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
    )

    field: str | None = Field(
        default=None,
        description="Field that caused the error (for validation errors)",
    )


class ErrorResponse(BaseModel):
    """
    Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "NO_ROUTE_FOUND",
                "message": "no route found for utterance: 'xyz'"
            }
        }
    """

    error: ErrorDetail = Field(..., description="Error details")


class BatchRouteItem(BaseModel):
    """Outcome for one query of a batch: either a match or an error."""

    query: str = Field(..., description="The query as submitted")

    result: RouteResponse | None = Field(
        default=None, description="The match, when one was found"
    )

    error: ErrorDetail | None = Field(
        default=None, description="Why no match was returned"
    )


class BatchRouteResponse(BaseModel):
    """Response from the /route/batch endpoint, in request order."""

    results: list[BatchRouteItem] = Field(default_factory=list)


class RouteMetrics(BaseModel):
    """
    Aggregated metrics for a specific route.

    Tracks request volume, average score, and latency for each route to
    monitor routing effectiveness.
    """

    route_name: str = Field(..., description="Route identifier")

    request_count: int = Field(
        default=0,
        ge=0,
        description="Total queries matched to this route",
    )

    avg_score: float = Field(default=0.0, description="Average match score")

    avg_latency_ms: float = Field(
        default=0.0,
        ge=0.0,
        description="Average match latency in milliseconds",
    )


class MetricsResponse(BaseModel):
    """
    Response from the /metrics endpoint.

    Example:
        {
            "total_requests": 1000,
            "requests_by_route": {...},
            "outcomes": {"matched": 950, "no_route": 48, "error": 2},
            "avg_latency_ms": 17.3
        }
    """

    total_requests: int = Field(
        default=0,
        ge=0,
        description="Total match requests processed",
    )

    requests_by_route: dict[str, RouteMetrics] = Field(
        default_factory=dict,
        description="Metrics breakdown by route",
    )

    outcomes: dict[str, int] = Field(
        default_factory=dict,
        description="Count of matched / no_route / error outcomes",
    )

    avg_latency_ms: float = Field(
        default=0.0,
        ge=0.0,
        description="Average match latency in milliseconds",
    )


class ComponentHealth(BaseModel):
    """Health status of an individual system component."""

    name: str = Field(
        ...,
        description="Component name (e.g., 'router', 'store')",
    )

    status: Literal["healthy", "degraded", "unhealthy"] = Field(
        ...,
        description="Component health status",
    )

    latency_ms: float | None = Field(
        default=None,
        ge=0.0,
        description="Last known latency for this component",
    )

    message: str | None = Field(
        default=None,
        description="Additional status information or error details",
    )


class HealthResponse(BaseModel):
    """
    Response from the /health endpoint.

    Example:
        {
            "status": "healthy",
            "service": "semroute",
            "version": "0.1.0",
            "components": [
                {"name": "router", "status": "healthy", "latency_ms": 812.4}
            ],
            "uptime_seconds": 3600.5
        }
    """

    status: Literal["healthy", "degraded", "unhealthy"] = Field(
        ...,
        description="Overall service health status",
    )

    service: str = Field(default="semroute", description="Service identifier")

    version: str = Field(..., description="Service version")

    components: list[ComponentHealth] = Field(
        default_factory=list,
        description="Individual component health",
    )

    uptime_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Seconds since the service started",
    )


# =============================================================================
# BUILDERS
# =============================================================================


def build_metrics_response(aggregated: "AggregatedMetrics") -> MetricsResponse:
    """Convert an AggregatedMetrics snapshot into the API response model."""
    return MetricsResponse(
        total_requests=aggregated.total_requests,
        requests_by_route={
            route: RouteMetrics(
                route_name=route,
                request_count=agg.count,
                avg_score=round(agg.avg_score, 6),
                avg_latency_ms=round(agg.avg_latency_ms, 2),
            )
            for route, agg in aggregated.requests_by_route.items()
        },
        outcomes=dict(aggregated.outcomes),
        avg_latency_ms=round(aggregated.avg_latency_ms, 2),
    )
