"""
semroute: FastAPI Application Entry Point

This module initializes the FastAPI application and defines the endpoints:
- /health: Health check endpoint
- /config: Non-sensitive configuration values
- /routes: Configured routes and scoring metrics
- /route: Match a single query
- /route/batch: Match several queries
- /metrics: Match statistics endpoint

The application uses a lifespan context manager to:
1. Load and validate configuration at startup
2. Configure logging based on settings
3. Pre-build the router (embedding every utterance once)
4. Close the encoder and store on shutdown
"""

from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from semroute import __version__
from semroute.config import Settings, get_settings, configure_logging
from semroute.errors import (
    EncodingError,
    MatchTimeoutError,
    NoRouteFoundError,
    RetrievalError,
    RouterError,
)
from semroute.metrics import (
    OUTCOME_ERROR,
    OUTCOME_MATCHED,
    OUTCOME_NO_ROUTE,
    MatchMetric,
    get_metrics_store,
)
from semroute.router.engine import close_router, ensure_router_initialized, get_router
from semroute.schemas import (
    BatchRouteItem,
    BatchRouteRequest,
    BatchRouteResponse,
    ComponentHealth,
    ErrorCodes,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    MetricsResponse,
    RouteRequest,
    RouteResponse,
    build_metrics_response,
)

logger = logging.getLogger(__name__)

_start_time: float = 0.0


def _error_detail(exc: RouterError) -> tuple[int, ErrorDetail]:
    """Map a router error to an HTTP status code and error body."""
    if isinstance(exc, NoRouteFoundError):
        return 404, ErrorDetail(code=ErrorCodes.NO_ROUTE_FOUND, message=str(exc))
    if isinstance(exc, EncodingError):
        return 502, ErrorDetail(code=ErrorCodes.ENCODING_ERROR, message=str(exc))
    if isinstance(exc, RetrievalError):
        return 500, ErrorDetail(code=ErrorCodes.RETRIEVAL_ERROR, message=str(exc))
    if isinstance(exc, MatchTimeoutError):
        return 504, ErrorDetail(code=ErrorCodes.MATCH_TIMEOUT, message=str(exc))
    return 500, ErrorDetail(code=ErrorCodes.INTERNAL_ERROR, message=str(exc))


def _record(query: str, result: RouteResponse | None, error: RouterError | None, latency_ms: float) -> None:
    """Record one match outcome in the metrics store."""
    if result is not None:
        outcome = OUTCOME_MATCHED
    elif isinstance(error, NoRouteFoundError):
        outcome = OUTCOME_NO_ROUTE
    else:
        outcome = OUTCOME_ERROR

    get_metrics_store().record(
        MatchMetric(
            timestamp=time.time(),
            route_name=result.route if result else None,
            score=result.score if result else 0.0,
            latency_ms=latency_ms,
            outcome=outcome,
            query_length=len(query),
        )
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup/shutdown events.

    On startup:
    - Loads configuration from environment
    - Configures logging
    - Builds the router

    On shutdown:
    - Closes the encoder and store
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info("=" * 60)
    logger.info("semroute starting up...")
    logger.info("=" * 60)
    logger.info(f"Encoder backend: {settings.encoder_backend}")
    logger.info(f"Store backend: {settings.store_backend}")
    logger.info(f"Routes file: {settings.routes_file or 'built-in routes'}")
    logger.info(f"Match timeout: {settings.match_timeout_seconds}s")
    logger.info(f"Debug mode: {'enabled' if settings.debug else 'disabled'}")

    logger.info("Building router...")
    await ensure_router_initialized()

    router = await get_router()
    routes_info = router.get_routes_info()
    logger.info(f"Router ready with {routes_info['num_routes']} routes:")
    for route in routes_info["routes"]:
        logger.info(f"  - {route['name']}: {route['num_utterances']} utterances")
    for metric in routes_info["metrics"]:
        logger.info(f"Scoring: {metric['metric']} x {metric['coefficient']}")
    logger.info(f"Router construction took {routes_info['build_latency_ms']:.2f}ms")

    global _start_time
    _start_time = time.time()

    logger.info("=" * 60)
    logger.info("semroute ready to accept requests")

    yield  # Application runs here

    logger.info("semroute shutting down...")
    await close_router()


app = FastAPI(
    title="semroute",
    description="Semantic intent routing over embedded example utterances",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


@app.get("/")
async def root():
    """
    Root endpoint with API information.
    """
    return {
        "name": "semroute",
        "description": "Semantic intent router",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "routes": "/routes",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check router and vector store status.",
)
async def health_check():
    """
    Health check endpoint for monitoring and orchestration.

    Checks:
    - Router construction status
    - Vector store readability (reads back the first utterance embedding)
    - System uptime
    """
    components = []
    overall_status = "healthy"

    try:
        router = await get_router()
        routes_info = router.get_routes_info()
        components.append(
            ComponentHealth(
                name="router",
                status="healthy",
                latency_ms=routes_info.get("build_latency_ms"),
                message=f"Router built with {routes_info['num_routes']} routes",
            )
        )
    except Exception as e:
        router = None
        components.append(ComponentHealth(name="router", status="unhealthy", message=str(e)))
        overall_status = "unhealthy"

    if router is not None:
        probe = next((u.text for r in router.routes for u in r.utterances), None)
        if probe is None:
            components.append(
                ComponentHealth(name="store", status="healthy", message="No utterances stored")
            )
        else:
            start = time.perf_counter()
            try:
                await router.store.get(probe)
                components.append(
                    ComponentHealth(
                        name="store",
                        status="healthy",
                        latency_ms=(time.perf_counter() - start) * 1000,
                    )
                )
            except Exception as e:
                components.append(
                    ComponentHealth(name="store", status="unhealthy", message=str(e))
                )
                overall_status = "degraded"

    uptime = time.time() - _start_time if _start_time > 0 else 0.0

    return HealthResponse(
        status=overall_status,
        version=__version__,
        components=components,
        uptime_seconds=uptime,
    )


@app.get("/config")
async def show_config(settings: Settings = Depends(get_settings)):
    """
    Returns non-sensitive configuration values.

    API keys are SecretStr and are NOT exposed in this endpoint.
    """
    return {
        "encoder": {
            "backend": settings.encoder_backend,
            "embedding_model": settings.embedding_model,
            "openai_embedding_model": settings.openai_embedding_model,
            "google_embedding_model": settings.google_embedding_model,
            "ollama_model": settings.ollama_model,
            "timeout_seconds": settings.encoder_timeout_seconds,
            "max_retries": settings.encoder_max_retries,
        },
        "store": {
            "backend": settings.store_backend,
            "redis_key_prefix": settings.redis_key_prefix,
            "redis_ttl_seconds": settings.redis_ttl_seconds,
        },
        "scoring": settings.metric_coefficients(),
        "router": {
            "routes_file": settings.routes_file,
            "match_timeout_seconds": settings.match_timeout_seconds,
        },
        "server": {"host": settings.host, "port": settings.port, "debug": settings.debug},
        "logging": {"level": settings.log_level},
        "api_keys_configured": {
            "openai": bool(
                settings.openai_api_key.get_secret_value() if settings.openai_api_key else False
            ),
            "google": bool(
                settings.google_api_key.get_secret_value() if settings.google_api_key else False
            ),
        },
    }


@app.get("/routes")
async def list_routes():
    """
    List all configured routes.

    Returns route names, descriptions, utterance counts, the encoder and
    the configured scoring metrics.
    """
    router = await get_router()
    return router.get_routes_info()


@app.post(
    "/route",
    response_model=RouteResponse,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    summary="Route a query",
    description="Match a query to the best-scoring route.",
)
async def route_query(request: RouteRequest):
    """
    Main routing endpoint.

    Flow:
    1. Embed the query
    2. Score it against every stored utterance embedding
    3. Record metrics
    4. Return the winning route, or an error when nothing matched
    """
    settings = get_settings()
    router = await get_router()

    try:
        match = await router.match(request.query, timeout=settings.match_timeout_seconds)
    except RouterError as e:
        _record(request.query, None, e, e.latency_ms or 0.0)
        status_code, detail = _error_detail(e)
        if status_code >= 500:
            logger.error(f"Routing failed: {e}")
        raise HTTPException(
            status_code=status_code, detail=detail.model_dump(exclude_none=True)
        ) from e

    response = RouteResponse(
        route=match.route_name,
        score=match.score,
        latency_ms=round(match.latency_ms, 2),
    )
    _record(request.query, response, None, match.latency_ms)
    return response


@app.post(
    "/route/batch",
    response_model=BatchRouteResponse,
    summary="Route several queries",
    description="Match each query independently; failures are reported per query.",
)
async def route_batch(request: BatchRouteRequest):
    """Batch routing endpoint. Results are returned in request order."""
    settings = get_settings()
    router = await get_router()

    outcomes = await router.match_batch(
        request.queries, timeout=settings.match_timeout_seconds
    )

    items = []
    for query, outcome in zip(request.queries, outcomes):
        if isinstance(outcome, RouterError):
            _record(query, None, outcome, outcome.latency_ms or 0.0)
            _, detail = _error_detail(outcome)
            items.append(BatchRouteItem(query=query, error=detail))
            continue

        result = RouteResponse(
            route=outcome.route_name,
            score=outcome.score,
            latency_ms=round(outcome.latency_ms, 2),
        )
        _record(query, result, None, outcome.latency_ms)
        items.append(BatchRouteItem(query=query, result=result))

    return BatchRouteResponse(results=items)


@app.get(
    "/metrics",
    response_model=MetricsResponse,
    summary="Get metrics",
    description="Retrieve aggregated match statistics.",
)
async def get_metrics():
    """Return aggregated match statistics from the metrics store."""
    return build_metrics_response(get_metrics_store().get_aggregated())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Returns a consistent error response format with the first validation
    error's details for client-side error handling.
    """
    errors = exc.errors()
    first_error = errors[0] if errors else {}

    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": ErrorCodes.VALIDATION_ERROR,
                "message": first_error.get("msg", "Validation failed"),
                "field": ".".join(str(loc) for loc in first_error.get("loc", [])),
            }
        },
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:
    """
    Handle HTTP exceptions with consistent format.
    """
    detail = exc.detail
    if isinstance(detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": detail})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": "HTTP_ERROR", "message": str(detail)}},
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs the full exception for debugging and returns a generic error
    response to avoid leaking implementation details.
    """
    logger.exception("Unhandled exception")
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": ErrorCodes.INTERNAL_ERROR,
                "message": "An unexpected error occurred",
            }
        },
    )
